"""Matcher facade over the delegation evaluator and diagnostics.

:class:`DelegateMatcher` answers the questions an assertion layer asks:
does the delegator match, how is the expectation described, and what
went wrong. :func:`assert_delegates` wraps it for plain ``assert``-style
tests::

    assert_delegates(Post(author), delegate("name").to("@author"))
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from delegate_matcher.diagnostics import describe, failure_message
from delegate_matcher.evaluator import Evaluation, Evaluator
from delegate_matcher.introspection import MethodIntrospector
from delegate_matcher.spec import DelegationSpec

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DelegationReport
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DelegationReport:
    """Serializable summary of one delegation check.

    Attributes:
        delegator: ``repr`` of the delegator that was checked.
        description: Positive description of the expectation.
        passed: Whether the delegator matched.
        failure_message: Message for a failed positive check.
        failure_message_when_negated: Message for a failed negated check.
        arguments_ok: Result of the argument check.
        block_ok: Result of the block check.
        return_value_ok: Result of the return value check.
        nil_check_ok: Result of the nil check.
    """
    delegator: str
    description: str
    passed: bool
    failure_message: str
    failure_message_when_negated: str
    arguments_ok: bool
    block_ok: bool
    return_value_ok: bool
    nil_check_ok: bool

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dict for JSON storage."""
        return {
            "delegator": self.delegator,
            "description": self.description,
            "passed": self.passed,
            "failure_message": self.failure_message,
            "failure_message_when_negated": self.failure_message_when_negated,
            "checks": {
                "arguments": self.arguments_ok,
                "block": self.block_ok,
                "return_value": self.return_value_ok,
                "nil": self.nil_check_ok,
            },
        }

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


# ---------------------------------------------------------------------------
# DelegateMatcher
# ---------------------------------------------------------------------------

class DelegateMatcher:
    """Checks a delegator against a :class:`DelegationSpec`.

    Messages refer to the most recent :meth:`matches` or
    :meth:`does_not_match` call and do not re-run the delegator.
    """

    def __init__(
        self,
        spec: DelegationSpec,
        introspector: MethodIntrospector | None = None,
    ) -> None:
        self.spec = spec
        self._evaluator = Evaluator(spec, introspector)
        self._delegator: object = None
        self._evaluation: Evaluation | None = None

    def matches(self, delegator: object) -> bool:
        """True if ``delegator`` delegates as configured."""
        self._delegator = delegator
        self._evaluation = self._evaluator.evaluate(delegator)
        passed = self._evaluation.passed
        logger.info(
            "Delegation check: %s -- %s",
            self.description,
            "matched" if passed else "did not match",
        )
        return passed

    def does_not_match(self, delegator: object) -> bool:
        return not self.matches(delegator)

    @property
    def description(self) -> str:
        return describe(self.spec)

    @property
    def evaluation(self) -> Evaluation:
        if self._evaluation is None:
            msg = "matches() has not been called"
            raise RuntimeError(msg)
        return self._evaluation

    @property
    def failure_message(self) -> str:
        return failure_message(self.evaluation, self._delegator)

    @property
    def failure_message_when_negated(self) -> str:
        return failure_message(self.evaluation, self._delegator, negated=True)

    def report(self) -> DelegationReport:
        """Summarize the most recent check."""
        evaluation = self.evaluation
        return DelegationReport(
            delegator=repr(self._delegator),
            description=self.description,
            passed=evaluation.passed,
            failure_message=self.failure_message,
            failure_message_when_negated=self.failure_message_when_negated,
            arguments_ok=evaluation.arguments_ok,
            block_ok=evaluation.block_ok,
            return_value_ok=evaluation.return_value_ok,
            nil_check_ok=evaluation.nil_check_ok,
        )


def assert_delegates(delegator: object, spec: DelegationSpec) -> None:
    """Raise ``AssertionError`` unless ``delegator`` matches ``spec``."""
    matcher = DelegateMatcher(spec)
    if not matcher.matches(delegator):
        raise AssertionError(matcher.failure_message)


def assert_not_delegates(delegator: object, spec: DelegationSpec) -> None:
    """Raise ``AssertionError`` if ``delegator`` matches ``spec``."""
    matcher = DelegateMatcher(spec)
    if not matcher.does_not_match(delegator):
        raise AssertionError(matcher.failure_message_when_negated)
