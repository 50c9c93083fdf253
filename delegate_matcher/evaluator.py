"""Expectation evaluator for delegation specs.

The evaluator runs the delegator with a test substitute in the
delegate's place and checks four things independently:

1. the delegator returned the delegate's result unchanged;
2. the delegate received the expected arguments;
3. the callback was (or was not) forwarded;
4. the delegator handled a ``None`` delegate as expected.

The fourth check runs a second, separate pass with ``None`` substituted
for the delegate.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from delegate_matcher.introspection import MethodIntrospector
from delegate_matcher.invoker import Invocation, invoke_spec
from delegate_matcher.resolver import check_configuration, resolve
from delegate_matcher.spec import DelegationSpec
from delegate_matcher.substitute import DelegateResult, InvocationRecord, TestSubstitute

logger = logging.getLogger(__name__)


def _make_block() -> Callable[..., None]:
    """Create a fresh callback to pass to the delegator."""

    def delegation_block(*args: object, **kwargs: object) -> None:
        return None

    return delegation_block


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NilCheck:
    """Outcome of the pass run with ``None`` as the delegate.

    Attributes:
        allowed: False if calling the delegator failed on the ``None``
            delegate, True if it returned normally.
        return_value: What the delegator returned when it did not fail.
    """
    allowed: bool
    return_value: object = None


@dataclass(frozen=True)
class Evaluation:
    """Results of all checks for one verification.

    Attributes:
        spec: The delegation that was verified.
        record: What the test substitute saw in the primary pass.
        invocation: Outcome of calling the delegator in the primary pass.
        result: The value the test substitute returned.
        block: Callback passed to the delegator, if a block check is set.
        nil_check: Outcome of the nil pass, if a nil check is set.
    """
    spec: DelegationSpec
    record: InvocationRecord
    invocation: Invocation
    result: DelegateResult
    block: object | None = None
    nil_check: NilCheck | None = None

    @property
    def delegated(self) -> bool:
        """True if the delegate method was reached."""
        return self.record.called

    @property
    def return_value(self) -> object:
        return self.invocation.return_value

    @property
    def return_value_ok(self) -> bool:
        return self.invocation.found and self.invocation.return_value is self.result

    @property
    def arguments_ok(self) -> bool:
        if self.spec.expected_args is None:
            return True
        return (
            self.record.called
            and self.record.args == self.spec.expected_args
            and self.record.kwargs == self.spec.expected_kwargs
        )

    @property
    def block_ok(self) -> bool:
        if self.spec.expected_block is None:
            return True
        if self.spec.expected_block:
            return self.record.block is not None and self.record.block is self.block
        return self.record.block is None

    @property
    def nil_check_ok(self) -> bool:
        if self.spec.expected_nil_check is None or self.nil_check is None:
            return True
        return (
            self.nil_check.allowed == self.spec.expected_nil_check
            and self.nil_check.return_value is None
        )

    @property
    def passed(self) -> bool:
        """True if every configured check passed."""
        return (
            self.nil_check_ok
            and self.return_value_ok
            and self.arguments_ok
            and self.block_ok
        )


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------

class Evaluator:
    """Runs the verification passes for a :class:`DelegationSpec`.

    Usage::

        evaluation = Evaluator(spec).evaluate(delegator)
        if not evaluation.passed:
            print(failure_message(evaluation))
    """

    def __init__(
        self,
        spec: DelegationSpec,
        introspector: MethodIntrospector | None = None,
    ) -> None:
        self.spec = spec
        self.introspector = introspector or MethodIntrospector()

    def evaluate(self, delegator: object) -> Evaluation:
        """Verify ``delegator`` against its delegation spec.

        Raises:
            DelegationConfigError: If the delegation cannot be verified. Nothing
                is called or replaced in that case.
        """
        check_configuration(self.spec, delegator, self.introspector)
        block = _make_block() if self.spec.expected_block is not None else None

        record = InvocationRecord()
        result = DelegateResult()
        substitute = TestSubstitute(
            self.spec.resolved_delegate_method,
            record,
            result,
            self.spec.block_keyword,
        )
        with resolve(self.spec, delegator, substitute, self.introspector):
            invocation = invoke_spec(self.spec, delegator, block, self.introspector)
        logger.debug(
            "Primary pass for %s: found=%s called=%s calls=%d",
            invocation.method_name,
            invocation.found,
            record.called,
            record.call_count,
        )

        nil_check: NilCheck | None = None
        if self.spec.expected_nil_check is not None:
            nil_check = self._check_nil(delegator, block)

        return Evaluation(
            spec=self.spec,
            record=record,
            invocation=invocation,
            result=result,
            block=block,
            nil_check=nil_check,
        )

    def _check_nil(self, delegator: object, block: object | None) -> NilCheck:
        """Run the delegator with ``None`` in the delegate's place."""
        with resolve(self.spec, delegator, None, self.introspector):
            try:
                invocation = invoke_spec(self.spec, delegator, block, self.introspector)
            except AttributeError as exc:
                if not self._is_nil_delegate_error(exc):
                    raise
                logger.debug("Nil pass raised on the None delegate: %s", exc)
                return NilCheck(allowed=False)
        if not invocation.found:
            return NilCheck(allowed=False)
        logger.debug("Nil pass returned %r", invocation.return_value)
        return NilCheck(allowed=True, return_value=invocation.return_value)

    def _is_nil_delegate_error(self, exc: AttributeError) -> bool:
        """True if ``exc`` is the delegate method being looked up on None."""
        return exc.obj is None and exc.name == self.spec.resolved_delegate_method
