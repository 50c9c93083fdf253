"""Descriptions and failure messages for delegation checks.

Failure messages are built from one clause per failing check, joined
with ``" and "``. In negated mode each clause reports a check that
passed when it was expected to fail.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping

from delegate_matcher.evaluator import Evaluation
from delegate_matcher.spec import DelegationSpec

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Value formatting
# ---------------------------------------------------------------------------

def format_value(value: object) -> str:
    """Format a value for a message; strings are double-quoted."""
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    return repr(value)


def format_arguments(
    args: tuple[object, ...] | None,
    kwargs: Mapping[str, object] | None = None,
) -> str:
    """Format an argument list as ``("Mr.", 2, key=3)``.

    Returns an empty string when ``args`` is ``None``.
    """
    if args is None:
        return ""
    parts = [format_value(a) for a in args]
    parts.extend(f"{k}={format_value(v)}" for k, v in (kwargs or {}).items())
    return f"({', '.join(parts)})"


# ---------------------------------------------------------------------------
# Description
# ---------------------------------------------------------------------------

def delegator_description(spec: DelegationSpec) -> str:
    return f"{spec.delegator_method}{format_arguments(spec.args, spec.kwargs)}"


def delegate_description(spec: DelegationSpec) -> str:
    if spec.arguments_translated:
        arguments = format_arguments(spec.expected_args, spec.expected_kwargs)
        return f"{spec.delegate_name}.{spec.resolved_delegate_method}{arguments}"
    if spec.resolved_delegate_method == spec.delegator_method:
        return spec.delegate_name
    return f"{spec.delegate_name}.{spec.resolved_delegate_method}"


def nil_description(spec: DelegationSpec) -> str:
    if spec.expected_nil_check is None:
        return ""
    return " with nil allowed" if spec.expected_nil_check else " with nil not allowed"


def block_description(spec: DelegationSpec) -> str:
    if spec.expected_block is None:
        return ""
    return " with a block" if spec.expected_block else " without a block"


def describe(spec: DelegationSpec) -> str:
    """Describe what ``spec`` expects, e.g. ``"delegate name to author"``."""
    return (
        f"delegate {delegator_description(spec)} to {delegate_description(spec)}"
        f"{nil_description(spec)}{block_description(spec)}"
    )


# ---------------------------------------------------------------------------
# Failure clauses
# ---------------------------------------------------------------------------

def argument_failure(evaluation: Evaluation, negated: bool) -> str:
    spec = evaluation.spec
    if spec.expected_args is None or negated ^ evaluation.arguments_ok:
        return ""
    record = evaluation.record
    if not record.called:
        return "was not called"
    return f"was called with {format_arguments(record.args, record.kwargs)}"


def block_failure(evaluation: Evaluation, negated: bool) -> str:
    expected = evaluation.spec.expected_block
    if expected is None or negated ^ evaluation.block_ok:
        return ""
    if negated:
        return "a block was passed" if expected else "a block was not passed"
    if expected:
        actual = evaluation.record.block
        if actual is None:
            return "a block was not passed"
        return f"a different block {actual!r} was passed"
    return "a block was passed"


def return_value_failure(evaluation: Evaluation, negated: bool) -> str:
    # Same text in both modes: the delegate was reached but its result was lost.
    if not evaluation.delegated or evaluation.return_value_ok:
        return ""
    return (
        f"a return value of {format_value(evaluation.return_value)} was returned "
        "instead of the delegate return value"
    )


def nil_failure(evaluation: Evaluation, negated: bool) -> str:
    spec = evaluation.spec
    nil_check = evaluation.nil_check
    if spec.expected_nil_check is None or nil_check is None:
        return ""
    if negated ^ evaluation.nil_check_ok:
        return ""
    if nil_check.return_value is not None:
        return "did not return nil"
    allowed = spec.expected_nil_check if negated else not spec.expected_nil_check
    return f"{spec.delegate_name} was {'' if allowed else 'not '}allowed to be nil"


def failure_details(evaluation: Evaluation, negated: bool = False) -> str:
    """Join the clauses of every check that went the wrong way."""
    clauses = [
        argument_failure(evaluation, negated),
        block_failure(evaluation, negated),
        return_value_failure(evaluation, negated),
        nil_failure(evaluation, negated),
    ]
    return " and ".join(c for c in clauses if c)


def failure_message(
    evaluation: Evaluation,
    delegator: object,
    negated: bool = False,
) -> str:
    """Failure message for ``delegator``, with a generic fallback."""
    details = failure_details(evaluation, negated)
    if details:
        return details
    logger.debug("No failing clause for %s, using generic message", evaluation.spec.method)
    verb = "not to" if negated else "to"
    return f"expected {delegator!r} {verb} {describe(evaluation.spec)}"
