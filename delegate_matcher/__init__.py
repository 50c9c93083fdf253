"""Delegate matcher -- declarative checks that a method forwards to a delegate.

Provides the delegation spec DSL, the verification engine and the
diagnostics used to report mismatches.
"""

__version__ = "0.1.0"

# Re-export key types for convenience.
from delegate_matcher.evaluator import Evaluation, Evaluator
from delegate_matcher.matcher import (
    DelegateMatcher,
    DelegationReport,
    assert_delegates,
    assert_not_delegates,
)
from delegate_matcher.spec import (
    DelegationConfigError,
    DelegationSpec,
    Variant,
    classify,
    delegate,
)

__all__ = [
    "DelegateMatcher",
    "DelegationConfigError",
    "DelegationReport",
    "DelegationSpec",
    "Evaluation",
    "Evaluator",
    "Variant",
    "assert_delegates",
    "assert_not_delegates",
    "classify",
    "delegate",
]
