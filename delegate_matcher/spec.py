"""Delegation spec DSL for the delegate matcher.

A :class:`DelegationSpec` describes *that* a method forwards to some
delegate, not *how* it does so. Specs are built with chained calls
starting from :func:`delegate`::

    spec = delegate("name").to("@author").with_("Mr.").allow_nil()

Every chained call returns a new spec; later calls of the same kind
overwrite earlier ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Self

DEFAULT_BLOCK_KEYWORD = "block"

CLASS_FIELD_SIGIL = "@@"
INSTANCE_FIELD_SIGIL = "@"


class DelegationConfigError(ValueError):
    """Raised when a delegation spec cannot be verified as written.

    Configuration errors mean the check itself is mis-specified. They are
    never reported as a failed match.
    """


# ---------------------------------------------------------------------------
# Variant
# ---------------------------------------------------------------------------

class Variant(Enum):
    """The kind of target a delegate reference points at."""
    CLASS_FIELD = "class_field"
    INSTANCE_FIELD = "instance_field"
    NAMED_CONSTANT = "named_constant"
    NAMED_METHOD = "named_method"
    OBJECT_REFERENCE = "object_reference"


def classify(reference: object) -> Variant:
    """Classify a delegate reference by its form.

    - ``"@@name"``: a field on the delegator's class.
    - ``"@name"``: a field on the delegator instance.
    - ``"Name"``: a constant visible from the delegator's class.
    - ``"name"``: a method on the delegator, queried at verification time.
    - anything else: the delegate object itself.
    """
    if not isinstance(reference, str):
        return Variant.OBJECT_REFERENCE
    if reference.startswith(CLASS_FIELD_SIGIL):
        return Variant.CLASS_FIELD
    if reference.startswith(INSTANCE_FIELD_SIGIL):
        return Variant.INSTANCE_FIELD
    if reference[:1].isupper():
        return Variant.NAMED_CONSTANT
    return Variant.NAMED_METHOD


# Variants where the delegate can be swapped for None.
NIL_CHECKABLE_VARIANTS = frozenset({
    Variant.CLASS_FIELD,
    Variant.INSTANCE_FIELD,
    Variant.NAMED_METHOD,
})


# ---------------------------------------------------------------------------
# DelegationSpec
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DelegationSpec:
    """A single delegation expectation.

    Attributes:
        method: Name of the delegator method under test.
        delegate: Delegate reference. A string in one of the forms accepted
            by :func:`classify`, or the delegate object itself.
        delegate_method: Method expected to be called on the delegate.
            Defaults to ``method``.
        prefix: Explicit prefix for the delegator method.
        default_prefix: Use the delegate name as the prefix.
        alias: Explicit delegator method name; wins over any prefix.
        args: Positional arguments passed to the delegator. ``None`` means
            arguments are neither passed nor checked.
        kwargs: Keyword arguments passed to the delegator.
        expected_args: Positional arguments expected to reach the delegate.
        expected_kwargs: Keyword arguments expected to reach the delegate.
        expected_block: ``True`` if the callback must be forwarded,
            ``False`` if no callback may be forwarded, ``None`` if unchecked.
        block_keyword: Keyword the callback is passed under.
        expected_nil_check: ``True`` if the delegator must tolerate a
            ``None`` delegate, ``False`` if it must not, ``None`` if unchecked.
    """
    method: str
    delegate: object = None
    delegate_method: str | None = None
    prefix: str | None = None
    default_prefix: bool = False
    alias: str | None = None
    args: tuple[object, ...] | None = None
    kwargs: dict[str, object] = field(default_factory=dict)
    expected_args: tuple[object, ...] | None = None
    expected_kwargs: dict[str, object] = field(default_factory=dict)
    expected_block: bool | None = None
    block_keyword: str = DEFAULT_BLOCK_KEYWORD
    expected_nil_check: bool | None = None

    # -- Chained configuration ----------------------------------------------

    def to(self, delegate: object) -> Self:
        """Set the delegate reference."""
        return replace(self, delegate=delegate)

    def as_(self, delegate_method: str) -> Self:
        """Expect ``delegate_method`` to be called on the delegate."""
        return replace(self, delegate_method=delegate_method)

    def with_prefix(self, prefix: str | None = None) -> Self:
        """Test ``<prefix>_<method>`` instead of ``method``.

        Without an argument the prefix is the delegate name, so
        ``delegate("name").to("@author").with_prefix()`` tests
        ``author_name``.
        """
        if prefix is None:
            return replace(self, prefix=None, default_prefix=True)
        return replace(self, prefix=prefix, default_prefix=False)

    def aliased(self, method_name: str) -> Self:
        """Test ``method_name`` on the delegator, whatever the prefix."""
        return replace(self, alias=method_name)

    def with_(self, *args: object, **kwargs: object) -> Self:
        """Set the expected arguments.

        The first call sets the arguments passed to the delegator and
        expected at the delegate. A second call sets only the arguments
        expected at the delegate, for delegators that translate arguments.
        """
        if self.args is None:
            return replace(
                self,
                args=args,
                kwargs=dict(kwargs),
                expected_args=args,
                expected_kwargs=dict(kwargs),
            )
        return replace(self, expected_args=args, expected_kwargs=dict(kwargs))

    def with_a_block(self, keyword: str = DEFAULT_BLOCK_KEYWORD) -> Self:
        """Expect the callback passed under ``keyword`` to be forwarded."""
        return replace(self, expected_block=True, block_keyword=keyword)

    def without_a_block(self, keyword: str = DEFAULT_BLOCK_KEYWORD) -> Self:
        """Expect the callback passed under ``keyword`` not to be forwarded."""
        return replace(self, expected_block=False, block_keyword=keyword)

    with_block = with_a_block
    without_block = without_a_block

    def allow_nil(self, allow: bool = True) -> Self:
        """Expect the delegator to tolerate (or reject) a ``None`` delegate."""
        return replace(self, expected_nil_check=allow)

    # -- Derived values -----------------------------------------------------

    @property
    def variant(self) -> Variant:
        """Variant of the current delegate reference."""
        return classify(self.delegate)

    @property
    def delegate_name(self) -> str:
        """Delegate reference without field sigils."""
        if isinstance(self.delegate, str):
            return self.delegate.lstrip(INSTANCE_FIELD_SIGIL)
        return str(self.delegate)

    @property
    def effective_prefix(self) -> str | None:
        """The prefix in effect, if any."""
        if self.prefix is not None:
            return self.prefix
        if not self.default_prefix:
            return None
        if isinstance(self.delegate, str):
            return self.delegate_name
        return type(self.delegate).__name__.lower()

    @property
    def delegator_method(self) -> str:
        """Name of the method actually invoked on the delegator."""
        if self.alias is not None:
            return self.alias
        prefix = self.effective_prefix
        if prefix:
            return f"{prefix}_{self.method}"
        return self.method

    @property
    def resolved_delegate_method(self) -> str:
        """Name of the method expected to be called on the delegate."""
        return self.delegate_method or self.method

    @property
    def arguments_translated(self) -> bool:
        """True if the delegate is expected to receive different arguments."""
        return (self.args, self.kwargs) != (self.expected_args, self.expected_kwargs)

    def validate(self) -> None:
        """Raise :class:`DelegationConfigError` if this delegation cannot be checked.

        Only checks that need no delegator are made here; the resolver
        checks the rest against the actual delegator.
        """
        if self.delegate is None:
            msg = 'need to provide a "to"'
            raise DelegationConfigError(msg)
        if self.expected_nil_check is not None and self.variant not in NIL_CHECKABLE_VARIANTS:
            target = "a constant" if self.variant == Variant.NAMED_CONSTANT else "an object"
            msg = f'cannot verify "allow_nil" expectations when delegating to {target}'
            raise DelegationConfigError(msg)


def delegate(method: str) -> DelegationSpec:
    """Start a delegation spec for the delegator method ``method``."""
    return DelegationSpec(method=method)
