"""Delegate target resolution and scoped substitution.

:func:`resolve` classifies the delegate reference and puts a stand-in in
the delegate's place for the duration of a ``with`` block::

    with resolve(spec, delegator, substitute):
        invoke(...)

Everything replaced inside the block is restored when it exits, whether
the invocation returned, the checks failed or the delegator raised.
"""

from __future__ import annotations

import inspect
import logging
import sys
from collections.abc import Iterator
from contextlib import AbstractContextManager, ExitStack, contextmanager
from types import TracebackType
from unittest import mock

from delegate_matcher.introspection import Arity, MethodIntrospector
from delegate_matcher.spec import DelegationConfigError, DelegationSpec, Variant
from delegate_matcher.substitute import TestSubstitute

logger = logging.getLogger(__name__)

_ABSENT = object()


def _read_own(owner: object, name: str) -> object:
    """Read ``name`` as stored on ``owner`` itself, or ``_ABSENT``.

    Data descriptors (properties with a setter, slots) are read through
    the descriptor.
    """
    descriptor = inspect.getattr_static(type(owner), name, None)
    if hasattr(type(descriptor), "__set__"):
        return getattr(owner, name, _ABSENT)
    try:
        namespace = vars(owner)
    except TypeError:
        # no __dict__
        return getattr(owner, name, _ABSENT)
    return namespace.get(name, _ABSENT)


# ---------------------------------------------------------------------------
# FieldSubstitution
# ---------------------------------------------------------------------------

class FieldSubstitution(AbstractContextManager["FieldSubstitution"]):
    """Scoped replacement of a single attribute on an object or class.

    :meth:`acquire` stores the current value and writes the replacement;
    :meth:`release` writes the original back, or deletes the attribute if
    ``owner`` did not hold one itself. Used as a context manager, release
    always runs.
    """

    def __init__(self, owner: object, name: str, value: object) -> None:
        self.owner = owner
        self.name = name
        self.value = value
        self._original: object = _ABSENT
        self._active = False

    def acquire(self) -> FieldSubstitution:
        if self._active:
            msg = f"{self.name} is already substituted"
            raise RuntimeError(msg)
        self._original = _read_own(self.owner, self.name)
        setattr(self.owner, self.name, self.value)
        self._active = True
        logger.debug("Substituted %r for %s on %r", self.value, self.name, self.owner)
        return self

    def release(self) -> None:
        if not self._active:
            return
        if self._original is _ABSENT:
            delattr(self.owner, self.name)
        else:
            setattr(self.owner, self.name, self._original)
        self._active = False
        self._original = _ABSENT
        logger.debug("Restored %s on %r", self.name, self.owner)

    def __enter__(self) -> FieldSubstitution:
        return self.acquire()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


# ---------------------------------------------------------------------------
# Target lookup and validation
# ---------------------------------------------------------------------------

def lookup_constant(delegator: object, name: str) -> object:
    """Find constant ``name`` on the delegator's class or in its module."""
    owner = type(delegator)
    value = getattr(owner, name, _ABSENT)
    if value is _ABSENT:
        module = sys.modules.get(owner.__module__)
        value = getattr(module, name, _ABSENT)
    if value is _ABSENT:
        msg = f"{owner.__name__} does not define a constant {name}"
        raise DelegationConfigError(msg)
    return value


def check_configuration(
    spec: DelegationSpec,
    delegator: object,
    introspector: MethodIntrospector,
) -> None:
    """Raise :class:`DelegationConfigError` for specs that cannot be verified.

    Runs before any substitution is made.
    """
    spec.validate()
    variant = spec.variant
    name = spec.delegate_name

    if introspector.is_property(delegator, spec.delegator_method) and (
        spec.args or spec.kwargs or spec.expected_block is not None
    ):
        msg = f"{spec.delegator_method} is a property and cannot be called with arguments or a block"
        raise DelegationConfigError(msg)

    if variant == Variant.CLASS_FIELD:
        owner = type(delegator)
        if not hasattr(owner, introspector.attribute_name(owner, name)):
            msg = f"{type(delegator).__name__} does not define a class field {name}"
            raise DelegationConfigError(msg)

    elif variant == Variant.INSTANCE_FIELD:
        attribute = introspector.attribute_name(delegator, name)
        descriptor = inspect.getattr_static(type(delegator), attribute, None)
        if isinstance(descriptor, property) and descriptor.fset is None:
            msg = f"{type(delegator).__name__}.{name} is a read-only property and cannot be substituted"
            raise DelegationConfigError(msg)

    elif variant == Variant.NAMED_METHOD:
        if not introspector.has_method(delegator, name):
            msg = f"{delegator!r} does not respond to {name}"
            raise DelegationConfigError(msg)
        if introspector.arity(delegator, name) == Arity.FIXED:
            msg = f"{delegator!r}'s {name} method expects parameters"
            raise DelegationConfigError(msg)

    elif variant == Variant.NAMED_CONSTANT:
        _check_responds(lookup_constant(delegator, name), spec, introspector)

    elif variant == Variant.OBJECT_REFERENCE:
        _check_responds(spec.delegate, spec, introspector)


def _check_responds(
    target: object,
    spec: DelegationSpec,
    introspector: MethodIntrospector,
) -> None:
    method = spec.resolved_delegate_method
    if not introspector.has_method(target, method):
        msg = f"{target!r} does not respond to {method}"
        raise DelegationConfigError(msg)


# ---------------------------------------------------------------------------
# Interception
# ---------------------------------------------------------------------------

def _intercept(
    target: object,
    spec: DelegationSpec,
    substitute: TestSubstitute,
    introspector: MethodIntrospector,
) -> AbstractContextManager[object]:
    """Route calls to the delegate method on ``target`` into ``substitute``."""
    attribute = introspector.attribute_name(target, spec.resolved_delegate_method)
    logger.debug("Intercepting %s on %r", attribute, target)
    return mock.patch.object(target, attribute, new=substitute.interceptor())


def _stub_method(
    delegator: object,
    name: str,
    replacement: object,
    introspector: MethodIntrospector,
) -> AbstractContextManager[object]:
    """Make the delegator's ``name`` method return ``replacement``."""
    attribute = introspector.attribute_name(delegator, name)
    logger.debug("Stubbing %s on %r", attribute, delegator)
    if introspector.is_property(delegator, name):
        return mock.patch.object(
            type(delegator),
            attribute,
            new=property(lambda _self: replacement),
        )

    def stub(*args: object, **kwargs: object) -> object:
        return replacement

    return mock.patch.object(delegator, attribute, new=stub)


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------

@contextmanager
def resolve(
    spec: DelegationSpec,
    delegator: object,
    substitute: TestSubstitute | None,
    introspector: MethodIntrospector | None = None,
) -> Iterator[Variant]:
    """Put ``substitute`` in the delegate's place for the ``with`` block.

    Fields and methods are given the substitute's stand-in; constants and
    objects get the substitute's interceptor patched onto their delegate
    method. Passing ``None`` as the substitute checks nil handling, which
    is only possible for field and method delegates.

    The configuration must already have passed :func:`check_configuration`;
    callers run it once per verification.

    Yields:
        The variant the delegate reference was classified as.

    Raises:
        DelegationConfigError: If ``None`` is substituted for a constant or
            an object, or the constant cannot be found. Raised before
            anything is replaced.
    """
    if introspector is None:
        introspector = MethodIntrospector()
    variant = spec.variant
    name = spec.delegate_name
    replacement = substitute.stand_in if substitute is not None else None

    with ExitStack() as stack:
        if variant == Variant.CLASS_FIELD:
            owner = type(delegator)
            attribute = introspector.attribute_name(owner, name)
            stack.enter_context(FieldSubstitution(owner, attribute, replacement))
        elif variant == Variant.INSTANCE_FIELD:
            attribute = introspector.attribute_name(delegator, name)
            stack.enter_context(FieldSubstitution(delegator, attribute, replacement))
        elif variant == Variant.NAMED_METHOD:
            stack.enter_context(_stub_method(delegator, name, replacement, introspector))
        else:
            if substitute is None:
                msg = f"cannot substitute None for {name}"
                raise DelegationConfigError(msg)
            if variant == Variant.NAMED_CONSTANT:
                target = lookup_constant(delegator, name)
            else:
                target = spec.delegate
            stack.enter_context(_intercept(target, spec, substitute, introspector))
        yield variant
