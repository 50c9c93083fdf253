"""Invocation of the delegator method under test."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from delegate_matcher.introspection import MethodIntrospector
from delegate_matcher.spec import DelegationConfigError, DelegationSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Invocation:
    """Outcome of calling the delegator.

    Attributes:
        method_name: The delegator method that was looked up.
        found: False if the delegator has no such method; nothing was called.
        return_value: What the delegator returned.
    """
    method_name: str
    found: bool
    return_value: object = None


def effective_method_name(spec: DelegationSpec) -> str:
    """Alias if set, else ``<prefix>_<method>`` with a prefix, else ``method``."""
    return spec.delegator_method


def invoke(
    delegator: object,
    method_name: str,
    args: tuple[object, ...] = (),
    kwargs: Mapping[str, object] | None = None,
    block: object | None = None,
    block_keyword: str | None = None,
    introspector: MethodIntrospector | None = None,
) -> Invocation:
    """Call ``delegator.method_name`` and capture what it returns.

    The block is passed as the ``block_keyword`` keyword argument when
    both are given and the method accepts that keyword; otherwise the
    method is called without it. A property is read instead of called and
    cannot take arguments. Exceptions raised by the delegator propagate
    unchanged.
    """
    if introspector is None:
        introspector = MethodIntrospector()

    if not introspector.has_method(delegator, method_name):
        logger.debug("%r does not respond to %s", delegator, method_name)
        return Invocation(method_name=method_name, found=False)

    call_kwargs = dict(kwargs or {})
    if block is not None and block_keyword is not None:
        if introspector.accepts_keyword(delegator, method_name, block_keyword):
            call_kwargs[block_keyword] = block
        else:
            logger.debug("%s takes no %s argument, calling without a block", method_name, block_keyword)

    attribute = introspector.attribute_name(delegator, method_name)
    if introspector.is_property(delegator, method_name):
        if args or call_kwargs:
            msg = f"{method_name} is a property and cannot be called with arguments or a block"
            raise DelegationConfigError(msg)
        return Invocation(
            method_name=method_name,
            found=True,
            return_value=getattr(delegator, attribute),
        )

    method = getattr(delegator, attribute)
    return Invocation(
        method_name=method_name,
        found=True,
        return_value=method(*args, **call_kwargs),
    )


def invoke_spec(
    spec: DelegationSpec,
    delegator: object,
    block: object | None = None,
    introspector: MethodIntrospector | None = None,
) -> Invocation:
    """Invoke the delegator the way ``spec`` describes."""
    return invoke(
        delegator,
        effective_method_name(spec),
        args=spec.args or (),
        kwargs=spec.kwargs,
        block=block,
        block_keyword=spec.block_keyword,
        introspector=introspector,
    )
