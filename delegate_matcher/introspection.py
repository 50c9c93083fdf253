"""Method lookup and arity classification.

The resolver and invoker only ask questions through
:class:`MethodIntrospector`, so reflection rules live in one place.
"""

from __future__ import annotations

import inspect
import logging
from enum import Enum

logger = logging.getLogger(__name__)

_REQUIRED_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)

_KEYWORD_KINDS = (
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)

_MISSING = object()


class Arity(Enum):
    """Parameter-count classification of a callable."""
    ZERO = "zero"
    VARIADIC = "variadic"
    FIXED = "fixed"


class MethodIntrospector:
    """Answers reflection questions about delegators and delegates.

    Private names written as ``"__name"`` are looked up under their
    mangled form (``_Class__name``) when the plain name is missing.
    """

    def attribute_name(self, obj: object, name: str) -> str:
        """Return the attribute name ``name`` is stored under on ``obj``."""
        if not name.startswith("__") or name.endswith("__"):
            return name
        if inspect.getattr_static(obj, name, _MISSING) is not _MISSING:
            return name
        owner = obj if isinstance(obj, type) else type(obj)
        for klass in owner.__mro__:
            mangled = f"_{klass.__name__.lstrip('_')}{name}"
            if inspect.getattr_static(obj, mangled, _MISSING) is not _MISSING:
                return mangled
        return name

    def is_property(self, obj: object, name: str) -> bool:
        """True if ``name`` is a property on the class of ``obj``."""
        if isinstance(obj, type):
            return False
        attr = inspect.getattr_static(type(obj), self.attribute_name(obj, name), None)
        return isinstance(attr, property)

    def has_method(self, obj: object, name: str) -> bool:
        """True if ``obj`` exposes ``name`` as a callable or a property."""
        if self.is_property(obj, name):
            return True
        try:
            attr = getattr(obj, self.attribute_name(obj, name))
        except AttributeError:
            return False
        return callable(attr)

    def accepts_keyword(self, obj: object, name: str, keyword: str) -> bool:
        """True if ``obj.name`` can be called with a ``keyword`` argument.

        Properties accept nothing. Callables without an inspectable
        signature are assumed to accept anything.
        """
        if self.is_property(obj, name):
            return False
        method = getattr(obj, self.attribute_name(obj, name))
        try:
            signature = inspect.signature(method)
        except (TypeError, ValueError):
            return True
        for parameter in signature.parameters.values():
            if parameter.kind is inspect.Parameter.VAR_KEYWORD:
                return True
            if parameter.name == keyword and parameter.kind in _KEYWORD_KINDS:
                return True
        return False

    def arity(self, obj: object, name: str) -> Arity:
        """Classify the parameters of ``obj.name``.

        Properties are ``ZERO``. Callables without an inspectable signature
        (some builtins) are ``VARIADIC``.
        """
        if self.is_property(obj, name):
            return Arity.ZERO
        method = getattr(obj, self.attribute_name(obj, name))
        try:
            signature = inspect.signature(method)
        except (TypeError, ValueError):
            logger.debug("No signature for %r.%s, treating as variadic", obj, name)
            return Arity.VARIADIC
        parameters = list(signature.parameters.values())
        if not parameters:
            return Arity.ZERO
        for parameter in parameters:
            if parameter.kind in _REQUIRED_KINDS and parameter.default is inspect.Parameter.empty:
                return Arity.FIXED
        return Arity.VARIADIC
