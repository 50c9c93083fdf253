"""Recording stand-in for the delegate.

The :class:`TestSubstitute` takes the delegate's place during a
verification pass. It records the first call that reaches it and
returns a :class:`DelegateResult`, a value no domain code can produce,
so the evaluator can tell whether the delegator returned the delegate's
result unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class DelegateResult(str):
    """Unique result returned by a test substitute.

    Subclasses ``str`` so delegators that post-process their delegate's
    result (``"Mr. " + result``) still run and produce a different value.
    Equality is identity.
    """
    __slots__ = ()

    def __new__(cls) -> DelegateResult:
        return super().__new__(cls, "<delegate result>")

    def __repr__(self) -> str:
        return "<delegate result>"

    def __eq__(self, other: object) -> bool:
        return self is other

    def __ne__(self, other: object) -> bool:
        return self is not other

    __hash__ = object.__hash__


@dataclass
class InvocationRecord:
    """What the test substitute saw during one pass.

    Attributes:
        called: Whether the delegate method was called at all.
        call_count: Number of calls, including ignored repeat calls.
        args: Positional arguments of the first call.
        kwargs: Keyword arguments of the first call, block excluded.
        block: Callback passed with the first call, if any.
    """
    called: bool = False
    call_count: int = 0
    args: tuple[object, ...] | None = None
    kwargs: dict[str, object] | None = None
    block: object | None = None

    def capture(
        self,
        args: tuple[object, ...],
        kwargs: Mapping[str, object],
        block_keyword: str,
    ) -> None:
        """Record a call. Only the first call is kept."""
        self.call_count += 1
        if self.called:
            logger.debug("Ignoring repeat call #%d to the delegate", self.call_count)
            return
        remaining = dict(kwargs)
        self.block = remaining.pop(block_keyword, None)
        self.args = tuple(args)
        self.kwargs = remaining
        self.called = True


class _StandIn:
    """Bare object carrying only the delegate method."""

    def __init__(self, method_name: str, method: Callable[..., object]) -> None:
        self._method_name = method_name
        setattr(self, method_name, method)

    def __repr__(self) -> str:
        return f"<test substitute for {self._method_name}>"


class TestSubstitute:
    """Records calls made to the delegate in its place.

    :attr:`stand_in` is what gets installed where the delegate was; it
    exposes only the delegate method. :meth:`interceptor` returns the same
    recording callable for patching onto a real object.

    Usage::

        record = InvocationRecord()
        result = DelegateResult()
        substitute = TestSubstitute("name", record, result, "block")
        assert substitute.stand_in.name("Mr.") is result
        assert record.args == ("Mr.",)
    """
    __test__ = False  # not a pytest test class

    def __init__(
        self,
        method_name: str,
        record: InvocationRecord,
        result: DelegateResult,
        block_keyword: str,
    ) -> None:
        self.method_name = method_name
        self.record = record
        self.result = result
        self.block_keyword = block_keyword
        self.stand_in = _StandIn(method_name, self.interceptor())

    def interceptor(self) -> Callable[..., object]:
        """Return a recording callable for installation on a real object."""

        def intercept(*args: object, **kwargs: object) -> object:
            self.record.capture(args, kwargs, self.block_keyword)
            return self.result

        intercept.__name__ = self.method_name
        return intercept

    def __repr__(self) -> str:
        return f"<TestSubstitute {self.method_name}>"
