"""Tests for delegate_matcher.substitute -- the recording stand-in."""

from __future__ import annotations

from delegate_matcher.substitute import DelegateResult, InvocationRecord, TestSubstitute


def _make_substitute(method: str = "name") -> TestSubstitute:
    return TestSubstitute(method, InvocationRecord(), DelegateResult(), "block")


class TestDelegateResult:
    """Tests for the sentinel result."""

    def test_results_are_distinct(self) -> None:
        assert DelegateResult() is not DelegateResult()
        assert DelegateResult() != DelegateResult()

    def test_not_equal_to_its_text(self) -> None:
        result = DelegateResult()
        assert result == result
        assert result != "<delegate result>"
        assert "<delegate result>" != result
        assert not result == "<delegate result>"

    def test_repr(self) -> None:
        assert repr(DelegateResult()) == "<delegate result>"

    def test_string_operations_produce_new_values(self) -> None:
        result = DelegateResult()
        decorated = "prefix: " + result
        assert decorated == "prefix: <delegate result>"
        assert type(decorated) is str

    def test_hashable(self) -> None:
        result = DelegateResult()
        assert {result: 1}[result] == 1


class TestInvocationRecord:
    """Tests for InvocationRecord.capture()."""

    def test_starts_uncalled(self) -> None:
        record = InvocationRecord()
        assert not record.called
        assert record.args is None
        assert record.block is None

    def test_capture_splits_block(self) -> None:
        record = InvocationRecord()
        callback = print
        record.capture(("a", 1), {"block": callback, "key": 2}, "block")
        assert record.called
        assert record.args == ("a", 1)
        assert record.kwargs == {"key": 2}
        assert record.block is callback

    def test_only_first_call_is_kept(self) -> None:
        record = InvocationRecord()
        record.capture(("first",), {}, "block")
        record.capture(("second",), {"block": print}, "block")
        assert record.args == ("first",)
        assert record.block is None
        assert record.call_count == 2

    def test_none_args_are_a_real_call(self) -> None:
        record = InvocationRecord()
        record.capture((None,), {}, "block")
        assert record.called
        assert record.args == (None,)


class TestTestSubstitute:
    """Tests for TestSubstitute."""

    def test_exposes_delegate_method(self) -> None:
        substitute = _make_substitute("full_name")
        result = substitute.stand_in.full_name("Mr.", block=len)  # type: ignore[attr-defined]
        assert result is substitute.result
        assert substitute.record.args == ("Mr.",)
        assert substitute.record.block is len

    def test_interceptor_records_into_the_same_record(self) -> None:
        substitute = _make_substitute()
        intercept = substitute.interceptor()
        assert intercept.__name__ == "name"
        assert intercept(1, 2) is substitute.result
        assert substitute.record.args == (1, 2)

    def test_repr(self) -> None:
        substitute = _make_substitute("title")
        assert repr(substitute) == "<TestSubstitute title>"
        assert repr(substitute.stand_in) == "<test substitute for title>"

    def test_method_names_do_not_clash(self) -> None:
        substitute = _make_substitute("record")
        assert substitute.stand_in.record() is substitute.result  # type: ignore[attr-defined]
        assert substitute.record.called
