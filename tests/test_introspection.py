"""Tests for delegate_matcher.introspection -- method lookup and arity."""

from __future__ import annotations

import pytest

from delegate_matcher.introspection import Arity, MethodIntrospector


class Subject:
    label = "plain value"

    def __init__(self) -> None:
        self.callback = lambda: None

    def none(self) -> None:
        pass

    def star(self, *args: object) -> None:
        pass

    def star_star(self, **kwargs: object) -> None:
        pass

    def optional(self, index: int = 0) -> None:
        pass

    def required(self, index: int) -> None:
        pass

    def keyword_only(self, *, index: int) -> None:
        pass

    def _private(self) -> None:
        pass

    def __secret(self) -> None:
        pass

    @property
    def author(self) -> str:
        return "author"

    @classmethod
    def build(cls) -> Subject:
        return cls()


class Callbacks(Subject):
    def with_block(self, text: str, block: object = None) -> None:
        pass

    def keyword_only_block(self, *, block: object = None) -> None:
        pass

    def positional_only_block(self, block: object = None, /) -> None:
        pass


class TestArity:
    """Tests for MethodIntrospector.arity()."""

    @pytest.mark.parametrize(
        ("name", "arity"),
        [
            ("none", Arity.ZERO),
            ("star", Arity.VARIADIC),
            ("star_star", Arity.VARIADIC),
            ("optional", Arity.VARIADIC),
            ("required", Arity.FIXED),
            ("keyword_only", Arity.FIXED),
            ("author", Arity.ZERO),
            ("build", Arity.ZERO),
            ("callback", Arity.ZERO),
        ],
    )
    def test_arity(self, name: str, arity: Arity) -> None:
        assert MethodIntrospector().arity(Subject(), name) is arity


class TestLookup:
    """Tests for has_method(), is_property() and attribute_name()."""

    def test_has_method(self) -> None:
        introspector = MethodIntrospector()
        subject = Subject()
        assert introspector.has_method(subject, "none")
        assert introspector.has_method(subject, "_private")
        assert introspector.has_method(subject, "author")
        assert introspector.has_method(subject, "callback")
        assert not introspector.has_method(subject, "label")
        assert not introspector.has_method(subject, "missing")

    def test_is_property(self) -> None:
        introspector = MethodIntrospector()
        assert introspector.is_property(Subject(), "author")
        assert not introspector.is_property(Subject(), "none")
        assert not introspector.is_property(Subject, "author")

    def test_mangled_private_names(self) -> None:
        introspector = MethodIntrospector()
        subject = Subject()
        assert introspector.attribute_name(subject, "__secret") == "_Subject__secret"
        assert introspector.has_method(subject, "__secret")
        assert introspector.arity(subject, "__secret") is Arity.ZERO

    def test_dunder_names_are_not_mangled(self) -> None:
        assert MethodIntrospector().attribute_name(Subject(), "__init__") == "__init__"


class TestAcceptsKeyword:
    """Tests for MethodIntrospector.accepts_keyword()."""

    @pytest.mark.parametrize(
        ("name", "accepted"),
        [
            ("none", False),
            ("star", False),
            ("star_star", True),
            ("optional", False),
            ("with_block", True),
            ("keyword_only_block", True),
            ("positional_only_block", False),
            ("author", False),
        ],
    )
    def test_accepts_block(self, name: str, accepted: bool) -> None:
        assert MethodIntrospector().accepts_keyword(Callbacks(), name, "block") is accepted

    def test_custom_keyword(self) -> None:
        introspector = MethodIntrospector()
        assert introspector.accepts_keyword(Callbacks(), "keyword_only_block", "block")
        assert not introspector.accepts_keyword(Callbacks(), "keyword_only_block", "on_done")

