"""PlaceholderResolver unit tests."""

from __future__ import annotations

from sqlshape.params import PlaceholderResolver
from sqlshape.tokens import TokenType

from tests.conftest import tok


def _ph(value: str, key: str | None = None):
    return tok(TokenType.PLACEHOLDER, value, key)


class TestNoParams:
    def test_returns_literal(self) -> None:
        assert PlaceholderResolver().resolve(_ph("?")) == "?"
        assert PlaceholderResolver().resolve(_ph(":id", "id")) == ":id"


class TestNamed:
    def test_lookup_by_key(self) -> None:
        r = PlaceholderResolver({"id": 7})
        assert r.resolve(_ph(":id", "id")) == "7"

    def test_missing_key_keeps_literal(self) -> None:
        r = PlaceholderResolver({"id": 7})
        assert r.resolve(_ph(":other", "other")) == ":other"

    def test_bare_marker_with_mapping_keeps_literal(self) -> None:
        assert PlaceholderResolver({"id": 7}).resolve(_ph("?")) == "?"


class TestPositional:
    def test_consumes_in_order(self) -> None:
        r = PlaceholderResolver(["a", "b"])
        assert r.resolve(_ph("?")) == "a"
        assert r.resolve(_ph("?")) == "b"

    def test_exhausted_keeps_literal(self) -> None:
        r = PlaceholderResolver([1])
        r.resolve(_ph("?"))
        assert r.resolve(_ph("?")) == "?"

    def test_indexed_key(self) -> None:
        r = PlaceholderResolver(["zero", "one"])
        assert r.resolve(_ph("?1", "1")) == "one"
        assert r.resolve(_ph("?5", "5")) == "?5"

    def test_indexed_does_not_advance_cursor(self) -> None:
        r = PlaceholderResolver(["zero", "one"])
        r.resolve(_ph("?1", "1"))
        assert r.resolve(_ph("?")) == "zero"

    def test_string_params_are_not_a_sequence(self) -> None:
        assert PlaceholderResolver("abc").resolve(_ph("?")) == "?"  # type: ignore[arg-type]
