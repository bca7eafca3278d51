"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from sqlshape.layout import FormatOptions, format_tokens
from sqlshape.lexer import tokenize
from sqlshape.tokens import Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and drops whitespace tokens."""

    def _lex(source: str) -> list[Token]:
        return [t for t in tokenize(source) if t.type != TokenType.WHITESPACE]

    return _lex


@pytest.fixture
def fmt():
    """Return a helper that tokenizes and formats source with the given options."""

    def _fmt(source: str, **options) -> str:
        return format_tokens(tokenize(source), FormatOptions(**options))

    return _fmt


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_values(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token values match the expected list."""
    actual = [t.value for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def tok(tt: TokenType, value: str, key: str | None = None) -> Token:
    """Build a token without a span, as an external tokenizer might."""
    return Token(tt, value, key)
