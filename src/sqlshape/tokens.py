"""Token types and data structures shared by the lexer and the layout engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    WHITESPACE = auto()
    WORD = auto()  # identifiers and anything unreserved
    STRING = auto()  # 'x', "x", `x`, [x], N'x'
    NUMBER = auto()
    OPERATOR = auto()  # punctuation, including , . ; :

    # Reserved words, most specific first
    RESERVED_TOPLEVEL = auto()  # SELECT, FROM, WHERE ...
    RESERVED_NEWLINE_WITH_INDENT = auto()  # ON
    RESERVED_NEWLINE = auto()  # AND, OR, JOIN ...
    RESERVED = auto()

    OPEN_PAREN = auto()  # ( or CASE
    CLOSE_PAREN = auto()  # ) or END
    PLACEHOLDER = auto()  # ?, ?1, :name, @name

    LINE_COMMENT = auto()  # -- x or # x, including the line break
    BLOCK_COMMENT = auto()  # /* x */


COMMENT_TYPES = frozenset({TokenType.LINE_COMMENT, TokenType.BLOCK_COMMENT})


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """A classified fragment of source text.

    ``value`` is the exact source text. ``key`` is only set on placeholders
    that carry a name or index (``:id`` -> ``"id"``, ``?2`` -> ``"2"``).
    """

    type: TokenType
    value: str
    key: str | None = None
    span: Span | None = None