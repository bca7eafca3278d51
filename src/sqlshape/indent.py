"""Nested indentation levels for the layout engine."""

from __future__ import annotations

from enum import Enum, auto


class IndentKind(Enum):
    TOPLEVEL = auto()  # body of a SELECT/FROM/WHERE ... clause
    BLOCK = auto()  # expanded parenthesised block
    NEWLINE_WITH_INDENT = auto()  # continuation after ON and friends
    OVERFLOW = auto()  # wrap of a line longer than max_line_length


class IndentTracker:
    """Four independent saturating counters rendered as one indent string.

    The kinds open and close on unrelated triggers, so they are counted
    separately instead of being kept on one stack. Decreasing a counter
    that is already zero is a no-op.
    """

    def __init__(self, unit: str = "  ") -> None:
        self.unit = unit
        self._levels = {kind: 0 for kind in IndentKind}

    def indent_text(self) -> str:
        return self.unit * sum(self._levels.values())

    def level(self, kind: IndentKind) -> int:
        return self._levels[kind]

    def increase(self, kind: IndentKind) -> None:
        self._levels[kind] += 1

    def decrease(self, kind: IndentKind) -> None:
        if self._levels[kind] > 0:
            self._levels[kind] -= 1

    def decrease_all_overflow(self) -> None:
        """Drop every overflow level; they only last until the next hard break."""
        self._levels[IndentKind.OVERFLOW] = 0
