"""Error types with formatted source context."""

from __future__ import annotations

from sqlshape.tokens import Position, Token


def _context(message: str, position: Position, source: str, width: int, filename: str) -> str:
    lines = source.splitlines(keepends=True)
    line_idx = position.line - 1
    col = position.column

    # Build the source line (strip trailing newline for display)
    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].rstrip("\n").rstrip("\r")
    else:
        source_line = ""

    # Underline at least 1 char, but stay within line
    underline_len = max(1, min(width, len(source_line) - col + 1))

    pad = " " * (col - 1)
    carets = "^" * underline_len

    line_num = str(position.line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"error: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{position.line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )


class LexError(Exception):
    """Raised on the first tokenizing error, with position and source context."""

    def __init__(self, message: str, position: Position, source: str) -> None:
        self.message = message
        self.position = position
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "input.sql") -> str:
        return _context(self.message, self.position, self.source, 2, filename)


class FormatError(Exception):
    """Raised when the token stream breaks the tokenizer contract.

    Formatting aborts on the first such token; no partial output is returned.
    """

    def __init__(self, message: str, token: Token, index: int) -> None:
        self.message = message
        self.token = token
        self.index = index
        super().__init__(f"{message} (token {index}: {token.value!r})")

    def format(self, source: str | None = None, filename: str = "input.sql") -> str:
        if source is None or self.token.span is None:
            return f"error: {self}"
        width = max(1, len(self.token.value.split("\n", 1)[0]))
        return _context(self.message, self.token.span.start, source, width, filename)
