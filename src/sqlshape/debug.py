"""--debug token stream dump to stderr."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import TextIO

from sqlshape.tokens import Token, TokenType


def dump_tokens(tokens: Sequence[Token], *, file: TextIO | None = None) -> None:
    """Print one line per non-whitespace token to *file* (default: stderr)."""
    f = file if file is not None else sys.stderr
    for tok in tokens:
        if tok.type == TokenType.WHITESPACE:
            continue
        where = f"{tok.span.start.line}:{tok.span.start.column}" if tok.span else "?:?"
        line = f"{where:>8}  {tok.type.name:<28} {tok.value!r}"
        if tok.key is not None:
            line += f"  key={tok.key!r}"
        f.write(line + "\n")
