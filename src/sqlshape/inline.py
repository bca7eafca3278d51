"""Detection of parenthesised regions short enough to stay on one line."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from sqlshape.tokens import Token, TokenType

logger = logging.getLogger(__name__)

INLINE_MAX_LENGTH = 50

_FORBIDDEN_TYPES = frozenset(
    {
        TokenType.RESERVED_TOPLEVEL,
        TokenType.RESERVED_NEWLINE,
        TokenType.RESERVED_NEWLINE_WITH_INDENT,
        TokenType.LINE_COMMENT,
        TokenType.BLOCK_COMMENT,
    }
)

# Punctuation the layout engine glues to the preceding token
_TIGHT_BEFORE = frozenset({",", ".", ":", ";"})

_WS_RUN = re.compile(r"\s+")


class InlineBlockDetector:
    """Tracks whether the layout engine is inside a one-line parenthesised block.

    Only one inline block is active at a time. Parentheses nested inside it
    are counted so that the block ends at its structurally matching close.
    """

    def __init__(self, max_length: int = INLINE_MAX_LENGTH) -> None:
        self.max_length = max_length
        self._depth = 0

    def try_begin(self, tokens: Sequence[Token], index: int) -> bool:
        """Enter (or nest deeper into) inline mode at the open paren ``tokens[index]``.

        Returns whether inline mode is active afterwards.
        """
        if self._depth > 0:
            self._depth += 1
        elif self.is_inline_block(tokens, index):
            logger.debug("inline block at token %d", index)
            self._depth = 1
        return self.is_active()

    def end(self) -> None:
        if self._depth > 0:
            self._depth -= 1

    def is_active(self) -> bool:
        return self._depth > 0

    def is_inline_block(self, tokens: Sequence[Token], index: int) -> bool:
        """Check the region from the open paren at *index* to its matching close.

        The region qualifies when its rendered one-line form fits in
        ``max_length`` characters (both parentheses included) and holds no
        clause keyword, newline keyword, comment or statement separator. A
        paren that is never closed does not qualify.
        """
        length = 0
        level = 0
        previous: Token | None = None
        for token in tokens[index:]:
            if token.type == TokenType.WHITESPACE:
                continue

            if previous is not None and _spaced(previous, token):
                length += 1
            length += len(_WS_RUN.sub(" ", token.value))
            if length > self.max_length:
                return False
            previous = token

            if token.type == TokenType.OPEN_PAREN:
                level += 1
            elif token.type == TokenType.CLOSE_PAREN:
                level -= 1
                if level == 0:
                    return True

            if token.type in _FORBIDDEN_TYPES or token.value == ";":
                return False

        logger.debug("no matching close for paren at token %d", index)
        return False


def _spaced(previous: Token, token: Token) -> bool:
    """Whether one-line layout puts a space between two adjacent tokens."""
    if previous.type == TokenType.OPEN_PAREN or previous.value == ".":
        return False
    return token.type != TokenType.CLOSE_PAREN and token.value not in _TIGHT_BEFORE
