"""SQL lexer — converts query text into a flat, lossless token stream."""

from __future__ import annotations

import re

from sqlshape.dialect import STANDARD_SQL, Dialect
from sqlshape.errors import LexError
from sqlshape.tokens import Position, Span, Token, TokenType

_CLOSING_QUOTE = {'"': '"', "'": "'", "`": "`", "[": "]", "N'": "'"}

# Longest first so that e.g. "->>" wins over "->"
_OPERATORS = (
    "!~~*",
    "->>",
    "~~*",
    "!~~",
    "!~*",
    "!=",
    "<>",
    "==",
    "<=",
    ">=",
    "!<",
    "!>",
    "||",
    "::",
    "->",
    "~~",
    "~*",
    "!~",
)

_WORD_RE = re.compile(r"\w+")
_NUMBER_RE = re.compile(r"(?:0x[0-9a-fA-F]+|0b[01]+|-?[0-9]+(?:\.[0-9]+)?)\b")

# Token types after which a "-" is a binary operator, not a sign
_OPERAND_TYPES = frozenset(
    {
        TokenType.WORD,
        TokenType.STRING,
        TokenType.NUMBER,
        TokenType.CLOSE_PAREN,
        TokenType.PLACEHOLDER,
    }
)


def _phrase_pattern(words: tuple[str, ...]) -> re.Pattern[str] | None:
    """Compile a case-insensitive matcher for a list of (possibly multi-word) phrases."""
    if not words:
        return None
    ordered = sorted(words, key=len, reverse=True)
    alternatives = "|".join(r"\s+".join(re.escape(part) for part in w.split()) for w in ordered)
    return re.compile(rf"(?:{alternatives})\b", re.IGNORECASE)


class Lexer:
    """Tokenize SQL source text into a list of Token objects."""

    def __init__(
        self, source: str, dialect: Dialect = STANDARD_SQL, filename: str = "input.sql"
    ) -> None:
        self._source = source
        self._dialect = dialect
        self._filename = filename
        self._pos = 0
        self._line = 1
        self._col = 1
        self._tokens: list[Token] = []
        self._reserved: list[tuple[TokenType, re.Pattern[str]]] = []
        for tt, words in (
            (TokenType.RESERVED_TOPLEVEL, dialect.reserved_toplevel),
            (TokenType.RESERVED_NEWLINE_WITH_INDENT, dialect.reserved_newline_with_indent),
            (TokenType.RESERVED_NEWLINE, dialect.reserved_newline),
            (TokenType.RESERVED, dialect.reserved),
        ):
            pattern = _phrase_pattern(words)
            if pattern is not None:
                self._reserved.append((tt, pattern))
        self._open_words = {p.upper() for p in dialect.open_parens if p.isalpha()}
        self._close_words = {p.upper() for p in dialect.close_parens if p.isalpha()}
        # Longest opener first so N' is tried before a bare quote
        self._quotes = sorted(dialect.string_quotes, key=len, reverse=True)

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list."""
        while self._pos < len(self._source):
            self._lex_next()
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _current_pos(self) -> Position:
        return Position(self._line, self._col, self._pos)

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _starts_with(self, text: str) -> bool:
        return self._source.startswith(text, self._pos)

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _advance_by(self, count: int) -> None:
        for _ in range(count):
            self._advance()

    def _emit(self, tt: TokenType, start: Position, key: str | None = None) -> Token:
        end = self._current_pos()
        tok = Token(tt, self._source[start.offset : end.offset], key, Span(start, end))
        self._tokens.append(tok)
        return tok

    def _error(self, message: str, pos: Position | None = None) -> LexError:
        if pos is None:
            pos = self._current_pos()
        return LexError(message, pos, self._source)

    def _previous(self, skip_whitespace: bool = False) -> Token | None:
        for tok in reversed(self._tokens):
            if skip_whitespace and tok.type == TokenType.WHITESPACE:
                continue
            return tok
        return None

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _lex_next(self) -> None:
        ch = self._peek()

        if ch.isspace():
            self._lex_whitespace()
            return

        if any(self._starts_with(prefix) for prefix in self._dialect.line_comments):
            self._lex_line_comment()
            return

        if self._starts_with("/*"):
            self._lex_block_comment()
            return

        for quote in self._quotes:
            if self._starts_with(quote):
                self._lex_string(quote)
                return

        if ch in self._dialect.open_parens:
            start = self._current_pos()
            self._advance()
            self._emit(TokenType.OPEN_PAREN, start)
            return

        if ch in self._dialect.close_parens:
            start = self._current_pos()
            self._advance()
            self._emit(TokenType.CLOSE_PAREN, start)
            return

        if self._lex_placeholder():
            return

        if self._lex_number():
            return

        if self._lex_reserved():
            return

        if self._lex_word():
            return

        self._lex_operator()

    # ------------------------------------------------------------------
    # Whitespace and comments
    # ------------------------------------------------------------------

    def _lex_whitespace(self) -> None:
        start = self._current_pos()
        while self._pos < len(self._source) and self._peek().isspace():
            self._advance()
        self._emit(TokenType.WHITESPACE, start)

    def _lex_line_comment(self) -> None:
        """Consume through the end of line, keeping the line break in the token."""
        start = self._current_pos()
        while self._pos < len(self._source):
            ch = self._advance()
            if ch == "\n":
                break
            if ch == "\r":
                if self._peek() == "\n":
                    self._advance()
                break
        self._emit(TokenType.LINE_COMMENT, start)

    def _lex_block_comment(self) -> None:
        start = self._current_pos()
        end = self._source.find("*/", self._pos + 2)
        if end == -1:
            raise self._error("unterminated block comment", start)
        self._advance_by(end + 2 - self._pos)
        self._emit(TokenType.BLOCK_COMMENT, start)

    # ------------------------------------------------------------------
    # Strings
    # ------------------------------------------------------------------

    def _lex_string(self, opener: str) -> None:
        """Scan a quoted literal; doubled closers and backslashes escape."""
        start = self._current_pos()
        closer = _CLOSING_QUOTE.get(opener, opener[-1])
        backslash_escapes = closer in ("'", '"')
        self._advance_by(len(opener))

        while self._pos < len(self._source):
            ch = self._peek()
            if ch == "\\" and backslash_escapes and self._pos + 1 < len(self._source):
                self._advance_by(2)
                continue
            if ch == closer:
                if self._peek(1) == closer:
                    self._advance_by(2)
                    continue
                self._advance()
                self._emit(TokenType.STRING, start)
                return
            self._advance()

        raise self._error(f"unterminated string (expected closing {closer})", start)

    # ------------------------------------------------------------------
    # Placeholders, numbers, words
    # ------------------------------------------------------------------

    def _lex_placeholder(self) -> bool:
        ch = self._peek()
        start = self._current_pos()

        if ch in self._dialect.indexed_placeholders:
            self._advance()
            digits = []
            while self._peek().isdigit():
                digits.append(self._advance())
            self._emit(TokenType.PLACEHOLDER, start, "".join(digits) or None)
            return True

        if ch not in self._dialect.named_placeholders:
            return False

        nxt = self._peek(1)
        if nxt in ("'", '"', "`"):
            close = self._source.find(nxt, self._pos + 2)
            if close == -1:
                return False
            key = self._source[self._pos + 2 : close]
            self._advance_by(close + 1 - self._pos)
            self._emit(TokenType.PLACEHOLDER, start, key)
            return True

        m = _WORD_RE.match(self._source, self._pos + 1)
        if m is None:
            return False
        self._advance_by(m.end() - self._pos)
        self._emit(TokenType.PLACEHOLDER, start, m.group())
        return True

    def _lex_number(self) -> bool:
        if self._peek() == "-":
            previous = self._previous(skip_whitespace=True)
            if previous is not None and previous.type in _OPERAND_TYPES:
                return False
        m = _NUMBER_RE.match(self._source, self._pos)
        if m is None:
            return False
        start = self._current_pos()
        self._advance_by(m.end() - self._pos)
        self._emit(TokenType.NUMBER, start)
        return True

    def _after_dot(self) -> bool:
        previous = self._previous()
        return previous is not None and previous.value == "."

    def _lex_reserved(self) -> bool:
        # t.select is a column reference, not a keyword
        if self._after_dot():
            return False
        for tt, pattern in self._reserved:
            m = pattern.match(self._source, self._pos)
            if m is not None:
                start = self._current_pos()
                self._advance_by(m.end() - self._pos)
                self._emit(tt, start)
                return True
        return False

    def _lex_word(self) -> bool:
        m = _WORD_RE.match(self._source, self._pos)
        if m is None:
            return False
        start = self._current_pos()
        word = m.group().upper()
        self._advance_by(m.end() - self._pos)
        if not self._after_dot() and word in self._open_words:
            self._emit(TokenType.OPEN_PAREN, start)
        elif not self._after_dot() and word in self._close_words:
            self._emit(TokenType.CLOSE_PAREN, start)
        else:
            self._emit(TokenType.WORD, start)
        return True

    def _lex_operator(self) -> None:
        start = self._current_pos()
        for op in _OPERATORS:
            if self._starts_with(op):
                self._advance_by(len(op))
                break
        else:
            self._advance()
        self._emit(TokenType.OPERATOR, start)


def tokenize(
    source: str, dialect: Dialect = STANDARD_SQL, filename: str = "input.sql"
) -> list[Token]:
    """Convenience function: tokenize source text and return token list."""
    return Lexer(source, dialect, filename).tokenize()
