"""Layout engine — re-renders a token stream as indented, line-broken SQL."""

from __future__ import annotations

import logging
import re
import textwrap
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from sqlshape.dialect import STANDARD_SQL, Dialect
from sqlshape.errors import FormatError
from sqlshape.indent import IndentKind, IndentTracker
from sqlshape.inline import INLINE_MAX_LENGTH, InlineBlockDetector
from sqlshape.params import Params, PlaceholderResolver
from sqlshape.tokens import COMMENT_TYPES, Token, TokenType

logger = logging.getLogger(__name__)

CommaStyle = Literal["leading", "trailing"]

_WS_RUN = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class FormatOptions:
    """Formatting settings for one format call.

    ``comma_style`` defaults to ``"leading"``: a broken list puts each comma
    at the start of the next item's line (``,b``). Pass ``"trailing"`` to
    end each line with the comma instead (``a,``).
    """

    indent: str = "  "
    max_line_length: int = 0  # 0 disables overflow wrapping
    params: Params | None = None
    comma_style: CommaStyle = "leading"
    inline_max_length: int = INLINE_MAX_LENGTH
    dialect: Dialect = field(default=STANDARD_SQL)

    def __post_init__(self) -> None:
        if self.max_line_length < 0:
            raise ValueError(f"max_line_length must be >= 0, got {self.max_line_length}")
        if self.inline_max_length < 0:
            raise ValueError(f"inline_max_length must be >= 0, got {self.inline_max_length}")
        if self.comma_style not in ("leading", "trailing"):
            raise ValueError(f"comma_style must be 'leading' or 'trailing', got {self.comma_style!r}")


def _collapse(text: str) -> str:
    """Replace each whitespace run with a single space."""
    return _WS_RUN.sub(" ", text)


class _Output:
    """Append-only text buffer that can drop trailing whitespace."""

    def __init__(self) -> None:
        self._parts: list[str] = []

    def append(self, text: str) -> None:
        if text:
            self._parts.append(text)

    def trim_end(self) -> None:
        while self._parts:
            stripped = self._parts[-1].rstrip()
            if stripped:
                self._parts[-1] = stripped
                return
            self._parts.pop()

    def last_line_length(self) -> int:
        length = 0
        for part in reversed(self._parts):
            nl = part.rfind("\n")
            if nl != -1:
                return length + len(part) - nl - 1
            length += len(part)
        return length

    def getvalue(self) -> str:
        return "".join(self._parts)


class LayoutEngine:
    """Walk a token stream once and rebuild its whitespace and indentation.

    Token order and values are preserved; only layout changes, plus
    placeholder substitution. All state lives on the engine and is reset
    at the start of every :meth:`format` call.
    """

    def __init__(self, options: FormatOptions | None = None) -> None:
        self.options = options or FormatOptions()
        self._reset()

    def _reset(self) -> None:
        self._indent = IndentTracker(self.options.indent)
        self._inline = InlineBlockDetector(self.options.inline_max_length)
        self._resolver = PlaceholderResolver(self.options.params)
        self._out = _Output()
        self._pending_prefix = ""
        self._previous_keyword: Token | None = None
        self._previous_type: TokenType | None = None
        self._after_separator = False

    def format(self, tokens: Sequence[Token]) -> str:
        """Format *tokens* and return the result with outer whitespace stripped."""
        self._reset()
        for index, token in enumerate(tokens):
            self._format_token(tokens, index, token)
            self._previous_type = token.type
        return self._out.getvalue().strip()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _format_token(self, tokens: Sequence[Token], index: int, token: Token) -> None:
        value = token.value
        if (
            self._pending_prefix
            and token.type != TokenType.WHITESPACE
            and token.type not in COMMENT_TYPES
        ):
            value = self._pending_prefix + value
            self._pending_prefix = ""

        match token.type:
            case TokenType.WHITESPACE:
                pass
            case TokenType.LINE_COMMENT:
                self._format_line_comment(value)
            case TokenType.BLOCK_COMMENT:
                self._format_block_comment(token, index)
            case TokenType.RESERVED_TOPLEVEL:
                self._format_toplevel_keyword(value)
                self._previous_keyword = token
            case TokenType.RESERVED_NEWLINE:
                self._format_newline_keyword(token, value)
                self._previous_keyword = token
            case TokenType.RESERVED_NEWLINE_WITH_INDENT:
                self._format_newline_keyword_with_indent(value)
                self._previous_keyword = token
            case TokenType.RESERVED:
                value = _collapse(value)
                self._check_max_line_length(value)
                self._format_with_spaces(value)
                self._previous_keyword = token
            case TokenType.OPEN_PAREN:
                self._format_open_paren(tokens, index, value)
            case TokenType.CLOSE_PAREN:
                self._format_close_paren(value)
            case TokenType.PLACEHOLDER:
                prefix = value[: len(value) - len(token.value)]
                self._format_with_spaces(prefix + self._resolver.resolve(token))
            case TokenType.OPERATOR if token.value == ",":
                self._format_comma(value)
            case TokenType.OPERATOR if token.value == ":":
                self._format_with_space_after(value)
            case TokenType.OPERATOR if token.value == ".":
                self._format_without_spaces(value)
            case TokenType.OPERATOR if token.value == ";":
                self._format_without_spaces(value)
                self._out.append("\n\n")
                self._after_separator = True
            case TokenType.WORD | TokenType.STRING | TokenType.NUMBER | TokenType.OPERATOR:
                self._check_max_line_length(value)
                self._format_with_spaces(value)
            case _:
                raise FormatError(f"unclassified token type {token.type!r}", token, index)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def _format_line_comment(self, value: str) -> None:
        """Render ``-- text`` as ``/* text */`` and break the line after it."""
        self._indent.decrease_all_overflow()
        body = value.rstrip("\r\n")
        for prefix in self.options.dialect.line_comments:
            if body.startswith(prefix):
                body = body[len(prefix) :]
                break
        # A closer inside the text would end the comment early
        body = body.replace("*/", "* /")
        self._emit("/*" + body + " */")
        self._add_newline()

    def _format_block_comment(self, token: Token, index: int) -> None:
        value = token.value
        if len(value) < 4 or not value.startswith("/*") or not value.endswith("*/"):
            raise FormatError("unterminated block comment", token, index)
        self._add_newline()
        self._emit(self._indent_comment(value))
        self._add_newline()

    def _indent_comment(self, comment: str) -> str:
        """Re-anchor continuation lines of a comment at the current indent."""
        indent = self._indent.indent_text()
        first, *rest = comment.split("\n")
        if rest:
            rest = textwrap.dedent("\n".join(rest)).split("\n")
        lines = [first.rstrip()] + [(indent + line).rstrip() for line in rest]
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Reserved words
    # ------------------------------------------------------------------

    def _format_toplevel_keyword(self, value: str) -> None:
        self._indent.decrease_all_overflow()
        self._indent.decrease(IndentKind.NEWLINE_WITH_INDENT)
        self._indent.decrease(IndentKind.TOPLEVEL)
        self._add_newline()
        self._indent.increase(IndentKind.TOPLEVEL)
        self._emit(_collapse(value))
        self._add_newline()

    def _format_newline_keyword(self, token: Token, value: str) -> None:
        self._indent.decrease_all_overflow()
        if _collapse(token.value).upper() in self.options.dialect.join_words:
            self._indent.decrease(IndentKind.NEWLINE_WITH_INDENT)
        self._add_newline()
        self._emit(_collapse(value) + " ")

    def _format_newline_keyword_with_indent(self, value: str) -> None:
        self._indent.decrease_all_overflow()
        self._indent.increase(IndentKind.NEWLINE_WITH_INDENT)
        self._add_newline()
        self._emit(_collapse(value) + " ")

    # ------------------------------------------------------------------
    # Parentheses
    # ------------------------------------------------------------------

    def _format_open_paren(self, tokens: Sequence[Token], index: int, value: str) -> None:
        self._indent.decrease_all_overflow()
        # Keep a space the source had, or one left by a preceding open paren
        if self._previous_type not in (TokenType.WHITESPACE, TokenType.OPEN_PAREN):
            self._out.trim_end()

        if self._inline.try_begin(tokens, index):
            self._emit(value)
            return

        self._add_newline()
        self._emit(value)
        self._indent.increase(IndentKind.BLOCK)
        self._add_newline()

    def _format_close_paren(self, value: str) -> None:
        if self._inline.is_active():
            self._inline.end()
            self._format_with_space_after(value)
            return

        self._indent.decrease(IndentKind.BLOCK)
        self._add_newline()
        self._format_with_spaces(value)

    # ------------------------------------------------------------------
    # Punctuation
    # ------------------------------------------------------------------

    def _format_comma(self, value: str) -> None:
        """Break after a comma unless inside an inline block or a LIMIT clause."""
        self._indent.decrease_all_overflow()
        if self._inline.is_active() or self._in_limit_clause():
            self._out.trim_end()
            self._emit(value + " ")
        elif self.options.comma_style == "trailing":
            self._out.trim_end()
            self._emit(value)
            self._add_newline()
        else:
            self._out.trim_end()
            self._pending_prefix = value
            self._add_newline()

    def _in_limit_clause(self) -> bool:
        keyword = self._previous_keyword
        return keyword is not None and keyword.value.upper() == "LIMIT"

    def _format_with_space_after(self, value: str) -> None:
        self._out.trim_end()
        self._emit(value + " ")

    def _format_without_spaces(self, value: str) -> None:
        self._out.trim_end()
        self._emit(value)

    def _format_with_spaces(self, value: str) -> None:
        self._emit(value + " ")

    # ------------------------------------------------------------------
    # Output primitives
    # ------------------------------------------------------------------

    def _check_max_line_length(self, value: str) -> None:
        limit = self.options.max_line_length
        if limit and self._out.last_line_length() + len(value) > limit:
            logger.debug("line would exceed %d chars before %r, wrapping", limit, value)
            self._indent.increase(IndentKind.OVERFLOW)
            self._add_newline()

    def _emit(self, text: str) -> None:
        self._out.append(text)
        self._after_separator = False

    def _add_newline(self) -> None:
        self._out.trim_end()
        # A statement separator keeps its blank line
        self._out.append("\n\n" if self._after_separator else "\n")
        self._out.append(self._indent.indent_text())


def format_tokens(tokens: Sequence[Token], options: FormatOptions | None = None) -> str:
    """Format an already tokenized query with a fresh engine."""
    return LayoutEngine(options).format(tokens)
