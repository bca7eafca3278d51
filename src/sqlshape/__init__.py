"""sqlshape — whitespace and indentation formatter for SQL."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqlshape.layout import CommaStyle
    from sqlshape.params import Params

__version__ = "0.1.0"


def format(
    query: str,
    *,
    indent: str = "  ",
    params: Params | None = None,
    max_line_length: int = 0,
    comma_style: CommaStyle = "leading",
    dialect: str = "sql",
) -> str:
    """Tokenize and re-layout a SQL query string."""
    from sqlshape.dialect import get_dialect
    from sqlshape.layout import FormatOptions, format_tokens
    from sqlshape.lexer import tokenize

    sql_dialect = get_dialect(dialect)
    options = FormatOptions(
        indent=indent,
        max_line_length=max_line_length,
        params=params,
        comma_style=comma_style,
        dialect=sql_dialect,
    )
    return format_tokens(tokenize(query, sql_dialect), options)
