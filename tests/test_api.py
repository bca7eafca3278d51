"""Tests for the package-level format() helper and dialect lookup."""

from __future__ import annotations

import pytest

import sqlshape
from sqlshape.dialect import STANDARD_SQL, get_dialect


class TestFormat:
    def test_basic(self) -> None:
        assert sqlshape.format("SELECT a FROM t") == "SELECT\n  a\nFROM\n  t"

    def test_options_pass_through(self) -> None:
        result = sqlshape.format(
            "SELECT a, ? FROM t",
            indent="    ",
            params=["1"],
            comma_style="trailing",
        )
        assert result == "SELECT\n    a,\n    1\nFROM\n    t"

    def test_unknown_dialect(self) -> None:
        with pytest.raises(ValueError, match="unknown dialect"):
            sqlshape.format("SELECT 1", dialect="klingon")

    def test_version(self) -> None:
        assert sqlshape.__version__ == "0.1.0"


class TestDialect:
    def test_lookup_by_name_and_alias(self) -> None:
        assert get_dialect("sql") is STANDARD_SQL
        assert get_dialect("ANSI") is STANDARD_SQL

    def test_join_words_are_newline_keywords(self) -> None:
        assert STANDARD_SQL.join_words <= set(STANDARD_SQL.reserved_newline)
