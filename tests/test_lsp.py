"""Tests for the LSP server — diagnostics and document formatting."""

from __future__ import annotations

import pytest
from lsprotocol.types import (
    DiagnosticSeverity,
    DocumentFormattingParams,
    FormattingOptions,
    PublishDiagnosticsParams,
    TextDocumentIdentifier,
    TextDocumentItem,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.workspace import Workspace

from sqlshape.lsp import _format_edits, _validate, formatting

URI = "file:///query.sql"
SPACES = FormattingOptions(tab_size=2, insert_spaces=True)


@pytest.fixture
def lsp_env():
    """Create a LanguageServer with an initialized workspace and captured diagnostics."""
    ls = LanguageServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(None)
    ls.protocol._workspace = ws

    published: list[PublishDiagnosticsParams] = []
    ls.text_document_publish_diagnostics = lambda params: published.append(params)

    def put(source: str, uri: str = URI) -> None:
        ws.put_text_document(TextDocumentItem(uri=uri, language_id="sql", version=0, text=source))

    return ls, published, put


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


class TestDiagnostics:
    def test_unterminated_string(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("SELECT 'abc")
        _validate(ls, URI)

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Error
        assert "unterminated string" in d.message
        assert d.source == "sqlshape"
        # the quote is at column 8 (1-based) -> character 7 (0-based)
        assert d.range.start.line == 0
        assert d.range.start.character == 7

    def test_error_on_second_line(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("SELECT a\n/* open")
        _validate(ls, URI)

        d = published[0].diagnostics[0]
        assert d.range.start.line == 1
        assert d.range.start.character == 0

    def test_clean_document(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("SELECT a FROM t")
        _validate(ls, URI)

        assert len(published) == 1
        assert published[0].diagnostics == []


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


class TestFormatting:
    def test_whole_document_edit(self) -> None:
        source = "select a from t\nwhere b = 1"
        edits = _format_edits(source, SPACES)
        assert len(edits) == 1
        edit = edits[0]
        assert edit.new_text == "select\n  a\nfrom\n  t\nwhere\n  b = 1\n"
        assert edit.range.start.line == 0
        assert edit.range.start.character == 0
        assert edit.range.end.line == 1
        assert edit.range.end.character == len("where b = 1")

    def test_tabs(self) -> None:
        edits = _format_edits("SELECT a", FormattingOptions(tab_size=4, insert_spaces=False))
        assert edits[0].new_text == "SELECT\n\ta\n"

    def test_tab_size(self) -> None:
        edits = _format_edits("SELECT a", FormattingOptions(tab_size=4, insert_spaces=True))
        assert edits[0].new_text == "SELECT\n    a\n"

    def test_already_formatted(self) -> None:
        assert _format_edits("SELECT\n  a\n", SPACES) == []

    def test_lex_error_gives_no_edits(self) -> None:
        assert _format_edits("SELECT 'abc", SPACES) == []

    def test_handler_reads_workspace(self, lsp_env) -> None:
        ls, _, put = lsp_env
        put("SELECT a")
        params = DocumentFormattingParams(
            text_document=TextDocumentIdentifier(uri=URI), options=SPACES
        )
        edits = formatting(ls, params)
        assert edits[0].new_text == "SELECT\n  a\n"
