"""Minimal LSP server for sqlshape — lex diagnostics and document formatting."""

from __future__ import annotations

import logging

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_FORMATTING,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    DocumentFormattingParams,
    FormattingOptions,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
    TextEdit,
)
from pygls.lsp.server import LanguageServer

from sqlshape import __version__
from sqlshape.errors import FormatError, LexError
from sqlshape.layout import FormatOptions, format_tokens
from sqlshape.lexer import tokenize

logger = logging.getLogger(__name__)

server = LanguageServer(
    "sqlshape-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)


def _validate(ls: LanguageServer, uri: str) -> None:
    """Tokenize the document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    diagnostics: list[Diagnostic] = []

    try:
        tokenize(doc.source)
    except LexError as exc:
        line = exc.position.line - 1
        col = exc.position.column - 1
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=line, character=col),
                    end=Position(line=line, character=col + 1),
                ),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="sqlshape",
            )
        )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


def _indent_unit(options: FormattingOptions) -> str:
    if not options.insert_spaces:
        return "\t"
    return " " * options.tab_size


def _format_edits(source: str, options: FormattingOptions) -> list[TextEdit]:
    """Return one whole-document edit, or none if unchanged or not tokenizable."""
    try:
        formatted = format_tokens(tokenize(source), FormatOptions(indent=_indent_unit(options)))
    except (LexError, FormatError) as exc:
        logger.info("skipping format: %s", exc)
        return []

    if formatted:
        formatted += "\n"
    if formatted == source:
        return []

    lines = source.split("\n")
    return [
        TextEdit(
            range=Range(
                start=Position(line=0, character=0),
                end=Position(line=len(lines) - 1, character=len(lines[-1])),
            ),
            new_text=formatted,
        )
    ]


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_FORMATTING)
def formatting(ls: LanguageServer, params: DocumentFormattingParams) -> list[TextEdit]:
    uri = params.text_document.uri
    logger.info("formatting %s", uri)
    doc = ls.workspace.get_text_document(uri)
    return _format_edits(doc.source, params.options)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    server.start_io()
