"""Minimal LSP server for Ginevra, diagnostics only."""

from __future__ import annotations

import io

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from ginevra import __version__
from ginevra.errors import PreprocessError, ScanError, Severity
from ginevra.expand import Preprocessor
from ginevra.scanner import Scanner
from ginevra.tokens import Position as SourcePosition

server = LanguageServer("ginevra-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)

_SEVERITY = {
    Severity.WARNING: DiagnosticSeverity.Warning,
    Severity.ERROR: DiagnosticSeverity.Error,
}


def _diagnostic(position: SourcePosition, message: str, severity: DiagnosticSeverity) -> Diagnostic:
    line = position.line - 1
    col = position.column - 1
    return Diagnostic(
        range=Range(
            start=Position(line=line, character=col),
            end=Position(line=line, character=col + 1),
        ),
        message=message,
        severity=severity,
        source="ginevra",
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Preprocess the document into a throwaway buffer and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    pre = Preprocessor(Scanner(io.StringIO(doc.source)), io.StringIO())

    diagnostics: list[Diagnostic] = []
    try:
        pre.run()
    except (ScanError, PreprocessError) as exc:
        fatal = _diagnostic(exc.position, exc.message, DiagnosticSeverity.Error)
    else:
        fatal = None

    for diag in pre.diagnostics:
        diagnostics.append(_diagnostic(diag.position, diag.message, _SEVERITY[diag.severity]))
    if fatal is not None:
        diagnostics.append(fatal)

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
