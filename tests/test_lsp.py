"""Tests for the LSP server: diagnostic generation."""

from __future__ import annotations

import pytest
from lsprotocol.types import (
    DiagnosticSeverity,
    PublishDiagnosticsParams,
    TextDocumentItem,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.workspace import Workspace

from ginevra.lsp import _validate


@pytest.fixture
def lsp_env():
    """Create a LanguageServer with an initialized workspace and captured diagnostics."""
    ls = LanguageServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(None)
    ls.protocol._workspace = ws

    published: list[PublishDiagnosticsParams] = []
    ls.text_document_publish_diagnostics = lambda params: published.append(params)

    def put(source: str, uri: str = "file:///test.h") -> None:
        ws.put_text_document(
            TextDocumentItem(uri=uri, language_id="cpp", version=0, text=source)
        )

    return ls, published, put


# ---------------------------------------------------------------------------
# Fatal errors -> Error severity
# ---------------------------------------------------------------------------


class TestFatalErrors:
    def test_unterminated_comment(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("int x;\n/* open")
        _validate(ls, "file:///test.h")

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Error
        assert "unterminated comment" in d.message
        assert d.source == "ginevra"
        # Line 2 (1-based) -> LSP line 1 (0-based)
        assert d.range.start.line == 1
        assert d.range.start.character == 0

    def test_premature_eof_after_define(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("#define")
        _validate(ls, "file:///test.h")

        diags = published[0].diagnostics
        assert len(diags) == 1
        assert diags[0].severity == DiagnosticSeverity.Error


# ---------------------------------------------------------------------------
# Reported diagnostics keep their severity
# ---------------------------------------------------------------------------


class TestReportedDiagnostics:
    def test_redefinition_is_warning(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("#define A 1\n#define A 2\n")
        _validate(ls, "file:///test.h")

        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Warning
        assert "redefined" in d.message
        assert d.range.start.line == 1
        assert d.range.start.character == 8

    def test_malformed_string_is_error(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("x 'abc\ny\n")
        _validate(ls, "file:///test.h")

        diags = published[0].diagnostics
        assert len(diags) == 1
        assert diags[0].severity == DiagnosticSeverity.Error

    def test_warnings_kept_before_fatal(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("#define A 1\n#define A 2\n'open")
        _validate(ls, "file:///test.h")

        severities = [d.severity for d in published[0].diagnostics]
        assert severities == [DiagnosticSeverity.Warning, DiagnosticSeverity.Error]


# ---------------------------------------------------------------------------
# Clean document -> empty diagnostics
# ---------------------------------------------------------------------------


class TestCleanDocument:
    def test_valid_document(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("#define APPLE 8\nint apples = APPLE;\n")
        _validate(ls, "file:///test.h")

        assert len(published) == 1
        assert published[0].diagnostics == []
