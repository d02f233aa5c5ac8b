"""Test error and diagnostic formatting."""

import pytest

from ginevra.errors import Diagnostic, PreprocessError, ScanError, Severity
from ginevra.expand import preprocess
from ginevra.scanner import tokenize
from ginevra.tokens import Position


class TestScanErrorFormatting:
    def test_error_prefix(self):
        with pytest.raises(ScanError) as exc_info:
            tokenize("'abc")
        assert exc_info.value.format().startswith("error:")

    def test_contains_position(self):
        with pytest.raises(ScanError) as exc_info:
            tokenize("x\ny /* open")
        assert "2:3" in exc_info.value.format()

    def test_custom_filename(self):
        with pytest.raises(ScanError) as exc_info:
            tokenize("'abc")
        assert "fruit.cpp:1:1" in exc_info.value.format("fruit.cpp")

    def test_single_line(self):
        with pytest.raises(ScanError) as exc_info:
            tokenize("/*")
        assert "\n" not in exc_info.value.format()

    def test_str_is_formatted(self):
        err = ScanError("unterminated comment", Position(3, 4))
        assert str(err) == "error: unterminated comment (input.h:3:4)"


class TestPreprocessErrorFormatting:
    def test_premature_eof(self):
        with pytest.raises(PreprocessError) as exc_info:
            preprocess("#define")
        formatted = exc_info.value.format("a.h")
        assert formatted == "error: premature end of file after #define (a.h:1:1)"


class TestDiagnosticFormatting:
    def test_warning(self):
        diag = Diagnostic(Severity.WARNING, "macro 'APPLE' redefined", Position(2, 9))
        assert diag.format("x.h") == "warning: macro 'APPLE' redefined (x.h:2:9)"

    def test_error(self):
        diag = Diagnostic(Severity.ERROR, "expected identifier after #define", Position(1, 9))
        assert diag.format().startswith("error: expected identifier")
