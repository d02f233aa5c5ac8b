"""Single-pass macro expansion: records #define directives and substitutes known names."""

from __future__ import annotations

import io
from collections.abc import Callable, Iterator
from typing import TextIO

from ginevra.errors import Diagnostic, PreprocessError, Severity
from ginevra.scanner import Scanner
from ginevra.tokens import Position, Token, TokenKind


class MacroTable:
    """Macro name to replacement value. Names are case-sensitive and unique."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._macros: dict[str, str] = dict(initial or {})

    def define(self, name: str, value: str) -> bool:
        """Bind name to value. Returns True if an existing definition was replaced."""
        existed = name in self._macros
        self._macros[name] = value
        return existed

    def lookup(self, name: str) -> str | None:
        return self._macros.get(name)

    def items(self) -> list[tuple[str, str]]:
        return list(self._macros.items())

    def __contains__(self, name: object) -> bool:
        return name in self._macros

    def __getitem__(self, name: str) -> str:
        return self._macros[name]

    def __len__(self) -> int:
        return len(self._macros)

    def __iter__(self) -> Iterator[str]:
        return iter(self._macros)


class Preprocessor:
    """Pull tokens from a Scanner and write the substituted text to an output sink."""

    def __init__(
        self,
        scanner: Scanner,
        out: TextIO,
        macros: MacroTable | None = None,
        eager: bool = False,
        report: Callable[[Diagnostic], None] | None = None,
    ) -> None:
        self._scanner = scanner
        self._out = out
        self.macros = macros if macros is not None else MacroTable()
        self.eager = eager
        self.diagnostics: list[Diagnostic] = []
        self.failed = False
        self._report = report

    def run(self) -> MacroTable:
        """Process the whole stream. Fatal errors propagate as exceptions."""
        while True:
            tok = self._scanner.next_token()
            if tok.kind == TokenKind.EOF:
                break
            if tok.kind == TokenKind.IDENTIFIER and tok.first_on_line and tok.text.startswith("#"):
                self._directive(tok)
            elif tok.kind == TokenKind.IDENTIFIER:
                self._write(self._substitute(tok.text) + " ")
            elif tok.kind == TokenKind.MALFORMED:
                self._malformed(tok)
            else:
                self._write(tok.text)
        return self.macros

    # ------------------------------------------------------------------
    # Directives
    # ------------------------------------------------------------------

    def _directive(self, tok: Token) -> None:
        if tok.text != "#define":
            self._diagnose(Severity.WARNING, f"unsupported directive '{tok.text}'", tok)
            rest = self._rest_of_line(tok).lstrip(" \t")
            self._write(f"{tok.text} {rest}" if rest.strip() else tok.text + rest)
            return

        name = self._scanner.next_token()
        if name.kind == TokenKind.EOF:
            raise PreprocessError("premature end of file after #define", tok.position)
        if name.kind == TokenKind.NEWLINE:
            self._diagnose(Severity.ERROR, "expected identifier after #define", name)
            return
        if name.kind == TokenKind.MALFORMED:
            self._malformed(name)
            self._rest_of_line(name)
            return
        if name.kind != TokenKind.IDENTIFIER:
            self._diagnose(Severity.ERROR, "expected identifier after #define", name)
            rest = self._rest_of_line(name)
            value = rest.strip()
            self._write(f"{name.text.rstrip()} {value}")
            if rest.endswith("\n"):
                self._write("\n")
            return

        value = self._read_value_eager() if self.eager else self._rest_of_line(name).strip()
        if self.macros.define(name.text, value):
            self._diagnose(Severity.WARNING, f"macro '{name.text}' redefined", name)

    def _read_value_eager(self) -> str:
        """Build a value from the rest of the line, resolving names defined so far."""
        parts: list[str] = []
        while True:
            tok = self._scanner.next_token()
            if tok.kind in (TokenKind.NEWLINE, TokenKind.EOF):
                break
            if tok.first_on_line:
                # A comment on the directive line swallowed its newline
                self._scanner.push_back(tok)
                break
            if tok.kind == TokenKind.IDENTIFIER:
                parts.append(self._substitute(tok.text) + " ")
            elif tok.kind == TokenKind.MALFORMED:
                self._malformed(tok)
            else:
                parts.append(tok.text)
        return "".join(parts).strip()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _rest_of_line(self, after: Token) -> str:
        """Read the rest of a directive line with block comments removed.

        A comment left open at the end of the line is skipped up to its close.
        """
        text, open_at = strip_comments(self._scanner.next_line())
        if open_at is not None:
            column = after.position.column + len(after.text) + open_at
            self._scanner.skip_comment(Position(after.position.line, column))
            text += "\n"
        return text

    def _substitute(self, name: str) -> str:
        value = self.macros.lookup(name)
        return name if value is None else value

    def _malformed(self, tok: Token) -> None:
        self.failed = True
        self._diagnose(Severity.ERROR, f"malformed string {tok.text!r}", tok)

    def _diagnose(self, severity: Severity, message: str, tok: Token) -> None:
        diag = Diagnostic(severity, message, tok.position)
        self.diagnostics.append(diag)
        if self._report is not None:
            self._report(diag)

    def _write(self, text: str) -> None:
        self._out.write(text)


def strip_comments(line: str) -> tuple[str, int | None]:
    """Remove block comments from a raw line, leaving quoted text alone.

    Returns the remaining text and the index of a comment opener that is not
    closed on this line (None when every comment closes).
    """
    out: list[str] = []
    quote = ""
    i = 0
    while i < len(line):
        ch = line[i]
        if quote:
            out.append(ch)
            if ch == "\\" and i + 1 < len(line):
                out.append(line[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = ""
        elif ch in "'\"":
            quote = ch
            out.append(ch)
        elif line.startswith("/*", i):
            end = line.find("*/", i + 2)
            if end < 0:
                return "".join(out), i
            i = end + 2
            continue
        else:
            out.append(ch)
        i += 1
    return "".join(out), None


def preprocess(
    source: str,
    defines: dict[str, str] | None = None,
    eager: bool = False,
) -> str:
    """Convenience function: preprocess source text and return the output text."""
    out = io.StringIO()
    Preprocessor(Scanner.from_string(source), out, MacroTable(defines), eager=eager).run()
    return out.getvalue()
