"""--debug token stream dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from ginevra.scanner import Scanner
from ginevra.tokens import Token, TokenKind


def dump_tokens(source: str, *, file: TextIO = sys.stderr) -> None:
    """Print one line per token of *source* to *file*."""
    for tok in Scanner.from_string(source):
        file.write(format_token(tok) + "\n")


def format_token(tok: Token) -> str:
    pos = f"{tok.position.line}:{tok.position.column}"
    marker = "^" if tok.first_on_line and tok.kind != TokenKind.EOF else " "
    return f"{pos:>7} {marker} {tok.kind.name:<10} {tok.text!r}"
