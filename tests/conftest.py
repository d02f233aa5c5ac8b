"""Shared test fixtures and helpers."""

from __future__ import annotations

import io

import pytest

from ginevra.expand import MacroTable, Preprocessor
from ginevra.scanner import Scanner, tokenize
from ginevra.tokens import Token, TokenKind


@pytest.fixture
def scan():
    """Return a helper that scans source and returns tokens (excluding EOF)."""

    def _scan(source: str) -> list[Token]:
        tokens = tokenize(source)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.kind != TokenKind.EOF]

    return _scan


@pytest.fixture
def run():
    """Return a helper that preprocesses source and returns (output, preprocessor)."""

    def _run(
        source: str,
        defines: dict[str, str] | None = None,
        eager: bool = False,
    ) -> tuple[str, Preprocessor]:
        out = io.StringIO()
        pre = Preprocessor(Scanner.from_string(source), out, MacroTable(defines), eager=eager)
        pre.run()
        return out.getvalue(), pre

    return _run


def assert_kinds(tokens: list[Token], expected: list[TokenKind]) -> None:
    """Assert that the token kinds match the expected list."""
    actual = [t.kind for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_texts(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token texts match the expected list."""
    actual = [t.text for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"
