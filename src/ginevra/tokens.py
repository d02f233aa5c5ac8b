"""Token kinds, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenKind(Enum):
    IDENTIFIER = auto()  # (letter | #) (letter | .)*
    STRING = auto()  # '...' or "..." including the quotes
    OTHER = auto()  # punctuation/operator run
    NEWLINE = auto()  # \n
    EOF = auto()
    MALFORMED = auto()  # string cut off by a newline


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column."""

    line: int
    column: int


@dataclass(frozen=True, slots=True)
class Token:
    """A single scanner token with its captured text."""

    kind: TokenKind
    text: str
    position: Position
    first_on_line: bool = False


_BLANK = frozenset(" \t\r")
_QUOTES = frozenset("'\"")


def is_ident_start(ch: str) -> bool:
    """Return True if ch can begin an identifier (or a directive)."""
    return ch.isalpha() or ch == "#"


# Letters and "." only, so digits and "_" end an identifier (MAX_SIZE scans as MAX, _, SIZE).
def is_ident_char(ch: str) -> bool:
    """Return True if ch can continue an identifier."""
    return ch.isalpha() or ch == "."


def is_blank(ch: str) -> bool:
    return ch in _BLANK


def is_quote(ch: str) -> bool:
    return ch in _QUOTES
