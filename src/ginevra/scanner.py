"""Ginevra scanner: a character-by-character state machine over a text stream."""

from __future__ import annotations

import io
from collections.abc import Iterator
from enum import Enum, auto
from typing import TextIO

from ginevra.errors import ScanError
from ginevra.tokens import Position, Token, TokenKind, is_blank, is_ident_char, is_ident_start, is_quote


class _State(Enum):
    START = auto()
    IN_IDENTIFIER = auto()
    IN_SINGLE_QUOTE = auto()
    IN_DOUBLE_QUOTE = auto()
    IN_COMMENT = auto()
    OTHER = auto()


class Cursor:
    """Forward-only cursor over a text stream with one character of lookahead."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._lookahead: str | None = None
        self.line = 1
        self.column = 1

    def position(self) -> Position:
        return Position(self.line, self.column)

    def peek(self) -> str:
        """Return the next character without consuming it ("" at end of stream)."""
        if self._lookahead is None:
            self._lookahead = self._stream.read(1)
        return self._lookahead

    def advance(self) -> str:
        """Consume and return the next character ("" at end of stream)."""
        ch = self.peek()
        if ch == "":
            return ch
        self._lookahead = None
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch


class Scanner:
    """Pull tokens one at a time from a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._cursor = Cursor(stream)
        self._line_start = True
        self._pending: Token | None = None

    @classmethod
    def from_string(cls, source: str) -> Scanner:
        return cls(io.StringIO(source))

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            yield tok
            if tok.kind == TokenKind.EOF:
                return

    def next_token(self) -> Token:
        """Consume characters until exactly one token is complete and return it."""
        if self._pending is not None:
            tok, self._pending = self._pending, None
            return tok

        cur = self._cursor
        state = _State.START
        resume = _State.START  # state to return to after a comment
        chars: list[str] = []
        start = cur.position()
        comment_start = start
        first = self._line_start
        line_ended = False  # a comment inside this token swallowed a newline

        while True:
            if state == _State.START:
                ch = cur.peek()
                if ch == "":
                    return self._emit(TokenKind.EOF, "", cur.position(), self._line_start)
                if is_blank(ch):
                    cur.advance()
                    continue
                start = cur.position()
                first = self._line_start
                if ch == "\n":
                    cur.advance()
                    return self._emit(TokenKind.NEWLINE, "\n", start, first)
                if is_ident_start(ch):
                    chars.append(cur.advance())
                    state = _State.IN_IDENTIFIER
                elif ch == "'":
                    chars.append(cur.advance())
                    state = _State.IN_SINGLE_QUOTE
                elif ch == '"':
                    chars.append(cur.advance())
                    state = _State.IN_DOUBLE_QUOTE
                elif ch == "/":
                    cur.advance()
                    if cur.peek() == "*":
                        cur.advance()
                        comment_start = start
                        resume = _State.START
                        state = _State.IN_COMMENT
                    else:
                        chars.append("/")
                        state = _State.OTHER
                elif ch == "\\":
                    cur.advance()
                    if cur.peek() == "\n":
                        # Line continuation
                        cur.advance()
                    else:
                        chars.append("\\")
                        state = _State.OTHER
                else:
                    chars.append(cur.advance())
                    state = _State.OTHER

            elif state == _State.IN_IDENTIFIER:
                while is_ident_char(cur.peek()):
                    chars.append(cur.advance())
                return self._emit(TokenKind.IDENTIFIER, "".join(chars), start, first)

            elif state in (_State.IN_SINGLE_QUOTE, _State.IN_DOUBLE_QUOTE):
                quote = "'" if state == _State.IN_SINGLE_QUOTE else '"'
                ch = cur.peek()
                if ch == "":
                    raise ScanError("unexpected end of file in string", start)
                if ch == "\n":
                    # Leave the newline for the next token
                    return self._emit(TokenKind.MALFORMED, "".join(chars), start, first)
                cur.advance()
                if ch == quote:
                    chars.append(ch)
                    return self._emit(TokenKind.STRING, "".join(chars), start, first)
                if ch == "\\":
                    nxt = cur.peek()
                    if nxt == quote:
                        chars.append(cur.advance())
                    elif nxt == "\n":
                        cur.advance()
                    else:
                        chars.append(ch)
                else:
                    chars.append(ch)

            elif state == _State.IN_COMMENT:
                ch = cur.advance()
                if ch == "":
                    raise ScanError("unterminated comment", comment_start)
                if ch == "*" and cur.peek() == "/":
                    cur.advance()
                    if cur.peek() == "\n":
                        cur.advance()
                        if resume == _State.START:
                            self._line_start = True
                        else:
                            line_ended = True
                    state = resume

            elif state == _State.OTHER:
                ch = cur.peek()
                if ch in ("", "\n", "\r") or is_ident_start(ch) or is_quote(ch):
                    return self._emit(TokenKind.OTHER, "".join(chars), start, first, line_ended)
                if ch in " \t":
                    cur.advance()
                    chars.append(" ")
                    return self._emit(TokenKind.OTHER, "".join(chars), start, first, line_ended)
                pos = cur.position()
                cur.advance()
                if ch == "/" and cur.peek() == "*":
                    cur.advance()
                    comment_start = pos
                    resume = _State.OTHER
                    state = _State.IN_COMMENT
                else:
                    chars.append(ch)

    def next_line(self) -> str:
        """Consume and return the rest of the current line, terminator included."""
        chars: list[str] = []
        while True:
            ch = self._cursor.advance()
            if ch == "":
                break
            chars.append(ch)
            if ch == "\n":
                self._line_start = True
                break
        return "".join(chars)

    def push_back(self, tok: Token) -> None:
        """Return tok from the next call to next_token instead of scanning."""
        self._pending = tok

    def skip_comment(self, start: Position) -> None:
        """Consume the rest of a block comment whose opener was already read.

        A newline right after the closing */ is consumed too, as in next_token.
        """
        cur = self._cursor
        while True:
            ch = cur.advance()
            if ch == "":
                raise ScanError("unterminated comment", start)
            if ch == "*" and cur.peek() == "/":
                cur.advance()
                if cur.peek() == "\n":
                    cur.advance()
                    self._line_start = True
                else:
                    self._line_start = False
                return

    def _emit(
        self, kind: TokenKind, text: str, start: Position, first: bool, line_ended: bool = False
    ) -> Token:
        tok = Token(kind, text, start, first)
        self._line_start = kind == TokenKind.NEWLINE or line_ended
        return tok


def tokenize(source: str) -> list[Token]:
    """Convenience function: scan source text and return the token list (EOF last)."""
    return list(Scanner.from_string(source))
