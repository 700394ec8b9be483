"""Base parser protocol and the token cursor every grammar parser walks."""

from __future__ import annotations

from typing import Protocol

from mermaid_ast.errors import UnexpectedToken
from mermaid_ast.lexer.tokens import Token, TokenKind
from mermaid_ast.syntax.types import Diagram

_LINE_END = (TokenKind.Newline, TokenKind.Semicolon, TokenKind.Eof)


def unquote(text: str) -> str:
    """Strip one pair of surrounding double quotes, if present."""
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return text[1:-1]
    return text


class Parser(Protocol):
    """Protocol that all diagram parsers must implement."""

    def parse(self, cursor: TokenCursor) -> Diagram:
        """Parse one diagram segment, header line included."""
        ...


class TokenCursor:
    """Stateful cursor over a token list. Comments are dropped on entry.

    ``src`` is the segment text the tokens were produced from and ``base`` its
    offset in the whole document, so raw source slices can be recovered for
    statements whose tail is free-form (member lines, block labels, aliases).
    """

    def __init__(self, tokens: list[Token], src: str, base: int = 0) -> None:
        self.tokens = [t for t in tokens if t.kind is not TokenKind.Comment]
        self.src = src
        self.base = base
        self.index = 0

    def peek(self, ahead: int = 0) -> Token:
        i = min(self.index + ahead, len(self.tokens) - 1)
        return self.tokens[i]

    def at_end(self) -> bool:
        return self.peek().kind is TokenKind.Eof

    def advance(self) -> Token:
        tok = self.peek()
        if tok.kind is not TokenKind.Eof:
            self.index += 1
        return tok

    def check(self, *kinds: TokenKind) -> bool:
        return self.peek().kind in kinds

    def check_word(self, *words: str, ahead: int = 0) -> bool:
        """True if the token is an identifier spelled like one of ``words``, ignoring case."""
        tok = self.peek(ahead)
        return tok.kind is TokenKind.Identifier and tok.text.lower() in words

    def accept(self, kind: TokenKind) -> Token | None:
        if self.check(kind):
            return self.advance()
        return None

    def accept_word(self, *words: str) -> Token | None:
        if self.check_word(*words):
            return self.advance()
        return None

    def expect(self, kind: TokenKind, expected: str | None = None) -> Token:
        if self.check(kind):
            return self.advance()
        tok = self.peek()
        raise UnexpectedToken(expected or kind.name.lower(), str(tok), tok.start)

    def expect_word(self, word: str) -> Token:
        if self.check_word(word):
            return self.advance()
        tok = self.peek()
        raise UnexpectedToken(repr(word), str(tok), tok.start)

    def fail(self, expected: str) -> UnexpectedToken:
        tok = self.peek()
        return UnexpectedToken(expected, str(tok), tok.start)

    # ─── Lines ───────────────────────────────────────────────────────────────

    def at_line_end(self) -> bool:
        return self.check(*_LINE_END)

    def skip_newlines(self) -> None:
        while self.check(TokenKind.Newline, TokenKind.Semicolon):
            self.advance()

    def end_statement(self) -> None:
        """Require the statement to stop here and step past its terminator."""
        if self.check(TokenKind.Newline, TokenKind.Semicolon):
            self.advance()
        elif not self.at_end():
            raise self.fail("end of line")

    def rest_of_line(self) -> str:
        """Consume tokens up to end of line and return their source text."""
        return self.raw_until()

    def raw_until(self, *stops: TokenKind) -> str:
        """Consume tokens up to end of line or a ``stops`` kind; return their source text."""
        if self.at_line_end() or self.check(*stops):
            return ""
        first = self.advance()
        last = first
        while not (self.at_line_end() or self.check(*stops)):
            last = self.advance()
        return self.src[first.start.offset - self.base : last.end.offset - self.base].strip()

    def ensure_progress(self, start: int) -> None:
        """Statement loops call this after every iteration."""
        if self.index <= start:
            raise RuntimeError(f"parser made no progress at {self.peek().start}")
