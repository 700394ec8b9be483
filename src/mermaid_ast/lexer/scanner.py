"""Scanner base shared by the structural and line tokenizers.

A scanner walks the text once, left to right. Each call to ``scan`` handles
one lexeme at ``pos`` and must move ``pos`` forward; anything no rule
recognises becomes a one-character Unknown token, so scanning never fails
and never stalls.
"""

from __future__ import annotations

import re

from mermaid_ast.lexer.tokens import Position, Token, TokenKind

_WHITESPACE_RE = re.compile(r"[ \t]+")
_NEWLINE_RE = re.compile(r"\r\n|\n|\r")
_COMMENT_RE = re.compile(r"%%[^\r\n]*")
_STRING_RE = re.compile(r'"[^"\r\n]*"')
_TEXT_RE = re.compile(r"[^\r\n]*")

Rule = tuple[re.Pattern[str], TokenKind]


class Scanner:
    """Rule-driven scanner. Subclasses supply ``rules`` and special cases."""

    rules: list[Rule] = []

    def __init__(self, text: str, line: int = 1, offset: int = 0) -> None:
        self.text = text
        self.pos = 0
        self.base = offset
        self.line = line
        self.line_start = 0
        self.tokens: list[Token] = []

    def position(self, index: int | None = None) -> Position:
        i = self.pos if index is None else index
        return Position(line=self.line, column=i - self.line_start, offset=self.base + i)

    def tokenize(self) -> list[Token]:
        while self.pos < len(self.text):
            start = self.pos
            self.scan()
            if self.pos <= start:
                raise RuntimeError(f"scanner stalled at offset {self.base + start}")
        eof = self.position()
        self.tokens.append(Token(TokenKind.Eof, "", eof, eof))
        return self.tokens

    # ─── Primitives ──────────────────────────────────────────────────────────

    def emit(self, kind: TokenKind, end: int) -> Token:
        start = self.position()
        text = self.text[self.pos : end]
        self.pos = end
        if kind is TokenKind.Newline:
            self.line += 1
            self.line_start = end
        token = Token(kind, text, start, self.position())
        self.tokens.append(token)
        return token

    def emit_span(self, kind: TokenKind, start: int, end: int) -> None:
        """Emit text[start:end] without touching the scan position."""
        token = Token(kind, self.text[start:end], self.position(start), self.position(end))
        self.tokens.append(token)

    def match(self, pattern: re.Pattern[str]) -> int | None:
        m = pattern.match(self.text, self.pos)
        if m and m.end() > self.pos:
            return m.end()
        return None

    def previous(self) -> Token | None:
        return self.tokens[-1] if self.tokens else None

    def line_end(self) -> int:
        m = _TEXT_RE.match(self.text, self.pos)
        assert m is not None
        return m.end()

    # ─── Scanning ────────────────────────────────────────────────────────────

    def scan(self) -> None:
        end = self.match(_WHITESPACE_RE)
        if end is not None:
            self.pos = end
            return
        for pattern, kind in self.common_rules():
            end = self.match(pattern)
            if end is not None:
                self.emit(kind, end)
                if kind is TokenKind.Colon and self.wants_text():
                    self.scan_text()
                return
        for pattern, kind in self.rules:
            end = self.match(pattern)
            if end is not None:
                self.emit(kind, end)
                return
        self.emit(TokenKind.Unknown, self.pos + 1)

    def common_rules(self) -> list[Rule]:
        return _COMMON_RULES

    def wants_text(self) -> bool:
        """Whether a colon introduces free text running to end of line."""
        return True

    def scan_text(self) -> None:
        end = self.match(_WHITESPACE_RE)
        if end is not None:
            self.pos = end
        stop = self.line_end()
        text = self.text[self.pos : stop].rstrip()
        if text:
            self.emit(TokenKind.Text, self.pos + len(text))
        self.pos = stop


_COMMON_RULES: list[Rule] = [
    (_NEWLINE_RE, TokenKind.Newline),
    (_COMMENT_RE, TokenKind.Comment),
    (_STRING_RE, TokenKind.String),
    (re.compile(r":"), TokenKind.Colon),
]
