"""Structural tokenizer for the flowchart, state, and ER dialects.

These dialects are built from identifiers joined by edge or relation
operators, with bracketed shapes (flowchart) and brace blocks (state, ER).
Flowchart shape labels and ``|edge labels|`` are scanned as a unit so that
their text never has to survive identifier rules.
"""

from __future__ import annotations

import re

from mermaid_ast.lexer.scanner import Rule, Scanner
from mermaid_ast.lexer.tokens import TokenKind
from mermaid_ast.types import DiagramKind

_IDENTIFIER_RE = re.compile(r"[A-Za-z0-9_]+(?:-[A-Za-z0-9_]+)*")
_EDGE_RE = re.compile(r"<?(?:-\.+-|--+|==+|~~~+)(?:>|o(?!\w)|x(?!\w))?")
_ER_RELATION_RE = re.compile(r"[|o}{]{1,2}(?:--|\.\.)[|o}{]{1,2}")

# Shape openers, longest first, with the closers each may end with.
_SHAPES: list[tuple[str, tuple[str, ...]]] = [
    ("(((", (")))",)),
    ("((", ("))",)),
    ("([", ("])",)),
    ("[[", ("]]",)),
    ("[(", (")]",)),
    ("[/", ("/]", "\\]")),
    ("[\\", ("\\]", "/]")),
    ("{{", ("}}",)),
    ("{", ("}",)),
    ("(", (")",)),
    ("[", ("]",)),
    (">", ("]",)),
]

_PUNCTUATION: list[Rule] = [
    (re.compile(r";"), TokenKind.Semicolon),
    (re.compile(r","), TokenKind.Comma),
    (re.compile(r"&"), TokenKind.Ampersand),
    (re.compile(r"<<"), TokenKind.StereoOpen),
    (re.compile(r">>"), TokenKind.StereoClose),
    (re.compile(r"\{"), TokenKind.LBrace),
    (re.compile(r"\}"), TokenKind.RBrace),
]

_FLOWCHART_RULES: list[Rule] = [
    (_EDGE_RE, TokenKind.EdgeOp),
    (_IDENTIFIER_RE, TokenKind.Identifier),
    *_PUNCTUATION,
]

_STATE_RULES: list[Rule] = [
    (re.compile(r"\[\*\]"), TokenKind.Pseudostate),
    (re.compile(r"-->"), TokenKind.Transition),
    (re.compile(r"---?(?![->])"), TokenKind.RegionSeparator),
    (_IDENTIFIER_RE, TokenKind.Identifier),
    *_PUNCTUATION,
]

_ER_RULES: list[Rule] = [
    (_ER_RELATION_RE, TokenKind.Relation),
    (_IDENTIFIER_RE, TokenKind.Identifier),
    *_PUNCTUATION,
]

_RULES: dict[DiagramKind, list[Rule]] = {
    DiagramKind.Flowchart: _FLOWCHART_RULES,
    DiagramKind.State: _STATE_RULES,
    DiagramKind.Er: _ER_RULES,
}


def _find_closer(text: str, start: int, stop: int, closers: tuple[str, ...]) -> tuple[int, str] | None:
    """Earliest closer in text[start:stop], skipping a leading quoted span."""
    search_from = start
    i = start
    while i < stop and text[i] in " \t":
        i += 1
    if i < stop and text[i] == '"':
        quote = text.find('"', i + 1, stop)
        if quote != -1:
            search_from = quote + 1
    best: tuple[int, str] | None = None
    for closer in closers:
        idx = text.find(closer, search_from, stop)
        if idx != -1 and (best is None or idx < best[0]):
            best = (idx, closer)
    return best


class StructuralTokenizer(Scanner):
    def __init__(self, text: str, dialect: DiagramKind, line: int = 1, offset: int = 0) -> None:
        super().__init__(text, line, offset)
        self.dialect = dialect
        self.rules = _RULES[dialect]

    def wants_text(self) -> bool:
        return self.dialect is not DiagramKind.Flowchart

    def scan(self) -> None:
        if self.dialect is DiagramKind.Flowchart:
            if self.text.startswith("|", self.pos) and self.scan_edge_label():
                return
            prev = self.previous()
            if prev is not None and prev.kind is TokenKind.Identifier and self.scan_shape():
                return
        super().scan()

    def scan_shape(self) -> bool:
        """Scan ``opener label closer`` after a node id; False if none fits."""
        stop = self.line_end()
        for opener, closers in _SHAPES:
            if not self.text.startswith(opener, self.pos):
                continue
            inner = self.pos + len(opener)
            found = _find_closer(self.text, inner, stop, closers)
            if found is None:
                continue
            close_at, closer = found
            self.emit(TokenKind.ShapeOpen, inner)
            if close_at > inner:
                self.emit(TokenKind.Label, close_at)
            self.emit(TokenKind.ShapeClose, close_at + len(closer))
            return True
        return False

    def scan_edge_label(self) -> bool:
        stop = self.line_end()
        inner = self.pos + 1
        found = _find_closer(self.text, inner, stop, ("|",))
        if found is None:
            return False
        close_at, _ = found
        self.emit_span(TokenKind.EdgeLabel, inner, close_at)
        self.pos = close_at + 1
        return True
