"""Line tokenizer for the sequence, class, and gantt dialects.

Statements in these dialects are single lines whose tail after a colon is
free text (message content, relation labels, task metadata). Operators are
dialect specific: message arrows with activation marks for sequence, relation
operators for class diagrams.
"""

from __future__ import annotations

import re

from mermaid_ast.lexer.scanner import Rule, Scanner
from mermaid_ast.lexer.tokens import TokenKind
from mermaid_ast.types import DiagramKind

_IDENTIFIER_RE = re.compile(r"[A-Za-z_]\w*")
_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")

# Longest first so that -->> is never read as --> followed by >.
_SEQUENCE_ARROW_RE = re.compile(r"-->>|->>|--x|--\)|-->|-x|-\)|->")
_CLASS_RELATION_RE = re.compile(
    r"<\|--|<\|\.\.|--\|>|\.\.\|>|\*--|--\*|(?<!\w)o--|--o(?!\w)|-->|<--|\.\.>|<\.\.|--|\.\."
)

_SHARED: list[Rule] = [
    (re.compile(r"<<"), TokenKind.StereoOpen),
    (re.compile(r">>"), TokenKind.StereoClose),
    (re.compile(r"\{"), TokenKind.LBrace),
    (re.compile(r"\}"), TokenKind.RBrace),
    (re.compile(r"~"), TokenKind.Tilde),
    (re.compile(r","), TokenKind.Comma),
    (re.compile(r"&"), TokenKind.Ampersand),
    (re.compile(r"\+"), TokenKind.Plus),
    (re.compile(r"-"), TokenKind.Minus),
    (_NUMBER_RE, TokenKind.Number),
    (_IDENTIFIER_RE, TokenKind.Identifier),
]

_RULES: dict[DiagramKind, list[Rule]] = {
    DiagramKind.Sequence: [(_SEQUENCE_ARROW_RE, TokenKind.Arrow), *_SHARED],
    DiagramKind.Class: [(_CLASS_RELATION_RE, TokenKind.ClassRelation), *_SHARED],
    DiagramKind.Gantt: _SHARED,
}


class LineTokenizer(Scanner):
    def __init__(self, text: str, dialect: DiagramKind, line: int = 1, offset: int = 0) -> None:
        super().__init__(text, line, offset)
        self.dialect = dialect
        self.rules = _RULES[dialect]
