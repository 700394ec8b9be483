"""Lexer: text to positioned tokens, one tokenizer family per dialect group."""

from __future__ import annotations

from mermaid_ast.lexer.line_tokenizer import LineTokenizer
from mermaid_ast.lexer.tokenizer import StructuralTokenizer
from mermaid_ast.lexer.tokens import Position, Token, TokenKind
from mermaid_ast.types import DiagramKind

_STRUCTURAL = {DiagramKind.Flowchart, DiagramKind.State, DiagramKind.Er}


def tokenize(
    text: str,
    dialect: DiagramKind = DiagramKind.Flowchart,
    line: int = 1,
    offset: int = 0,
) -> list[Token]:
    """Tokenize ``text`` with the rules of ``dialect``.

    Never raises: unrecognised characters come back as Unknown tokens. The
    list always ends with a single Eof token. ``line`` and ``offset`` locate
    ``text`` inside a larger document so positions stay document-absolute.
    """
    if dialect in _STRUCTURAL:
        return StructuralTokenizer(text, dialect, line, offset).tokenize()
    return LineTokenizer(text, dialect, line, offset).tokenize()


__all__ = [
    "LineTokenizer",
    "Position",
    "StructuralTokenizer",
    "Token",
    "TokenKind",
    "tokenize",
]
