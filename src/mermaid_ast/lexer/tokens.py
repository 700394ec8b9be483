"""Token and source-position types shared by every tokenizer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


@dataclass(frozen=True)
class Position:
    """A point in the source document. Lines are 1-based, columns 0-based."""

    line: int
    column: int
    offset: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class TokenKind(Enum):
    # Dialect-agnostic
    Identifier = auto()
    Number = auto()
    String = auto()  # "quoted", quotes included in text
    Text = auto()  # free text after a colon, up to end of line
    Newline = auto()
    Semicolon = auto()
    Colon = auto()
    Comma = auto()
    Ampersand = auto()
    LBrace = auto()
    RBrace = auto()
    StereoOpen = auto()  # <<
    StereoClose = auto()  # >>
    Comment = auto()
    Unknown = auto()
    Eof = auto()

    # Flowchart
    ShapeOpen = auto()
    ShapeClose = auto()
    Label = auto()
    EdgeOp = auto()
    EdgeLabel = auto()

    # State
    Pseudostate = auto()  # [*]
    Transition = auto()  # -->
    RegionSeparator = auto()  # -- between concurrent regions

    # Entity-relationship
    Relation = auto()  # ||--o{

    # Sequence
    Arrow = auto()
    Plus = auto()
    Minus = auto()

    # Class
    ClassRelation = auto()
    Tilde = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    start: Position
    end: Position

    def __str__(self) -> str:
        if self.kind is TokenKind.Eof:
            return "end of input"
        if self.kind is TokenKind.Newline:
            return "end of line"
        return repr(self.text)
