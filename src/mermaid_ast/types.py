"""Shared type definitions for mermaid-ast.

Closed enumerations used across the lexer, parsers, AST, and generators.
Enums whose members are looked up from source text carry that text as their
value; the rest use auto().
"""

from __future__ import annotations

from enum import Enum, auto


class DiagramKind(Enum):
    Flowchart = auto()
    Sequence = auto()
    Class = auto()
    Er = auto()
    State = auto()
    Gantt = auto()


# ─── Flowchart ───────────────────────────────────────────────────────────────


class Direction(Enum):
    LR = auto()
    RL = auto()
    TD = auto()
    BT = auto()

    @classmethod
    def default(cls) -> Direction:
        return cls.TD

    @classmethod
    def from_text(cls, text: str) -> Direction | None:
        key = text.upper()
        if key == "TB":
            return cls.TD
        return cls.__members__.get(key)


class NodeShape(Enum):
    Rectangle = auto()  # id[Label]
    Rounded = auto()  # id(Label)
    Stadium = auto()  # id([Label])
    Subroutine = auto()  # id[[Label]]
    Cylinder = auto()  # id[(Label)]
    Circle = auto()  # id((Label))
    DoubleCircle = auto()  # id(((Label)))
    Diamond = auto()  # id{Label}
    Hexagon = auto()  # id{{Label}}
    Parallelogram = auto()  # id[/Label/]
    ParallelogramAlt = auto()  # id[\Label\]
    Trapezoid = auto()  # id[/Label\]
    TrapezoidAlt = auto()  # id[\Label/]
    Asymmetric = auto()  # id>Label]

    @classmethod
    def default(cls) -> NodeShape:
        return cls.Rectangle


class EdgeType(Enum):
    Arrow = auto()  # -->
    Line = auto()  # ---
    DottedArrow = auto()  # -.->
    DottedLine = auto()  # -.-
    ThickArrow = auto()  # ==>
    ThickLine = auto()  # ===
    Invisible = auto()  # ~~~
    CircleArrow = auto()  # --o
    CrossArrow = auto()  # --x
    BidirArrow = auto()  # <-->
    BidirDotted = auto()  # <-.->
    BidirThick = auto()  # <==>


# ─── Sequence ────────────────────────────────────────────────────────────────


class ParticipantKind(Enum):
    Participant = "participant"
    Actor = "actor"


class ArrowType(Enum):
    SolidOpen = "->"
    DottedOpen = "-->"
    SolidArrow = "->>"
    DottedArrow = "-->>"
    SolidCross = "-x"
    DottedCross = "--x"
    SolidAsync = "-)"
    DottedAsync = "--)"


class ActivationMark(Enum):
    Activate = "+"
    Deactivate = "-"


class NotePosition(Enum):
    LeftOf = "left of"
    RightOf = "right of"
    Over = "over"


class BlockKind(Enum):
    Loop = "loop"
    Alt = "alt"
    Opt = "opt"
    Par = "par"
    Critical = "critical"
    Break = "break"
    Rect = "rect"
    Box = "box"

    @property
    def branch_keyword(self) -> str | None:
        """Keyword that opens a further branch inside this block, if any."""
        return _BRANCH_KEYWORDS.get(self)


_BRANCH_KEYWORDS: dict[BlockKind, str] = {
    BlockKind.Alt: "else",
    BlockKind.Par: "and",
    BlockKind.Critical: "option",
}


# ─── Class ───────────────────────────────────────────────────────────────────


class Visibility(Enum):
    Public = "+"
    Private = "-"
    Protected = "#"
    Package = "~"


class MemberKind(Enum):
    Attribute = auto()
    Method = auto()


class RelationType(Enum):
    Inheritance = "<|--"
    InheritanceReverse = "--|>"
    Composition = "*--"
    CompositionReverse = "--*"
    Aggregation = "o--"
    AggregationReverse = "--o"
    Association = "-->"
    AssociationReverse = "<--"
    Link = "--"
    Dependency = "..>"
    DependencyReverse = "<.."
    Realization = "..|>"
    RealizationReverse = "<|.."
    DashedLink = ".."


# ─── Entity-Relationship ─────────────────────────────────────────────────────


class Cardinality(Enum):
    ZeroOrOne = auto()
    ExactlyOne = auto()
    ZeroOrMore = auto()
    OneOrMore = auto()


class Identification(Enum):
    Identifying = auto()  # --
    NonIdentifying = auto()  # ..


class AttributeKey(Enum):
    PK = "PK"
    FK = "FK"
    UK = "UK"


# ─── State ───────────────────────────────────────────────────────────────────


class StateKind(Enum):
    Simple = auto()
    Choice = auto()
    Fork = auto()
    Join = auto()


# ─── Gantt ───────────────────────────────────────────────────────────────────


class TaskStatus(Enum):
    Done = "done"
    Active = "active"
    Crit = "crit"
    Milestone = "milestone"


class DurationUnit(Enum):
    Hours = "h"
    Days = "d"
    Weeks = "w"
