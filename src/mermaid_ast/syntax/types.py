"""AST data structures for all six Mermaid dialects.

A Program holds diagrams in source order; each diagram class carries its
dialect's statements and registries. Source positions are kept for
diagnostics only and never take part in equality, so ``==`` is the
structural comparison used by round-trip checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, ClassVar, Union

from mermaid_ast.content import Content
from mermaid_ast.lexer.tokens import Position
from mermaid_ast.types import (
    ActivationMark,
    ArrowType,
    AttributeKey,
    BlockKind,
    Cardinality,
    DiagramKind,
    Direction,
    DurationUnit,
    EdgeType,
    Identification,
    MemberKind,
    NodeShape,
    NotePosition,
    ParticipantKind,
    RelationType,
    StateKind,
    TaskStatus,
    Visibility,
)


def _position() -> Any:
    return field(default=None, compare=False, repr=False)


# ─── Flowchart ───────────────────────────────────────────────────────────────


@dataclass
class Node:
    id: str
    label: Content | None = None
    shape: NodeShape = field(default_factory=NodeShape.default)

    @classmethod
    def bare(cls, id: str) -> Node:
        """A node known only by id: no label, default Rectangle shape."""
        return cls(id=id)


@dataclass
class NodeDeclaration:
    node: Node
    position: Position | None = _position()


@dataclass
class Edge:
    source: str
    target: str
    edge_type: EdgeType = EdgeType.Arrow
    label: Content | None = None
    position: Position | None = _position()


@dataclass
class Subgraph:
    id: str
    label: str | None = None
    direction: Direction | None = None
    statements: list[FlowchartStatement] = field(default_factory=list)
    position: Position | None = _position()


@dataclass
class ClassDef:
    name: str
    styles: str


@dataclass
class ClassAssignment:
    node_ids: list[str]
    class_name: str


@dataclass
class Style:
    node_id: str
    styles: str


FlowchartStatement = Union[NodeDeclaration, Edge, Subgraph, ClassDef, ClassAssignment, Style]


@dataclass
class FlowchartDiagram:
    kind: ClassVar[DiagramKind] = DiagramKind.Flowchart

    direction: Direction = field(default_factory=Direction.default)
    statements: list[FlowchartStatement] = field(default_factory=list)
    nodes: list[Node] = field(default_factory=list)

    def node(self, node_id: str) -> Node | None:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None


# ─── Sequence ────────────────────────────────────────────────────────────────


@dataclass
class Participant:
    id: str
    alias: str | None = None
    kind: ParticipantKind = ParticipantKind.Participant
    position: Position | None = _position()


@dataclass
class Message:
    source: str
    target: str
    arrow: ArrowType = ArrowType.SolidArrow
    text: Content | None = None
    activation: ActivationMark | None = None
    position: Position | None = _position()


@dataclass
class Note:
    placement: NotePosition
    participants: list[str]
    text: Content
    position: Position | None = _position()


@dataclass
class Activation:
    participant: str
    active: bool = True


@dataclass
class Branch:
    label: str | None = None
    statements: list[SequenceStatement] = field(default_factory=list)


@dataclass
class Block:
    kind: BlockKind
    label: str | None = None
    statements: list[SequenceStatement] = field(default_factory=list)
    branches: list[Branch] = field(default_factory=list)
    position: Position | None = _position()


SequenceStatement = Union[Participant, Message, Note, Activation, Block]


@dataclass
class SequenceDiagram:
    kind: ClassVar[DiagramKind] = DiagramKind.Sequence

    statements: list[SequenceStatement] = field(default_factory=list)
    autonumber: bool = False
    participants: list[Participant] = field(default_factory=list)


# ─── Class ───────────────────────────────────────────────────────────────────


@dataclass
class Member:
    name: str
    kind: MemberKind = MemberKind.Attribute
    visibility: Visibility | None = None
    type: str | None = None
    parameters: str | None = None
    is_static: bool = False
    is_abstract: bool = False


@dataclass
class ClassDefinition:
    name: str
    generic: str | None = None
    annotation: str | None = None
    members: list[Member] = field(default_factory=list)
    position: Position | None = _position()


@dataclass
class Relation:
    source: str
    target: str
    relation: RelationType
    source_cardinality: str | None = None
    target_cardinality: str | None = None
    label: str | None = None
    position: Position | None = _position()


@dataclass
class ClassDiagram:
    kind: ClassVar[DiagramKind] = DiagramKind.Class

    classes: list[ClassDefinition] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)
    direction: Direction | None = None

    def get_class(self, name: str) -> ClassDefinition | None:
        for c in self.classes:
            if c.name == name:
                return c
        return None


# ─── Entity-Relationship ─────────────────────────────────────────────────────


@dataclass
class Attribute:
    type: str
    name: str
    key: AttributeKey | None = None
    comment: str | None = None


@dataclass
class Entity:
    name: str
    attributes: list[Attribute] = field(default_factory=list)
    position: Position | None = _position()


@dataclass
class Relationship:
    source: str
    target: str
    source_cardinality: Cardinality
    target_cardinality: Cardinality
    identification: Identification = Identification.Identifying
    label: str | None = None
    position: Position | None = _position()


@dataclass
class ErDiagram:
    kind: ClassVar[DiagramKind] = DiagramKind.Er

    entities: list[Entity] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)

    def entity(self, name: str) -> Entity | None:
        for e in self.entities:
            if e.name == name:
                return e
        return None


# ─── State ───────────────────────────────────────────────────────────────────

START_STATE = "[*]_start"
END_STATE = "[*]_end"


@dataclass
class Transition:
    source: str
    target: str
    label: Content | None = None
    position: Position | None = _position()


@dataclass
class StateNote:
    state: str
    placement: NotePosition
    text: Content


@dataclass
class StateRegion:
    """A concurrent region of a composite state, opened by a ``--`` line."""

    states: list[State] = field(default_factory=list)
    transitions: list[Transition] = field(default_factory=list)
    notes: list[StateNote] = field(default_factory=list)


@dataclass
class State:
    """A state. Composite states own a nested scope of states and transitions.

    The scope held directly on the state is its first region; ``regions``
    holds any further concurrent ones, in source order.
    """

    id: str
    label: Content | None = None
    kind: StateKind = StateKind.Simple
    children: list[State] | None = None
    transitions: list[Transition] = field(default_factory=list)
    notes: list[StateNote] = field(default_factory=list)
    direction: Direction | None = None
    regions: list[StateRegion] = field(default_factory=list)
    position: Position | None = _position()

    @property
    def is_composite(self) -> bool:
        return self.children is not None


@dataclass
class StateDiagram:
    kind: ClassVar[DiagramKind] = DiagramKind.State

    version: str = "v2"
    direction: Direction | None = None
    states: list[State] = field(default_factory=list)
    transitions: list[Transition] = field(default_factory=list)
    notes: list[StateNote] = field(default_factory=list)


# ─── Gantt ───────────────────────────────────────────────────────────────────

DEFAULT_DATE_FORMAT = "YYYY-MM-DD"


@dataclass
class DateStart:
    value: datetime


@dataclass
class AfterStart:
    task_ids: list[str]


@dataclass
class Duration:
    amount: int
    unit: DurationUnit = DurationUnit.Days

    def to_timedelta(self) -> timedelta:
        if self.unit is DurationUnit.Hours:
            return timedelta(hours=self.amount)
        if self.unit is DurationUnit.Weeks:
            return timedelta(weeks=self.amount)
        return timedelta(days=self.amount)


@dataclass
class EndDate:
    value: datetime


TaskStart = Union[DateStart, AfterStart, None]
TaskEnd = Union[Duration, EndDate]


@dataclass
class Task:
    name: str
    end: TaskEnd
    id: str | None = None
    status: TaskStatus | None = None
    start: TaskStart = None
    position: Position | None = _position()

    @property
    def end_date(self) -> datetime | None:
        """End of the task when it can be known without the rest of the chart."""
        if isinstance(self.end, EndDate):
            return self.end.value
        if isinstance(self.start, DateStart):
            return self.start.value + self.end.to_timedelta()
        return None


@dataclass
class Section:
    name: str
    tasks: list[Task] = field(default_factory=list)


@dataclass
class GanttConfig:
    title: str | None = None
    date_format: str = DEFAULT_DATE_FORMAT
    axis_format: str | None = None
    excludes: str | None = None
    today_marker: str | None = None


@dataclass
class GanttDiagram:
    kind: ClassVar[DiagramKind] = DiagramKind.Gantt

    config: GanttConfig = field(default_factory=GanttConfig)
    sections: list[Section] = field(default_factory=list)

    def tasks(self) -> list[Task]:
        return [t for s in self.sections for t in s.tasks]


# ─── Program ─────────────────────────────────────────────────────────────────

Diagram = Union[FlowchartDiagram, SequenceDiagram, ClassDiagram, ErDiagram, StateDiagram, GanttDiagram]


@dataclass
class Program:
    diagrams: list[Diagram] = field(default_factory=list)
