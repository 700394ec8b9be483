"""Pure functions for building and editing diagrams.

Each function takes a diagram, validates the edit and returns a new diagram;
the argument is never modified. Ids go through the validating constructors
in ``mermaid_ast.validate``. References follow the parser's rules: flowchart
edges and gantt dependencies must point at things that already exist, while
sequence, state, class and ER edits create their endpoints on first mention.
"""

from __future__ import annotations

from mermaid_ast.content import parse_content
from mermaid_ast.errors import ValidationCode, ValidationError
from mermaid_ast.parsers.flowchart import register
from mermaid_ast.syntax.types import (
    END_STATE,
    START_STATE,
    AfterStart,
    ClassDefinition,
    ClassDiagram,
    Edge,
    Entity,
    ErDiagram,
    FlowchartDiagram,
    GanttDiagram,
    Message,
    Node,
    NodeDeclaration,
    Participant,
    Relation,
    Relationship,
    Section,
    SequenceDiagram,
    State,
    StateDiagram,
    Task,
    TaskEnd,
    TaskStart,
    Transition,
)
from mermaid_ast.transform import clone
from mermaid_ast.types import (
    ArrowType,
    Cardinality,
    EdgeType,
    Identification,
    NodeShape,
    ParticipantKind,
    RelationType,
    TaskStatus,
)
from mermaid_ast.validate import (
    class_name,
    entity_name,
    find_dependency_cycle,
    node_id,
    participant_id,
    state_id,
    task_id,
)

# ─── Flowchart ───────────────────────────────────────────────────────────────


def add_node(
    diagram: FlowchartDiagram,
    id: str,
    label: str | None = None,
    shape: NodeShape = NodeShape.Rectangle,
) -> FlowchartDiagram:
    nid = node_id(id)
    if diagram.node(nid) is not None:
        raise ValidationError(ValidationCode.DuplicateId, f"node {nid!r} already exists")
    result = clone(diagram)
    content = parse_content(label) if label else None
    stmt = NodeDeclaration(Node(id=nid, label=content, shape=shape))
    result.statements.append(stmt)
    register(result, stmt)
    return result


def add_edge(
    diagram: FlowchartDiagram,
    source: str,
    target: str,
    edge_type: EdgeType = EdgeType.Arrow,
    label: str | None = None,
) -> FlowchartDiagram:
    for end in (source, target):
        if diagram.node(end) is None:
            raise ValidationError(ValidationCode.NotFound, f"node {end!r} not found; add it before linking it")
    result = clone(diagram)
    stmt = Edge(source, target, edge_type, parse_content(label) if label else None)
    result.statements.append(stmt)
    register(result, stmt)
    return result


# ─── Sequence ────────────────────────────────────────────────────────────────


def _participant(diagram: SequenceDiagram, id: str) -> Participant | None:
    for p in diagram.participants:
        if p.id == id:
            return p
    return None


def add_participant(
    diagram: SequenceDiagram,
    id: str,
    alias: str | None = None,
    kind: ParticipantKind = ParticipantKind.Participant,
) -> SequenceDiagram:
    pid = participant_id(id)
    if _participant(diagram, pid) is not None:
        raise ValidationError(ValidationCode.DuplicateId, f"participant {pid!r} already exists")
    result = clone(diagram)
    stmt = Participant(id=pid, alias=alias, kind=kind)
    result.statements.append(stmt)
    result.participants.append(Participant(id=pid, alias=alias, kind=kind))
    return result


def add_message(
    diagram: SequenceDiagram,
    source: str,
    target: str,
    text: str | None = None,
    arrow: ArrowType = ArrowType.SolidArrow,
) -> SequenceDiagram:
    ids = [participant_id(source), participant_id(target)]
    result = clone(diagram)
    for pid in ids:
        if _participant(result, pid) is None:
            result.participants.append(Participant(id=pid))
    result.statements.append(Message(ids[0], ids[1], arrow, parse_content(text) if text else None))
    return result


# ─── State ───────────────────────────────────────────────────────────────────


def _find_state(states: list[State], id: str) -> State | None:
    pending = [states]
    while pending:
        for state in pending.pop():
            if state.id == id:
                return state
            if state.children is not None:
                pending.append(state.children)
            pending.extend(region.states for region in state.regions)
    return None


def add_transition(
    diagram: StateDiagram,
    source: str,
    target: str,
    label: str | None = None,
) -> StateDiagram:
    """Append a top-level transition. Use START_STATE and END_STATE for ``[*]``."""
    if source == END_STATE:
        raise ValidationError(ValidationCode.InvalidIdFormat, "the end pseudostate cannot be a transition source")
    if target == START_STATE:
        raise ValidationError(ValidationCode.InvalidIdFormat, "the start pseudostate cannot be a transition target")
    ends = [end if end in (START_STATE, END_STATE) else state_id(end) for end in (source, target)]
    result = clone(diagram)
    for end in ends:
        if end not in (START_STATE, END_STATE) and _find_state(result.states, end) is None:
            result.states.append(State(id=end))
    result.transitions.append(Transition(ends[0], ends[1], parse_content(label) if label else None))
    return result


# ─── Class ───────────────────────────────────────────────────────────────────


def add_relation(
    diagram: ClassDiagram,
    source: str,
    target: str,
    relation: RelationType = RelationType.Association,
    label: str | None = None,
    source_cardinality: str | None = None,
    target_cardinality: str | None = None,
) -> ClassDiagram:
    names = [class_name(source), class_name(target)]
    result = clone(diagram)
    for name in names:
        if result.get_class(name) is None:
            result.classes.append(ClassDefinition(name=name))
    result.relations.append(
        Relation(names[0], names[1], relation, source_cardinality, target_cardinality, label or None)
    )
    return result


# ─── Entity-Relationship ─────────────────────────────────────────────────────


def add_relationship(
    diagram: ErDiagram,
    source: str,
    target: str,
    source_cardinality: Cardinality,
    target_cardinality: Cardinality,
    label: str | None = None,
    identification: Identification = Identification.Identifying,
) -> ErDiagram:
    names = [entity_name(source), entity_name(target)]
    result = clone(diagram)
    for name in names:
        if result.entity(name) is None:
            result.entities.append(Entity(name=name))
    result.relationships.append(
        Relationship(names[0], names[1], source_cardinality, target_cardinality, identification, label or None)
    )
    return result


# ─── Gantt ───────────────────────────────────────────────────────────────────


def add_task(
    diagram: GanttDiagram,
    section: str,
    name: str,
    end: TaskEnd,
    id: str | None = None,
    start: TaskStart = None,
    status: TaskStatus | None = None,
) -> GanttDiagram:
    """Append a task to ``section``, creating the section if needed.

    ``after`` dependencies must name tasks that precede the new task in
    chart order.

    Raises:
        ValidationError: for a bad or duplicate id, a dependency on a task
            that does not precede it, or a dependency cycle.
    """
    if not name.strip() or ":" in name:
        raise ValidationError(ValidationCode.InvalidIdFormat, f"invalid task name {name!r}")
    tid = task_id(id) if id is not None else None
    if tid is not None and start is None:
        raise ValidationError(ValidationCode.InvalidIdFormat, f"task {tid!r} needs an explicit start to carry an id")
    if tid is not None and any(t.id == tid for t in diagram.tasks()):
        raise ValidationError(ValidationCode.DuplicateId, f"task {tid!r} already exists")

    result = clone(diagram)
    target = next((s for s in result.sections if s.name == section), None)
    if target is None:
        target = Section(name=section)
        result.sections.append(target)
    task = Task(name=name, end=end, id=tid, status=status, start=clone(start))
    target.tasks.append(task)

    if isinstance(start, AfterStart):
        ordered = result.tasks()
        index = next(i for i, t in enumerate(ordered) if t is task)
        earlier = {t.id for t in ordered[:index] if t.id is not None}
        for dep in start.task_ids:
            if dep not in earlier:
                raise ValidationError(ValidationCode.NotFound, f"task {name!r} depends on unknown or later task {dep!r}")

    cycle = find_dependency_cycle(result)
    if cycle is not None:
        raise ValidationError(ValidationCode.CircularReference, "circular task dependency: " + " -> ".join(cycle + cycle[:1]))
    return result
