"""Identifier validation and dependency checks for the builder layer.

Ids handed to the builders are plain strings wrapped in ``NewType`` aliases;
the only way to get one is through the matching constructor below, which
rejects malformed ids and Mermaid keywords.
"""

from __future__ import annotations

import re
from typing import NewType

import networkx as nx

from mermaid_ast.errors import ValidationCode, ValidationError
from mermaid_ast.gantt import dependency_graph
from mermaid_ast.syntax.types import AfterStart, GanttDiagram

NodeId = NewType("NodeId", str)
ParticipantId = NewType("ParticipantId", str)
ClassName = NewType("ClassName", str)
EntityName = NewType("EntityName", str)
StateId = NewType("StateId", str)
TaskId = NewType("TaskId", str)

# Stored lowercased; lookups are case-insensitive.
RESERVED_WORDS: frozenset[str] = frozenset(
    {
        # diagram headers
        "graph",
        "flowchart",
        "sequencediagram",
        "classdiagram",
        "statediagram",
        "statediagram-v2",
        "erdiagram",
        "gantt",
        "journey",
        "pie",
        "gitgraph",
        "mindmap",
        "timeline",
        # flowchart
        "subgraph",
        "end",
        "style",
        "class",
        "classdef",
        "click",
        "call",
        "href",
        # sequence
        "participant",
        "actor",
        "loop",
        "alt",
        "else",
        "opt",
        "par",
        "and",
        "critical",
        "break",
        "note",
        "over",
        "activate",
        "deactivate",
        "autonumber",
        # state
        "state",
        "fork",
        "join",
        "choice",
        # class
        "namespace",
        "interface",
        "enum",
        "annotation",
        "extends",
        "implements",
        # er
        "entity",
        "relationship",
        # gantt
        "section",
        "title",
        "dateformat",
        # directions
        "tb",
        "td",
        "bt",
        "lr",
        "rl",
    }
)

_ID_RE = re.compile(r"[A-Za-z][A-Za-z0-9_-]*")


def is_reserved_word(word: str) -> bool:
    return word.lower() in RESERVED_WORDS


def check_identifier(value: str, what: str = "id") -> str:
    """Return ``value`` if it is usable as an id, else raise ValidationError."""
    if not _ID_RE.fullmatch(value):
        raise ValidationError(
            ValidationCode.InvalidIdFormat,
            f"invalid {what} {value!r}: must start with a letter and contain only letters, digits, '_' and '-'",
        )
    if is_reserved_word(value):
        raise ValidationError(ValidationCode.ReservedWord, f"{what} {value!r} is a reserved word")
    return value


def node_id(value: str) -> NodeId:
    return NodeId(check_identifier(value, "node id"))


def participant_id(value: str) -> ParticipantId:
    return ParticipantId(check_identifier(value, "participant id"))


def class_name(value: str) -> ClassName:
    return ClassName(check_identifier(value, "class name"))


def entity_name(value: str) -> EntityName:
    return EntityName(check_identifier(value, "entity name"))


def state_id(value: str) -> StateId:
    return StateId(check_identifier(value, "state id"))


def task_id(value: str) -> TaskId:
    return TaskId(check_identifier(value, "task id"))


# ─── Gantt dependencies ──────────────────────────────────────────────────────


def find_dependency_cycle(gantt: GanttDiagram) -> list[str] | None:
    """Task ids forming a dependency cycle, in order, or None if there is none."""
    try:
        edges = nx.find_cycle(dependency_graph(gantt))
    except nx.NetworkXNoCycle:
        return None
    return [source for source, _target in edges]


def validate_gantt(gantt: GanttDiagram) -> None:
    """Check task ids are unique, ``after`` references resolve, and nothing is circular.

    Raises:
        ValidationError: with DuplicateId, NotFound or CircularReference.
    """
    seen: set[str] = set()
    for task in gantt.tasks():
        if task.id is None:
            continue
        if task.id in seen:
            raise ValidationError(ValidationCode.DuplicateId, f"task id {task.id!r} is declared twice")
        seen.add(task.id)
    for task in gantt.tasks():
        if isinstance(task.start, AfterStart):
            for dep in task.start.task_ids:
                if dep not in seen:
                    raise ValidationError(ValidationCode.NotFound, f"task {task.name!r} depends on unknown task {dep!r}")
    cycle = find_dependency_cycle(gantt)
    if cycle is not None:
        raise ValidationError(ValidationCode.CircularReference, "circular task dependency: " + " -> ".join(cycle + cycle[:1]))
