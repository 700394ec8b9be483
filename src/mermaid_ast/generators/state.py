"""State diagram generator.

Each scope is written as its state declarations, then its transitions, then
its notes. Both pseudostate sentinels are written back as ``[*]``; which one
is meant follows from the side of the arrow it sits on.
"""

from __future__ import annotations

from typing import Union

from mermaid_ast.config import GeneratorConfig
from mermaid_ast.syntax.types import END_STATE, START_STATE, State, StateDiagram, StateNote, Transition
from mermaid_ast.types import StateKind


def _ref(state_id: str) -> str:
    return "[*]" if state_id in (START_STATE, END_STATE) else state_id


def transition_text(tr: Transition) -> str:
    text = f"{_ref(tr.source)} --> {_ref(tr.target)}"
    if tr.label is not None:
        text += f" : {tr.label.raw}"
    return text


def _note_lines(note: StateNote, depth: int, config: GeneratorConfig) -> list[str]:
    head = f"note {note.placement.value} {note.state}"
    raw = note.text.raw
    if raw and "\n" not in raw:
        return [config.pad(depth) + f"{head} : {raw}"]
    lines = [config.pad(depth) + head]
    if raw:
        lines.extend(config.pad(depth + 1) + line for line in raw.split("\n"))
    lines.append(config.pad(depth) + "end note")
    return lines


# A pending item is either a finished line or a scope still to be written:
# its states, transitions, notes and depth.
_Pending = Union[str, tuple[list[State], list[Transition], list[StateNote], int]]


def _scope_items(
    states: list[State],
    transitions: list[Transition],
    notes: list[StateNote],
    depth: int,
    config: GeneratorConfig,
) -> list[_Pending]:
    pad = config.pad(depth)
    inner = config.pad(depth + 1)
    items: list[_Pending] = []
    for state in states:
        if state.children is not None:
            items.append(f"{pad}state {state.id} {{")
            if state.direction is not None:
                items.append(f"{inner}direction {state.direction.name}")
            items.append((state.children, state.transitions, state.notes, depth + 1))
            for region in state.regions:
                items.append(inner + "--")
                items.append((region.states, region.transitions, region.notes, depth + 1))
            items.append(pad + "}")
        elif state.kind is not StateKind.Simple:
            items.append(f"{pad}state {state.id} <<{state.kind.name.lower()}>>")
        else:
            items.append(f"{pad}state {state.id}")
        if state.label is not None:
            items.append(f"{pad}{state.id} : {state.label.raw}")
    items.extend(pad + transition_text(tr) for tr in transitions)
    for note in notes:
        items.extend(_note_lines(note, depth, config))
    return items


def generate_state(diagram: StateDiagram, config: GeneratorConfig) -> str:
    lines = ["stateDiagram-v2" if diagram.version == "v2" else "stateDiagram"]
    if diagram.direction is not None:
        lines.append(config.pad(1) + f"direction {diagram.direction.name}")
    pending: list[_Pending] = [(diagram.states, diagram.transitions, diagram.notes, 1)]
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            lines.append(item)
        else:
            pending.extend(reversed(_scope_items(*item, config)))
    return "\n".join(lines)
