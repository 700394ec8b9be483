"""Read and rewrite utilities over the AST.

Walkers are iterative so arbitrarily deep nesting cannot exhaust the call
stack. Rewrites never touch their input; they return an edited deep copy.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from typing import TypeVar

from mermaid_ast.parsers.flowchart import register
from mermaid_ast.syntax.types import (
    Block,
    ClassAssignment,
    Diagram,
    Edge,
    FlowchartDiagram,
    FlowchartStatement,
    NodeDeclaration,
    Program,
    SequenceDiagram,
    SequenceStatement,
    State,
    StateDiagram,
    Style,
    Subgraph,
)
from mermaid_ast.types import DiagramKind

T = TypeVar("T")


def clone(tree: T) -> T:
    """Deep copy of a program, diagram or statement."""
    return copy.deepcopy(tree)


def iter_diagrams(program: Program, kind: DiagramKind | None = None) -> Iterator[Diagram]:
    for diagram in program.diagrams:
        if kind is None or diagram.kind is kind:
            yield diagram


# ─── Sequence ────────────────────────────────────────────────────────────────


def walk_sequence(diagram: SequenceDiagram) -> Iterator[tuple[int, SequenceStatement]]:
    """Yield ``(depth, statement)`` in document order; top-level statements are depth 0.

    Branch bodies are yielded at the same depth as the block's main body.
    """
    stack: list[tuple[int, Iterator[SequenceStatement]]] = [(0, iter(diagram.statements))]
    while stack:
        depth, it = stack[-1]
        stmt = next(it, None)
        if stmt is None:
            stack.pop()
            continue
        yield depth, stmt
        if isinstance(stmt, Block):
            bodies = [stmt.statements] + [b.statements for b in stmt.branches]
            stack.append((depth + 1, (s for body in bodies for s in body)))


def block_depth(diagram: SequenceDiagram) -> int:
    """Deepest block nesting; 0 when the diagram has no blocks."""
    return max((depth + 1 for depth, stmt in walk_sequence(diagram) if isinstance(stmt, Block)), default=0)


# ─── State ───────────────────────────────────────────────────────────────────


def walk_states(diagram: StateDiagram) -> Iterator[tuple[State | None, State]]:
    """Yield ``(parent, state)`` for every state, composite children and regions included."""
    stack: list[tuple[State | None, list[State]]] = [(None, diagram.states)]
    while stack:
        parent, states = stack.pop(0)
        for state in states:
            yield parent, state
            if state.children is not None:
                stack.append((state, state.children))
            stack.extend((state, region.states) for region in state.regions)


def all_state_ids(diagram: StateDiagram) -> list[str]:
    return [state.id for _parent, state in walk_states(diagram)]


# ─── Flowchart ───────────────────────────────────────────────────────────────


def all_node_ids(diagram: FlowchartDiagram) -> list[str]:
    return [node.id for node in diagram.nodes]


def walk_flowchart(statements: list[FlowchartStatement]) -> Iterator[FlowchartStatement]:
    """Yield statements in document order, subgraph contents after their subgraph."""
    stack: list[Iterator[FlowchartStatement]] = [iter(statements)]
    while stack:
        stmt = next(stack[-1], None)
        if stmt is None:
            stack.pop()
            continue
        yield stmt
        if isinstance(stmt, Subgraph):
            stack.append(iter(stmt.statements))


def remove_node(diagram: FlowchartDiagram, node_id: str) -> FlowchartDiagram:
    """Copy of ``diagram`` without ``node_id`` and every edge touching it.

    Nodes left without a declaration or edge are re-declared at the top level.
    """
    result = clone(diagram)
    result.nodes = [n for n in result.nodes if n.id != node_id]
    pending: list[list[FlowchartStatement]] = [result.statements]
    while pending:
        statements = pending.pop()
        kept: list[FlowchartStatement] = []
        for stmt in statements:
            if isinstance(stmt, NodeDeclaration) and stmt.node.id == node_id:
                continue
            if isinstance(stmt, Edge) and node_id in (stmt.source, stmt.target):
                continue
            if isinstance(stmt, Style) and stmt.node_id == node_id:
                continue
            if isinstance(stmt, ClassAssignment) and node_id in stmt.node_ids:
                stmt.node_ids = [n for n in stmt.node_ids if n != node_id]
                if not stmt.node_ids:
                    continue
            if isinstance(stmt, Subgraph):
                pending.append(stmt.statements)
            kept.append(stmt)
        statements[:] = kept

    # Re-declare nodes that no remaining statement mentions.
    mentioned: set[str] = set()
    for stmt in walk_flowchart(result.statements):
        if isinstance(stmt, NodeDeclaration):
            mentioned.add(stmt.node.id)
        elif isinstance(stmt, Edge):
            mentioned.update((stmt.source, stmt.target))
    result.statements.extend(NodeDeclaration(n) for n in result.nodes if n.id not in mentioned)

    result.nodes = []
    for stmt in walk_flowchart(result.statements):
        register(result, stmt)
    return result
