"""Graph IR: projects a diagram AST onto a networkx MultiDiGraph.

This is the hand-off point for layout and analysis consumers. Flowchart,
state, class and ER diagrams are graphs at heart; each one is flattened into
generic node and edge records while subgraph (or composite state) membership
is kept on the node. Parallel edges are preserved.
"""

from __future__ import annotations

from dataclasses import dataclass

import networkx as nx

from mermaid_ast.content import extract_text
from mermaid_ast.syntax.types import (
    END_STATE,
    START_STATE,
    ClassDiagram,
    Diagram,
    Edge,
    ErDiagram,
    FlowchartDiagram,
    FlowchartStatement,
    NodeDeclaration,
    State,
    StateDiagram,
    Subgraph,
    Transition,
)
from mermaid_ast.types import DiagramKind, NodeShape, StateKind

_STATE_SHAPES: dict[StateKind, NodeShape] = {
    StateKind.Simple: NodeShape.Rounded,
    StateKind.Choice: NodeShape.Diamond,
    StateKind.Fork: NodeShape.Rectangle,
    StateKind.Join: NodeShape.Rectangle,
}


@dataclass
class NodeData:
    id: str
    label: str
    shape: NodeShape = NodeShape.Rectangle
    subgraph: str | None = None


@dataclass
class EdgeData:
    kind: str
    label: str | None = None


class GraphIR:
    """The graph intermediate representation built from one diagram.

    Wraps a networkx MultiDiGraph and exposes helpers for topology queries.
    """

    def __init__(self, graph: nx.MultiDiGraph, kind: DiagramKind, subgraph_members: list[tuple[str, list[str]]]) -> None:
        self.graph = graph
        self.kind = kind
        self.subgraph_members = subgraph_members

    @classmethod
    def from_diagram(cls, diagram: Diagram) -> GraphIR:
        """Build a GraphIR from a flowchart, state, class or ER diagram.

        Raises:
            TypeError: for sequence and gantt diagrams, which are not graphs.
        """
        graph: nx.MultiDiGraph = nx.MultiDiGraph()
        members: list[tuple[str, list[str]]] = []
        if isinstance(diagram, FlowchartDiagram):
            _from_flowchart(diagram, graph, members)
        elif isinstance(diagram, StateDiagram):
            _from_state(diagram, graph, members)
        elif isinstance(diagram, ClassDiagram):
            for c in diagram.classes:
                _ensure_node(graph, c.name)
            for rel in diagram.relations:
                _add_edge(graph, rel.source, rel.target, EdgeData(rel.relation.name, rel.label))
        elif isinstance(diagram, ErDiagram):
            for e in diagram.entities:
                _ensure_node(graph, e.name)
            for r in diagram.relationships:
                kind = f"{r.source_cardinality.name}-{r.target_cardinality.name}"
                _add_edge(graph, r.source, r.target, EdgeData(kind, r.label))
        else:
            raise TypeError(f"{type(diagram).__name__} has no graph form")
        return cls(graph, diagram.kind, members)

    def is_dag(self) -> bool:
        return nx.is_directed_acyclic_graph(self.graph)

    def topological_order(self) -> list[str] | None:
        try:
            return list(nx.topological_sort(self.graph))
        except nx.NetworkXUnfeasible:
            return None

    def node_count(self) -> int:
        return self.graph.number_of_nodes()

    def edge_count(self) -> int:
        return self.graph.number_of_edges()

    def node(self, node_id: str) -> NodeData | None:
        if node_id not in self.graph:
            return None
        return self.graph.nodes[node_id]["data"]

    def in_degree(self, node_id: str) -> int:
        if node_id not in self.graph:
            return 0
        return self.graph.in_degree(node_id)

    def out_degree(self, node_id: str) -> int:
        if node_id not in self.graph:
            return 0
        return self.graph.out_degree(node_id)

    def adjacency_list(self) -> list[tuple[str, list[str]]]:
        result: list[tuple[str, list[str]]] = []
        for node_id in self.graph.nodes:
            neighbors = sorted(set(self.graph.successors(node_id)))
            result.append((node_id, neighbors))
        result.sort(key=lambda x: x[0])
        return result


def _ensure_node(graph: nx.MultiDiGraph, node_id: str, data: NodeData | None = None) -> None:
    if node_id not in graph:
        graph.add_node(node_id, data=data or NodeData(id=node_id, label=node_id))


def _add_edge(graph: nx.MultiDiGraph, source: str, target: str, data: EdgeData) -> None:
    _ensure_node(graph, source)
    _ensure_node(graph, target)
    graph.add_edge(source, target, data=data)


# ─── Flowchart ───────────────────────────────────────────────────────────────


def _from_flowchart(diagram: FlowchartDiagram, graph: nx.MultiDiGraph, members: list[tuple[str, list[str]]]) -> None:
    membership: dict[str, str] = {}
    edges: list[Edge] = []
    _collect_flowchart(diagram.statements, None, membership, edges, members)
    for node in diagram.nodes:
        label = extract_text(node.label) or node.id
        graph.add_node(node.id, data=NodeData(node.id, label, node.shape, membership.get(node.id)))
    for edge in edges:
        _add_edge(graph, edge.source, edge.target, EdgeData(edge.edge_type.name, extract_text(edge.label) or None))


def _collect_flowchart(
    statements: list[FlowchartStatement],
    owner: str | None,
    membership: dict[str, str],
    edges: list[Edge],
    members: list[tuple[str, list[str]]],
) -> None:
    ids: list[str] = []
    for stmt in statements:
        if isinstance(stmt, Edge):
            edges.append(stmt)
            ids.extend((stmt.source, stmt.target))
        elif isinstance(stmt, Subgraph):
            _collect_flowchart(stmt.statements, stmt.id, membership, edges, members)
        elif isinstance(stmt, NodeDeclaration):
            ids.append(stmt.node.id)
    if owner is None:
        return
    own: list[str] = []
    for node_id in ids:
        if node_id not in membership:
            membership[node_id] = owner
            own.append(node_id)
    members.append((owner, own))


# ─── State ───────────────────────────────────────────────────────────────────


# (scope key, states, transitions); the key qualifies the scope's pseudostates.
_StateScope = tuple[str | None, list[State], list[Transition]]


def _state_scopes(state: State) -> list[_StateScope]:
    """The regions of a composite state; concurrent regions after the first are keyed ``id:2``, ``id:3``, ..."""
    assert state.children is not None
    scopes: list[_StateScope] = [(state.id, state.children, state.transitions)]
    for n, region in enumerate(state.regions, start=2):
        scopes.append((f"{state.id}:{n}", region.states, region.transitions))
    return scopes


def _from_state(diagram: StateDiagram, graph: nx.MultiDiGraph, members: list[tuple[str, list[str]]]) -> None:
    pending: list[tuple[str | None, list[_StateScope]]] = [(None, [(None, diagram.states, diagram.transitions)])]
    while pending:
        owner, scopes = pending.pop()
        own: list[str] = []
        composites: list[State] = []
        for key, states, transitions in scopes:
            for state in states:
                label = extract_text(state.label) or state.id
                graph.add_node(state.id, data=NodeData(state.id, label, _STATE_SHAPES[state.kind], owner))
                own.append(state.id)
                if state.children is not None:
                    composites.append(state)
            for tr in transitions:
                source = _sentinel(tr.source, key, owner, graph)
                target = _sentinel(tr.target, key, owner, graph)
                _add_edge(graph, source, target, EdgeData("Transition", extract_text(tr.label) or None))
        if owner is not None:
            members.append((owner, own))
        pending.extend((state.id, _state_scopes(state)) for state in reversed(composites))


def _sentinel(state_id: str, key: str | None, owner: str | None, graph: nx.MultiDiGraph) -> str:
    """Pseudostates are per scope, so nested ones are qualified by their scope key."""
    if state_id not in (START_STATE, END_STATE):
        return state_id
    node_id = state_id if key is None else f"{key}/{state_id}"
    _ensure_node(graph, node_id, NodeData(node_id, "[*]", NodeShape.Circle, owner))
    return node_id
