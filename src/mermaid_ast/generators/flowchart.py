"""Flowchart generator."""

from __future__ import annotations

import re
from typing import Union

from mermaid_ast.config import GeneratorConfig
from mermaid_ast.content import Content
from mermaid_ast.parsers.flowchart import SHAPE_DELIMITERS
from mermaid_ast.syntax.types import (
    ClassAssignment,
    ClassDef,
    Edge,
    FlowchartDiagram,
    FlowchartStatement,
    Node,
    NodeDeclaration,
    Style,
    Subgraph,
)
from mermaid_ast.types import EdgeType, NodeShape

EDGE_TOKENS: dict[EdgeType, str] = {
    EdgeType.Arrow: "-->",
    EdgeType.Line: "---",
    EdgeType.DottedArrow: "-.->",
    EdgeType.DottedLine: "-.-",
    EdgeType.ThickArrow: "==>",
    EdgeType.ThickLine: "===",
    EdgeType.Invisible: "~~~",
    EdgeType.CircleArrow: "--o",
    EdgeType.CrossArrow: "--x",
    EdgeType.BidirArrow: "<-->",
    EdgeType.BidirDotted: "<-.->",
    EdgeType.BidirThick: "<==>",
}

# Labels matching this are emitted bare; anything else is quoted.
_SAFE_LABEL_RE = re.compile(r"\w[\w .,;:!?'&+*#@$%=-]*")
_SAFE_ID_RE = re.compile(r"[A-Za-z0-9_]+(?:-[A-Za-z0-9_]+)*")


def label_text(text: str) -> str:
    if _SAFE_LABEL_RE.fullmatch(text):
        return text
    return f'"{text}"'


def node_text(node: Node) -> str:
    if node.label is None and node.shape is NodeShape.Rectangle:
        return node.id
    opener, closer = SHAPE_DELIMITERS[node.shape]
    label = label_text(node.label.raw) if node.label is not None else ""
    return f"{node.id}{opener}{label}{closer}"


def edge_text(edge: Edge) -> str:
    label = f"|{label_text(edge.label.raw)}|" if isinstance(edge.label, Content) else ""
    return f"{edge.source} {EDGE_TOKENS[edge.edge_type]}{label} {edge.target}"


def _subgraph_header(sg: Subgraph) -> str:
    sg_id = sg.id if _SAFE_ID_RE.fullmatch(sg.id) else f'"{sg.id}"'
    if sg.label is None:
        return f"subgraph {sg_id}"
    return f"subgraph {sg_id}[{label_text(sg.label)}]"


def statement_text(stmt: FlowchartStatement) -> str:
    """One-line form of any statement except a subgraph."""
    if isinstance(stmt, NodeDeclaration):
        return node_text(stmt.node)
    if isinstance(stmt, Edge):
        return edge_text(stmt)
    if isinstance(stmt, ClassDef):
        return f"classDef {stmt.name} {stmt.styles}"
    if isinstance(stmt, ClassAssignment):
        return f"class {','.join(stmt.node_ids)} {stmt.class_name}"
    if isinstance(stmt, Style):
        return f"style {stmt.node_id} {stmt.styles}"
    raise TypeError(f"not a flowchart statement: {stmt!r}")


# A pending item is either a finished line or a body still to be written.
_Pending = Union[str, tuple[list[FlowchartStatement], int]]


def _emit(statements: list[FlowchartStatement], lines: list[str], config: GeneratorConfig) -> None:
    pending: list[_Pending] = [(statements, 1)]
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            lines.append(item)
            continue
        body, depth = item
        pad = config.pad(depth)
        expanded: list[_Pending] = []
        for stmt in body:
            if isinstance(stmt, Subgraph):
                expanded.append(pad + _subgraph_header(stmt))
                if stmt.direction is not None:
                    expanded.append(config.pad(depth + 1) + f"direction {stmt.direction.name}")
                expanded.append((stmt.statements, depth + 1))
                expanded.append(pad + "end")
            else:
                expanded.append(pad + statement_text(stmt))
        pending.extend(reversed(expanded))


def generate_flowchart(diagram: FlowchartDiagram, config: GeneratorConfig) -> str:
    lines = [f"flowchart {diagram.direction.name}"]
    _emit(diagram.statements, lines, config)
    return "\n".join(lines)
