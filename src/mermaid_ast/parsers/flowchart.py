"""Flowchart parser: hand-rolled descent over structural tokens.

Every node id is entered in the diagram's node registry at first reference.
A shaped reference (``A[Label]``) additionally becomes a NodeDeclaration
statement placed ahead of the edges of its line. Subgraphs nest through an
explicit stack, not recursion.
"""

from __future__ import annotations

import re

from mermaid_ast.content import Content, parse_content
from mermaid_ast.errors import UnexpectedToken, UnterminatedBlock
from mermaid_ast.lexer.tokens import Token, TokenKind
from mermaid_ast.parsers.base import TokenCursor, unquote
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
from mermaid_ast.types import Direction, EdgeType, NodeShape

_EDGE_PARTS_RE = re.compile(r"(?P<head><)?(?P<body>-\.+-|--+|==+|~~~+)(?P<tail>[>ox])?")

_EDGE_TYPES: dict[tuple[bool, str, str | None], EdgeType] = {
    (False, "solid", ">"): EdgeType.Arrow,
    (False, "solid", None): EdgeType.Line,
    (False, "dotted", ">"): EdgeType.DottedArrow,
    (False, "dotted", None): EdgeType.DottedLine,
    (False, "thick", ">"): EdgeType.ThickArrow,
    (False, "thick", None): EdgeType.ThickLine,
    (False, "invisible", None): EdgeType.Invisible,
    (False, "solid", "o"): EdgeType.CircleArrow,
    (False, "solid", "x"): EdgeType.CrossArrow,
    (True, "solid", ">"): EdgeType.BidirArrow,
    (True, "dotted", ">"): EdgeType.BidirDotted,
    (True, "thick", ">"): EdgeType.BidirThick,
}

SHAPE_DELIMITERS: dict[NodeShape, tuple[str, str]] = {
    NodeShape.Rectangle: ("[", "]"),
    NodeShape.Rounded: ("(", ")"),
    NodeShape.Stadium: ("([", "])"),
    NodeShape.Subroutine: ("[[", "]]"),
    NodeShape.Cylinder: ("[(", ")]"),
    NodeShape.Circle: ("((", "))"),
    NodeShape.DoubleCircle: ("(((", ")))"),
    NodeShape.Diamond: ("{", "}"),
    NodeShape.Hexagon: ("{{", "}}"),
    NodeShape.Parallelogram: ("[/", "/]"),
    NodeShape.ParallelogramAlt: ("[\\", "\\]"),
    NodeShape.Trapezoid: ("[/", "\\]"),
    NodeShape.TrapezoidAlt: ("[\\", "/]"),
    NodeShape.Asymmetric: (">", "]"),
}

_SHAPES_BY_DELIMITERS = {delims: shape for shape, delims in SHAPE_DELIMITERS.items()}


def edge_type_of(tok: Token) -> EdgeType:
    m = _EDGE_PARTS_RE.fullmatch(tok.text)
    if m is None:
        raise UnexpectedToken("edge operator", str(tok), tok.start)
    body = m.group("body")
    if body.startswith("~"):
        style = "invisible"
    elif "." in body:
        style = "dotted"
    elif body.startswith("="):
        style = "thick"
    else:
        style = "solid"
    tail = m.group("tail")
    etype = _EDGE_TYPES.get((m.group("head") is not None, style, tail))
    # -- and == alone are not complete operators
    if etype is None or (tail is None and len(body) < 3):
        raise UnexpectedToken("edge operator", str(tok), tok.start)
    return etype


def _label(text: str) -> Content | None:
    text = unquote(text.strip())
    if not text:
        return None
    return parse_content(text)


class FlowchartParser:
    """Flowchart/graph diagram parser."""

    def parse(self, cursor: TokenCursor) -> FlowchartDiagram:
        self.cursor = cursor
        self.diagram = FlowchartDiagram()
        self.parse_header()

        stack: list[tuple[Subgraph | None, list[FlowchartStatement]]] = [(None, self.diagram.statements)]
        while not cursor.at_end():
            start = cursor.index
            if cursor.check(TokenKind.Newline, TokenKind.Semicolon):
                cursor.advance()
                continue
            subgraph, scope = stack[-1]
            if cursor.check_word("end") and cursor.peek(1).kind in (
                TokenKind.Newline,
                TokenKind.Semicolon,
                TokenKind.Eof,
            ):
                if subgraph is None:
                    raise cursor.fail("statement")
                cursor.advance()
                cursor.end_statement()
                stack.pop()
            elif cursor.check_word("subgraph"):
                sg = self.parse_subgraph_header()
                scope.append(sg)
                stack.append((sg, sg.statements))
            elif cursor.check_word("direction") and cursor.peek(1).kind is TokenKind.Identifier:
                cursor.advance()
                direction = self.parse_direction()
                if subgraph is None:
                    self.diagram.direction = direction
                else:
                    subgraph.direction = direction
                cursor.end_statement()
            elif cursor.check_word("classdef") and cursor.peek(1).kind is TokenKind.Identifier:
                cursor.advance()
                name = cursor.advance().text
                scope.append(ClassDef(name=name, styles=cursor.rest_of_line()))
                cursor.end_statement()
            elif cursor.check_word("class") and cursor.peek(1).kind is TokenKind.Identifier:
                scope.append(self.parse_class_assignment())
            elif cursor.check_word("style") and cursor.peek(1).kind is TokenKind.Identifier:
                cursor.advance()
                node_id = cursor.advance().text
                scope.append(Style(node_id=node_id, styles=cursor.rest_of_line()))
                cursor.end_statement()
            else:
                self.parse_node_statement(scope)
            cursor.ensure_progress(start)

        if len(stack) > 1:
            open_sg = stack[-1][0]
            assert open_sg is not None
            raise UnterminatedBlock("subgraph", open_sg.position, cursor.peek().start)
        return self.diagram

    def parse_header(self) -> None:
        cursor = self.cursor
        cursor.skip_newlines()
        if not cursor.check_word("flowchart", "graph"):
            raise cursor.fail("'flowchart' or 'graph'")
        cursor.advance()
        if cursor.check(TokenKind.Identifier):
            self.diagram.direction = self.parse_direction()
        cursor.end_statement()

    def parse_direction(self) -> Direction:
        tok = self.cursor.expect(TokenKind.Identifier, "direction")
        direction = Direction.from_text(tok.text)
        if direction is None:
            raise UnexpectedToken("direction (TD, TB, BT, LR, RL)", str(tok), tok.start)
        return direction

    def parse_subgraph_header(self) -> Subgraph:
        cursor = self.cursor
        kw = cursor.advance()
        label: str | None = None
        if cursor.check(TokenKind.String):
            sg_id = unquote(cursor.advance().text)
        elif cursor.check(TokenKind.Identifier) and (
            cursor.peek(1).kind is TokenKind.ShapeOpen
            or cursor.peek(1).kind in (TokenKind.Newline, TokenKind.Semicolon, TokenKind.Eof)
        ):
            sg_id = cursor.advance().text
            if cursor.accept(TokenKind.ShapeOpen):
                text = cursor.accept(TokenKind.Label)
                cursor.expect(TokenKind.ShapeClose, "closing bracket")
                label = unquote(text.text.strip()) if text else None
        else:
            first = cursor.peek()
            sg_id = cursor.rest_of_line()
            if not sg_id:
                raise cursor.fail("subgraph id")
            # A quote could not be written back inside a quoted id.
            if '"' in sg_id:
                raise UnexpectedToken("subgraph id without quotes", repr(sg_id), first.start)
        cursor.end_statement()
        return Subgraph(id=sg_id, label=label or None, position=kw.start)

    def parse_class_assignment(self) -> ClassAssignment:
        cursor = self.cursor
        cursor.advance()
        node_ids = [cursor.expect(TokenKind.Identifier, "node id").text]
        while cursor.accept(TokenKind.Comma):
            node_ids.append(cursor.expect(TokenKind.Identifier, "node id").text)
        class_name = cursor.expect(TokenKind.Identifier, "class name").text
        cursor.end_statement()
        return ClassAssignment(node_ids=node_ids, class_name=class_name)

    # ─── Nodes and edges ─────────────────────────────────────────────────────

    def parse_node_statement(self, scope: list[FlowchartStatement]) -> None:
        cursor = self.cursor
        produced: list[FlowchartStatement] = []
        group = self.parse_group(produced)
        edges: list[Edge] = []
        while cursor.check(TokenKind.EdgeOp):
            op = cursor.advance()
            edge_type = edge_type_of(op)
            label_tok = cursor.accept(TokenKind.EdgeLabel)
            targets = self.parse_group(produced)
            for source, _ in group:
                for target, _ in targets:
                    label = _label(label_tok.text) if label_tok else None
                    edges.append(Edge(source, target, edge_type, label, position=op.start))
            group = targets
        if not edges:
            # A line of bare ids declares them.
            for node_id, declared in group:
                if not declared:
                    produced.append(NodeDeclaration(Node.bare(node_id)))
        produced.extend(edges)
        cursor.end_statement()
        for stmt in produced:
            register(self.diagram, stmt)
        scope.extend(produced)

    def parse_group(self, produced: list[FlowchartStatement]) -> list[tuple[str, bool]]:
        """Parse ``ref (& ref)*``; returns (id, had_shape) per reference."""
        refs = [self.parse_node_ref(produced)]
        while self.cursor.accept(TokenKind.Ampersand):
            refs.append(self.parse_node_ref(produced))
        return refs

    def parse_node_ref(self, produced: list[FlowchartStatement]) -> tuple[str, bool]:
        cursor = self.cursor
        tok = cursor.expect(TokenKind.Identifier, "node id")
        opener = cursor.accept(TokenKind.ShapeOpen)
        if opener is None:
            return tok.text, False
        text = cursor.accept(TokenKind.Label)
        closer = cursor.expect(TokenKind.ShapeClose, "closing delimiter")
        shape = _SHAPES_BY_DELIMITERS.get((opener.text, closer.text))
        if shape is None:
            raise UnexpectedToken("matching shape delimiter", str(closer), closer.start)
        label = _label(text.text) if text else None
        produced.append(NodeDeclaration(Node(tok.text, label, shape), position=tok.start))
        return tok.text, True


def register(diagram: FlowchartDiagram, stmt: FlowchartStatement) -> None:
    """Enter the node ids a statement mentions into the diagram's node registry.

    Ids are registered in statement order, which is also the order generators
    emit statements in, so the registry survives a round trip unchanged. A
    shaped declaration overwrites the label and shape of an existing entry.
    """
    if isinstance(stmt, NodeDeclaration):
        entry = _entry(diagram, stmt.node.id)
        if stmt.node != Node.bare(stmt.node.id):
            entry.label = stmt.node.label
            entry.shape = stmt.node.shape
    elif isinstance(stmt, Edge):
        _entry(diagram, stmt.source)
        _entry(diagram, stmt.target)


def _entry(diagram: FlowchartDiagram, node_id: str) -> Node:
    entry = diagram.node(node_id)
    if entry is None:
        entry = Node.bare(node_id)
        diagram.nodes.append(entry)
    return entry
