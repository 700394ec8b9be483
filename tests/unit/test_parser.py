"""Tests for the flowchart parser."""

import pytest

from mermaid_ast import generate, parse
from mermaid_ast.content import ContentKind
from mermaid_ast.errors import UnexpectedToken, UnterminatedBlock
from mermaid_ast.syntax.types import (
    ClassAssignment,
    ClassDef,
    Edge,
    FlowchartDiagram,
    NodeDeclaration,
    Style,
    Subgraph,
)
from mermaid_ast.types import Direction, EdgeType, NodeShape


def flowchart(src: str) -> FlowchartDiagram:
    program = parse(src)
    assert len(program.diagrams) == 1
    diagram = program.diagrams[0]
    assert isinstance(diagram, FlowchartDiagram)
    return diagram


def edges(diagram: FlowchartDiagram) -> list[Edge]:
    return [s for s in diagram.statements if isinstance(s, Edge)]


def test_parse_minimal():
    diagram = flowchart("flowchart LR\nA-->B")
    assert diagram.direction == Direction.LR
    assert [n.id for n in diagram.nodes] == ["A", "B"]
    assert all(n.shape == NodeShape.Rectangle and n.label is None for n in diagram.nodes)
    assert [(e.source, e.target) for e in edges(diagram)] == [("A", "B")]


def test_parse_simple_chain():
    diagram = flowchart("graph TD\n    A --> B --> C\n")
    assert diagram.direction == Direction.TD
    assert len(diagram.nodes) == 3
    assert [(e.source, e.target) for e in edges(diagram)] == [("A", "B"), ("B", "C")]


def test_default_direction():
    diagram = flowchart("flowchart\nA --> B\n")
    assert diagram.direction == Direction.TD


def test_tb_is_td():
    diagram = flowchart("graph TB\nA --> B\n")
    assert diagram.direction == Direction.TD


def test_parse_node_with_label():
    diagram = flowchart("graph TD\n    A[Start] --> B[End]\n")
    assert diagram.nodes[0].label is not None
    assert diagram.nodes[0].label.raw == "Start"
    assert diagram.nodes[1].label.raw == "End"
    decls = [s for s in diagram.statements if isinstance(s, NodeDeclaration)]
    assert [d.node.id for d in decls] == ["A", "B"]


def test_parse_shapes():
    diagram = flowchart("graph TD\n    A[Rect] --> B(Round) --> C{Diamond} --> D((Circle))\n")
    assert [n.shape for n in diagram.nodes] == [
        NodeShape.Rectangle,
        NodeShape.Rounded,
        NodeShape.Diamond,
        NodeShape.Circle,
    ]


@pytest.mark.parametrize(
    "ref,shape",
    [
        ("A([x])", NodeShape.Stadium),
        ("A[[x]]", NodeShape.Subroutine),
        ("A[(x)]", NodeShape.Cylinder),
        ("A(((x)))", NodeShape.DoubleCircle),
        ("A{{x}}", NodeShape.Hexagon),
        ("A[/x/]", NodeShape.Parallelogram),
        ("A[\\x\\]", NodeShape.ParallelogramAlt),
        ("A[/x\\]", NodeShape.Trapezoid),
        ("A[\\x/]", NodeShape.TrapezoidAlt),
        ("A>x]", NodeShape.Asymmetric),
    ],
)
def test_parse_every_shape(ref: str, shape: NodeShape):
    diagram = flowchart(f"flowchart LR\n{ref}\n")
    assert diagram.nodes[0].shape == shape
    assert diagram.nodes[0].label.raw == "x"


def test_parse_edge_label():
    diagram = flowchart("graph TD\n    A -->|yes| B\n")
    assert edges(diagram)[0].label.raw == "yes"


def test_parse_edge_types():
    diagram = flowchart(
        "graph TD\n"
        "A --> B\nC --- D\nE -.-> F\nG ==> H\nI -.- J\nK === L\nM ~~~ N\n"
        "O --o P\nQ --x R\nS <--> T\nU <-.-> V\nW <==> X\n"
    )
    assert [e.edge_type for e in edges(diagram)] == [
        EdgeType.Arrow,
        EdgeType.Line,
        EdgeType.DottedArrow,
        EdgeType.ThickArrow,
        EdgeType.DottedLine,
        EdgeType.ThickLine,
        EdgeType.Invisible,
        EdgeType.CircleArrow,
        EdgeType.CrossArrow,
        EdgeType.BidirArrow,
        EdgeType.BidirDotted,
        EdgeType.BidirThick,
    ]


def test_long_arrow_is_arrow():
    diagram = flowchart("flowchart LR\nA ----> B\n")
    assert edges(diagram)[0].edge_type == EdgeType.Arrow


def test_two_dash_alone_is_rejected():
    with pytest.raises(UnexpectedToken):
        parse("flowchart LR\nA -- B\n")


def test_ampersand_fans_out():
    diagram = flowchart("flowchart LR\nA & B --> C & D\n")
    assert [(e.source, e.target) for e in edges(diagram)] == [("A", "C"), ("A", "D"), ("B", "C"), ("B", "D")]


def test_implicit_nodes_not_duplicated():
    diagram = flowchart("flowchart LR\nA --> B\nB --> A\nA --> C\n")
    assert [n.id for n in diagram.nodes] == ["A", "B", "C"]


def test_later_shape_updates_registry():
    diagram = flowchart("graph TD\n    A --> B\n    A[World] --> C\n")
    a_node = diagram.node("A")
    assert a_node is not None
    assert a_node.label.raw == "World"
    assert len(diagram.nodes) == 3


def test_bare_id_line_declares_node():
    diagram = flowchart("flowchart LR\nA\nB & C\n")
    decls = [s for s in diagram.statements if isinstance(s, NodeDeclaration)]
    assert [d.node.id for d in decls] == ["A", "B", "C"]


def test_parse_comments():
    diagram = flowchart("graph TD\n    %% This is a comment\n    A --> B\n")
    assert len(diagram.nodes) == 2


def test_semicolons_separate_statements():
    diagram = flowchart("graph LR;A-->B;B-->C;")
    assert len(edges(diagram)) == 2


def test_parse_quoted_label():
    diagram = flowchart('graph TD\n    A["Hello World"] --> B\n')
    assert diagram.nodes[0].label.raw == "Hello World"
    assert diagram.nodes[0].label.kind == ContentKind.Plain


def test_html_label_is_rendered():
    diagram = flowchart('graph TD\n    A["<b>Hi</b> there"]\n')
    label = diagram.nodes[0].label
    assert label.kind == ContentKind.Html
    assert label.extract_text() == "Hi there"


def test_markdown_label():
    diagram = flowchart('graph TD\n    A["`**bold** text`"]\n')
    label = diagram.nodes[0].label
    assert label.kind == ContentKind.Markdown
    assert label.extract_text() == "bold text"


def test_mismatched_shape_delimiters():
    with pytest.raises(UnexpectedToken):
        parse("flowchart LR\nA[(x]]\n")


# ─── Subgraphs ───────────────────────────────────────────────────────────────


def test_parse_subgraph():
    diagram = flowchart("graph TD\n    subgraph Group\n        A --> B\n    end\n")
    sg = diagram.statements[0]
    assert isinstance(sg, Subgraph)
    assert sg.id == "Group"
    assert sg.label is None
    assert len(edges_in(sg)) == 1
    assert [n.id for n in diagram.nodes] == ["A", "B"]


def edges_in(sg: Subgraph) -> list[Edge]:
    return [s for s in sg.statements if isinstance(s, Edge)]


def test_subgraph_label_and_direction():
    diagram = flowchart("flowchart TD\nsubgraph one [First group]\ndirection LR\nA --> B\nend\n")
    sg = diagram.statements[0]
    assert sg.id == "one"
    assert sg.label == "First group"
    assert sg.direction == Direction.LR
    assert diagram.direction == Direction.TD


def test_subgraph_with_spaces_in_id():
    diagram = flowchart("flowchart TD\nsubgraph My Group\nA\nend\n")
    assert diagram.statements[0].id == "My Group"


def test_subgraph_id_with_spaces_survives_generation():
    src = "flowchart TD\nsubgraph My Group\nA\nend\n"
    text = generate(parse(src))
    assert '    subgraph "My Group"' in text
    assert parse(text) == parse(src)


def test_subgraph_id_with_trailing_quote_is_rejected():
    with pytest.raises(UnexpectedToken) as exc:
        parse('flowchart LR\nsubgraph a "b"\nA\nend\n')
    assert exc.value.position.line == 2


def test_nested_subgraphs():
    diagram = flowchart("flowchart TD\nsubgraph outer\nsubgraph inner\nA --> B\nend\nC\nend\n")
    outer = diagram.statements[0]
    inner = outer.statements[0]
    assert isinstance(inner, Subgraph)
    assert inner.id == "inner"
    assert len(outer.statements) == 2


def test_deep_nesting_does_not_recurse():
    depth = 2000
    src = "flowchart TD\n" + "subgraph s\n" * depth + "A\n" + "end\n" * depth
    diagram = flowchart(src)
    assert diagram.nodes[0].id == "A"


def test_unterminated_subgraph():
    with pytest.raises(UnterminatedBlock) as exc:
        parse("flowchart TD\nsubgraph one\nA --> B\n")
    assert exc.value.opened_at.line == 2


def test_stray_end():
    with pytest.raises(UnexpectedToken):
        parse("flowchart TD\nA --> B\nend\n")


# ─── Styling ─────────────────────────────────────────────────────────────────


def test_class_def_and_assignment():
    diagram = flowchart("flowchart LR\nA --> B\nclassDef hot fill:#f96,stroke:#333\nclass A,B hot\n")
    class_def = diagram.statements[1]
    assert isinstance(class_def, ClassDef)
    assert class_def.name == "hot"
    assert class_def.styles == "fill:#f96,stroke:#333"
    assignment = diagram.statements[2]
    assert isinstance(assignment, ClassAssignment)
    assert assignment.node_ids == ["A", "B"]
    assert assignment.class_name == "hot"


def test_style_statement():
    diagram = flowchart("flowchart LR\nA\nstyle A fill:#bbf,stroke-width:4px\n")
    style = diagram.statements[1]
    assert isinstance(style, Style)
    assert style.node_id == "A"
    assert style.styles == "fill:#bbf,stroke-width:4px"


def test_error_carries_position():
    with pytest.raises(UnexpectedToken) as exc:
        parse("flowchart LR\nA --> -->\n")
    assert exc.value.position.line == 2
    assert "line 2" in str(exc.value)
