"""Tests for header detection and multi-diagram documents."""

import pytest

from mermaid_ast import UnexpectedToken, UnknownDiagramType, detect_type, parse
from mermaid_ast.parsers import header_kind, split_segments
from mermaid_ast.syntax.types import Edge, Message
from mermaid_ast.types import DiagramKind


@pytest.mark.parametrize(
    "line,kind",
    [
        ("flowchart LR", DiagramKind.Flowchart),
        ("graph TD", DiagramKind.Flowchart),
        ("graph", DiagramKind.Flowchart),
        ("graph LR;A-->B", DiagramKind.Flowchart),
        ("sequenceDiagram", DiagramKind.Sequence),
        ("classDiagram", DiagramKind.Class),
        ("classDiagram-v2", DiagramKind.Class),
        ("erDiagram", DiagramKind.Er),
        ("stateDiagram", DiagramKind.State),
        ("stateDiagram-v2", DiagramKind.State),
        ("gantt", DiagramKind.Gantt),
        ("  gantt  %% trailing comment", DiagramKind.Gantt),
    ],
)
def test_header_kind(line: str, kind: DiagramKind):
    assert header_kind(line) == kind


@pytest.mark.parametrize("line", ["pie", "sequenceDiagram LR", "A --> B", "", "journey"])
def test_not_a_header(line: str):
    assert header_kind(line) is None


def test_detect_type():
    assert detect_type("sequenceDiagram\nA->>B: hi\n") == DiagramKind.Sequence
    assert detect_type("%% leading comment\n\nerDiagram\nA ||--|| B\n") == DiagramKind.Er


@pytest.mark.parametrize("src", ["", "\n\n", "%% only a comment\n"])
def test_empty_input_has_no_diagram(src: str):
    with pytest.raises(UnknownDiagramType):
        parse(src)


def test_unknown_header():
    with pytest.raises(UnknownDiagramType) as exc:
        parse("pie title Pets\n")
    assert exc.value.position.line == 1


def test_multiple_diagrams_in_order():
    src = "flowchart LR\nA-->B\n\nsequenceDiagram\nA->>B: hi\n\ngantt\nsection S\nT :1d\n"
    program = parse(src)
    assert [d.kind for d in program.diagrams] == [DiagramKind.Flowchart, DiagramKind.Sequence, DiagramKind.Gantt]


def test_header_needs_blank_line_before_it():
    segments = split_segments("sequenceDiagram\nA->>B: hi\n\nflowchart LR\nA-->B\n")
    assert [(s.kind, s.line) for s in segments] == [(DiagramKind.Sequence, 1), (DiagramKind.Flowchart, 4)]


def test_positions_are_document_absolute():
    program = parse("flowchart LR\nA-->B\n\nsequenceDiagram\nA->>B: hi\n")
    edge = next(s for s in program.diagrams[0].statements if isinstance(s, Edge))
    message = program.diagrams[1].statements[0]
    assert isinstance(message, Message)
    assert edge.position.line == 2
    assert message.position.line == 5
    assert message.position.offset == len("flowchart LR\nA-->B\n\nsequenceDiagram\n")


def test_error_in_later_diagram_reports_document_line():
    with pytest.raises(UnexpectedToken) as exc:
        parse("flowchart LR\nA-->B\n\nsequenceDiagram\nA B\n")
    assert exc.value.position.line == 5


def test_crlf_line_endings():
    program = parse("flowchart LR\r\nA-->B\r\n")
    assert [n.id for n in program.diagrams[0].nodes] == ["A", "B"]


def test_first_error_stops_parsing():
    with pytest.raises(UnexpectedToken):
        parse("flowchart LR\nA --> -->\n\nsequenceDiagram\nA->>B: fine\n")
