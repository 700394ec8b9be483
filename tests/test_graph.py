"""Tests for mermaid_ast.ir: GraphIR construction, cycle detection, and degree queries."""

import pytest

from mermaid_ast import parse
from mermaid_ast.ir import EdgeData, GraphIR, NodeData
from mermaid_ast.syntax.types import END_STATE, START_STATE
from mermaid_ast.types import DiagramKind, NodeShape


def graph_of(src: str) -> GraphIR:
    return GraphIR.from_diagram(parse(src).diagrams[0])


def edge_records(gir: GraphIR) -> list[tuple[str, str, EdgeData]]:
    return list(gir.graph.edges(data="data"))


class TestFlowchart:
    SRC = "flowchart LR\nA[Start] --> B\nsubgraph g\nC --> D\nend\nA -->|go| C\nA --> C\n"

    def test_counts(self):
        gir = graph_of(self.SRC)
        assert gir.kind == DiagramKind.Flowchart
        assert gir.node_count() == 4
        assert gir.edge_count() == 4

    def test_node_data(self):
        gir = graph_of(self.SRC)
        assert gir.node("A") == NodeData("A", "Start", NodeShape.Rectangle, None)
        assert gir.node("B").label == "B"
        assert gir.node("C").subgraph == "g"
        assert gir.node("missing") is None

    def test_parallel_edges_are_kept(self):
        gir = graph_of(self.SRC)
        a_to_c = [data for u, v, data in edge_records(gir) if (u, v) == ("A", "C")]
        assert [d.label for d in a_to_c] == ["go", None]
        assert all(d.kind == "Arrow" for d in a_to_c)

    def test_degrees(self):
        gir = graph_of(self.SRC)
        assert gir.out_degree("A") == 3
        assert gir.in_degree("C") == 2
        assert gir.in_degree("A") == 0
        assert gir.out_degree("nope") == 0

    def test_adjacency_list(self):
        gir = graph_of(self.SRC)
        assert gir.adjacency_list() == [("A", ["B", "C"]), ("B", []), ("C", ["D"]), ("D", [])]

    def test_subgraph_members(self):
        gir = graph_of(self.SRC)
        assert gir.subgraph_members == [("g", ["C", "D"])]

    def test_innermost_subgraph_wins(self):
        gir = graph_of("flowchart TD\nsubgraph outer\nsubgraph inner\nA\nend\nA --> B\nend\n")
        assert gir.subgraph_members == [("inner", ["A"]), ("outer", ["B"])]
        assert gir.node("A").subgraph == "inner"

    def test_dag_and_topological_order(self):
        gir = graph_of("flowchart TD\nA --> B --> C\n")
        assert gir.is_dag()
        assert gir.topological_order() == ["A", "B", "C"]

    def test_cycle(self):
        gir = graph_of("flowchart TD\nA --> B\nB --> A\n")
        assert not gir.is_dag()
        assert gir.topological_order() is None


class TestState:
    SRC = (
        "stateDiagram-v2\n"
        "[*] --> Active\n"
        "state Active {\n"
        "  [*] --> Idle\n"
        "  Idle --> [*]\n"
        "}\n"
        "Active --> [*]\n"
    )

    def test_sentinels_are_per_scope(self):
        gir = graph_of(self.SRC)
        assert gir.node_count() == 6
        for node_id in (START_STATE, END_STATE, f"Active/{START_STATE}", f"Active/{END_STATE}"):
            data = gir.node(node_id)
            assert data.shape == NodeShape.Circle
            assert data.label == "[*]"
        assert gir.node(f"Active/{START_STATE}").subgraph == "Active"

    def test_composite_membership(self):
        gir = graph_of(self.SRC)
        assert gir.node("Idle").subgraph == "Active"
        assert gir.node("Active").subgraph is None
        assert gir.subgraph_members == [("Active", ["Idle"])]

    def test_regions_have_their_own_sentinels(self):
        gir = graph_of("stateDiagram-v2\nstate X {\n[*] --> A\n--\n[*] --> B\n}\n")
        assert gir.node_count() == 5
        assert gir.out_degree(f"X/{START_STATE}") == 1
        assert gir.out_degree(f"X:2/{START_STATE}") == 1
        assert gir.node(f"X:2/{START_STATE}").subgraph == "X"
        assert gir.subgraph_members == [("X", ["A", "B"])]

    def test_choice_shape(self):
        gir = graph_of("stateDiagram-v2\nstate C <<choice>>\nA --> C\n")
        assert gir.node("C").shape == NodeShape.Diamond
        assert gir.node("A").shape == NodeShape.Rounded


class TestClassAndEr:
    def test_class_relations(self):
        gir = graph_of("classDiagram\nAnimal <|-- Duck : is\nclass Pond\n")
        assert gir.node_count() == 3
        [(u, v, data)] = edge_records(gir)
        assert (u, v) == ("Animal", "Duck")
        assert data == EdgeData("Inheritance", "is")

    def test_er_relationships(self):
        gir = graph_of("erDiagram\nCUSTOMER ||--o{ ORDER : places\nAUDIT\n")
        assert gir.node_count() == 3
        [(_, _, data)] = edge_records(gir)
        assert data.kind == "ExactlyOne-ZeroOrMore"
        assert data.label == "places"


@pytest.mark.parametrize("src", ["sequenceDiagram\nA->>B: hi\n", "gantt\nsection S\nT :1d\n"])
def test_non_graph_diagrams_rejected(src: str):
    with pytest.raises(TypeError):
        graph_of(src)
