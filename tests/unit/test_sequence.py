"""Tests for the sequence diagram parser."""

import pytest

from mermaid_ast import parse
from mermaid_ast.errors import UnexpectedToken, UnterminatedBlock
from mermaid_ast.syntax.types import Activation, Block, Message, Note, Participant, SequenceDiagram
from mermaid_ast.transform import block_depth
from mermaid_ast.types import ActivationMark, ArrowType, BlockKind, NotePosition, ParticipantKind


def sequence(body: str) -> SequenceDiagram:
    diagram = parse("sequenceDiagram\n" + body).diagrams[0]
    assert isinstance(diagram, SequenceDiagram)
    return diagram


class TestMessages:
    def test_simple_message(self):
        diagram = sequence("Alice->>John: Hello John, how are you?\n")
        msg = diagram.statements[0]
        assert isinstance(msg, Message)
        assert (msg.source, msg.target) == ("Alice", "John")
        assert msg.arrow == ArrowType.SolidArrow
        assert msg.text.raw == "Hello John, how are you?"

    def test_self_message(self):
        diagram = sequence("A->>A: text\n")
        msg = diagram.statements[0]
        assert msg.source == msg.target == "A"
        assert [p.id for p in diagram.participants] == ["A"]

    @pytest.mark.parametrize("arrow", list(ArrowType))
    def test_every_arrow(self, arrow: ArrowType):
        diagram = sequence(f"A{arrow.value}B: x\n")
        assert diagram.statements[0].arrow == arrow

    def test_activation_marks(self):
        diagram = sequence("A->>+B: start\nB-->>-A: done\n")
        assert diagram.statements[0].activation == ActivationMark.Activate
        assert diagram.statements[1].activation == ActivationMark.Deactivate

    def test_message_without_text(self):
        diagram = sequence("A->>B\n")
        assert diagram.statements[0].text is None

    def test_missing_arrow(self):
        with pytest.raises(UnexpectedToken) as exc:
            sequence("A B: hi\n")
        assert exc.value.expected == "message arrow"


class TestParticipants:
    def test_implicit_participants_in_order(self):
        diagram = sequence("Alice->>John: hi\nJohn->>Bob: hi\nBob->>Alice: hi\n")
        assert [p.id for p in diagram.participants] == ["Alice", "John", "Bob"]
        assert not any(isinstance(s, Participant) for s in diagram.statements)

    def test_declared_participant_with_alias(self):
        diagram = sequence("participant A as Alice the Great\nactor B\n")
        a, b = diagram.statements
        assert a.alias == "Alice the Great"
        assert b.kind == ParticipantKind.Actor
        assert diagram.participants[1].kind == ParticipantKind.Actor

    def test_participant_list(self):
        diagram = sequence("participant A, B & C\n")
        assert [p.id for p in diagram.statements] == ["A", "B", "C"]

    def test_late_declaration_updates_registry(self):
        diagram = sequence("A->>B: hi\nactor B as Bob\n")
        assert [p.id for p in diagram.participants] == ["A", "B"]
        assert diagram.participants[1].alias == "Bob"
        assert diagram.participants[1].kind == ParticipantKind.Actor

    def test_keyword_named_participant(self):
        diagram = sequence("loop->>end: hi\n")
        msg = diagram.statements[0]
        assert (msg.source, msg.target) == ("loop", "end")


class TestNotesAndActivation:
    def test_note_positions(self):
        diagram = sequence("Note left of A: one\nnote right of A: two\nNote over A,B: three\n")
        notes = diagram.statements
        assert all(isinstance(n, Note) for n in notes)
        assert [n.placement for n in notes] == [NotePosition.LeftOf, NotePosition.RightOf, NotePosition.Over]
        assert notes[2].participants == ["A", "B"]
        assert notes[2].text.raw == "three"

    def test_note_requires_text(self):
        with pytest.raises(UnexpectedToken):
            sequence("Note over A\n")

    def test_activate_deactivate(self):
        diagram = sequence("activate A\ndeactivate A\n")
        assert diagram.statements == [Activation("A", True), Activation("A", False)]

    def test_autonumber(self):
        diagram = sequence("autonumber\nA->>B: hi\n")
        assert diagram.autonumber is True
        assert len(diagram.statements) == 1


class TestBlocks:
    def test_loop(self):
        diagram = sequence("loop Every minute\nA->>B: ping\nend\n")
        block = diagram.statements[0]
        assert isinstance(block, Block)
        assert block.kind == BlockKind.Loop
        assert block.label == "Every minute"
        assert len(block.statements) == 1

    def test_alt_inside_loop(self):
        diagram = sequence(
            "loop retry\n"
            "  alt ok\n"
            "    A->>B: yes\n"
            "  else failed\n"
            "    A->>B: no\n"
            "  end\n"
            "end\n"
        )
        loop = diagram.statements[0]
        alt = loop.statements[0]
        assert alt.kind == BlockKind.Alt
        assert alt.label == "ok"
        assert len(alt.statements) == 1
        assert len(alt.branches) == 1
        assert alt.branches[0].label == "failed"
        assert len(alt.branches[0].statements) == 1
        assert block_depth(diagram) == 2

    def test_par_and_critical_branches(self):
        diagram = sequence(
            "par one\nA->>B: 1\nand two\nA->>C: 2\nand three\nA->>D: 3\nend\n"
            "critical db\nA->>B: q\noption timeout\nA->>A: retry\nend\n"
        )
        par, critical = diagram.statements
        assert [b.label for b in par.branches] == ["two", "three"]
        assert critical.branches[0].label == "timeout"

    def test_box_groups_participants(self):
        diagram = sequence("box Aqua Group\nparticipant A\nparticipant B\nend\nA->>B: hi\n")
        box = diagram.statements[0]
        assert isinstance(box, Block)
        assert box.kind == BlockKind.Box
        assert box.label == "Aqua Group"
        assert [p.id for p in box.statements] == ["A", "B"]
        assert box.branches == []

    def test_box_has_no_branches(self):
        with pytest.raises(UnexpectedToken):
            sequence("box\nparticipant A\nelse\nend\n")

    def test_block_without_label(self):
        diagram = sequence("opt\nA->>B: maybe\nend\n")
        assert diagram.statements[0].label is None

    def test_wrong_branch_keyword(self):
        with pytest.raises(UnexpectedToken):
            sequence("loop x\nA->>B: hi\nelse y\nend\n")

    def test_branch_outside_block(self):
        with pytest.raises(UnexpectedToken):
            sequence("else nope\n")

    def test_unterminated_loop(self):
        with pytest.raises(UnterminatedBlock) as exc:
            sequence("A->>B: hi\nloop forever\nA->>B: again\n")
        assert exc.value.block == "loop"
        assert exc.value.opened_at.line == 3

    def test_stray_end(self):
        with pytest.raises(UnexpectedToken):
            sequence("A->>B: hi\nend\n")

    def test_deep_nesting(self):
        depth = 1500
        diagram = sequence("loop x\n" * depth + "A->>B: deep\n" + "end\n" * depth)
        assert block_depth(diagram) == depth
