"""State diagram parser.

``[*]`` is the start pseudostate when it is a transition source and the end
pseudostate when it is a target; the two map to the distinct ids START_STATE
and END_STATE within each scope. Composite states open a scope on an
explicit stack and ``}`` closes it; inside one, a ``--`` line starts a further
concurrent region. State ids are unique across the whole
diagram: a reference from any scope resolves to the state already declared.
"""

from __future__ import annotations

from dataclasses import dataclass

from mermaid_ast.content import parse_content
from mermaid_ast.errors import UnexpectedToken, UnterminatedBlock
from mermaid_ast.lexer.tokens import Token, TokenKind
from mermaid_ast.parsers.base import TokenCursor, unquote
from mermaid_ast.syntax.types import (
    END_STATE,
    START_STATE,
    State,
    StateDiagram,
    StateNote,
    StateRegion,
    Transition,
)
from mermaid_ast.types import Direction, NotePosition, StateKind

_STATE_KINDS: dict[str, StateKind] = {
    "choice": StateKind.Choice,
    "fork": StateKind.Fork,
    "join": StateKind.Join,
}


@dataclass
class _Scope:
    owner: State | None
    states: list[State]
    transitions: list[Transition]
    notes: list[StateNote]


class StateParser:
    """State diagram parser (stateDiagram and stateDiagram-v2)."""

    def parse(self, cursor: TokenCursor) -> StateDiagram:
        self.cursor = cursor
        self.diagram = StateDiagram()
        self.index: dict[str, State] = {}
        self.parse_header()

        diagram = self.diagram
        self.stack = [_Scope(None, diagram.states, diagram.transitions, diagram.notes)]
        while not cursor.at_end():
            start = cursor.index
            if cursor.accept(TokenKind.Newline) or cursor.accept(TokenKind.Semicolon):
                continue
            if cursor.check(TokenKind.RBrace):
                if len(self.stack) == 1:
                    raise cursor.fail("statement")
                cursor.advance()
                cursor.end_statement()
                self.stack.pop()
            elif cursor.check_word("state") and cursor.peek(1).kind in (TokenKind.Identifier, TokenKind.String):
                self.parse_state_declaration()
            elif cursor.check_word("note") and cursor.check_word("left", "right", ahead=1):
                self.parse_note()
            elif cursor.check_word("direction") and cursor.peek(1).kind is TokenKind.Identifier:
                cursor.advance()
                tok = cursor.advance()
                direction = Direction.from_text(tok.text)
                if direction is None:
                    raise UnexpectedToken("direction", str(tok), tok.start)
                owner = self.stack[-1].owner
                if owner is None:
                    diagram.direction = direction
                else:
                    owner.direction = direction
                cursor.end_statement()
            elif cursor.check(TokenKind.RegionSeparator):
                self.parse_region_separator()
            elif cursor.check(TokenKind.Pseudostate) or cursor.peek(1).kind is TokenKind.Transition:
                self.parse_transition()
            elif cursor.check(TokenKind.Identifier):
                tok = cursor.advance()
                state = self.declare(tok)
                if cursor.accept(TokenKind.Colon):
                    state.label = parse_content(cursor.expect(TokenKind.Text, "state description").text)
                cursor.end_statement()
            else:
                raise cursor.fail("state, transition or note")
            cursor.ensure_progress(start)

        if len(self.stack) > 1:
            owner = self.stack[-1].owner
            assert owner is not None
            raise UnterminatedBlock("state", owner.position, cursor.peek().start)
        return diagram

    def parse_header(self) -> None:
        cursor = self.cursor
        cursor.skip_newlines()
        tok = cursor.expect(TokenKind.Identifier, "'stateDiagram'")
        header = tok.text.lower()
        if header == "statediagram":
            self.diagram.version = "v1"
        elif header == "statediagram-v2":
            self.diagram.version = "v2"
        else:
            raise UnexpectedToken("'stateDiagram' or 'stateDiagram-v2'", str(tok), tok.start)
        cursor.end_statement()

    def declare(self, tok: Token) -> State:
        """Resolve a state id, creating it in the current scope at first reference."""
        state = self.index.get(tok.text)
        if state is None:
            state = State(id=tok.text, position=tok.start)
            self.index[tok.text] = state
            self.stack[-1].states.append(state)
        return state

    def parse_state_declaration(self) -> None:
        cursor = self.cursor
        cursor.advance()
        label = None
        if cursor.check(TokenKind.String):
            label = unquote(cursor.advance().text)
            cursor.expect_word("as")
        state = self.declare(cursor.expect(TokenKind.Identifier, "state id"))
        if label is not None:
            state.label = parse_content(label)
        if cursor.accept(TokenKind.StereoOpen):
            kind_tok = cursor.expect(TokenKind.Identifier, "'choice', 'fork' or 'join'")
            kind = _STATE_KINDS.get(kind_tok.text.lower())
            if kind is None:
                raise UnexpectedToken("'choice', 'fork' or 'join'", str(kind_tok), kind_tok.start)
            cursor.expect(TokenKind.StereoClose, "'>>'")
            state.kind = kind
        if cursor.accept(TokenKind.Colon):
            state.label = parse_content(cursor.expect(TokenKind.Text, "state description").text)
        if cursor.accept(TokenKind.LBrace):
            if state.children is None:
                state.children = []
            self.stack.append(_Scope(state, state.children, state.transitions, state.notes))
        cursor.end_statement()

    def parse_region_separator(self) -> None:
        """Start the next concurrent region of the enclosing composite state."""
        cursor = self.cursor
        owner = self.stack[-1].owner
        if owner is None:
            raise cursor.fail("state, transition or note")
        cursor.advance()
        cursor.end_statement()
        region = StateRegion()
        owner.regions.append(region)
        self.stack[-1] = _Scope(owner, region.states, region.transitions, region.notes)

    def parse_transition(self) -> None:
        cursor = self.cursor
        first = cursor.peek()
        if cursor.accept(TokenKind.Pseudostate):
            source = START_STATE
        else:
            source = self.declare(cursor.expect(TokenKind.Identifier, "state id")).id
        cursor.expect(TokenKind.Transition, "'-->'")
        if cursor.accept(TokenKind.Pseudostate):
            target = END_STATE
        else:
            target = self.declare(cursor.expect(TokenKind.Identifier, "state id")).id
        label = None
        if cursor.accept(TokenKind.Colon):
            text = cursor.accept(TokenKind.Text)
            label = parse_content(text.text) if text else None
        cursor.end_statement()
        self.stack[-1].transitions.append(Transition(source, target, label, position=first.start))

    def parse_note(self) -> None:
        cursor = self.cursor
        kw = cursor.advance()
        side = cursor.advance().text.lower()
        cursor.expect_word("of")
        state = self.declare(cursor.expect(TokenKind.Identifier, "state id"))
        placement = NotePosition.LeftOf if side == "left" else NotePosition.RightOf
        if cursor.accept(TokenKind.Colon):
            text = cursor.expect(TokenKind.Text, "note text").text
            cursor.end_statement()
        else:
            cursor.end_statement()
            lines: list[str] = []
            while not (cursor.check_word("end") and cursor.check_word("note", ahead=1)):
                if cursor.at_end():
                    raise UnterminatedBlock("note", kw.start, cursor.peek().start)
                lines.append(cursor.rest_of_line())
                cursor.end_statement()
            cursor.advance()
            cursor.advance()
            cursor.end_statement()
            text = "\n".join(lines)
        self.stack[-1].notes.append(StateNote(state.id, placement, parse_content(text)))
