"""Sequence diagram parser.

Statements are read line by line in a single loop. Blocks (loop, alt, par,
...) push a frame on an explicit stack and ``end`` pops it, so nesting depth
never turns into Python recursion depth. Every loop iteration must consume at
least one token; the cursor checks this after each statement, whichever
branch handled it.
"""

from __future__ import annotations

from mermaid_ast.content import parse_content
from mermaid_ast.errors import UnexpectedToken, UnterminatedBlock
from mermaid_ast.lexer.tokens import TokenKind
from mermaid_ast.parsers.base import TokenCursor
from mermaid_ast.syntax.types import (
    Activation,
    Block,
    Branch,
    Message,
    Note,
    Participant,
    SequenceDiagram,
    SequenceStatement,
)
from mermaid_ast.types import ActivationMark, ArrowType, BlockKind, NotePosition, ParticipantKind

_BLOCK_KINDS: dict[str, BlockKind] = {k.value: k for k in BlockKind}
_BRANCH_WORDS = ("else", "and", "option")
_ARROWS: dict[str, ArrowType] = {a.value: a for a in ArrowType}
_NAME_KINDS = (TokenKind.Identifier, TokenKind.Number)

_Frame = tuple[Block | None, list[SequenceStatement]]


class SequenceParser:
    """Sequence diagram parser."""

    def parse(self, cursor: TokenCursor) -> SequenceDiagram:
        self.cursor = cursor
        self.diagram = SequenceDiagram()
        cursor.skip_newlines()
        cursor.expect_word("sequencediagram")
        cursor.end_statement()

        stack: list[_Frame] = [(None, self.diagram.statements)]
        while not cursor.at_end():
            start = cursor.index
            if cursor.accept(TokenKind.Newline):
                continue
            block, body = stack[-1]
            if self.at_keyword("end"):
                if block is None:
                    raise cursor.fail("statement")
                cursor.advance()
                cursor.end_statement()
                stack.pop()
            elif self.at_keyword(*_BRANCH_WORDS):
                stack[-1] = (block, self.parse_branch(block))
            elif self.at_keyword(*_BLOCK_KINDS):
                new_block = self.parse_block_header()
                body.append(new_block)
                stack.append((new_block, new_block.statements))
            else:
                body.extend(self.parse_statement())
            cursor.ensure_progress(start)

        if len(stack) > 1:
            open_block = stack[-1][0]
            assert open_block is not None
            raise UnterminatedBlock(open_block.kind.value, open_block.position, cursor.peek().start)
        return self.diagram

    def at_keyword(self, *words: str) -> bool:
        # "loop->>B: hi" is a message from a participant named loop
        return self.cursor.check_word(*words) and self.cursor.peek(1).kind is not TokenKind.Arrow

    # ─── Blocks ──────────────────────────────────────────────────────────────

    def parse_block_header(self) -> Block:
        cursor = self.cursor
        kw = cursor.advance()
        label = cursor.rest_of_line()
        cursor.end_statement()
        return Block(kind=_BLOCK_KINDS[kw.text.lower()], label=label or None, position=kw.start)

    def parse_branch(self, block: Block | None) -> list[SequenceStatement]:
        cursor = self.cursor
        kw = cursor.peek()
        word = kw.text.lower()
        if block is None:
            raise UnexpectedToken("statement", str(kw), kw.start)
        if block.kind.branch_keyword != word:
            expected = "'end'" if block.kind.branch_keyword is None else f"'{block.kind.branch_keyword}' or 'end'"
            raise UnexpectedToken(expected, str(kw), kw.start)
        cursor.advance()
        branch = Branch(label=cursor.rest_of_line() or None)
        cursor.end_statement()
        block.branches.append(branch)
        return branch.statements

    # ─── Statements ──────────────────────────────────────────────────────────

    def parse_statement(self) -> list[SequenceStatement]:
        cursor = self.cursor
        if cursor.check_word("participant", "actor") and cursor.peek(1).kind in _NAME_KINDS:
            return list(self.parse_participants())
        if cursor.check_word("autonumber") and cursor.peek(1).kind is not TokenKind.Arrow:
            cursor.advance()
            cursor.rest_of_line()
            cursor.end_statement()
            self.diagram.autonumber = True
            return []
        if cursor.check_word("activate", "deactivate") and cursor.peek(1).kind in _NAME_KINDS:
            kw = cursor.advance()
            name = self.expect_name()
            cursor.end_statement()
            self.register(name)
            return [Activation(participant=name, active=kw.text.lower() == "activate")]
        if cursor.check_word("note") and cursor.peek(1).kind is TokenKind.Identifier:
            return [self.parse_note()]
        return [self.parse_message()]

    def parse_participants(self) -> list[Participant]:
        cursor = self.cursor
        kw = cursor.advance()
        kind = ParticipantKind(kw.text.lower())
        declared: list[Participant] = []
        while True:
            name_tok = cursor.peek()
            name = self.expect_name()
            alias: str | None = None
            if cursor.accept_word("as"):
                alias = cursor.rest_of_line() or None
            declared.append(Participant(id=name, alias=alias, kind=kind, position=name_tok.start))
            self.register(name, kind, alias)
            if alias is not None:
                break
            if not (cursor.accept(TokenKind.Comma) or cursor.accept(TokenKind.Ampersand)):
                break
        cursor.end_statement()
        return declared

    def parse_note(self) -> Note:
        cursor = self.cursor
        kw = cursor.advance()
        if cursor.accept_word("over"):
            placement = NotePosition.Over
        elif cursor.check_word("left", "right"):
            side = cursor.advance().text.lower()
            cursor.expect_word("of")
            placement = NotePosition.LeftOf if side == "left" else NotePosition.RightOf
        else:
            raise cursor.fail("'left of', 'right of' or 'over'")
        participants = [self.expect_name()]
        while cursor.accept(TokenKind.Comma):
            participants.append(self.expect_name())
        cursor.expect(TokenKind.Colon, "':'")
        text = cursor.expect(TokenKind.Text, "note text")
        cursor.end_statement()
        for name in participants:
            self.register(name)
        return Note(placement, participants, parse_content(text.text), position=kw.start)

    def parse_message(self) -> Message:
        cursor = self.cursor
        first = cursor.peek()
        source = self.expect_name()
        arrow_tok = cursor.expect(TokenKind.Arrow, "message arrow")
        activation: ActivationMark | None = None
        if cursor.accept(TokenKind.Plus):
            activation = ActivationMark.Activate
        elif cursor.accept(TokenKind.Minus):
            activation = ActivationMark.Deactivate
        target = self.expect_name()
        text = None
        if cursor.accept(TokenKind.Colon):
            text_tok = cursor.accept(TokenKind.Text)
            text = parse_content(text_tok.text) if text_tok else None
        cursor.end_statement()
        self.register(source)
        self.register(target)
        return Message(source, target, _ARROWS[arrow_tok.text], text, activation, position=first.start)

    # ─── Helpers ─────────────────────────────────────────────────────────────

    def expect_name(self) -> str:
        cursor = self.cursor
        if cursor.check(*_NAME_KINDS):
            return cursor.advance().text
        raise cursor.fail("participant name")

    def register(self, name: str, kind: ParticipantKind | None = None, alias: str | None = None) -> None:
        """Materialize a participant at first reference; explicit declarations update it."""
        for p in self.diagram.participants:
            if p.id == name:
                if kind is not None:
                    p.kind = kind
                    p.alias = alias
                return
        self.diagram.participants.append(
            Participant(id=name, alias=alias, kind=kind or ParticipantKind.Participant)
        )

