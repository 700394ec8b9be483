"""Entity-relationship diagram parser.

Relationship notation is ``<left card><sep><right card>``, for example
``||--o{``. Cardinalities are read in either orientation on either side;
``--`` marks an identifying relationship and ``..`` a non-identifying one.
"""

from __future__ import annotations

import re

from mermaid_ast.errors import UnexpectedToken, UnrecognizedCardinality, UnterminatedBlock
from mermaid_ast.lexer.tokens import Position, Token, TokenKind
from mermaid_ast.parsers.base import TokenCursor, unquote
from mermaid_ast.syntax.types import Attribute, Entity, ErDiagram, Relationship
from mermaid_ast.types import AttributeKey, Cardinality, Identification

_RELATION_PARTS_RE = re.compile(r"(?P<left>[|o}{]{1,2})(?P<sep>--|\.\.)(?P<right>[|o}{]{1,2})")
_ATTRIBUTE_RE = re.compile(
    r"(?P<type>\S+)\s+(?P<name>\S+)(?:\s+(?P<key>PK|FK|UK))?(?:\s+\"(?P<comment>[^\"]*)\")?"
)

CARDINALITIES: dict[str, Cardinality] = {
    "|o": Cardinality.ZeroOrOne,
    "o|": Cardinality.ZeroOrOne,
    "||": Cardinality.ExactlyOne,
    "}o": Cardinality.ZeroOrMore,
    "o{": Cardinality.ZeroOrMore,
    "}|": Cardinality.OneOrMore,
    "|{": Cardinality.OneOrMore,
}

IDENTIFICATION: dict[str, Identification] = {
    "--": Identification.Identifying,
    "..": Identification.NonIdentifying,
}


def _cardinality(symbol: str, tok: Token) -> Cardinality:
    card = CARDINALITIES.get(symbol)
    if card is None:
        raise UnrecognizedCardinality(f"unrecognized cardinality {symbol!r} in {tok.text!r}", tok.start)
    return card


def parse_attribute(text: str, position: Position | None = None) -> Attribute:
    m = _ATTRIBUTE_RE.fullmatch(text.strip())
    if m is None:
        raise UnexpectedToken("attribute 'type name [PK|FK|UK] [\"comment\"]'", repr(text.strip()), position)
    key = m.group("key")
    return Attribute(
        type=m.group("type"),
        name=m.group("name"),
        key=AttributeKey(key) if key else None,
        comment=m.group("comment"),
    )


class ErParser:
    """Entity-relationship diagram parser."""

    def parse(self, cursor: TokenCursor) -> ErDiagram:
        self.cursor = cursor
        self.diagram = ErDiagram()
        cursor.skip_newlines()
        cursor.expect_word("erdiagram")
        cursor.end_statement()

        while not cursor.at_end():
            start = cursor.index
            if cursor.accept(TokenKind.Newline) or cursor.accept(TokenKind.Semicolon):
                continue
            name_tok = cursor.expect(TokenKind.Identifier, "entity name")
            if cursor.check(TokenKind.Relation):
                self.parse_relationship(name_tok)
            else:
                entity = self.get_or_create(name_tok)
                if cursor.accept(TokenKind.LBrace):
                    self.parse_entity_body(entity, name_tok)
                else:
                    cursor.end_statement()
            cursor.ensure_progress(start)
        return self.diagram

    def get_or_create(self, tok: Token) -> Entity:
        entity = self.diagram.entity(tok.text)
        if entity is None:
            entity = Entity(name=tok.text, position=tok.start)
            self.diagram.entities.append(entity)
        return entity

    def parse_entity_body(self, entity: Entity, name_tok: Token) -> None:
        cursor = self.cursor
        while True:
            start = cursor.index
            cursor.skip_newlines()
            if cursor.at_end():
                raise UnterminatedBlock("entity", name_tok.start, cursor.peek().start)
            if cursor.accept(TokenKind.RBrace):
                cursor.end_statement()
                return
            first = cursor.peek()
            entity.attributes.append(parse_attribute(cursor.raw_until(TokenKind.RBrace), first.start))
            if not cursor.check(TokenKind.RBrace):
                cursor.end_statement()
            cursor.ensure_progress(start)

    def parse_relationship(self, source_tok: Token) -> None:
        cursor = self.cursor
        rel_tok = cursor.advance()
        m = _RELATION_PARTS_RE.fullmatch(rel_tok.text)
        if m is None:
            raise UnexpectedToken("relationship notation", str(rel_tok), rel_tok.start)
        source_card = _cardinality(m.group("left"), rel_tok)
        target_card = _cardinality(m.group("right"), rel_tok)
        target_tok = cursor.expect(TokenKind.Identifier, "entity name")
        label: str | None = None
        if cursor.accept(TokenKind.Colon):
            text = cursor.accept(TokenKind.Text)
            label = unquote(text.text) if text else None
        cursor.end_statement()
        self.get_or_create(source_tok)
        self.get_or_create(target_tok)
        self.diagram.relationships.append(
            Relationship(
                source=source_tok.text,
                target=target_tok.text,
                source_cardinality=source_card,
                target_cardinality=target_card,
                identification=IDENTIFICATION[m.group("sep")],
                label=label or None,
                position=source_tok.start,
            )
        )
