"""Class diagram parser.

Class headers and relations are read from tokens. Member lines are free-form
(``+List~int~ items``, ``+area() double*``), so each one is taken as raw
source text and split with regular expressions.
"""

from __future__ import annotations

import re

from mermaid_ast.errors import UnexpectedToken, UnterminatedBlock
from mermaid_ast.lexer.tokens import Position, TokenKind
from mermaid_ast.parsers.base import TokenCursor, unquote
from mermaid_ast.syntax.types import ClassDefinition, ClassDiagram, Member, Relation
from mermaid_ast.types import Direction, MemberKind, RelationType, Visibility

_RELATIONS: dict[str, RelationType] = {r.value: r for r in RelationType}

_METHOD_RE = re.compile(
    r"(?:(?P<type>[^\s(]+)\s+)?(?P<name>[^\s(]+)\((?P<params>[^)]*)\)"
    r"(?P<mods1>[$*]*)(?:\s+(?P<ret>[^$*]+?))?(?P<mods2>[$*]*)"
)
_ATTRIBUTE_RE = re.compile(r"(?:(?P<type>\S+)\s+)?(?P<name>[^\s$*]+)(?P<mods>[$*]*)")


def parse_member(text: str, position: Position | None = None) -> Member:
    """Parse one member line such as ``+String name`` or ``+getName() String$``."""
    body = text.strip()
    visibility: Visibility | None = None
    if body[:1] in ("+", "-", "#", "~"):
        visibility = Visibility(body[0])
        body = body[1:].strip()

    if "(" in body:
        m = _METHOD_RE.fullmatch(body)
        if m is None or (m.group("type") and m.group("ret")):
            raise UnexpectedToken("method member", repr(text.strip()), position)
        mods = m.group("mods1") + m.group("mods2")
        return Member(
            name=m.group("name"),
            kind=MemberKind.Method,
            visibility=visibility,
            type=m.group("type") or m.group("ret"),
            parameters=m.group("params").strip(),
            is_static="$" in mods,
            is_abstract="*" in mods,
        )

    m = _ATTRIBUTE_RE.fullmatch(body)
    if m is None:
        raise UnexpectedToken("attribute member", repr(text.strip()), position)
    return Member(
        name=m.group("name"),
        visibility=visibility,
        type=m.group("type"),
        is_static="$" in m.group("mods"),
        is_abstract="*" in m.group("mods"),
    )


class ClassDiagramParser:
    """Class diagram parser."""

    def parse(self, cursor: TokenCursor) -> ClassDiagram:
        self.cursor = cursor
        self.diagram = ClassDiagram()
        cursor.skip_newlines()
        cursor.expect_word("classdiagram")
        if cursor.accept(TokenKind.Minus):
            cursor.expect_word("v2")
        cursor.end_statement()

        while not cursor.at_end():
            start = cursor.index
            if cursor.accept(TokenKind.Newline):
                continue
            if cursor.check_word("class") and cursor.peek(1).kind is TokenKind.Identifier:
                self.parse_class()
            elif cursor.check_word("direction") and cursor.peek(1).kind is TokenKind.Identifier:
                cursor.advance()
                tok = cursor.advance()
                direction = Direction.from_text(tok.text)
                if direction is None:
                    raise UnexpectedToken("direction", str(tok), tok.start)
                self.diagram.direction = direction
                cursor.end_statement()
            elif cursor.check(TokenKind.StereoOpen):
                annotation = self.parse_annotation()
                name_tok = cursor.expect(TokenKind.Identifier, "class name")
                self.get_or_create(name_tok.text, name_tok.start).annotation = annotation
                cursor.end_statement()
            elif cursor.check(TokenKind.Identifier) and cursor.peek(1).kind is TokenKind.Colon:
                name_tok = cursor.advance()
                cursor.advance()
                text = cursor.expect(TokenKind.Text, "member")
                cls = self.get_or_create(name_tok.text, name_tok.start)
                cls.members.append(parse_member(text.text, text.start))
                cursor.end_statement()
            elif cursor.check(TokenKind.Identifier):
                self.parse_relation()
            else:
                raise cursor.fail("class, relation or member")
            cursor.ensure_progress(start)
        return self.diagram

    def get_or_create(self, name: str, position: Position | None = None) -> ClassDefinition:
        cls = self.diagram.get_class(name)
        if cls is None:
            cls = ClassDefinition(name=name, position=position)
            self.diagram.classes.append(cls)
        return cls

    def parse_annotation(self) -> str:
        cursor = self.cursor
        cursor.expect(TokenKind.StereoOpen)
        name = cursor.expect(TokenKind.Identifier, "annotation").text
        cursor.expect(TokenKind.StereoClose, "'>>'")
        return name

    def parse_class(self) -> None:
        cursor = self.cursor
        kw = cursor.advance()
        name_tok = cursor.advance()
        cls = self.get_or_create(name_tok.text, name_tok.start)
        if cursor.accept(TokenKind.Tilde):
            generic = cursor.raw_until(TokenKind.Tilde)
            cursor.expect(TokenKind.Tilde, "closing '~'")
            if not generic:
                raise cursor.fail("generic type parameter")
            cls.generic = generic
        if cursor.check(TokenKind.StereoOpen):
            cls.annotation = self.parse_annotation()
        if not cursor.accept(TokenKind.LBrace):
            cursor.end_statement()
            return
        if cursor.accept(TokenKind.RBrace):
            cursor.end_statement()
            return
        cursor.end_statement()
        while True:
            start = cursor.index
            cursor.skip_newlines()
            if cursor.at_end():
                raise UnterminatedBlock("class", kw.start, cursor.peek().start)
            if cursor.accept(TokenKind.RBrace):
                cursor.end_statement()
                return
            if cursor.check(TokenKind.StereoOpen):
                cls.annotation = self.parse_annotation()
            else:
                first = cursor.peek()
                cls.members.append(parse_member(cursor.raw_until(TokenKind.RBrace), first.start))
            if not cursor.check(TokenKind.RBrace):
                cursor.end_statement()
            cursor.ensure_progress(start)

    def parse_relation(self) -> None:
        cursor = self.cursor
        source_tok = cursor.advance()
        source_card = self.accept_cardinality()
        rel_tok = cursor.expect(TokenKind.ClassRelation, "relation operator")
        relation = _RELATIONS.get(rel_tok.text)
        if relation is None:
            raise UnexpectedToken("relation operator", str(rel_tok), rel_tok.start)
        target_card = self.accept_cardinality()
        target_tok = cursor.expect(TokenKind.Identifier, "class name")
        label: str | None = None
        if cursor.accept(TokenKind.Colon):
            text = cursor.accept(TokenKind.Text)
            label = text.text if text else None
        cursor.end_statement()
        self.get_or_create(source_tok.text, source_tok.start)
        self.get_or_create(target_tok.text, target_tok.start)
        self.diagram.relations.append(
            Relation(
                source=source_tok.text,
                target=target_tok.text,
                relation=relation,
                source_cardinality=source_card,
                target_cardinality=target_card,
                label=label,
                position=source_tok.start,
            )
        )

    def accept_cardinality(self) -> str | None:
        tok = self.cursor.accept(TokenKind.String)
        return unquote(tok.text) if tok else None
