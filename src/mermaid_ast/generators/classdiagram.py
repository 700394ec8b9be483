"""Class diagram generator.

Classes are emitted first, in registry order, so that a reparse registers
them in the same order; relations follow. A class body is written only when
the class has members or an annotation, and cardinalities are always quoted.
"""

from __future__ import annotations

from mermaid_ast.config import GeneratorConfig
from mermaid_ast.syntax.types import ClassDefinition, ClassDiagram, Member, Relation
from mermaid_ast.types import MemberKind


def member_text(member: Member) -> str:
    vis = member.visibility.value if member.visibility is not None else ""
    type_prefix = f"{member.type} " if member.type else ""
    mods = ("$" if member.is_static else "") + ("*" if member.is_abstract else "")
    if member.kind is MemberKind.Method:
        return f"{vis}{type_prefix}{member.name}({member.parameters or ''}){mods}"
    return f"{vis}{type_prefix}{member.name}{mods}"


def relation_text(rel: Relation) -> str:
    parts = [rel.source]
    if rel.source_cardinality is not None:
        parts.append(f'"{rel.source_cardinality}"')
    parts.append(rel.relation.value)
    if rel.target_cardinality is not None:
        parts.append(f'"{rel.target_cardinality}"')
    parts.append(rel.target)
    text = " ".join(parts)
    if rel.label:
        text += f" : {rel.label}"
    return text


def _class_lines(cls: ClassDefinition, config: GeneratorConfig) -> list[str]:
    header = f"class {cls.name}"
    if cls.generic:
        header += f"~{cls.generic}~"
    if not cls.members and not cls.annotation:
        return [config.pad(1) + header]
    lines = [config.pad(1) + header + " {"]
    if cls.annotation:
        lines.append(config.pad(2) + f"<<{cls.annotation}>>")
    lines.extend(config.pad(2) + member_text(m) for m in cls.members)
    lines.append(config.pad(1) + "}")
    return lines


def generate_class(diagram: ClassDiagram, config: GeneratorConfig) -> str:
    lines = ["classDiagram"]
    if diagram.direction is not None:
        lines.append(config.pad(1) + f"direction {diagram.direction.name}")
    for cls in diagram.classes:
        lines.extend(_class_lines(cls, config))
    for rel in diagram.relations:
        lines.append(config.pad(1) + relation_text(rel))
    return "\n".join(lines)
