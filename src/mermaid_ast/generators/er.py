"""Entity-relationship diagram generator.

Identification policy: identifying relationships use ``--`` and
non-identifying ones ``..``, matching the parser.
"""

from __future__ import annotations

import re

from mermaid_ast.config import GeneratorConfig
from mermaid_ast.syntax.types import Attribute, Entity, ErDiagram, Relationship
from mermaid_ast.types import Cardinality, Identification

LEFT_SYMBOLS: dict[Cardinality, str] = {
    Cardinality.ZeroOrOne: "|o",
    Cardinality.ExactlyOne: "||",
    Cardinality.ZeroOrMore: "}o",
    Cardinality.OneOrMore: "}|",
}

RIGHT_SYMBOLS: dict[Cardinality, str] = {
    Cardinality.ZeroOrOne: "o|",
    Cardinality.ExactlyOne: "||",
    Cardinality.ZeroOrMore: "o{",
    Cardinality.OneOrMore: "|{",
}

SEPARATORS: dict[Identification, str] = {
    Identification.Identifying: "--",
    Identification.NonIdentifying: "..",
}

_BARE_LABEL_RE = re.compile(r"[\w-]+")


def attribute_text(attr: Attribute) -> str:
    parts = [attr.type, attr.name]
    if attr.key is not None:
        parts.append(attr.key.value)
    if attr.comment is not None:
        parts.append(f'"{attr.comment}"')
    return " ".join(parts)


def relationship_text(rel: Relationship) -> str:
    notation = LEFT_SYMBOLS[rel.source_cardinality] + SEPARATORS[rel.identification] + RIGHT_SYMBOLS[rel.target_cardinality]
    text = f"{rel.source} {notation} {rel.target}"
    if rel.label:
        label = rel.label if _BARE_LABEL_RE.fullmatch(rel.label) else f'"{rel.label}"'
        text += f" : {label}"
    return text


def _entity_lines(entity: Entity, config: GeneratorConfig) -> list[str]:
    if not entity.attributes:
        return [config.pad(1) + entity.name]
    lines = [config.pad(1) + entity.name + " {"]
    lines.extend(config.pad(2) + attribute_text(a) for a in entity.attributes)
    lines.append(config.pad(1) + "}")
    return lines


def generate_er(diagram: ErDiagram, config: GeneratorConfig) -> str:
    lines = ["erDiagram"]
    for entity in diagram.entities:
        lines.extend(_entity_lines(entity, config))
    for rel in diagram.relationships:
        lines.append(config.pad(1) + relationship_text(rel))
    return "\n".join(lines)
