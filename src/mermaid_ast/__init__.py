"""mermaid-ast: parse Mermaid diagram text into an AST and regenerate it."""

from mermaid_ast.config import GeneratorConfig
from mermaid_ast.content import Content, ContentKind, extract_text
from mermaid_ast.errors import (
    InvalidIdentifier,
    MalformedDate,
    MalformedDuration,
    ParseError,
    UnexpectedToken,
    UnknownDiagramType,
    UnrecognizedCardinality,
    UnterminatedBlock,
    ValidationCode,
    ValidationError,
)
from mermaid_ast.generators import generate
from mermaid_ast.parsers import detect_type, parse
from mermaid_ast.syntax.types import Program


def roundtrip(src: str, config: GeneratorConfig | None = None) -> str:
    """Parse ``src`` and return its canonical regeneration.

    Raises:
        ParseError: If the input cannot be parsed.
    """
    return generate(parse(src), config)


__all__ = [
    "Content",
    "ContentKind",
    "GeneratorConfig",
    "InvalidIdentifier",
    "MalformedDate",
    "MalformedDuration",
    "ParseError",
    "Program",
    "UnexpectedToken",
    "UnknownDiagramType",
    "UnrecognizedCardinality",
    "UnterminatedBlock",
    "ValidationCode",
    "ValidationError",
    "detect_type",
    "extract_text",
    "generate",
    "parse",
    "roundtrip",
]
