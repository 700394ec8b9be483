"""Error taxonomy for parsing and validation.

Every parse failure is a ParseError (a ValueError) carrying a short ``kind``
string, the bare message, and the source position where it was detected.
Parsing stops at the first error; there is no recovery.
"""

from __future__ import annotations

from enum import Enum

from mermaid_ast.lexer.tokens import Position


class ParseError(ValueError):
    kind = "parse_error"

    def __init__(self, message: str, position: Position | None = None) -> None:
        self.message = message
        self.position = position
        if position is not None:
            message = f"{message} at line {position.line}, column {position.column}"
        super().__init__(message)


class UnknownDiagramType(ParseError):
    kind = "unknown_diagram_type"


class UnexpectedToken(ParseError):
    kind = "unexpected_token"

    def __init__(self, expected: str, found: str, position: Position | None = None) -> None:
        self.expected = expected
        self.found = found
        super().__init__(f"expected {expected}, found {found}", position)


class UnterminatedBlock(ParseError):
    kind = "unterminated_block"

    def __init__(self, block: str, opened_at: Position | None, position: Position | None = None) -> None:
        self.block = block
        self.opened_at = opened_at
        where = f" opened at line {opened_at.line}" if opened_at is not None else ""
        super().__init__(f"unterminated {block} block{where}", position)


class InvalidIdentifier(ParseError):
    kind = "invalid_identifier"


class MalformedDuration(ParseError):
    kind = "malformed_duration"


class MalformedDate(ParseError):
    kind = "malformed_date"


class UnrecognizedCardinality(ParseError):
    kind = "unrecognized_cardinality"


# ─── Validation ──────────────────────────────────────────────────────────────


class ValidationCode(Enum):
    ReservedWord = "RESERVED_WORD"
    InvalidIdFormat = "INVALID_ID_FORMAT"
    NotFound = "NOT_FOUND"
    DuplicateId = "DUPLICATE_ID"
    CircularReference = "CIRCULAR_REFERENCE"


class ValidationError(ValueError):
    """Raised by the builder and validation layer when an edit is rejected."""

    def __init__(self, code: ValidationCode, message: str) -> None:
        self.code = code
        super().__init__(message)
