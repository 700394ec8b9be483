"""Parser registry: split a document into diagrams and dispatch each one.

A diagram starts at a header line (``flowchart LR``, ``sequenceDiagram``,
...) that is either the first content line of the document or follows a
blank line. Each segment runs to the next such header and is tokenized with
document-absolute positions before its grammar parser sees it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from mermaid_ast.errors import UnknownDiagramType
from mermaid_ast.lexer import tokenize
from mermaid_ast.lexer.tokens import Position
from mermaid_ast.parsers.base import Parser, TokenCursor
from mermaid_ast.parsers.classdiagram import ClassDiagramParser
from mermaid_ast.parsers.er import ErParser
from mermaid_ast.parsers.flowchart import FlowchartParser
from mermaid_ast.parsers.gantt import GanttParser
from mermaid_ast.parsers.sequence import SequenceParser
from mermaid_ast.parsers.state import StateParser
from mermaid_ast.syntax.types import Diagram, Program
from mermaid_ast.types import DiagramKind

logger = logging.getLogger(__name__)

_HEADERS: dict[str, DiagramKind] = {
    "flowchart": DiagramKind.Flowchart,
    "graph": DiagramKind.Flowchart,
    "sequencediagram": DiagramKind.Sequence,
    "classdiagram": DiagramKind.Class,
    "classdiagram-v2": DiagramKind.Class,
    "erdiagram": DiagramKind.Er,
    "statediagram": DiagramKind.State,
    "statediagram-v2": DiagramKind.State,
    "gantt": DiagramKind.Gantt,
}

_HEADER_RE = re.compile(r"\s*(?P<word>[A-Za-z][\w-]*)(?:\s+(?P<arg>[A-Za-z]{2}))?\s*(?:;.*|%%.*)?")

_PARSERS: dict[DiagramKind, type[Parser]] = {
    DiagramKind.Flowchart: FlowchartParser,
    DiagramKind.Sequence: SequenceParser,
    DiagramKind.Class: ClassDiagramParser,
    DiagramKind.Er: ErParser,
    DiagramKind.State: StateParser,
    DiagramKind.Gantt: GanttParser,
}


@dataclass
class Segment:
    kind: DiagramKind
    text: str
    line: int
    offset: int


def header_kind(line: str) -> DiagramKind | None:
    """The dialect a header line opens, or None if it is not a header."""
    m = _HEADER_RE.fullmatch(line.rstrip("\r\n"))
    if m is None:
        return None
    kind = _HEADERS.get(m.group("word").lower())
    if kind is None or (m.group("arg") and kind is not DiagramKind.Flowchart):
        return None
    return kind


def _is_blank(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("%%")


def split_segments(src: str) -> list[Segment]:
    """Slice a document into one segment per diagram, in source order."""
    segments: list[Segment] = []
    current: tuple[DiagramKind, int, int] | None = None
    offset = 0
    previous_blank = True
    lines = src.splitlines(keepends=True)
    for lineno, line in enumerate(lines, start=1):
        kind = header_kind(line) if previous_blank else None
        if kind is not None:
            if current is not None:
                segments.append(_close(src, current, offset))
            current = (kind, lineno, offset)
        elif current is None and not _is_blank(line):
            raise UnknownDiagramType(
                f"expected a diagram header, found {line.strip()!r}",
                Position(line=lineno, column=len(line) - len(line.lstrip()), offset=offset),
            )
        previous_blank = _is_blank(line)
        offset += len(line)
    if current is None:
        raise UnknownDiagramType("no diagram header found", Position(line=len(lines) + 1, column=0, offset=offset))
    segments.append(_close(src, current, offset))
    return segments


def _close(src: str, current: tuple[DiagramKind, int, int], end: int) -> Segment:
    kind, line, start = current
    return Segment(kind=kind, text=src[start:end], line=line, offset=start)


def detect_type(src: str) -> DiagramKind:
    """Dialect of the first diagram in ``src``."""
    return split_segments(src)[0].kind


def parse_segment(segment: Segment) -> Diagram:
    tokens = tokenize(segment.text, segment.kind, segment.line, segment.offset)
    cursor = TokenCursor(tokens, segment.text, base=segment.offset)
    return _PARSERS[segment.kind]().parse(cursor)


def parse(src: str) -> Program:
    """Parse every diagram in ``src`` into a Program.

    Raises:
        ParseError: on the first malformed diagram; no partial result is returned.
    """
    program = Program()
    for segment in split_segments(src):
        logger.debug("parsing %s diagram at line %d", segment.kind.name, segment.line)
        program.diagrams.append(parse_segment(segment))
    return program
