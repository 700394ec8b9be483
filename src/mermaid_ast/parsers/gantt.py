"""Gantt chart parser.

Config directives take the rest of their line as value. Task lines are
``Name : [status,] [id,] [start,] end`` where the comma-separated metadata is
read positionally: one part is the end, two are start and end, three are id,
start and end.
"""

from __future__ import annotations

import re

from mermaid_ast.errors import InvalidIdentifier, MalformedDuration, UnexpectedToken
from mermaid_ast.gantt import parse_date
from mermaid_ast.lexer.tokens import Position, TokenKind
from mermaid_ast.parsers.base import TokenCursor
from mermaid_ast.syntax.types import (
    AfterStart,
    DateStart,
    Duration,
    EndDate,
    GanttConfig,
    GanttDiagram,
    Section,
    Task,
    TaskEnd,
    TaskStart,
)
from mermaid_ast.types import DurationUnit, TaskStatus

_DURATION_RE = re.compile(r"(\d+)([dwh])")
_DURATION_LIKE_RE = re.compile(r"\d+(?:\.\d+)?[A-Za-z]+")
_TASK_ID_RE = re.compile(r"[A-Za-z_][\w-]*")
_STATUSES: dict[str, TaskStatus] = {s.value: s for s in TaskStatus}

_DIRECTIVES: dict[str, str] = {
    "title": "title",
    "dateformat": "date_format",
    "axisformat": "axis_format",
    "excludes": "excludes",
    "todaymarker": "today_marker",
}


class GanttParser:
    """Gantt chart parser."""

    def parse(self, cursor: TokenCursor) -> GanttDiagram:
        self.cursor = cursor
        self.diagram = GanttDiagram()
        self.known_ids: set[str] = set()
        cursor.skip_newlines()
        cursor.expect_word("gantt")
        cursor.end_statement()

        section: Section | None = None
        while not cursor.at_end():
            start = cursor.index
            if cursor.accept(TokenKind.Newline):
                continue
            tok = cursor.peek()
            word = tok.text.lower() if tok.kind is TokenKind.Identifier else ""
            if word in _DIRECTIVES and cursor.peek(1).kind is not TokenKind.Colon:
                cursor.advance()
                value = cursor.rest_of_line()
                if not value:
                    raise cursor.fail(f"value for {tok.text}")
                setattr(self.diagram.config, _DIRECTIVES[word], value)
            elif word == "section" and cursor.peek(1).kind is not TokenKind.Colon:
                cursor.advance()
                section = Section(name=cursor.rest_of_line())
                if not section.name:
                    raise cursor.fail("section name")
                self.diagram.sections.append(section)
            else:
                name = cursor.raw_until(TokenKind.Colon)
                if not name:
                    raise cursor.fail("task name")
                cursor.expect(TokenKind.Colon, "':' after task name")
                meta = cursor.expect(TokenKind.Text, "task metadata")
                if section is None:
                    raise UnexpectedToken("'section' before first task", repr(name), tok.start)
                section.tasks.append(self.parse_task(name, meta.text, tok.start, meta.start))
            cursor.end_statement()
            cursor.ensure_progress(start)
        return self.diagram

    @property
    def config(self) -> GanttConfig:
        return self.diagram.config

    def parse_task(self, name: str, meta: str, position: Position, meta_position: Position) -> Task:
        parts = [p.strip() for p in meta.split(",")]
        status: TaskStatus | None = None
        while parts and parts[0].lower() in _STATUSES:
            if status is not None:
                raise UnexpectedToken("task start or duration", repr(parts[0]), meta_position)
            status = _STATUSES[parts.pop(0).lower()]

        task_id: str | None = None
        start_text: str | None = None
        if len(parts) == 1:
            end_text = parts[0]
        elif len(parts) == 2:
            start_text, end_text = parts
        elif len(parts) == 3:
            task_id, start_text, end_text = parts
        else:
            raise UnexpectedToken("'[id,] [start,] end'", repr(meta), meta_position)

        if task_id is not None:
            if not _TASK_ID_RE.fullmatch(task_id):
                raise InvalidIdentifier(f"invalid task id {task_id!r}", meta_position)
        start = self.parse_start(start_text, meta_position) if start_text is not None else None
        end = self.parse_end(end_text, meta_position)
        if task_id is not None:
            self.known_ids.add(task_id)
        return Task(name=name, end=end, id=task_id, status=status, start=start, position=position)

    def parse_start(self, text: str, position: Position) -> TaskStart:
        words = text.split()
        if words and words[0].lower() == "after":
            ids = words[1:]
            if not ids:
                raise InvalidIdentifier("'after' needs at least one task id", position)
            for dep in ids:
                if dep not in self.known_ids:
                    raise InvalidIdentifier(f"'after' references undeclared task {dep!r}", position)
            return AfterStart(task_ids=ids)
        return DateStart(parse_date(text, self.config.date_format, position))

    def parse_end(self, text: str, position: Position) -> TaskEnd:
        m = _DURATION_RE.fullmatch(text)
        if m:
            return Duration(amount=int(m.group(1)), unit=DurationUnit(m.group(2)))
        if _DURATION_LIKE_RE.fullmatch(text):
            raise MalformedDuration(f"duration {text!r} is not <integer><d|w|h>", position)
        if not text:
            raise MalformedDuration("missing task duration or end date", position)
        return EndDate(parse_date(text, self.config.date_format, position))
