"""Gantt date handling and schedule resolution.

Mermaid gantt charts spell dates with dayjs-style formats (``YYYY-MM-DD``).
This module converts those formats for ``datetime.strptime``/``strftime``
and resolves every task of a chart to concrete start and end datetimes.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime

import networkx as nx

from mermaid_ast.errors import MalformedDate, ValidationCode, ValidationError
from mermaid_ast.lexer.tokens import Position
from mermaid_ast.syntax.types import AfterStart, DateStart, Duration, EndDate, GanttDiagram, Task

logger = logging.getLogger(__name__)

_DAYJS_TOKENS: dict[str, str] = {
    "YYYY": "%Y",
    "YY": "%y",
    "MMMM": "%B",
    "MMM": "%b",
    "MM": "%m",
    "M": "%m",
    "DD": "%d",
    "D": "%d",
    "HH": "%H",
    "H": "%H",
    "hh": "%I",
    "mm": "%M",
    "ss": "%S",
    "A": "%p",
}
_DAYJS_RE = re.compile("|".join(sorted(_DAYJS_TOKENS, key=len, reverse=True)))


def strptime_format(date_format: str) -> str:
    """Translate a dayjs format string into a strptime/strftime one."""
    return _DAYJS_RE.sub(lambda m: _DAYJS_TOKENS[m.group(0)], date_format.replace("%", "%%"))


def parse_date(text: str, date_format: str, position: Position | None = None) -> datetime:
    try:
        return datetime.strptime(text.strip(), strptime_format(date_format))
    except ValueError:
        raise MalformedDate(f"date {text.strip()!r} does not match format {date_format!r}", position) from None


def format_date(value: datetime, date_format: str) -> str:
    return value.strftime(strptime_format(date_format))


# ─── Schedule ────────────────────────────────────────────────────────────────


@dataclass
class ScheduledTask:
    task: Task
    start: datetime
    end: datetime


def dependency_graph(gantt: GanttDiagram) -> nx.DiGraph:
    """Directed graph with an edge from each ``after`` dependency to its dependent task."""
    graph: nx.DiGraph = nx.DiGraph()
    for task in gantt.tasks():
        if task.id is not None:
            graph.add_node(task.id)
            if isinstance(task.start, AfterStart):
                for dep in task.start.task_ids:
                    graph.add_edge(dep, task.id)
    return graph


def resolve_schedule(gantt: GanttDiagram) -> list[ScheduledTask]:
    """Compute concrete start and end times for every task, in chart order.

    A task without a start follows the previous task. ``after`` starts at the
    latest end among the named tasks. Raises ValidationError when the first
    task has no start or a dependency cannot be resolved.
    """
    ends: dict[str, datetime] = {}
    scheduled: list[ScheduledTask] = []
    previous_end: datetime | None = None
    for task in gantt.tasks():
        if isinstance(task.start, DateStart):
            start = task.start.value
        elif isinstance(task.start, AfterStart):
            missing = [dep for dep in task.start.task_ids if dep not in ends]
            if missing:
                raise ValidationError(
                    ValidationCode.NotFound,
                    f"task {task.name!r} depends on unknown or later task(s) {', '.join(missing)}",
                )
            start = max(ends[dep] for dep in task.start.task_ids)
        elif previous_end is not None:
            start = previous_end
        else:
            raise ValidationError(ValidationCode.NotFound, f"task {task.name!r} has no start and no previous task")

        if isinstance(task.end, Duration):
            end = start + task.end.to_timedelta()
        else:
            assert isinstance(task.end, EndDate)
            end = task.end.value

        logger.debug("scheduled %s: %s -> %s", task.name, start, end)
        scheduled.append(ScheduledTask(task=task, start=start, end=end))
        if task.id is not None:
            ends[task.id] = end
        previous_end = end
    return scheduled
