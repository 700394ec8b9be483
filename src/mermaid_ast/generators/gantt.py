"""Gantt chart generator.

``dateFormat`` is always written so that dates reparse under the format they
were read with.
"""

from __future__ import annotations

from mermaid_ast.config import GeneratorConfig
from mermaid_ast.gantt import format_date
from mermaid_ast.syntax.types import AfterStart, DateStart, Duration, GanttDiagram, Task


def task_text(task: Task, date_format: str) -> str:
    parts: list[str] = []
    if task.status is not None:
        parts.append(task.status.value)
    if isinstance(task.start, AfterStart):
        start = "after " + " ".join(task.start.task_ids)
    elif isinstance(task.start, DateStart):
        start = format_date(task.start.value, date_format)
    else:
        start = None
    # An id is only positional when a start follows it.
    if start is not None:
        if task.id is not None:
            parts.append(task.id)
        parts.append(start)
    if isinstance(task.end, Duration):
        parts.append(f"{task.end.amount}{task.end.unit.value}")
    else:
        parts.append(format_date(task.end.value, date_format))
    return f"{task.name} : {', '.join(parts)}"


def generate_gantt(diagram: GanttDiagram, config: GeneratorConfig) -> str:
    cfg = diagram.config
    lines = ["gantt"]
    if cfg.title:
        lines.append(config.pad(1) + f"title {cfg.title}")
    lines.append(config.pad(1) + f"dateFormat {cfg.date_format}")
    if cfg.axis_format:
        lines.append(config.pad(1) + f"axisFormat {cfg.axis_format}")
    if cfg.excludes:
        lines.append(config.pad(1) + f"excludes {cfg.excludes}")
    if cfg.today_marker:
        lines.append(config.pad(1) + f"todayMarker {cfg.today_marker}")
    for section in diagram.sections:
        lines.append(config.pad(1) + f"section {section.name}")
        lines.extend(config.pad(2) + task_text(t, cfg.date_format) for t in section.tasks)
    return "\n".join(lines)
