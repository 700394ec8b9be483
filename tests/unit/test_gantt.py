"""Tests for the gantt parser and date helpers."""

from datetime import datetime

import pytest

from mermaid_ast import generate, parse
from mermaid_ast.errors import InvalidIdentifier, MalformedDate, MalformedDuration, UnexpectedToken
from mermaid_ast.gantt import format_date, parse_date, strptime_format
from mermaid_ast.syntax.types import AfterStart, DateStart, Duration, EndDate, GanttDiagram
from mermaid_ast.types import DurationUnit, TaskStatus


def gantt(body: str, date_format: str = "YYYY-MM-DD") -> GanttDiagram:
    diagram = parse(f"gantt\ndateFormat {date_format}\n{body}").diagrams[0]
    assert isinstance(diagram, GanttDiagram)
    return diagram


def test_duration_task_end_date():
    src = "gantt\ndateFormat YYYY-MM-DD\nsection Plan\nTask 1 :task1, 2024-01-01, 5d"
    program = parse(src)
    task = program.diagrams[0].sections[0].tasks[0]
    assert task.name == "Task 1"
    assert task.id == "task1"
    assert task.start == DateStart(datetime(2024, 1, 1))
    assert task.end == Duration(5, DurationUnit.Days)
    assert task.end_date == datetime(2024, 1, 6)
    assert parse(generate(program)) == program


def test_config_directives():
    diagram = parse(
        "gantt\n"
        "title Launch plan\n"
        "dateFormat YYYY-MM-DD\n"
        "axisFormat %m/%d\n"
        "excludes weekends\n"
        "todayMarker off\n"
    ).diagrams[0]
    cfg = diagram.config
    assert cfg.title == "Launch plan"
    assert cfg.axis_format == "%m/%d"
    assert cfg.excludes == "weekends"
    assert cfg.today_marker == "off"
    assert diagram.sections == []


def test_default_date_format():
    diagram = parse("gantt\nsection S\nA :2024-03-01, 1d\n").diagrams[0]
    assert diagram.config.date_format == "YYYY-MM-DD"
    assert diagram.sections[0].tasks[0].start == DateStart(datetime(2024, 3, 1))


def test_positional_metadata():
    diagram = gantt("section S\nOne :2d\nTwo :2024-01-01, 2024-01-03\nThree :t3, 2024-01-05, 1w\n")
    one, two, three = diagram.sections[0].tasks
    assert one.start is None and one.id is None
    assert one.end == Duration(2, DurationUnit.Days)
    assert two.start == DateStart(datetime(2024, 1, 1))
    assert two.end == EndDate(datetime(2024, 1, 3))
    assert three.id == "t3"
    assert three.end == Duration(1, DurationUnit.Weeks)


def test_status_and_after():
    diagram = gantt("section S\nA :done, a1, 2024-01-01, 3d\nB :crit, after a1, 12h\nC :milestone, m1, after a1, 0d\n")
    a, b, c = diagram.sections[0].tasks
    assert a.status == TaskStatus.Done
    assert b.status == TaskStatus.Crit
    assert b.start == AfterStart(["a1"])
    assert b.end == Duration(12, DurationUnit.Hours)
    assert c.status == TaskStatus.Milestone
    assert c.end == Duration(0, DurationUnit.Days)


def test_after_several_tasks():
    diagram = gantt("section S\nA :a, 2024-01-01, 1d\nB :b, 2024-01-02, 1d\nC :after a b, 1d\n")
    assert diagram.sections[0].tasks[2].start == AfterStart(["a", "b"])


def test_sections_keep_order():
    diagram = gantt("section First\nA :1d\nsection Second phase\nB :1d\n")
    assert [s.name for s in diagram.sections] == ["First", "Second phase"]


def test_custom_date_format():
    diagram = gantt("section S\nA :01/02/2024, 2d\n", date_format="DD/MM/YYYY")
    assert diagram.sections[0].tasks[0].start == DateStart(datetime(2024, 2, 1))


@pytest.mark.parametrize("end", ["5x", "1.5d", "2m"])
def test_malformed_duration(end: str):
    with pytest.raises(MalformedDuration):
        gantt(f"section S\nA :2024-01-01, {end}\n")


def test_malformed_duration_position():
    with pytest.raises(MalformedDuration) as exc:
        gantt("section S\nA :2024-01-01, 5x\n")
    assert exc.value.position.line == 4


def test_malformed_date():
    with pytest.raises(MalformedDate):
        gantt("section S\nA :2024-13-01, 2d\n")


def test_after_unknown_task():
    with pytest.raises(InvalidIdentifier):
        gantt("section S\nA :after nope, 2d\n")


def test_after_later_task_is_rejected():
    with pytest.raises(InvalidIdentifier):
        gantt("section S\nA :after b, 1d\nB :b, 2024-01-01, 1d\n")


def test_invalid_task_id():
    with pytest.raises(InvalidIdentifier):
        gantt("section S\nA :9lives, 2024-01-01, 1d\n")


def test_two_statuses_rejected():
    with pytest.raises(UnexpectedToken):
        gantt("section S\nA :done, crit, 2024-01-01, 2d\n")


def test_too_many_parts():
    with pytest.raises(UnexpectedToken):
        gantt("section S\nA :a, 2024-01-01, 2024-01-02, 2d\n")


def test_task_before_section():
    with pytest.raises(UnexpectedToken):
        gantt("A :1d\n")


def test_directive_needs_value():
    with pytest.raises(UnexpectedToken):
        parse("gantt\ntitle\n")


# ─── Dates ───────────────────────────────────────────────────────────────────


def test_strptime_format():
    assert strptime_format("YYYY-MM-DD") == "%Y-%m-%d"
    assert strptime_format("DD.MM.YY HH:mm") == "%d.%m.%y %H:%M"


def test_date_helpers_are_inverse():
    value = parse_date("2024-02-29 13:05", "YYYY-MM-DD HH:mm")
    assert value == datetime(2024, 2, 29, 13, 5)
    assert format_date(value, "YYYY-MM-DD HH:mm") == "2024-02-29 13:05"
