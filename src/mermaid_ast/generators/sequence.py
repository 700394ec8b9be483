"""Sequence diagram generator."""

from __future__ import annotations

from typing import Union

from mermaid_ast.config import GeneratorConfig
from mermaid_ast.syntax.types import (
    Activation,
    Block,
    Message,
    Note,
    Participant,
    SequenceDiagram,
    SequenceStatement,
)


def message_text(msg: Message) -> str:
    mark = msg.activation.value if msg.activation is not None else ""
    text = f": {msg.text.raw}" if msg.text is not None else ""
    return f"{msg.source}{msg.arrow.value}{mark}{msg.target}{text}"


def _keyword_line(keyword: str, label: str | None) -> str:
    return f"{keyword} {label}" if label else keyword


def statement_text(stmt: SequenceStatement) -> str:
    """One-line form of any statement except a block."""
    if isinstance(stmt, Participant):
        alias = f" as {stmt.alias}" if stmt.alias else ""
        return f"{stmt.kind.value} {stmt.id}{alias}"
    if isinstance(stmt, Message):
        return message_text(stmt)
    if isinstance(stmt, Note):
        return f"note {stmt.placement.value} {','.join(stmt.participants)}: {stmt.text.raw}"
    if isinstance(stmt, Activation):
        return f"{'activate' if stmt.active else 'deactivate'} {stmt.participant}"
    raise TypeError(f"not a sequence statement: {stmt!r}")


# A pending item is either a finished line or a body still to be written.
_Pending = Union[str, tuple[list[SequenceStatement], int]]


def _emit(statements: list[SequenceStatement], lines: list[str], config: GeneratorConfig) -> None:
    pending: list[_Pending] = [(statements, 1)]
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            lines.append(item)
            continue
        body, depth = item
        pad = config.pad(depth)
        expanded: list[_Pending] = []
        for stmt in body:
            if isinstance(stmt, Block):
                expanded.append(pad + _keyword_line(stmt.kind.value, stmt.label))
                expanded.append((stmt.statements, depth + 1))
                for branch in stmt.branches:
                    expanded.append(pad + _keyword_line(stmt.kind.branch_keyword or "else", branch.label))
                    expanded.append((branch.statements, depth + 1))
                expanded.append(pad + "end")
            else:
                expanded.append(pad + statement_text(stmt))
        pending.extend(reversed(expanded))


def generate_sequence(diagram: SequenceDiagram, config: GeneratorConfig) -> str:
    lines = ["sequenceDiagram"]
    if diagram.autonumber:
        lines.append(config.pad(1) + "autonumber")
    _emit(diagram.statements, lines, config)
    return "\n".join(lines)
