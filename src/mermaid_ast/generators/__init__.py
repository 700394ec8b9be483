"""Generator registry: turn an AST back into canonical Mermaid text.

Output is canonical rather than a reproduction of the input: comments and
original spacing are gone, but parsing the output yields an equal AST.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from mermaid_ast.config import GeneratorConfig
from mermaid_ast.generators.classdiagram import generate_class
from mermaid_ast.generators.er import generate_er
from mermaid_ast.generators.flowchart import generate_flowchart
from mermaid_ast.generators.gantt import generate_gantt
from mermaid_ast.generators.sequence import generate_sequence
from mermaid_ast.generators.state import generate_state
from mermaid_ast.syntax.types import (
    ClassDiagram,
    Diagram,
    ErDiagram,
    FlowchartDiagram,
    GanttDiagram,
    Program,
    SequenceDiagram,
    StateDiagram,
)

_GENERATORS: dict[type, Callable[[Any, GeneratorConfig], str]] = {
    FlowchartDiagram: generate_flowchart,
    SequenceDiagram: generate_sequence,
    ClassDiagram: generate_class,
    ErDiagram: generate_er,
    StateDiagram: generate_state,
    GanttDiagram: generate_gantt,
}


def generate_diagram(diagram: Diagram, config: GeneratorConfig | None = None) -> str:
    """Canonical text for one diagram, without a trailing newline."""
    generator = _GENERATORS.get(type(diagram))
    if generator is None:
        raise TypeError(f"cannot generate {type(diagram).__name__}")
    return generator(diagram, config or GeneratorConfig())


def generate(program: Program, config: GeneratorConfig | None = None) -> str:
    """Canonical text for a whole program; diagrams are separated by a blank line."""
    config = config or GeneratorConfig()
    if not program.diagrams:
        return ""
    return "\n\n".join(generate_diagram(d, config) for d in program.diagrams) + "\n"
