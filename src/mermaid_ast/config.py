"""Centralized configuration for mermaid-ast."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class GeneratorConfig:
    """Configuration for the code generators."""

    indent: str = "    "

    def pad(self, depth: int) -> str:
        return self.indent * depth
