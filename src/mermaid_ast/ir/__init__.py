"""Intermediate representation: graph view of a diagram AST."""

from mermaid_ast.ir.graph import EdgeData, GraphIR, NodeData

__all__ = [
    "EdgeData",
    "GraphIR",
    "NodeData",
]
