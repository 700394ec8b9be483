"""AST node types."""
