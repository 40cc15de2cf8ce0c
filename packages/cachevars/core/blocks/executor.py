"""Compile and run blocks in a caller-supplied namespace."""

from __future__ import annotations

import ast
from dataclasses import dataclass
from types import CodeType
from typing import Any

from cachevars.core.errors import ArgumentError

from .analyzer import BLOCK_FILENAME


@dataclass(frozen=True)
class CompiledBlock:
    """A block split into its statements and its trailing expression.

    Attributes:
        body: Code for every statement except a trailing expression
        final: Code evaluating the trailing expression, or None if the
            block does not end with an expression statement
    """

    body: CodeType
    final: CodeType | None


def compile_block(module: ast.Module, filename: str = BLOCK_FILENAME) -> CompiledBlock:
    """Compile a parsed block; a trailing expression becomes its value.

    Raises:
        ArgumentError: If the tree cannot be compiled (malformed nodes)
    """
    statements = list(module.body)
    final_expr: ast.Expression | None = None
    if statements and isinstance(statements[-1], ast.Expr):
        final_expr = ast.Expression(body=statements.pop().value)

    try:
        body = compile(ast.Module(body=statements, type_ignores=[]), filename, "exec")
        final = compile(final_expr, filename, "eval") if final_expr is not None else None
    except (TypeError, ValueError, SyntaxError) as e:
        raise ArgumentError(f"Block could not be compiled: {e}") from e
    return CompiledBlock(body=body, final=final)


def execute_block(compiled: CompiledBlock, namespace: dict[str, Any]) -> Any:
    """Run a compiled block with namespace as its globals and return its value."""
    exec(compiled.body, namespace)
    if compiled.final is None:
        return None
    return eval(compiled.final, namespace)
