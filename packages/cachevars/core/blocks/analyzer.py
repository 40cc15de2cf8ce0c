"""Static scan of a block for the names it assigns.

The scan is purely syntactic: nothing is executed. Rules:

- ``x = ...``, ``x: T = ...``, ``x += ...`` and ``(x := ...)`` bind ``x``
- tuple/list/starred targets, ``for`` targets, ``with ... as`` targets and
  ``match`` capture patterns bind every name they contain
- bodies of ``if``/``for``/``while``/``with``/``try``/``match`` are plain
  sequencing and contribute all their bindings, at any depth
- ``with scope():`` bodies are reported too, even though at runtime a name
  first created inside the scope does not survive it (see ``scope``)
- comprehension loop variables stay local, but ``(x := ...)`` inside a
  comprehension binds ``x`` in the block
- ``def``, ``class``, ``lambda``, imports, ``del`` and ``except ... as e``
  bind nothing that is captured

Results keep first-assignment order with duplicates removed.
"""

from __future__ import annotations

import ast
import logging
import textwrap
from collections.abc import Sequence
from dataclasses import dataclass

from cachevars.core.errors import ArgumentError

logger = logging.getLogger(__name__)

BindingSet = tuple[str, ...]

SCOPE_MARKERS = frozenset({"scope"})

BLOCK_FILENAME = "<cachevars-block>"

Block = str | ast.Module | Sequence[ast.stmt]


def parse_block(block: Block, filename: str = BLOCK_FILENAME) -> ast.Module:
    """Turn a block (source text, module or statement list) into a module.

    Raises:
        ArgumentError: If block is not a sequence of statements
    """
    if isinstance(block, str):
        try:
            return ast.parse(textwrap.dedent(block), filename=filename, mode="exec")
        except SyntaxError as e:
            raise ArgumentError(
                f"Block is not valid Python source: {e.msg} (line {e.lineno})"
            ) from e

    if isinstance(block, ast.Module):
        # hand-built trees often lack line numbers, which compile() requires
        return ast.fix_missing_locations(block)

    if isinstance(block, Sequence) and all(isinstance(stmt, ast.stmt) for stmt in block):
        return ast.fix_missing_locations(ast.Module(body=list(block), type_ignores=[]))

    raise ArgumentError(
        "Expected a block of statements (source text, ast.Module or list of ast.stmt), "
        f"got {type(block).__name__}"
    )


def is_scoped_block(node: ast.With | ast.AsyncWith) -> bool:
    """True for ``with scope():`` (or ``with <mod>.scope(...):``)."""
    for item in node.items:
        expr = item.context_expr
        if not isinstance(expr, ast.Call):
            continue
        func = expr.func
        if isinstance(func, ast.Name) and func.id in SCOPE_MARKERS:
            return True
        if isinstance(func, ast.Attribute) and func.attr in SCOPE_MARKERS:
            return True
    return False


@dataclass(frozen=True)
class BindingReport:
    """Analyzer output.

    Attributes:
        names: All assigned names, first-assignment order
        scoped_only: Names only ever assigned inside ``scope()`` bodies;
            these are reported in ``names`` but may be unbound after a run
    """

    names: BindingSet
    scoped_only: BindingSet


class BindingAnalyzer(ast.NodeVisitor):
    """Collects assigned names from a block's syntax tree."""

    def __init__(self) -> None:
        self._names: dict[str, None] = {}
        self._scoped_only: dict[str, None] = {}
        self._scope_depth = 0

    def analyze(self, module: ast.Module) -> BindingReport:
        for stmt in module.body:
            self.visit(stmt)
        return BindingReport(names=tuple(self._names), scoped_only=tuple(self._scoped_only))

    def _bind(self, name: str) -> None:
        if self._scope_depth:
            if name not in self._names:
                self._scoped_only[name] = None
        else:
            self._scoped_only.pop(name, None)
        self._names.setdefault(name, None)

    def _bind_target(self, target: ast.expr) -> None:
        match target:
            case ast.Name(id=name):
                self._bind(name)
            case ast.Tuple(elts=elts) | ast.List(elts=elts):
                for elt in elts:
                    self._bind_target(elt)
            case ast.Starred(value=value):
                self._bind_target(value)
            case _:
                # attribute/subscript targets mutate, they don't bind
                self.visit(target)

    def _visit_body(self, body: list[ast.stmt]) -> None:
        for stmt in body:
            self.visit(stmt)

    # Assignments

    def visit_Assign(self, node: ast.Assign) -> None:
        self.visit(node.value)
        for target in node.targets:
            self._bind_target(target)

    def visit_AugAssign(self, node: ast.AugAssign) -> None:
        self.visit(node.value)
        self._bind_target(node.target)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        if node.value is not None:
            self.visit(node.value)
            self._bind_target(node.target)

    def visit_NamedExpr(self, node: ast.NamedExpr) -> None:
        # also covers show(j := 10)
        self.visit(node.value)
        self._bind_target(node.target)

    # Sequencing

    def visit_For(self, node: ast.For | ast.AsyncFor) -> None:
        self.visit(node.iter)
        self._bind_target(node.target)
        self._visit_body(node.body)
        self._visit_body(node.orelse)

    visit_AsyncFor = visit_For

    def visit_With(self, node: ast.With | ast.AsyncWith) -> None:
        scoped = is_scoped_block(node)
        for item in node.items:
            self.visit(item.context_expr)

        if scoped:
            self._scope_depth += 1
        try:
            for item in node.items:
                if item.optional_vars is not None:
                    self._bind_target(item.optional_vars)
            self._visit_body(node.body)
        finally:
            if scoped:
                self._scope_depth -= 1

    visit_AsyncWith = visit_With

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        # the "as" name is deleted when the handler exits
        if node.type is not None:
            self.visit(node.type)
        self._visit_body(node.body)

    # Match patterns

    def visit_MatchAs(self, node: ast.MatchAs) -> None:
        if node.pattern is not None:
            self.visit(node.pattern)
        if node.name is not None:
            self._bind(node.name)

    def visit_MatchStar(self, node: ast.MatchStar) -> None:
        if node.name is not None:
            self._bind(node.name)

    def visit_MatchMapping(self, node: ast.MatchMapping) -> None:
        self.generic_visit(node)
        if node.rest is not None:
            self._bind(node.rest)

    # Comprehensions: loop targets are local, walrus targets leak out

    def _visit_comprehension(
        self, node: ast.ListComp | ast.SetComp | ast.DictComp | ast.GeneratorExp
    ) -> None:
        for generator in node.generators:
            self.visit(generator.iter)
            for condition in generator.ifs:
                self.visit(condition)
        if isinstance(node, ast.DictComp):
            self.visit(node.key)
            self.visit(node.value)
        else:
            self.visit(node.elt)

    visit_ListComp = _visit_comprehension
    visit_SetComp = _visit_comprehension
    visit_DictComp = _visit_comprehension
    visit_GeneratorExp = _visit_comprehension

    # Deferred bodies and own scopes

    def _skip(self, node: ast.AST) -> None:
        pass

    visit_FunctionDef = _skip
    visit_AsyncFunctionDef = _skip
    visit_ClassDef = _skip
    visit_Lambda = _skip


def analyze_block(block: Block) -> BindingReport:
    """Parse and analyze a block."""
    return BindingAnalyzer().analyze(parse_block(block))


def assigned_names(block: Block) -> BindingSet:
    """
    Return the names a block assigns, in first-assignment order.

    Example:
        >>> assigned_names("x = [1, 2, 3]\\ny = 4\\n'final'")
        ('x', 'y')
    """
    return analyze_block(block).names


def describe_names(names: BindingSet) -> str:
    """Human-readable summary of a binding set."""
    if not names:
        return "No variable assignments found"
    return f"Variable assignments found: {', '.join(names)}"
