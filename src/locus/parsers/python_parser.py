"""Python parser -- stdlib ``ast`` behind the Parser protocol."""

from __future__ import annotations

import ast
import logging
from typing import Iterable

from ..models import Diagnostic
from .base import CallSite, ParseResult

logger = logging.getLogger(__name__)


def _callee_name(func: ast.expr) -> str | None:
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute):
        return func.attr
    return None


class PythonTree:
    """SyntaxTree adapter over an ``ast.Module``."""

    def __init__(self, module: ast.Module) -> None:
        self._module = module

    @property
    def root(self) -> ast.Module:
        return self._module

    def children(self, node: ast.AST) -> Iterable[ast.AST]:
        return ast.iter_child_nodes(node)

    def call_site(self, node: ast.AST) -> CallSite | None:
        if not isinstance(node, ast.Call):
            return None
        name = _callee_name(node.func)
        if name is None:
            return None
        # Keyword arguments never carry the message id.
        return CallSite(
            callee=name,
            arguments=list(node.args),
            line=node.lineno,
            column=node.col_offset + 1,
        )

    def string_literal(self, node: ast.AST) -> str | None:
        # Implicitly concatenated literals arrive as a single Constant;
        # f-strings are JoinedStr and bytes are not str.
        if isinstance(node, ast.Constant) and isinstance(node.value, str):
            return node.value
        return None


class PythonParser:
    """Parses ``.py`` sources; syntax errors become diagnostics."""

    def parse(self, source: bytes | memoryview) -> ParseResult:
        data = bytes(source)
        try:
            module = ast.parse(data, type_comments=False)
        except SyntaxError as exc:
            return self._failed(exc.lineno, exc.offset, exc.msg)
        except (ValueError, RecursionError, MemoryError) as exc:
            # Null bytes and pathologically deep nesting.
            return self._failed(1, 1, str(exc) or type(exc).__name__)
        return ParseResult(tree=PythonTree(module))

    @staticmethod
    def _failed(line: int | None, column: int | None, message: str) -> ParseResult:
        diag = Diagnostic(line=max(line or 1, 1), column=max(column or 1, 1), message=message)
        logger.debug("Python syntax error at %d:%d: %s", diag.line, diag.column, message)
        empty = ast.Module(body=[], type_ignores=[])
        return ParseResult(tree=PythonTree(empty), diagnostics=[diag])
