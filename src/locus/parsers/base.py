"""Base protocols for source parsers and the trees they produce."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol, runtime_checkable

from ..models import Diagnostic


@dataclass
class CallSite:
    """A call expression as seen by the extraction visitor.

    ``callee`` is the called identifier (the last component for dotted
    calls); ``line`` and ``column`` are 1-based and point at the start of
    the call expression.
    """

    callee: str
    arguments: list[Any]
    line: int
    column: int


@runtime_checkable
class SyntaxTree(Protocol):
    """Grammar-specific view over a parsed tree.

    Implementations:
      - PythonTree     (stdlib ``ast`` nodes)
      - TreeSitterTree (tree-sitter nodes for JavaScript / TypeScript)
    """

    @property
    def root(self) -> Any:
        ...

    def children(self, node: Any) -> Iterable[Any]:
        """Direct children of *node*, in source order."""
        ...

    def call_site(self, node: Any) -> CallSite | None:
        """Describe *node* if it is a call with an identifiable callee."""
        ...

    def string_literal(self, node: Any) -> str | None:
        """Decoded text of *node* if it is a plain string literal."""
        ...


@dataclass
class ParseResult:
    """A tree (possibly empty) plus the syntax diagnostics for one file."""

    tree: SyntaxTree
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


@runtime_checkable
class Parser(Protocol):
    """Interface that every language parser must satisfy.

    ``parse`` must never raise on malformed input: problems are reported
    through ``ParseResult.diagnostics`` alongside whatever tree could be
    built.
    """

    def parse(self, source: bytes | memoryview) -> ParseResult:
        ...
