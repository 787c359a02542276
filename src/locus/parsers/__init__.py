"""Parser capability -- routes files to the right parser by suffix."""

from __future__ import annotations

from pathlib import PurePath
from typing import Callable

from .base import CallSite, Parser, ParseResult, SyntaxTree

__all__ = [
    "CallSite",
    "Parser",
    "ParseResult",
    "ParserRegistry",
    "SyntaxTree",
    "default_registry",
]

ParserFactory = Callable[[], Parser]


class ParserRegistry:
    """Maps file suffixes to parser factories.

    Factories rather than instances are stored so that every worker can
    build parsers of its own.
    """

    def __init__(self) -> None:
        self._factories: dict[str, ParserFactory] = {}

    def register(self, suffix: str, factory: ParserFactory) -> None:
        """Register a parser factory for *suffix* (e.g. ``".py"``)."""
        self._factories[_normalize(suffix)] = factory

    def suffixes(self) -> list[str]:
        return sorted(self._factories)

    def recognizes(self, path: str | PurePath) -> bool:
        return _normalize(PurePath(path).suffix) in self._factories

    def create(self, suffix: str) -> Parser:
        """Instantiate a new parser for *suffix*; ``KeyError`` if unknown."""
        return self._factories[_normalize(suffix)]()


def _normalize(suffix: str) -> str:
    suffix = suffix.lower()
    if suffix and not suffix.startswith("."):
        suffix = "." + suffix
    return suffix


def default_registry() -> ParserRegistry:
    """Build a registry with all built-in parsers."""
    from .python_parser import PythonParser
    from .treesitter_parser import TreeSitterParser

    registry = ParserRegistry()
    for suffix in (".py", ".pyi"):
        registry.register(suffix, PythonParser)
    for suffix in (".js", ".mjs", ".cjs", ".jsx"):
        registry.register(suffix, lambda: TreeSitterParser("javascript"))
    for suffix in (".ts", ".mts", ".cts"):
        registry.register(suffix, lambda: TreeSitterParser("typescript"))
    registry.register(".tsx", lambda: TreeSitterParser("tsx"))
    return registry
