"""Tests for the grammar-independent extraction visitor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

import pytest

from locus.parsers.base import CallSite, SyntaxTree
from locus.visitor import ExtractionVisitor


@dataclass
class FakeNode:
    kind: str
    value: Any = None
    line: int = 1
    column: int = 1
    children: list["FakeNode"] = field(default_factory=list)


class FakeTree:
    """Minimal SyntaxTree: ``call`` nodes name their callee in ``value``."""

    def __init__(self, root: FakeNode) -> None:
        self._root = root

    @property
    def root(self) -> FakeNode:
        return self._root

    def children(self, node: FakeNode) -> Iterable[FakeNode]:
        return node.children

    def call_site(self, node: FakeNode) -> CallSite | None:
        if node.kind != "call":
            return None
        return CallSite(callee=node.value, arguments=node.children, line=node.line, column=node.column)

    def string_literal(self, node: FakeNode) -> str | None:
        return node.value if node.kind == "str" else None


def _call(callee: str, *args: FakeNode, line: int = 1, column: int = 1) -> FakeNode:
    return FakeNode("call", callee, line, column, list(args))


def test_fake_tree_satisfies_protocol():
    assert isinstance(FakeTree(FakeNode("root")), SyntaxTree)


def test_requires_markers():
    with pytest.raises(ValueError):
        ExtractionVisitor(markers=())


def test_results_sorted_by_position():
    root = FakeNode("root", children=[
        _call("__", FakeNode("str", "Second"), line=5),
        _call("__", FakeNode("str", "First"), line=2, column=7),
        _call("__", FakeNode("name", "x"), line=1),
    ])
    strings, warnings = ExtractionVisitor().extract(FakeTree(root), "f.src")
    assert [(s.line, s.message) for s in strings] == [(2, "First"), (5, "Second")]
    assert strings[0].column == 7
    assert len(warnings) == 1


def test_deep_nesting_does_not_recurse():
    # Far deeper than the interpreter's recursion limit.
    depth = 20_000
    leaf = _call("__", FakeNode("str", "Deep"), line=depth)
    node = leaf
    for i in range(depth):
        node = FakeNode("block", children=[node], line=depth - i)
    strings, _ = ExtractionVisitor().extract(FakeTree(node), "deep.src")
    assert [s.message for s in strings] == ["Deep"]
    assert strings[0].line == depth


def test_n_distinct_call_sites_yield_n_strings():
    calls = [_call("translate", FakeNode("str", f"msg {i}"), line=i + 1) for i in range(25)]
    strings, warnings = ExtractionVisitor().extract(FakeTree(FakeNode("root", children=calls)), "f.src")
    assert len(strings) == 25
    assert warnings == []
    assert [s.line for s in strings] == list(range(1, 26))


def test_lone_surrogate_becomes_warning():
    root = FakeNode("root", children=[
        _call("__", FakeNode("str", "\ud800 x"), line=1),
        _call("__", FakeNode("str", "Kept"), line=2),
    ])
    strings, warnings = ExtractionVisitor().extract(FakeTree(root), "f.src")
    assert [s.message for s in strings] == ["Kept"]
    assert [(str(w.location), w.reason) for w in warnings] == [("f.src:1:1", "invalid message")]
