"""Tree-sitter parser for JavaScript and TypeScript sources.

Tree-sitter never rejects input: malformed regions show up as ``ERROR``
or missing nodes, which are reported here as diagnostics.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from tree_sitter import Language, Node, Parser

from ..models import Diagnostic
from .base import CallSite, ParseResult

logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------
# Grammar loaders
# --------------------------------------------------------------------------

def _load_grammar(language: str) -> Language:
    """Load the tree-sitter grammar for *language*."""
    if language == "javascript":
        import tree_sitter_javascript
        return Language(tree_sitter_javascript.language())
    if language == "typescript":
        import tree_sitter_typescript
        return Language(tree_sitter_typescript.language_typescript())
    if language == "tsx":
        import tree_sitter_typescript
        return Language(tree_sitter_typescript.language_tsx())
    raise ValueError(f"No tree-sitter grammar for language {language!r}")


# Languages are immutable and safe to share; parsers are not.
_grammar_cache: dict[str, Language] = {}


def _get_grammar(language: str) -> Language:
    if language not in _grammar_cache:
        _grammar_cache[language] = _load_grammar(language)
    return _grammar_cache[language]


# --------------------------------------------------------------------------
# JavaScript string literal decoding
# --------------------------------------------------------------------------

_JS_ESCAPE_RE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|[0-7]{1,3}|\r\n|[\s\S])"
)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}

_LINE_CONTINUATIONS = {"\n", "\r", "\r\n", "\u2028", "\u2029"}


def _replace_escape(match: re.Match[str]) -> str:
    esc = match.group(1)
    if esc.startswith("u{"):
        code = int(esc[2:-1], 16)
        return chr(code) if code <= 0x10FFFF else match.group(0)
    if esc[0] == "u" and len(esc) == 5:
        return chr(int(esc[1:], 16))
    if esc[0] == "x" and len(esc) == 3:
        return chr(int(esc[1:], 16))
    if esc[0] in "01234567":
        return chr(int(esc, 8))
    if esc in _LINE_CONTINUATIONS:
        return ""
    return _SIMPLE_ESCAPES.get(esc, esc)


def unescape_js(body: str) -> str:
    """Resolve JavaScript escape sequences in a literal's body."""
    text = _JS_ESCAPE_RE.sub(_replace_escape, body)
    # Join surrogate pairs written as two \uXXXX escapes.
    try:
        return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le")
    except UnicodeDecodeError:
        return text


def _node_text(node: Node) -> str:
    return (node.text or b"").decode("utf-8", errors="replace")


# --------------------------------------------------------------------------
# Tree adapter
# --------------------------------------------------------------------------

class TreeSitterTree:
    """SyntaxTree adapter over a tree-sitter tree."""

    def __init__(self, root: Node) -> None:
        self._root = root

    @property
    def root(self) -> Node:
        return self._root

    def children(self, node: Node) -> Iterable[Node]:
        return node.children

    def call_site(self, node: Node) -> CallSite | None:
        if node.type != "call_expression":
            return None
        func = node.child_by_field_name("function")
        args = node.child_by_field_name("arguments")
        if func is None or args is None:
            return None

        if func.type == "identifier":
            callee = _node_text(func)
        elif func.type == "member_expression":
            prop = func.child_by_field_name("property")
            if prop is None:
                return None
            callee = _node_text(prop)
        else:
            return None

        if args.type == "template_string":
            # Tagged template: __`Hello`
            arguments = [args]
        else:
            arguments = [c for c in args.named_children if c.type != "comment"]

        row, col = node.start_point
        return CallSite(callee=callee, arguments=arguments, line=row + 1, column=col + 1)

    def string_literal(self, node: Node) -> str | None:
        if node.type == "string":
            return unescape_js(_node_text(node)[1:-1])
        if node.type == "template_string":
            if any(c.type == "template_substitution" for c in node.children):
                return None
            return unescape_js(_node_text(node)[1:-1])
        return None


def collect_diagnostics(root: Node) -> list[Diagnostic]:
    """Report every outermost ``ERROR`` node and every missing node."""
    diagnostics: list[Diagnostic] = []
    if not root.has_error:
        return diagnostics

    stack = [root]
    while stack:
        node = stack.pop()
        row, col = node.start_point
        if node.is_error:
            snippet = _node_text(node).split("\n", 1)[0][:40]
            diagnostics.append(Diagnostic(
                line=row + 1, column=col + 1, message=f"syntax error near {snippet!r}",
            ))
            continue
        if node.is_missing:
            diagnostics.append(Diagnostic(
                line=row + 1, column=col + 1, message=f"missing {node.type!r}",
            ))
            continue
        stack.extend(c for c in node.children if c.has_error)

    diagnostics.sort(key=lambda d: (d.line, d.column))
    return diagnostics


class TreeSitterParser:
    """Parses JavaScript / TypeScript sources with tree-sitter."""

    SUPPORTED: frozenset[str] = frozenset({"javascript", "typescript", "tsx"})

    def __init__(self, language: str) -> None:
        if language not in self.SUPPORTED:
            raise ValueError(f"Unsupported tree-sitter language: {language!r}")
        self.language = language
        self._parser = Parser(_get_grammar(language))

    def parse(self, source: bytes | memoryview) -> ParseResult:
        tree = self._parser.parse(bytes(source))
        diagnostics = collect_diagnostics(tree.root_node)
        if diagnostics:
            logger.debug("%s parse produced %d diagnostic(s)", self.language, len(diagnostics))
        return ParseResult(tree=TreeSitterTree(tree.root_node), diagnostics=diagnostics)
