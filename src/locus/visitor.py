"""Extraction visitor -- finds marker calls and pulls out their messages."""

from __future__ import annotations

import logging
from typing import Iterable

from .models import ExtractionWarning, Location, TranslationString
from .parsers.base import CallSite, SyntaxTree

logger = logging.getLogger(__name__)

DEFAULT_MARKERS: tuple[str, ...] = ("__", "translate")

NON_LITERAL = "non-literal argument"
MISSING_ARGUMENT = "missing argument"
EMPTY_MESSAGE = "empty message"
INVALID_MESSAGE = "invalid message"


class ExtractionVisitor:
    """Walks a SyntaxTree and collects translatable strings.

    Traversal uses an explicit stack, so arbitrarily deep trees never touch
    the interpreter's recursion limit.  Only the first argument of a marker
    call is the message id; any further arguments are ignored.  Marker calls
    nested inside other marker calls are visited on their own.
    """

    def __init__(self, markers: Iterable[str] = DEFAULT_MARKERS) -> None:
        self.markers = frozenset(markers)
        if not self.markers:
            raise ValueError("at least one marker name is required")

    def extract(
        self, tree: SyntaxTree, file_path: str
    ) -> tuple[list[TranslationString], list[ExtractionWarning]]:
        strings: list[TranslationString] = []
        warnings: list[ExtractionWarning] = []

        stack = [tree.root]
        while stack:
            node = stack.pop()
            call = tree.call_site(node)
            if call is not None and call.callee in self.markers:
                self._visit_marker(tree, call, file_path, strings, warnings)
            children = list(tree.children(node))
            children.reverse()
            stack.extend(children)

        strings.sort(key=lambda s: (s.line, s.column))
        warnings.sort(key=lambda w: (w.location.line, w.location.column))
        logger.debug(
            "%s: %d message(s), %d warning(s)", file_path, len(strings), len(warnings)
        )
        return strings, warnings

    def _visit_marker(
        self,
        tree: SyntaxTree,
        call: CallSite,
        file_path: str,
        strings: list[TranslationString],
        warnings: list[ExtractionWarning],
    ) -> None:
        location = Location(file_path=file_path, line=call.line, column=call.column)

        if not call.arguments:
            warnings.append(ExtractionWarning(location=location, reason=MISSING_ARGUMENT))
            return

        message = tree.string_literal(call.arguments[0])
        if message is None:
            warnings.append(ExtractionWarning(location=location, reason=NON_LITERAL))
        elif not message:
            warnings.append(ExtractionWarning(location=location, reason=EMPTY_MESSAGE))
        elif not _encodable(message):
            # Lone surrogates such as "\ud800" have no UTF-8 form.
            warnings.append(ExtractionWarning(location=location, reason=INVALID_MESSAGE))
        else:
            strings.append(TranslationString(
                file_path=file_path,
                line=call.line,
                column=call.column,
                message=message,
            ))


def _encodable(message: str) -> bool:
    try:
        message.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True
