"""Runtime side of locus: the translation marker itself.

Lookup is identity for now: ``translate("Hello")`` returns ``"Hello"``.
A locale-driven lookup would plug in behind :meth:`TranslationContext.translate`.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_LOCALE = "en_US.UTF-8"


@dataclass(frozen=True)
class TranslationContext:
    """Explicit translation state, created once and passed where needed."""

    locale: str = DEFAULT_LOCALE

    def translate(self, msgid: str) -> str:
        return msgid

    __call__ = translate


def translate(msgid: str) -> str:
    """Mark *msgid* as translatable and return it unchanged."""
    return msgid


__ = translate
