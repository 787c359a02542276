"""Locus - gettext-style message extraction."""

from .catalog import MessageCatalog, build_template, render_template, write_template
from .errors import (  # noqa: F401 -- public re-exports
    ConfigError,
    InvalidRootError,
    LocusError,
    ParseErrorsFound,
    ShortReadError,
)
from .models import (  # noqa: F401 -- public re-exports
    CatalogEntry,
    Diagnostic,
    ExtractionWarning,
    Location,
    RunReport,
    RunState,
    TranslationString,
)
from .translation import TranslationContext, __, translate
from .walker import DirectoryWalker, WalkOptions, walk

__version__ = "0.1.0"

__all__ = [
    "DirectoryWalker",
    "MessageCatalog",
    "TranslationContext",
    "WalkOptions",
    "build_template",
    "render_template",
    "translate",
    "walk",
    "write_template",
    "CatalogEntry",
    "ExtractionWarning",
    "Location",
    "RunReport",
    "TranslationString",
]
