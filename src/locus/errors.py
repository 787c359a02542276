"""Exception hierarchy for locus."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import RunReport


class LocusError(Exception):
    """Base class for every error raised by locus."""


class ConfigError(LocusError):
    """Raised when ``locus.toml`` or ``[tool.locus]`` cannot be used."""


class InvalidRootError(LocusError, OSError):
    """The directory to scan is missing, unreadable, or not a directory."""


class ShortReadError(LocusError, OSError):
    """A file yielded fewer bytes than its size reported at stat time."""


class ParseErrorsFound(LocusError):
    """Raised after a complete walk when strict mode saw any parse error.

    The full :class:`~locus.models.RunReport` is attached so callers can
    still enumerate the failing files.
    """

    def __init__(self, report: RunReport) -> None:
        self.report = report
        failing = ", ".join(sorted(report.files_with_errors)) or "<none>"
        super().__init__(f"parse errors found in: {failing}")
