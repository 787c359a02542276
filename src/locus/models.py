"""Pydantic models for locus's extraction pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .errors import ParseErrorsFound


# ---------------------------------------------------------------------------
# Shared primitives
# ---------------------------------------------------------------------------

class Location(BaseModel):
    """Points back to a call site in the scanned tree (1-based)."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    line: int = Field(ge=1)
    column: int = Field(ge=1)

    def sort_key(self) -> tuple[str, int, int]:
        return (self.file_path, self.line, self.column)

    def __str__(self) -> str:
        return f"{self.file_path}:{self.line}:{self.column}"


class Diagnostic(BaseModel):
    """A syntax problem reported by a parser."""

    line: int = Field(ge=1)
    column: int = Field(ge=1)
    message: str


# ---------------------------------------------------------------------------
# Extraction output
# ---------------------------------------------------------------------------

class TranslationString(BaseModel):
    """One translatable literal found at a marker call site."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    line: int = Field(ge=1)
    column: int = Field(ge=1)
    message: str = Field(min_length=1)

    @property
    def location(self) -> Location:
        return Location(file_path=self.file_path, line=self.line, column=self.column)


class ExtractionWarning(BaseModel):
    """A marker call that could not be turned into a catalog message."""

    model_config = ConfigDict(frozen=True)

    location: Location
    reason: str  # "non-literal argument" | "missing argument" | "empty message"

    def __str__(self) -> str:
        return f"{self.location}: {self.reason}"


class CatalogEntry(BaseModel):
    """A unique message id and every place it was marked."""

    message: str
    locations: list[Location] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Run report
# ---------------------------------------------------------------------------

class RunState(str, Enum):
    clean = "clean"
    dirty = "dirty"


class FileError(BaseModel):
    """A per-file (or per-directory) failure recorded during a walk."""

    path: str
    kind: Literal["io", "parse"]
    message: str


class RunReport(BaseModel):
    """Counters and failures aggregated over one walk.

    ``state`` moves from ``clean`` to ``dirty`` on the first parse error and
    never back.
    """

    files_seen: int = 0
    files_skipped: int = 0
    files_with_errors: set[str] = Field(default_factory=set)
    state: RunState = RunState.clean
    errors: list[FileError] = Field(default_factory=list)
    warnings: list[ExtractionWarning] = Field(default_factory=list)
    cancelled: bool = False

    @computed_field
    @property
    def had_parse_errors(self) -> bool:
        return self.state is RunState.dirty

    def record_io_error(self, path: str, exc: BaseException) -> None:
        self.files_with_errors.add(path)
        self.errors.append(FileError(path=path, kind="io", message=str(exc)))

    def record_parse_errors(self, path: str, diagnostics: list[Diagnostic]) -> None:
        self.files_with_errors.add(path)
        for diag in diagnostics:
            self.errors.append(FileError(
                path=path,
                kind="parse",
                message=f"{diag.line}:{diag.column}: {diag.message}",
            ))
        self.state = RunState.dirty

    def succeeded(self, ignore_parse_errors: bool = False) -> bool:
        """Whether the run counts as a success for the given strictness."""
        if self.cancelled:
            return False
        return ignore_parse_errors or not self.had_parse_errors

    def raise_for_status(self, ignore_parse_errors: bool = False) -> None:
        if not ignore_parse_errors and self.had_parse_errors:
            raise ParseErrorsFound(self)

    def finalize(self) -> None:
        """Put collections into a stable order once the walk is over."""
        self.errors.sort(key=lambda e: (e.path, e.kind, e.message))
        self.warnings.sort(key=lambda w: w.location.sort_key())
