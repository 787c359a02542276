"""Directory walker -- drives scratch buffer, parser and visitor per file.

Failures are contained at file granularity: an unreadable file or
directory, or a file with syntax errors, is recorded in the
:class:`~locus.models.RunReport` and the walk carries on.  Whether the run
as a whole failed is only decided once every file has been visited.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Iterator

from pydantic import BaseModel, Field, field_validator

from .buffer import ScratchBuffer
from .catalog import MessageCatalog
from .errors import InvalidRootError
from .models import Diagnostic, ExtractionWarning, RunReport, TranslationString
from .parsers import Parser, ParserRegistry, default_registry
from .visitor import DEFAULT_MARKERS, ExtractionVisitor

logger = logging.getLogger(__name__)


class WalkOptions(BaseModel):
    """Knobs for a single walk."""

    extensions: tuple[str, ...] = (".py",)
    markers: tuple[str, ...] = DEFAULT_MARKERS
    ignore_parse_errors: bool = False
    skip_dirs: frozenset[str] = frozenset()
    workers: int = Field(default=1, ge=1)

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value)

    @field_validator("markers")
    @classmethod
    def require_markers(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("at least one marker name is required")
        return value


# ---------------------------------------------------------------------------
# Per-file processing
# ---------------------------------------------------------------------------

@dataclass
class FileOutcome:
    """Everything one file contributed (or why it contributed nothing)."""

    path: str
    strings: list[TranslationString] = field(default_factory=list)
    warnings: list[ExtractionWarning] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    error: OSError | None = None


class FileProcessor:
    """One file-processing unit: a scratch buffer, parsers, and a visitor.

    Never shared between threads; each worker builds its own.
    """

    def __init__(self, registry: ParserRegistry, markers: tuple[str, ...] = DEFAULT_MARKERS) -> None:
        self._registry = registry
        self._buffer = ScratchBuffer()
        self._parsers: dict[str, Parser] = {}
        self._visitor = ExtractionVisitor(markers)

    def _parser_for(self, suffix: str) -> Parser:
        suffix = suffix.lower()
        if suffix not in self._parsers:
            self._parsers[suffix] = self._registry.create(suffix)
        return self._parsers[suffix]

    def process(self, abs_path: Path, rel_path: str) -> FileOutcome:
        logger.debug("Processing file: %s", rel_path)
        try:
            source = self._buffer.read(abs_path)
        except OSError as exc:
            return FileOutcome(path=rel_path, error=exc)

        result = self._parser_for(abs_path.suffix).parse(source)
        if not result.ok:
            # Syntactically broken files contribute nothing.
            return FileOutcome(path=rel_path, diagnostics=result.diagnostics)

        strings, warnings = self._visitor.extract(result.tree, rel_path)
        return FileOutcome(path=rel_path, strings=strings, warnings=warnings)


# ---------------------------------------------------------------------------
# Walker
# ---------------------------------------------------------------------------

class DirectoryWalker:
    """Walks a directory tree and feeds every recognised file to the catalog.

    Parameters
    ----------
    catalog:
        Where extracted messages go.  A fresh one is created when omitted.
    options:
        Extensions, markers, strictness and worker count.
    registry:
        Parser factories by suffix; defaults to :func:`default_registry`.
    """

    def __init__(
        self,
        catalog: MessageCatalog | None = None,
        options: WalkOptions | None = None,
        registry: ParserRegistry | None = None,
    ) -> None:
        self.catalog = catalog if catalog is not None else MessageCatalog()
        self.options = options or WalkOptions()
        self.registry = registry or default_registry()

        unknown = [ext for ext in self.options.extensions if not self.registry.recognizes(f"x{ext}")]
        if unknown:
            raise ValueError(
                f"No parser registered for extension(s): {', '.join(unknown)}. "
                f"Known: {', '.join(self.registry.suffixes())}"
            )
        self._extensions = frozenset(self.options.extensions)
        self._cancelled = threading.Event()
        self._report_lock = threading.Lock()

    # -- public API ----------------------------------------------------------

    def cancel(self) -> None:
        """Stop handing out files; the running walk returns a partial report.

        Each call to :meth:`walk` starts uncancelled, so a walker can be reused.
        """
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def walk(self, root: str | os.PathLike[str]) -> RunReport:
        root_path = Path(root)
        self._check_root(root_path)
        self._cancelled.clear()
        logger.info("Processing directory: %s", root_path)

        report = RunReport()
        if self.options.workers > 1:
            self._walk_parallel(root_path, report)
        else:
            self._walk_serial(root_path, report)

        report.cancelled = self._cancelled.is_set()
        report.finalize()
        logger.info(
            "Scanned %d file(s): %d message(s), %d warning(s), %d file(s) with errors%s",
            report.files_seen,
            len(self.catalog),
            len(report.warnings),
            len(report.files_with_errors),
            " (cancelled)" if report.cancelled else "",
        )
        return report

    # -- helpers -------------------------------------------------------------

    @staticmethod
    def _check_root(root: Path) -> None:
        if not root.exists():
            raise InvalidRootError(f"Directory not found: {root}")
        if not root.is_dir():
            raise InvalidRootError(f"Not a directory: {root}")
        try:
            with os.scandir(root):
                pass
        except OSError as exc:
            raise InvalidRootError(f"Cannot open directory {root}: {exc}") from exc

    def _recognized(self, name: str) -> bool:
        return PurePath(name).suffix.lower() in self._extensions

    def _discover(self, root: Path, report: RunReport) -> Iterator[tuple[Path, str]]:
        """Yield ``(absolute, root-relative)`` paths of recognised files.

        Depth-first with an explicit stack; entries are sorted by name so
        the visiting order is reproducible.  Symlinks and special files are
        ignored.
        """
        stack: list[tuple[Path, str]] = [(root, "")]
        while stack:
            if self._cancelled.is_set():
                return
            directory, rel_dir = stack.pop()
            if rel_dir:
                logger.debug("Processing directory: %s", rel_dir)
            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as exc:
                logger.warning("Cannot open directory %s: %s", rel_dir or ".", exc)
                with self._report_lock:
                    report.record_io_error(rel_dir or ".", exc)
                continue

            subdirs: list[tuple[Path, str]] = []
            for entry in entries:
                rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
                try:
                    if entry.is_symlink():
                        continue
                    if entry.is_dir(follow_symlinks=False):
                        if entry.name not in self.options.skip_dirs:
                            subdirs.append((Path(entry.path), rel_path))
                    elif entry.is_file(follow_symlinks=False):
                        if self._recognized(entry.name):
                            yield Path(entry.path), rel_path
                        else:
                            logger.debug("Skipping unrecognised file: %s", rel_path)
                            with self._report_lock:
                                report.files_skipped += 1
                except OSError as exc:
                    logger.warning("Cannot stat %s: %s", rel_path, exc)
                    with self._report_lock:
                        report.record_io_error(rel_path, exc)

            stack.extend(reversed(subdirs))

    def _record(self, report: RunReport, outcome: FileOutcome) -> None:
        with self._report_lock:
            report.files_seen += 1
            if outcome.error is not None:
                logger.warning("Cannot read %s: %s", outcome.path, outcome.error)
                report.record_io_error(outcome.path, outcome.error)
                return
            if outcome.diagnostics:
                first = outcome.diagnostics[0]
                logger.warning(
                    "Parse error in %s at %d:%d: %s",
                    outcome.path, first.line, first.column, first.message,
                )
                report.record_parse_errors(outcome.path, outcome.diagnostics)
                return
            for warning in outcome.warnings:
                logger.warning("%s", warning)
            report.warnings.extend(outcome.warnings)
        self.catalog.extend(outcome.strings)

    def _walk_serial(self, root: Path, report: RunReport) -> None:
        processor = FileProcessor(self.registry, self.options.markers)
        for abs_path, rel_path in self._discover(root, report):
            if self._cancelled.is_set():
                break
            self._record(report, processor.process(abs_path, rel_path))

    def _walk_parallel(self, root: Path, report: RunReport) -> None:
        work: queue.Queue[tuple[Path, str] | None] = queue.Queue()
        failures: list[BaseException] = []

        def worker() -> None:
            processor = FileProcessor(self.registry, self.options.markers)
            while True:
                item = work.get()
                if item is None:
                    return
                if self._cancelled.is_set():
                    continue
                try:
                    self._record(report, processor.process(*item))
                except Exception as exc:  # noqa: BLE001 -- re-raised on the caller's thread
                    failures.append(exc)
                    self._cancelled.set()

        threads = [
            threading.Thread(target=worker, name=f"locus-worker-{i}", daemon=True)
            for i in range(self.options.workers)
        ]
        for t in threads:
            t.start()
        try:
            for item in self._discover(root, report):
                if self._cancelled.is_set():
                    break
                work.put(item)
        finally:
            for _ in threads:
                work.put(None)
            for t in threads:
                t.join()

        if failures:
            raise failures[0]


def walk(
    root: str | os.PathLike[str],
    options: WalkOptions | None = None,
    *,
    catalog: MessageCatalog | None = None,
    registry: ParserRegistry | None = None,
) -> RunReport:
    """Walk *root* once and return the report; messages land in *catalog*."""
    return DirectoryWalker(catalog=catalog, options=options, registry=registry).walk(root)
