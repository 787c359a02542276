"""Message catalog -- deduplicated messages with sorted source locations.

Entries are keyed by message text.  Output order never depends on the
order in which files were walked: entries are sorted by the UTF-8 bytes of
their message, and each entry's locations by ``(file_path, line, column)``.
"""

from __future__ import annotations

import bisect
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

import polib

from .models import CatalogEntry, Location, TranslationString

logger = logging.getLogger(__name__)


class MessageCatalog:
    """Thread-safe, grow-only collection of extracted messages."""

    def __init__(self) -> None:
        self._entries: dict[str, list[Location]] = {}
        self._lock = threading.Lock()

    def insert(self, ts: TranslationString) -> None:
        """Add *ts*, creating an entry or merging its location into one."""
        location = ts.location
        key = location.sort_key()
        with self._lock:
            locations = self._entries.setdefault(ts.message, [])
            idx = bisect.bisect_left(locations, key, key=Location.sort_key)
            if idx < len(locations) and locations[idx].sort_key() == key:
                return
            locations.insert(idx, location)

    def extend(self, strings: Iterable[TranslationString]) -> None:
        for ts in strings:
            self.insert(ts)

    def entries(self) -> list[CatalogEntry]:
        with self._lock:
            items = [(msg, list(locs)) for msg, locs in self._entries.items()]
        items.sort(key=lambda item: item[0].encode("utf-8"))
        return [CatalogEntry(message=msg, locations=locs) for msg, locs in items]

    def get(self, message: str) -> CatalogEntry | None:
        with self._lock:
            locations = self._entries.get(message)
            if locations is None:
                return None
            return CatalogEntry(message=message, locations=list(locations))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, message: object) -> bool:
        return message in self._entries


# ---------------------------------------------------------------------------
# Template export
# ---------------------------------------------------------------------------

# Long msgids and occurrence lists stay on one line.
NO_WRAP = 0


def build_template(
    catalog: MessageCatalog,
    *,
    project: str = "PACKAGE VERSION",
    locale: str | None = None,
    created: datetime | None = None,
) -> polib.POFile:
    """Build a :class:`polib.POFile` holding one entry per catalog message."""
    created = created or datetime.now(timezone.utc)
    pot = polib.POFile(wrapwidth=NO_WRAP)
    pot.metadata = {
        "Project-Id-Version": project,
        "POT-Creation-Date": created.strftime("%Y-%m-%d %H:%M%z"),
        "Language": locale or "",
        "MIME-Version": "1.0",
        "Content-Type": "text/plain; charset=UTF-8",
        "Content-Transfer-Encoding": "8bit",
    }
    for entry in catalog.entries():
        pot.append(polib.POEntry(
            msgid=entry.message,
            msgstr="",
            occurrences=[(loc.file_path, f"{loc.line}:{loc.column}") for loc in entry.locations],
        ))
    return pot


def render_template(
    catalog: MessageCatalog,
    *,
    header: bool = True,
    project: str = "PACKAGE VERSION",
    locale: str | None = None,
    created: datetime | None = None,
) -> str:
    """Render *catalog* as a POT template, one block per entry."""
    pot = build_template(catalog, project=project, locale=locale, created=created)
    entries = list(pot)
    if header:
        entries.insert(0, pot.metadata_as_entry())
    return "\n".join(entry.__unicode__(pot.wrapwidth) for entry in entries)


def write_template(catalog: MessageCatalog, path: Path, **kwargs: object) -> Path:
    """Write the rendered template to *path* (UTF-8) and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_template(catalog, **kwargs), encoding="utf-8")  # type: ignore[arg-type]
    logger.info("Wrote %d message(s) to %s", len(catalog), path)
    return path
