"""Tests for the message catalog and template rendering."""

from __future__ import annotations

import random
import threading
from datetime import datetime, timezone
from pathlib import Path

from locus.catalog import MessageCatalog, build_template, render_template, write_template
from locus.models import TranslationString


def _ts(message: str, path: str = "a.py", line: int = 1, column: int = 1) -> TranslationString:
    return TranslationString(file_path=path, line=line, column=column, message=message)


class TestInsert:
    def test_new_entry(self):
        catalog = MessageCatalog()
        catalog.insert(_ts("Hello"))
        assert len(catalog) == 1
        assert "Hello" in catalog

    def test_duplicates_merge(self):
        catalog = MessageCatalog()
        catalog.insert(_ts("Hello", "b.py", 1))
        catalog.insert(_ts("Hello", "a.py", 3))
        entries = catalog.entries()
        assert len(entries) == 1
        assert [(loc.file_path, loc.line) for loc in entries[0].locations] == [
            ("a.py", 3),
            ("b.py", 1),
        ]

    def test_locations_sorted_by_path_line_column(self):
        catalog = MessageCatalog()
        for path, line, column in [("b.py", 2, 1), ("a.py", 9, 4), ("a.py", 9, 2), ("a.py", 1, 8)]:
            catalog.insert(_ts("X", path, line, column))
        locs = catalog.get("X").locations
        assert [(l.file_path, l.line, l.column) for l in locs] == [
            ("a.py", 1, 8),
            ("a.py", 9, 2),
            ("a.py", 9, 4),
            ("b.py", 2, 1),
        ]

    def test_same_location_kept_once(self):
        catalog = MessageCatalog()
        catalog.insert(_ts("X", "a.py", 1, 1))
        catalog.insert(_ts("X", "a.py", 1, 1))
        assert len(catalog.get("X").locations) == 1

    def test_get_unknown(self):
        assert MessageCatalog().get("nope") is None

    def test_concurrent_inserts(self):
        catalog = MessageCatalog()

        def fill(worker: int) -> None:
            for i in range(200):
                catalog.insert(_ts(f"msg {i % 10}", f"w{worker}.py", i + 1))

        threads = [threading.Thread(target=fill, args=(w,)) for w in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(catalog) == 10
        assert all(len(entry.locations) == 80 for entry in catalog.entries())


class TestEntries:
    def test_sorted_by_message_bytes(self):
        catalog = MessageCatalog()
        for msg in ["apple", "Zebra", "émigré", "banana"]:
            catalog.insert(_ts(msg))
        assert [e.message for e in catalog.entries()] == ["Zebra", "apple", "banana", "émigré"]

    def test_independent_of_insertion_order(self):
        strings = [_ts(f"m{i % 7}", f"f{i % 5}.py", i + 1) for i in range(60)]
        first = MessageCatalog()
        first.extend(strings)
        shuffled = list(strings)
        random.Random(42).shuffle(shuffled)
        second = MessageCatalog()
        second.extend(shuffled)
        assert first.entries() == second.entries()

    def test_entries_are_snapshots(self):
        catalog = MessageCatalog()
        catalog.insert(_ts("X", "a.py"))
        snapshot = catalog.entries()
        catalog.insert(_ts("X", "b.py"))
        assert len(snapshot[0].locations) == 1


class TestTemplate:
    def test_entry_blocks(self):
        catalog = MessageCatalog()
        catalog.insert(_ts("Hello", "b.py", 1, 1))
        catalog.insert(_ts("Hello", "a.py", 3, 5))
        catalog.insert(_ts("Bye", "a.py", 7, 1))
        assert render_template(catalog, header=False) == (
            "#: a.py:7:1\n"
            'msgid "Bye"\n'
            'msgstr ""\n'
            "\n"
            "#: a.py:3:5 b.py:1:1\n"
            'msgid "Hello"\n'
            'msgstr ""\n'
        )

    def test_escaping(self):
        catalog = MessageCatalog()
        catalog.insert(_ts('Say "hi"\tback\\slash'))
        assert 'msgid "Say \\"hi\\"\\tback\\\\slash"\n' in render_template(catalog, header=False)

    def test_long_message_not_wrapped(self):
        catalog = MessageCatalog()
        message = " ".join(["word"] * 40)
        catalog.insert(_ts(message))
        assert f'msgid "{message}"\n' in render_template(catalog, header=False)

    def test_build_template_occurrences(self):
        catalog = MessageCatalog()
        catalog.insert(_ts("Hello", "pkg/a.py", 3, 5))
        pot = build_template(catalog, project="demo 1.0")
        assert pot.metadata["Project-Id-Version"] == "demo 1.0"
        assert [(e.msgid, e.occurrences) for e in pot] == [("Hello", [("pkg/a.py", "3:5")])]

    def test_header(self):
        catalog = MessageCatalog()
        catalog.insert(_ts("Hello"))
        created = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        text = render_template(catalog, locale="fr_FR", project="demo 1.0", created=created)
        assert text.startswith('msgid ""\nmsgstr ""\n')
        assert '"Project-Id-Version: demo 1.0\\n"' in text
        assert '"POT-Creation-Date: 2024-05-01 12:30+0000\\n"' in text
        assert '"Language: fr_FR\\n"' in text
        assert '"Content-Type: text/plain; charset=UTF-8\\n"' in text
        assert text.endswith('msgid "Hello"\nmsgstr ""\n')

    def test_empty_catalog_without_header(self):
        assert render_template(MessageCatalog(), header=False) == ""

    def test_write_template(self, tmp_path: Path):
        catalog = MessageCatalog()
        catalog.insert(_ts("Grüße"))
        out = write_template(catalog, tmp_path / "po" / "messages.pot", header=False)
        assert out.read_text(encoding="utf-8") == '#: a.py:1:1\nmsgid "Grüße"\nmsgstr ""\n'
