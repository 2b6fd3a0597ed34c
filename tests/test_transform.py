"""Tests for neoglob.transform."""

from __future__ import annotations

import pytest

from neoglob.scanner import Entry
from neoglob.settings import Settings
from neoglob.transform import EntryTransformer
from tests.conftest import make_entry


def _transform(entry: Entry, **options: object):
    return EntryTransformer(Settings(cwd="/root", **options)).get_transformer()(entry)


class TestEntryTransformer:
    @pytest.mark.parametrize(
        ("options", "path", "is_dir", "expected"),
        [
            ({}, "fixtures/file.md", False, "fixtures/file.md"),
            ({}, "fixtures", True, "fixtures"),
            ({"absolute": True}, "fixtures/file.md", False, "/root/fixtures/file.md"),
            ({"absolute": True}, "../file.md", False, "/file.md"),
            ({"mark_directories": True}, "fixtures", True, "fixtures/"),
            ({"mark_directories": True}, "fixtures/file.md", False, "fixtures/file.md"),
            ({"absolute": True, "mark_directories": True}, "fixtures", True, "/root/fixtures/"),
        ],
    )
    def test_paths(self, options: dict, path: str, is_dir: bool, expected: str) -> None:
        assert _transform(make_entry(path, is_dir=is_dir), **options) == expected

    def test_mark_directories_does_not_double_slash(self) -> None:
        entry = make_entry("fixtures/", is_dir=True)
        assert _transform(entry, mark_directories=True) == "fixtures/"

    def test_object_mode_returns_entry(self) -> None:
        entry = make_entry("fixtures", is_dir=True)
        item = _transform(entry, object_mode=True, absolute=True, mark_directories=True)
        assert isinstance(item, Entry)
        assert item.path == "/root/fixtures/"
        assert item.name == "fixtures"
        assert item.is_dir

    def test_object_mode_keeps_original_entry_untouched(self) -> None:
        entry = make_entry("file.md")
        item = _transform(entry, object_mode=True, absolute=True)
        assert entry.path == "file.md"
        assert item.path == "/root/file.md"
