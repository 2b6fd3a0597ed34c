"""Shared fixtures for neoglob tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from neoglob.scanner import Entry

MD_FILES = [
    "fixtures/file.md",
    "fixtures/first/file.md",
    "fixtures/first/nested/directory/file.md",
    "fixtures/first/nested/file.md",
    "fixtures/second/file.md",
    "fixtures/second/nested/directory/file.md",
    "fixtures/second/nested/file.md",
    "fixtures/third/library/a/book.md",
    "fixtures/third/library/b/book.md",
]

FIRST_AND_SECOND_MD_FILES = [
    "fixtures/first/file.md",
    "fixtures/first/nested/directory/file.md",
    "fixtures/first/nested/file.md",
    "fixtures/second/file.md",
    "fixtures/second/nested/directory/file.md",
    "fixtures/second/nested/file.md",
]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fixtures_tree(tmp_path: Path) -> Path:
    """Create the standard fixtures tree and return its parent (the cwd).

    Structure::

        cwd/
        └── fixtures/
            ├── .hidden/
            │   └── file.md
            ├── file.md
            ├── file.txt
            ├── first/
            │   ├── file.md
            │   └── nested/
            │       ├── directory/
            │       │   └── file.md
            │       └── file.md
            ├── second/          (same as first/)
            └── third/
                └── library/
                    ├── a/
                    │   └── book.md
                    └── b/
                        └── book.md
    """
    for relative in MD_FILES:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(relative)
    (tmp_path / "fixtures" / "file.txt").write_text("txt")
    (tmp_path / "fixtures" / ".hidden").mkdir()
    (tmp_path / "fixtures" / ".hidden" / "file.md").write_text("hidden")
    return tmp_path


def make_entry(
    path: str,
    *,
    is_dir: bool = False,
    is_symlink: bool = False,
) -> Entry:
    """Build an in-memory entry for filter tests."""
    return Entry(
        name=path.rstrip("/").rsplit("/", 1)[-1],
        path=path,
        is_file=not is_dir,
        is_dir=is_dir,
        is_symlink=is_symlink,
    )
