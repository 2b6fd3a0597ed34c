"""Gitignore integration: exclude entries listed in ``cwd/.gitignore`` via pathspec."""

from __future__ import annotations

import logging
from pathlib import Path

from pathspec import GitIgnoreSpec

from neoglob.scanner import Entry

logger = logging.getLogger(__name__)


def load_gitignore_spec(cwd: str | Path) -> GitIgnoreSpec | None:
    """Load .gitignore patterns from the *cwd* directory.

    Args:
        cwd: Directory containing the ``.gitignore`` file.

    Returns:
        A compiled spec when a ``.gitignore`` exists and is readable,
        otherwise ``None``.
    """
    gitignore_path = Path(cwd) / ".gitignore"
    try:
        lines = gitignore_path.read_text(encoding="utf-8").splitlines()
    except OSError:
        logger.debug("Cannot read .gitignore: %s", gitignore_path)
        return None
    return GitIgnoreSpec.from_lines(lines)


def is_ignored(spec: GitIgnoreSpec | None, entry: Entry) -> bool:
    """Return whether *spec* ignores *entry*.

    Only paths inside ``cwd`` are checked; directories are matched with a
    trailing ``/`` so directory-only rules apply.
    """
    if spec is None:
        return False
    path = entry.path
    if path.startswith(("/", "../")) or path == "..":
        return False
    if entry.is_dir and not path.endswith("/"):
        path += "/"
    return spec.match_file(path)
