"""Entry, directory-descent and error filters applied during traversal."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import replace

from pathspec import GitIgnoreSpec

from neoglob.gitignore import is_ignored
from neoglob.pattern import (
    GLOBSTAR,
    Matcher,
    PartialMatcher,
    is_affect_depth_of_reading_pattern,
    make_absolute,
    match_any,
    remove_leading_dot_segment,
    to_matchers,
)
from neoglob.scanner import Entry, EntryPredicate, ErrorPredicate
from neoglob.settings import Settings

logger = logging.getLogger(__name__)


class DedupIndex:
    """Paths accepted so far during one resolution call.

    Shared by every task of the call; safe to use from several threads.
    """

    def __init__(self) -> None:
        self._paths: set[str] = set()
        self._lock = threading.Lock()

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._paths

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)

    def add(self, path: str) -> bool:
        """Record *path*; return ``False`` if it was already present."""
        with self._lock:
            if path in self._paths:
                return False
            self._paths.add(path)
            return True


def _is_match_to_patterns(path: str, matchers: Sequence[Matcher], is_dir: bool) -> bool:
    filepath = remove_leading_dot_segment(path)
    if match_any(filepath, matchers):
        return True
    # A pattern with a trailing slash only matches directories.
    return is_dir and match_any(filepath + "/", matchers)


class EntryFilter:
    """Decide which traversed entries are reported.

    Checks run cheapest first: duplicates, entry type, absolute negative
    patterns, positive patterns, negative patterns, then gitignore rules.
    """

    def __init__(
        self,
        settings: Settings,
        index: DedupIndex | None = None,
        ignore_spec: GitIgnoreSpec | None = None,
    ) -> None:
        """Initialize entry filter.

        Args:
            settings: Resolution settings.
            index: Dedup index of the current call. A fresh one by default.
            ignore_spec: Loaded ``.gitignore`` rules, if enabled.
        """
        self._settings = settings
        self.index = index if index is not None else DedupIndex()
        self._ignore_spec = ignore_spec

    def get_filter(self, positive: Sequence[str], negative: Sequence[str]) -> EntryPredicate:
        """Build the predicate for one task.

        Args:
            positive: Normalized inclusion patterns of the task.
            negative: Exclusion patterns, without their ``!``.

        Returns:
            EntryPredicate: ``True`` for entries to report.

        Raises:
            PatternCompilationError: If a pattern is malformed.
        """
        options = self._settings.pattern_options
        positive_matchers = to_matchers(positive, options)
        negative_matchers = to_matchers(negative, options)
        return lambda entry: self._filter(entry, positive_matchers, negative_matchers)

    def _filter(
        self,
        entry: Entry,
        positive: Sequence[Matcher],
        negative: Sequence[Matcher],
    ) -> bool:
        if self._settings.unique and entry.path in self.index:
            return False

        if self._only_file_filter(entry) or self._only_directory_filter(entry):
            return False

        if self._is_skipped_by_absolute_negative_patterns(entry.path, negative):
            return False

        filepath = entry.name if self._settings.base_name_match else entry.path
        if not _is_match_to_patterns(filepath, positive, entry.is_dir):
            return False
        if _is_match_to_patterns(entry.path, negative, entry.is_dir):
            return False

        if is_ignored(self._ignore_spec, entry):
            return False

        if self._settings.unique:
            # Another task may have accepted the same path in the meantime.
            return self.index.add(entry.path)
        return True

    def _only_file_filter(self, entry: Entry) -> bool:
        return self._settings.only_files and not entry.is_file

    def _only_directory_filter(self, entry: Entry) -> bool:
        return self._settings.only_directories and not entry.is_dir

    def _is_skipped_by_absolute_negative_patterns(
        self, entry_path: str, negative: Sequence[Matcher]
    ) -> bool:
        if not self._settings.absolute:
            return False
        fullpath = make_absolute(self._settings.cwd, entry_path)
        return match_any(fullpath, negative)


class DeepFilter:
    """Decide which directories the traversal descends into."""

    def __init__(self, settings: Settings, ignore_spec: GitIgnoreSpec | None = None) -> None:
        self._settings = settings
        self._ignore_spec = ignore_spec

    def get_filter(
        self, base_path: str, positive: Sequence[str], negative: Sequence[str]
    ) -> EntryPredicate:
        """Build the descent predicate for one task.

        Args:
            base_path: Entry path of the task base, empty for ``cwd``.
            positive: Normalized inclusion patterns of the task.
            negative: Exclusion patterns, without their ``!``.

        Returns:
            EntryPredicate: ``True`` for directories to read.
        """
        options = self._settings.pattern_options
        matcher = PartialMatcher(positive, options)
        # Hidden directories are pruned too when a negative pattern names them.
        depth_patterns = [
            _strip_trailing_globstar(p) for p in negative if is_affect_depth_of_reading_pattern(p)
        ]
        negative_matchers = to_matchers(depth_patterns, replace(options, dot=True))
        return lambda entry: self._filter(base_path, entry, matcher, negative_matchers)

    def _filter(
        self,
        base_path: str,
        entry: Entry,
        matcher: PartialMatcher,
        negative: Sequence[Matcher],
    ) -> bool:
        if self._is_skipped_by_deep(base_path, entry.path):
            return False
        if self._is_skipped_symbolic_link(entry):
            return False

        filepath = remove_leading_dot_segment(entry.path)
        if self._is_skipped_by_positive_patterns(filepath, matcher):
            return False
        if _is_match_to_patterns(filepath, negative, is_dir=True):
            return False

        return not is_ignored(self._ignore_spec, entry)

    def _is_skipped_by_deep(self, base_path: str, entry_path: str) -> bool:
        if self._settings.deep is None:
            return False
        return get_entry_level(base_path, entry_path) >= self._settings.deep

    def _is_skipped_symbolic_link(self, entry: Entry) -> bool:
        return not self._settings.follow_symbolic_links and entry.is_symlink

    def _is_skipped_by_positive_patterns(self, entry_path: str, matcher: PartialMatcher) -> bool:
        return not self._settings.base_name_match and not matcher.match(entry_path)


def _strip_trailing_globstar(pattern: str) -> str:
    # "dir/**" prunes "dir" itself, not only what lies below it.
    if pattern.endswith("/" + GLOBSTAR) and len(pattern) > 3:
        return pattern[:-3]
    return pattern


def get_entry_level(base_path: str, entry_path: str) -> int:
    """Depth of *entry_path* below *base_path*; direct children are level 1."""
    entry_depth = len(entry_path.rstrip("/").split("/"))
    if not base_path:
        return entry_depth
    return entry_depth - len(base_path.rstrip("/").split("/"))


class ErrorFilter:
    """Decide which traversal errors are skipped instead of raised."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def get_filter(self) -> ErrorPredicate:
        """Return the predicate telling which ``OSError``s are skipped."""
        return self._is_non_fatal_error

    def _is_non_fatal_error(self, error: OSError) -> bool:
        # A missing path simply has no entries.
        if isinstance(error, (FileNotFoundError, NotADirectoryError)):
            return True
        if self._settings.suppress_errors:
            logger.debug("Suppressed traversal error: %s", error)
            return True
        return False
