"""Directory reader using os.scandir with an explicit stack (DFS)."""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import AsyncIterator, Callable, Iterable, Iterator
from dataclasses import dataclass

import anyio

from neoglob.errors import TraversalError
from neoglob.pattern import unescape

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Entry:
    """A single filesystem entry discovered during traversal.

    Attributes:
        name: Basename of the entry.
        path: ``/``-separated path, relative to ``cwd`` unless the pattern
            that found it was absolute.
        is_file: Whether the entry is a regular file.
        is_dir: Whether the entry is a directory.
        is_symlink: Whether the entry itself is a symbolic link.
        stats: ``os.stat_result`` when stats were requested.
    """

    name: str
    path: str
    is_file: bool = False
    is_dir: bool = False
    is_symlink: bool = False
    stats: os.stat_result | None = None


EntryPredicate = Callable[[Entry], bool]
ErrorPredicate = Callable[[OSError], bool]


@dataclass(frozen=True, slots=True)
class ReaderOptions:
    """Options controlling one traversal.

    Attributes:
        base_path: Prefix joined with entry names to form entry paths.
            Empty for the current directory.
        entry_filter: Decides which entries are reported.
        deep_filter: Decides which directories are descended into.
        error_filter: Returns ``True`` for errors that should be skipped.
        follow_symbolic_links: Resolve symlinks to their targets' type.
        throw_error_on_broken_symbolic_link: Raise on dangling symlinks.
        stats: Attach ``os.stat_result`` to entries.
    """

    base_path: str = ""
    entry_filter: EntryPredicate | None = None
    deep_filter: EntryPredicate | None = None
    error_filter: ErrorPredicate | None = None
    follow_symbolic_links: bool = True
    throw_error_on_broken_symbolic_link: bool = False
    stats: bool = False


def join_entry_path(base_path: str, name: str) -> str:
    """Build the entry path of child *name*.

    Args:
        base_path: Entry path of the parent, empty for the walk root.
        name: Child name.

    Returns:
        str: ``/``-separated path; a trailing ``/`` on *base_path* is not doubled.
    """
    if not base_path:
        return name
    if base_path.endswith("/"):
        return base_path + name
    return f"{base_path}/{name}"


def read_directory(directory: str, base_path: str, options: ReaderOptions) -> list[Entry]:
    """Read the direct children of *directory*, sorted by name.

    Args:
        directory: Filesystem path of the directory.
        base_path: Entry path of the directory, used as the children's prefix.
        options: Reader options.

    Returns:
        list[Entry]: Children of the directory.

    Raises:
        OSError: If the directory or one of its children cannot be read.
    """
    with os.scandir(directory) as iterator:
        raw_entries = sorted(iterator, key=lambda e: e.name)

    return [
        _make_entry(
            dir_entry.name,
            dir_entry.path,
            join_entry_path(base_path, dir_entry.name),
            options,
            dir_entry,
        )
        for dir_entry in raw_entries
    ]


def _make_entry(
    name: str,
    fullpath: str,
    path: str,
    options: ReaderOptions,
    dir_entry: os.DirEntry[str] | None = None,
) -> Entry:
    if dir_entry is not None:
        is_symlink = dir_entry.is_symlink()
        own_stats = dir_entry.stat(follow_symlinks=False) if options.stats or is_symlink else None
    else:
        own_stats = os.lstat(fullpath)
        is_symlink = stat.S_ISLNK(own_stats.st_mode)

    mode_stats = own_stats
    if is_symlink and options.follow_symbolic_links:
        try:
            mode_stats = os.stat(fullpath)
        except FileNotFoundError as exc:
            if options.throw_error_on_broken_symbolic_link:
                raise TraversalError(fullpath, exc) from exc
            logger.debug("Broken symbolic link: %s", fullpath)

    if mode_stats is not None:
        is_dir = stat.S_ISDIR(mode_stats.st_mode)
        is_file = stat.S_ISREG(mode_stats.st_mode)
    elif dir_entry is not None:
        is_dir = dir_entry.is_dir(follow_symlinks=False)
        is_file = dir_entry.is_file(follow_symlinks=False)
    else:
        is_dir = is_file = False

    return Entry(
        name=name,
        path=path,
        is_file=is_file,
        is_dir=is_dir,
        is_symlink=is_symlink,
        stats=mode_stats if options.stats else None,
    )


def _handle_error(error: OSError, path: str, options: ReaderOptions) -> None:
    """Skip suppressed errors, raise everything else as ``TraversalError``."""
    if isinstance(error, TraversalError):
        raise error
    if options.error_filter is not None and options.error_filter(error):
        logger.debug("Skipped %s: %s", path, error)
        return
    raise TraversalError(path, error) from error


def _is_cyclic_link(fullpath: str, directory: str) -> bool:
    """Whether a symlinked directory points at itself or an ancestor."""
    target = os.path.realpath(fullpath)
    current = os.path.realpath(directory)
    return current == target or current.startswith(target.rstrip(os.sep) + os.sep)


def _process_children(
    directory: str,
    children: list[Entry],
    options: ReaderOptions,
) -> tuple[list[Entry], list[tuple[str, str]]]:
    """Split children into accepted entries and directories to descend into."""
    accepted: list[Entry] = []
    child_dirs: list[tuple[str, str]] = []

    for entry in children:
        if options.entry_filter is None or options.entry_filter(entry):
            accepted.append(entry)

        if not entry.is_dir:
            continue
        if options.deep_filter is not None and not options.deep_filter(entry):
            continue
        fullpath = os.path.join(directory, entry.name)
        if entry.is_symlink and _is_cyclic_link(fullpath, directory):
            logger.debug("Symbolic link cycle: %s", fullpath)
            continue
        child_dirs.append((fullpath, entry.path))

    return accepted, child_dirs


def walk(root: str, options: ReaderOptions | None = None) -> Iterator[Entry]:
    """Traverse *root* depth-first and yield entries accepted by the filter.

    Args:
        root: Directory to traverse.
        options: Reader options. Defaults to ``ReaderOptions()``.

    Yields:
        Entry: Accepted entries, children sorted by name.

    Raises:
        TraversalError: On errors the error filter does not suppress.
    """
    reader_options = options or ReaderOptions()

    # Stack items: (filesystem path, entry path).
    # Children are pushed in reverse so the first by name is popped first.
    stack: list[tuple[str, str]] = [(root, reader_options.base_path)]

    while stack:
        directory, base_path = stack.pop()
        try:
            children = read_directory(directory, base_path, reader_options)
        except OSError as exc:
            _handle_error(exc, directory, reader_options)
            continue

        accepted, child_dirs = _process_children(directory, children, reader_options)
        yield from accepted
        stack.extend(reversed(child_dirs))


async def walk_async(root: str, options: ReaderOptions | None = None) -> AsyncIterator[Entry]:
    """Asynchronous ``walk``: each directory is read in a worker thread.

    Filtering runs on the event loop thread.
    """
    reader_options = options or ReaderOptions()
    stack: list[tuple[str, str]] = [(root, reader_options.base_path)]

    while stack:
        directory, base_path = stack.pop()
        try:
            children = await anyio.to_thread.run_sync(
                read_directory, directory, base_path, reader_options
            )
        except OSError as exc:
            _handle_error(exc, directory, reader_options)
            continue

        accepted, child_dirs = _process_children(directory, children, reader_options)
        for entry in accepted:
            yield entry
        stack.extend(reversed(child_dirs))


def read_entry(cwd: str, pattern: str, options: ReaderOptions) -> Entry:
    """Build the entry a static *pattern* names, relative to *cwd*.

    Raises:
        OSError: If the path cannot be stat'ed.
    """
    path = unescape(pattern)
    fullpath = os.path.join(cwd, path)
    name = os.path.basename(path.rstrip("/")) or path
    return _make_entry(name, fullpath, path, options)


def _accept_static(entry: Entry, options: ReaderOptions) -> bool:
    return options.entry_filter is None or options.entry_filter(entry)


def read_static(
    cwd: str, patterns: Iterable[str], options: ReaderOptions | None = None
) -> Iterator[Entry]:
    """Resolve static patterns with ``stat`` alone, without traversal.

    Missing paths are skipped.
    """
    reader_options = options or ReaderOptions()
    for pattern in patterns:
        try:
            entry = read_entry(cwd, pattern, reader_options)
        except OSError as exc:
            _handle_error(exc, pattern, reader_options)
            continue
        if _accept_static(entry, reader_options):
            yield entry


async def read_static_async(
    cwd: str, patterns: Iterable[str], options: ReaderOptions | None = None
) -> AsyncIterator[Entry]:
    """Asynchronous ``read_static``; each lookup runs in a worker thread.

    Args:
        cwd: Directory the patterns are relative to.
        patterns: Unescaped static patterns.
        options: Reader options.

    Yields:
        Entry: Each existing path accepted by the entry filter.

    Raises:
        TraversalError: If a lookup fails and the error filter does not skip it.
    """
    reader_options = options or ReaderOptions()
    for pattern in patterns:
        try:
            entry = await anyio.to_thread.run_sync(read_entry, cwd, pattern, reader_options)
        except OSError as exc:
            _handle_error(exc, pattern, reader_options)
            continue
        if _accept_static(entry, reader_options):
            yield entry
