"""Public entry points.

Every function validates its pattern argument and builds the task list
before returning, so invalid input raises at call time whatever the
execution strategy.
"""

from __future__ import annotations

from collections.abc import Coroutine, Iterator, Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any

from anyio.streams.memory import MemoryObjectReceiveStream

from neoglob.errors import InvalidInputError
from neoglob.pattern import escape, is_dynamic
from neoglob.providers import AwaitProvider, CollectProvider, EmitProvider
from neoglob.settings import Settings
from neoglob.tasks import Task, generate
from neoglob.transform import EntryItem

Patterns = str | Sequence[str]


def glob_sync(patterns: Patterns, **options: Any) -> list[EntryItem]:
    """Resolve *patterns* and return every match once all tasks are read.

    Args:
        patterns: One pattern or a sequence of patterns.
        **options: ``Settings`` fields.

    Returns:
        list[EntryItem]: Paths, or ``Entry`` objects in object mode.

    Raises:
        InvalidInputError: If *patterns* is not usable.
        PatternCompilationError: If a pattern is malformed.
        TraversalError: On unsuppressed filesystem errors.
    """
    settings = Settings(**options)
    tasks = generate(patterns, settings)
    return CollectProvider(settings).read_all(tasks)


def iglob(patterns: Patterns, **options: Any) -> Iterator[EntryItem]:
    """Like ``glob_sync`` but yields matches as they are found."""
    settings = Settings(**options)
    tasks = generate(patterns, settings)
    provider = CollectProvider(settings)
    return (item for task in tasks for item in provider.iterate(task))


def glob(patterns: Patterns, **options: Any) -> Coroutine[Any, Any, list[EntryItem]]:
    """Resolve *patterns* asynchronously, reading tasks concurrently.

    Validation happens on call; the returned coroutine performs the I/O::

        paths = await neoglob.glob("src/**/*.py")
    """
    settings = Settings(**options)
    tasks = generate(patterns, settings)
    return AwaitProvider(settings).read_all(tasks)


def stream(
    patterns: Patterns, **options: Any
) -> AbstractAsyncContextManager[MemoryObjectReceiveStream[EntryItem]]:
    """Resolve *patterns*, delivering each match as soon as it is accepted::

        async with neoglob.stream("**/*.md") as entries:
            async for path in entries:
                ...
    """
    settings = Settings(**options)
    tasks = generate(patterns, settings)
    return EmitProvider(settings).open(tasks)


def generate_tasks(patterns: Patterns, **options: Any) -> list[Task]:
    """Return the traversal tasks *patterns* are split into."""
    return generate(patterns, Settings(**options))


def is_dynamic_pattern(pattern: str, **options: Any) -> bool:
    """Return whether *pattern* contains glob syntax under *options*."""
    if not isinstance(pattern, str):
        raise InvalidInputError()
    return is_dynamic(pattern, Settings(**options).pattern_options)


def escape_path(path: str) -> str:
    """Escape *path* so it is matched literally."""
    if not isinstance(path, str):
        raise InvalidInputError()
    return escape(path)
