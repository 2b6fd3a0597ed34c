"""Execution strategies sharing one task → traversal → filter pipeline.

``CollectProvider`` reads tasks one after another on the calling thread,
``AwaitProvider`` reads them concurrently and returns once all are done, and
``EmitProvider`` pushes entries to a memory stream as soon as they are
accepted.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator, Iterator, Sequence
from contextlib import asynccontextmanager

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from neoglob.filter import DedupIndex, DeepFilter, EntryFilter, ErrorFilter
from neoglob.gitignore import load_gitignore_spec
from neoglob.scanner import ReaderOptions, read_static, read_static_async, walk, walk_async
from neoglob.settings import Settings
from neoglob.tasks import Task
from neoglob.transform import EntryItem, EntryTransformer

logger = logging.getLogger(__name__)


def _first_error(group: BaseExceptionGroup) -> BaseException:
    """Unwrap the first leaf exception of a (nested) exception group."""
    error: BaseException = group
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error


class Provider:
    """Builds the per-task filters and reader options for one call.

    A provider owns the dedup index, so one instance serves exactly one
    top-level call.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        ignore_spec = load_gitignore_spec(settings.cwd) if settings.gitignore else None
        self.index = DedupIndex()
        self.entry_filter = EntryFilter(settings, self.index, ignore_spec)
        self.deep_filter = DeepFilter(settings, ignore_spec)
        self.error_filter = ErrorFilter(settings)
        self.entry_transformer = EntryTransformer(settings)

    def _get_root_directory(self, task: Task) -> str:
        # An absolute base replaces cwd.
        return os.path.join(self._settings.cwd, task.base)

    def _get_reader_options(self, task: Task) -> ReaderOptions:
        base_path = "" if task.base == "." else task.base
        return ReaderOptions(
            base_path=base_path,
            entry_filter=self.entry_filter.get_filter(task.positive, task.negative),
            deep_filter=self.deep_filter.get_filter(base_path, task.positive, task.negative),
            error_filter=self.error_filter.get_filter(),
            follow_symbolic_links=self._settings.follow_symbolic_links,
            throw_error_on_broken_symbolic_link=self._settings.throw_error_on_broken_symbolic_link,
            stats=self._settings.stats,
        )

    async def iterate_async(self, task: Task) -> AsyncIterator[EntryItem]:
        options = self._get_reader_options(task)
        transform = self.entry_transformer.get_transformer()
        if task.dynamic:
            entries = walk_async(self._get_root_directory(task), options)
        else:
            entries = read_static_async(self._settings.cwd, task.positive, options)
        async for entry in entries:
            yield transform(entry)


class CollectProvider(Provider):
    """Buffered synchronous strategy."""

    def iterate(self, task: Task) -> Iterator[EntryItem]:
        options = self._get_reader_options(task)
        transform = self.entry_transformer.get_transformer()
        if task.dynamic:
            entries = walk(self._get_root_directory(task), options)
        else:
            entries = read_static(self._settings.cwd, task.positive, options)
        for entry in entries:
            yield transform(entry)

    def read(self, task: Task) -> list[EntryItem]:
        return list(self.iterate(task))

    def read_all(self, tasks: Sequence[Task]) -> list[EntryItem]:
        results: list[EntryItem] = []
        for task in tasks:
            results.extend(self.iterate(task))
        return results


class AwaitProvider(Provider):
    """Asynchronous strategy resolving once every task has finished."""

    async def read(self, task: Task) -> list[EntryItem]:
        return [item async for item in self.iterate_async(task)]

    async def read_all(self, tasks: Sequence[Task]) -> list[EntryItem]:
        """Read *tasks* concurrently.

        The first failing task cancels the others and its error is raised
        as is, not wrapped in an exception group.
        """
        results: list[EntryItem] = []

        async def collect(task: Task) -> None:
            async for item in self.iterate_async(task):
                results.append(item)

        try:
            async with anyio.create_task_group() as tg:
                for task in tasks:
                    tg.start_soon(collect, task)
        except BaseExceptionGroup as group:
            raise _first_error(group) from None

        return results


class EmitProvider(Provider):
    """Streaming strategy."""

    @asynccontextmanager
    async def open(
        self, tasks: Sequence[Task]
    ) -> AsyncIterator[MemoryObjectReceiveStream[EntryItem]]:
        """Start reading *tasks* and yield the stream entries arrive on.

        The stream ends once every task has finished. A task failure cancels
        the other tasks and is raised out of the ``async with`` block.
        Leaving the block early cancels the remaining work.
        """
        send_stream, receive_stream = anyio.create_memory_object_stream(0)
        try:
            async with anyio.create_task_group() as tg:
                tg.start_soon(self._produce, tasks, send_stream)
                try:
                    yield receive_stream
                finally:
                    tg.cancel_scope.cancel()
                    receive_stream.close()
        except BaseExceptionGroup as group:
            raise _first_error(group) from None

    async def _produce(
        self, tasks: Sequence[Task], send_stream: MemoryObjectSendStream[EntryItem]
    ) -> None:
        async with send_stream:
            async with anyio.create_task_group() as tg:
                for task in tasks:
                    tg.start_soon(self._emit, task, send_stream)
        logger.debug("Stream finished after %d task(s)", len(tasks))

    async def _emit(self, task: Task, send_stream: MemoryObjectSendStream[EntryItem]) -> None:
        async for item in self.iterate_async(task):
            await send_stream.send(item)
