"""neoglob: resolve glob patterns against the filesystem.

Three execution strategies share one pipeline::

    neoglob.glob_sync("src/**/*.py")            # buffered, synchronous
    await neoglob.glob("src/**/*.py")           # asynchronous
    async with neoglob.stream("**/*.md") as s:  # streaming
        async for path in s: ...
"""

from neoglob.api import (
    escape_path,
    generate_tasks,
    glob,
    glob_sync,
    iglob,
    is_dynamic_pattern,
    stream,
)
from neoglob.errors import GlobError, InvalidInputError, PatternCompilationError, TraversalError
from neoglob.scanner import Entry
from neoglob.settings import Settings
from neoglob.tasks import Task

__version__ = "0.1.0"

__all__ = [
    "Entry",
    "GlobError",
    "InvalidInputError",
    "PatternCompilationError",
    "Settings",
    "Task",
    "TraversalError",
    "escape_path",
    "generate_tasks",
    "glob",
    "glob_sync",
    "iglob",
    "is_dynamic_pattern",
    "stream",
]
