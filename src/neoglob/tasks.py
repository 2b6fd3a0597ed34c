"""Task builder: split a pattern list into traversal tasks."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from neoglob.errors import InvalidInputError
from neoglob.pattern import (
    compile_pattern,
    get_base_directory,
    is_dynamic,
    is_negative,
    normalize,
)
from neoglob.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Task:
    """A traversal unit.

    Attributes:
        base: Directory the traversal starts from, relative to ``cwd``
            unless absolute.
        positive: Normalized inclusion patterns, not rewritten relative
            to ``base``.
        negative: Normalized exclusion patterns without their ``!``. Shared
            by every task of a call.
        dynamic: Whether any positive pattern needs a traversal. Static
            tasks are resolved with ``stat`` alone.
    """

    base: str
    positive: tuple[str, ...]
    negative: tuple[str, ...] = ()
    dynamic: bool = True

    @property
    def patterns(self) -> tuple[str, ...]:
        return self.positive + tuple(f"!{pattern}" for pattern in self.negative)


def validate_patterns(patterns: object) -> list[str]:
    """Return *patterns* as a list, or raise when it is not usable.

    Raises:
        InvalidInputError: If *patterns* is not a non-empty string or a
            non-empty list/tuple of non-empty strings.
    """
    if isinstance(patterns, str):
        items: list[object] = [patterns]
    elif isinstance(patterns, (list, tuple)):
        items = list(patterns)
    else:
        raise InvalidInputError()

    if not items or not all(isinstance(item, str) and item for item in items):
        raise InvalidInputError()
    return [str(item) for item in items]


def generate(patterns: str | Sequence[str], settings: Settings) -> list[Task]:
    """Build the task list for *patterns*.

    Args:
        patterns: One pattern or a sequence of patterns. ``!`` marks a
            negative pattern.
        settings: Resolution settings; ``settings.ignore`` adds negatives.

    Returns:
        list[Task]: One task per distinct base directory, in order of the
        first pattern seen for each base.

    Raises:
        InvalidInputError: If *patterns* fails validation.
        PatternCompilationError: If any pattern is malformed.
    """
    items = validate_patterns(patterns)
    options = settings.pattern_options

    positive: list[str] = []
    negative: list[str] = []
    for item in items:
        if is_negative(item):
            negative.append(normalize(item[1:]))
        else:
            positive.append(normalize(item))
    negative.extend(normalize(pattern) for pattern in settings.ignore)

    for pattern in positive + negative:
        compile_pattern(pattern, options)

    groups: dict[str, list[str]] = {}
    for pattern in positive:
        groups.setdefault(get_base_directory(pattern, options), []).append(pattern)

    tasks = [
        Task(
            base=base,
            positive=tuple(group),
            negative=tuple(negative),
            dynamic=any(is_dynamic(pattern, options) for pattern in group),
        )
        for base, group in groups.items()
    ]
    logger.debug("Generated %d task(s) from %d pattern(s)", len(tasks), len(items))
    return tasks
