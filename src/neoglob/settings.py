"""Resolution options shared by every execution strategy."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from neoglob.syntax import PatternOptions


@dataclass(frozen=True, slots=True)
class Settings:
    """Options controlling one resolution call.

    Attributes:
        cwd: Directory relative patterns are resolved against.
        deep: Maximum depth of reported entries below a task base, direct
            children being depth 1. ``None`` means unlimited.
        ignore: Extra negative patterns (without the ``!`` prefix).
        dot: Whether wildcards match names starting with ``.``.
        only_files: Accept files only.
        only_directories: Accept directories only. Turns ``only_files`` off.
        unique: Suppress paths already accepted during the same call.
        absolute: Report absolute paths and test negatives against them.
        mark_directories: Append ``/`` to directory paths.
        object_mode: Report ``Entry`` objects instead of strings.
        stats: Attach ``os.stat_result`` to entries. Implies ``object_mode``.
        base_name_match: Match positive patterns against the entry name.
        case_sensitive: Case-sensitive matching.
        brace_expansion: Expand ``{a,b}`` and ``{1..3}``.
        extglob: Enable ``@(a|b)`` style groups.
        globstar: Let ``**`` match across directories.
        follow_symbolic_links: Descend into symlinked directories.
        throw_error_on_broken_symbolic_link: Raise on dangling symlinks.
        suppress_errors: Swallow traversal errors other than missing paths.
        gitignore: Exclude entries matched by ``cwd/.gitignore``.
    """

    cwd: str = field(default_factory=os.getcwd)
    deep: int | None = None
    ignore: tuple[str, ...] = ()
    dot: bool = False
    only_files: bool = True
    only_directories: bool = False
    unique: bool = True
    absolute: bool = False
    mark_directories: bool = False
    object_mode: bool = False
    stats: bool = False
    base_name_match: bool = False
    case_sensitive: bool = True
    brace_expansion: bool = True
    extglob: bool = True
    globstar: bool = True
    follow_symbolic_links: bool = True
    throw_error_on_broken_symbolic_link: bool = False
    suppress_errors: bool = False
    gitignore: bool = False

    def __post_init__(self) -> None:
        # Frozen dataclass: derived values are fixed through object.__setattr__.
        object.__setattr__(self, "cwd", os.fspath(self.cwd))
        object.__setattr__(self, "ignore", tuple(self.ignore))
        if self.only_directories:
            object.__setattr__(self, "only_files", False)
        if self.stats:
            object.__setattr__(self, "object_mode", True)
        if self.deep is not None and self.deep < 0:
            raise ValueError("deep must be a non-negative integer or None")

    @property
    def pattern_options(self) -> PatternOptions:
        """Hashable matcher configuration derived from these settings."""
        return PatternOptions(
            dot=self.dot,
            case_sensitive=self.case_sensitive,
            brace_expansion=self.brace_expansion,
            extglob=self.extglob,
            globstar=self.globstar,
        )
