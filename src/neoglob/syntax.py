"""Glob syntax: brace expansion through bracex, translation through wcmatch.

Braces are expanded up front so every variant can be matched, walked and
split into segments on its own; wcmatch then compiles each brace-free
variant with the ``glob`` flags derived from ``PatternOptions``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import bracex
from wcmatch import glob

from neoglob.errors import PatternCompilationError

BRACE_EXPANSION_LIMIT = 1000


@dataclass(frozen=True, slots=True)
class PatternOptions:
    """Matcher configuration. Hashable so compiled patterns can be cached.

    Attributes:
        dot: Whether wildcards match names starting with ``.``.
        case_sensitive: Case-sensitive matching.
        brace_expansion: Expand ``{}`` groups.
        extglob: Recognize extglob groups.
        globstar: Treat a ``**`` segment as any number of directories.
    """

    dot: bool = False
    case_sensitive: bool = True
    brace_expansion: bool = True
    extglob: bool = True
    globstar: bool = True


def glob_flags(options: PatternOptions) -> int:
    """Map *options* onto ``wcmatch.glob`` flags.

    ``BRACE`` is left out: braces are expanded with bracex before
    translation.
    """
    flags = glob.FORCEUNIX
    if options.extglob:
        flags |= glob.EXTGLOB
    if options.globstar:
        flags |= glob.GLOBSTAR
    if options.dot:
        flags |= glob.DOTGLOB
    flags |= glob.CASE if options.case_sensitive else glob.IGNORECASE
    return flags


def is_magic(pattern: str, options: PatternOptions) -> bool:
    """Return whether *pattern* holds any character wcmatch treats as syntax."""
    flags = glob_flags(options)
    if options.brace_expansion:
        flags |= glob.BRACE
    return glob.is_magic(pattern, flags=flags)


def expand_braces(pattern: str, limit: int = BRACE_EXPANSION_LIMIT) -> list[str]:
    """Expand brace groups into the list of patterns they denote.

    Escapes are kept so the variants are still glob patterns.

    Raises:
        PatternCompilationError: If the expansion yields more than *limit*
            patterns.
    """
    try:
        return bracex.expand(pattern, keep_escapes=True, limit=limit)
    except bracex.ExpansionLimitException as exc:
        raise PatternCompilationError(pattern, str(exc)) from exc


def compile_regexes(pattern: str, options: PatternOptions) -> tuple[re.Pattern[str], ...]:
    """Compile *pattern* into one anchored regex per brace variant.

    Raises:
        PatternCompilationError: If the pattern is malformed.
    """
    variants = expand_braces(pattern) if options.brace_expansion else [pattern]
    try:
        include, _ = glob.translate(variants, flags=glob_flags(options), limit=0)
        return tuple(re.compile(expression) for expression in include)
    except (re.error, ValueError) as exc:
        raise PatternCompilationError(pattern, str(exc)) from exc
