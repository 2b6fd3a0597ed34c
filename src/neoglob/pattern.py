"""Pattern utilities: normalization, classification, escaping and matchers."""

from __future__ import annotations

import functools
import os
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from neoglob.syntax import PatternOptions, compile_regexes, expand_braces, is_magic

GLOBSTAR = "**"

_DUPLICATE_SLASHES_RE = re.compile(r"(?!^)/{2,}")
_ESCAPED_CHAR_RE = re.compile(r"\\(.)", re.DOTALL)
_ESCAPE_SPECIAL_RE = re.compile(r"(\\?)([()*?[\]{|}]|^!|[!+@](?=\())")


def normalize(pattern: str) -> str:
    """Collapse repeated ``/`` and strip leading ``./`` segments.

    A leading ``//`` (UNC prefix) is preserved. Idempotent.
    """
    collapsed = _DUPLICATE_SLASHES_RE.sub("/", pattern)
    while collapsed.startswith("./") and len(collapsed) > 2:
        collapsed = collapsed[2:]
    return collapsed


def is_negative(pattern: str) -> bool:
    """``!foo`` is negative; an extglob ``!(foo)`` is not."""
    return pattern.startswith("!") and pattern[1:2] != "("


def is_positive(pattern: str) -> bool:
    """Return whether *pattern* includes paths rather than excluding them.

    Args:
        pattern: Raw pattern, possibly prefixed with ``!``.

    Returns:
        bool: ``True`` unless the pattern is negative.
    """
    return not is_negative(pattern)


def _has_magic(pattern: str, options: PatternOptions) -> bool:
    # Escaped characters are literal, and wcmatch counts a backslash as magic.
    return is_magic(_ESCAPED_CHAR_RE.sub("", pattern), options)


def is_dynamic(pattern: str, options: PatternOptions | None = None) -> bool:
    """Return whether *pattern* contains unescaped glob syntax.

    Case-insensitive matching makes every pattern dynamic, since a literal
    path cannot be looked up case-insensitively.
    """
    options = options or PatternOptions()
    if not pattern:
        return False
    if not options.case_sensitive:
        return True
    return _has_magic(pattern, options)


def is_static(pattern: str, options: PatternOptions | None = None) -> bool:
    return not is_dynamic(pattern, options)


def escape(path: str) -> str:
    """Escape every character of *path* the glob syntax would interpret.

    Already escaped characters are left as they are.
    """
    return _ESCAPE_SPECIAL_RE.sub(r"\\\2", path)


def unescape(pattern: str) -> str:
    """Drop escaping backslashes, turning a static pattern into a path."""
    return _ESCAPED_CHAR_RE.sub(r"\1", pattern)


def get_base_directory(pattern: str, options: PatternOptions | None = None) -> str:
    """Return the longest wildcard-free directory prefix of *pattern*.

    The last segment never belongs to the base, so static patterns yield
    their parent directory. Returns ``.`` when there is no static prefix.
    A segment holding part of a brace group spanning ``/`` counts as magic.
    """
    options = options or PatternOptions()
    static: list[str] = []
    for segment in pattern.split("/")[:-1]:
        if _has_magic(segment, options):
            break
        static.append(segment)

    if not static:
        return "."
    base = "/".join(static)
    return unescape(base) if base else "/"


def is_affect_depth_of_reading_pattern(pattern: str) -> bool:
    """Negative patterns that can exclude a whole directory from traversal."""
    basename = pattern.rsplit("/", 1)[-1]
    return pattern.endswith("/" + GLOBSTAR) or is_static(basename)


# Path helpers


def remove_leading_dot_segment(path: str) -> str:
    if path.startswith("./"):
        return path[2:]
    return path


def make_absolute(cwd: str, path: str) -> str:
    """Join *path* onto *cwd* and return it with ``/`` separators."""
    absolute = os.path.normpath(os.path.join(cwd, path))
    return absolute.replace(os.sep, "/") if os.sep != "/" else absolute


# Matchers


@dataclass(frozen=True, slots=True)
class Matcher:
    """Compiled predicate for a single pattern.

    Attributes:
        pattern: Source pattern.
        regexes: One anchored regex per brace variant.
        directory_only: The pattern ended with ``/`` and only matches paths
            given in directory form (with a trailing ``/``).
    """

    pattern: str
    regexes: tuple[re.Pattern[str], ...]
    directory_only: bool = False

    def match(self, path: str) -> bool:
        if self.directory_only:
            if not path.endswith("/"):
                return False
            path = path[:-1]
        return any(regex.fullmatch(path) is not None for regex in self.regexes)


@functools.lru_cache(maxsize=2048)
def compile_pattern(pattern: str, options: PatternOptions) -> Matcher:
    """Compile *pattern* under *options*; memoized per ``(pattern, options)``.

    Raises:
        PatternCompilationError: If the pattern is malformed.
    """
    directory_only = len(pattern) > 1 and pattern.endswith("/")
    body = pattern[:-1] if directory_only else pattern
    return Matcher(
        pattern=pattern,
        regexes=compile_regexes(body, options),
        directory_only=directory_only,
    )


def to_matchers(patterns: Iterable[str], options: PatternOptions) -> list[Matcher]:
    """Normalize and compile *patterns*.

    Args:
        patterns: Glob patterns, without any ``!`` prefix.
        options: Matcher configuration shared by every pattern.

    Returns:
        list[Matcher]: One matcher per pattern, in input order.

    Raises:
        PatternCompilationError: If a pattern is malformed.
    """
    return [compile_pattern(normalize(pattern), options) for pattern in patterns]


def match_any(path: str, matchers: Sequence[Matcher]) -> bool:
    """Return whether any of *matchers* matches *path*.

    Args:
        path: ``/``-separated path, in directory form when it ends with ``/``.
        matchers: Compiled patterns.

    Returns:
        bool: ``False`` for an empty *matchers*.
    """
    return any(matcher.match(path) for matcher in matchers)


@dataclass(frozen=True, slots=True)
class _Segment:
    pattern: str
    dynamic: bool
    regexes: tuple[re.Pattern[str], ...] = ()


@dataclass(frozen=True, slots=True)
class _PatternInfo:
    segments: tuple[_Segment, ...]
    leading: int
    complete: bool


class PartialMatcher:
    """Decide whether a directory may contain matches of any pattern.

    Patterns are compared segment by segment against the directory path.
    Once a pattern reaches its first ``**`` every deeper directory may match.
    """

    def __init__(self, patterns: Iterable[str], options: PatternOptions) -> None:
        self._options = options
        # Braces are expanded here; segments are compiled without them.
        self._segment_options = replace(options, brace_expansion=False)
        self._infos: list[_PatternInfo] = []
        for pattern in patterns:
            variants = expand_braces(pattern) if options.brace_expansion else [pattern]
            for variant in variants:
                self._infos.append(self._build_info(variant))

    def _build_info(self, pattern: str) -> _PatternInfo:
        parts = pattern.split("/")
        segments = tuple(self._build_segment(part) for part in parts)
        has_globstar = self._options.globstar and GLOBSTAR in parts
        leading = parts.index(GLOBSTAR) if has_globstar else len(parts)
        return _PatternInfo(segments=segments, leading=leading, complete=not has_globstar)

    def _build_segment(self, part: str) -> _Segment:
        options = self._segment_options
        if not _has_magic(part, options) and options.case_sensitive:
            return _Segment(pattern=unescape(part), dynamic=False)
        return _Segment(pattern=part, dynamic=True, regexes=compile_regexes(part, options))

    def match(self, filepath: str) -> bool:
        """Return whether directory *filepath* may hold a match.

        Args:
            filepath: ``/``-separated directory path relative to ``cwd``.

        Returns:
            bool: ``False`` when every pattern is shorter than the path or
            differs from it on a compared segment.
        """
        parts = filepath.split("/")
        levels = len(parts)

        for info in self._infos:
            if info.complete and len(info.segments) <= levels:
                continue
            if not info.complete and levels > info.leading:
                return True
            if all(
                _segment_matches(info.segments[index], part) for index, part in enumerate(parts)
            ):
                return True

        return False


def _segment_matches(segment: _Segment, part: str) -> bool:
    if segment.dynamic:
        return any(regex.fullmatch(part) is not None for regex in segment.regexes)
    return segment.pattern == part
