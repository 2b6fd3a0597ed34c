"""Exception hierarchy raised by neoglob."""

from __future__ import annotations

INVALID_PATTERNS_MESSAGE = "Patterns must be a string (non empty) or an array of strings"


class GlobError(Exception):
    """Base class for every error raised by neoglob."""


class InvalidInputError(GlobError, TypeError):
    """Pattern argument is not a non-empty string or sequence of strings.

    Raised before any filesystem access, by every execution strategy.
    """

    def __init__(self, message: str = INVALID_PATTERNS_MESSAGE) -> None:
        super().__init__(message)


class PatternCompilationError(GlobError, ValueError):
    """A pattern could not be compiled into a matcher."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid pattern '{pattern}': {reason}")
        self.pattern = pattern
        self.reason = reason


class TraversalError(GlobError, OSError):
    """Filesystem error raised while reading a directory or entry.

    The original ``OSError`` is available as ``__cause__``.
    """

    def __init__(self, path: str, error: OSError) -> None:
        super().__init__(error.errno, error.strerror or str(error), path)
        self.path = path
