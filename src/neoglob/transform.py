"""Turn accepted entries into output items."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import Union

from neoglob.pattern import make_absolute
from neoglob.scanner import Entry
from neoglob.settings import Settings

EntryItem = Union[str, Entry]


class EntryTransformer:
    """Apply ``absolute``, ``mark_directories`` and ``object_mode``."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def get_transformer(self) -> Callable[[Entry], EntryItem]:
        return self._transform

    def _transform(self, entry: Entry) -> EntryItem:
        filepath = entry.path

        if self._settings.absolute:
            filepath = make_absolute(self._settings.cwd, filepath)

        if self._settings.mark_directories and entry.is_dir and not filepath.endswith("/"):
            filepath += "/"

        if not self._settings.object_mode:
            return filepath

        return replace(entry, path=filepath)
