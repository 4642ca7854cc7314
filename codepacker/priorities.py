# FILE PATH: codepacker/priorities.py
# LOCATION: codepacker package
# DESCRIPTION: Per-file priorities (0-5) and the priority sort order

import logging
from typing import Dict, List, Optional, Sequence

from .settings import MemorySettingsStore, SettingsStore
from .source import FileRecord

MAX_PRIORITY = 5
SETTINGS_KEY = "filePriorities"


def _is_priority(value) -> bool:
    # bool is an int subclass but would serialize as true/false
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 <= value <= MAX_PRIORITY
    )


class PriorityStore:
    """
    Path -> priority map persisted through a settings store.

    Priority 0 means unset and is never stored.
    """

    def __init__(self, store: Optional[SettingsStore] = None):
        self._store = store if store is not None else MemorySettingsStore()
        self._priorities: Dict[str, int] = self._load()

    def _load(self) -> Dict[str, int]:
        saved = self._store.get(SETTINGS_KEY, {})
        if not isinstance(saved, dict):
            logging.warning("Ignoring malformed saved file priorities")
            return {}

        priorities = {}
        for path, value in saved.items():
            if _is_priority(value) and value > 0:
                priorities[path] = value
            else:
                logging.debug(f"Dropping invalid saved priority {value!r} for {path}")
        return priorities

    def _save(self) -> None:
        self._store.set(SETTINGS_KEY, dict(self._priorities))

    def get(self, path: str) -> int:
        return self._priorities.get(path, 0)

    def set(self, path: str, priority: int) -> None:
        if not _is_priority(priority):
            raise ValueError(f"Priority must be an integer between 0 and {MAX_PRIORITY}")

        if priority == 0:
            self._priorities.pop(path, None)
        else:
            self._priorities[path] = priority
        self._save()

    def cycle(self, path: str) -> int:
        """Advance 0 -> 1 -> ... -> 5 -> 0 and return the new priority."""
        new_priority = (self.get(path) + 1) % (MAX_PRIORITY + 1)
        self.set(path, new_priority)
        return new_priority

    def clear(self) -> None:
        self._priorities = {}
        self._store.delete(SETTINGS_KEY)

    def as_dict(self) -> Dict[str, int]:
        return dict(self._priorities)

    def sort_by_priority(self, files: Sequence[FileRecord]) -> List[FileRecord]:
        """Highest priority first; equal priorities keep their input order."""
        return sorted(files, key=lambda f: -self.get(f.relative_path))
