# FILE PATH: codepacker/settings.py
# LOCATION: codepacker package
# DESCRIPTION: Key-value settings stores, output format and recent projects

"""
Persistent user settings.

The pipeline only talks to a small key-value interface. Two stores are
provided: an in-memory one (tests, one-shot runs) and a JSON file store
that plays the role of the browser's localStorage.

Keys used:
- outputFormat: one of OUTPUT_FORMATS
- filePriorities: {path: 1..5}
- recentProjects: newest-first list of at most MAX_RECENT_PROJECTS entries
"""

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import UnknownFormatError

OUTPUT_FORMATS = ("plain", "xml", "json", "markdown", "tree")
DEFAULT_FORMAT = "plain"
MAX_RECENT_PROJECTS = 5
DEFAULT_SETTINGS_FILE = Path.home() / ".codepacker_settings.json"


class SettingsStore:
    """Interface: get/set/delete JSON-serializable values by key."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemorySettingsStore(SettingsStore):
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileSettingsStore(SettingsStore):
    """
    Settings kept in one JSON file.

    A missing or corrupt file is treated as empty; every write rewrites the
    whole file through a temporary file.
    """

    def __init__(self, path: Path = DEFAULT_SETTINGS_FILE):
        self.path = Path(path)
        self._data = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logging.warning(f"Ignoring unreadable settings file {self.path}: {str(e)}")
            return {}
        if not isinstance(data, dict):
            logging.warning(f"Ignoring malformed settings file {self.path}")
            return {}
        return data

    def _save(self) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logging.error(f"Error saving settings to {self.path}: {str(e)}")

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._save()

    def delete(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._save()


def get_output_format(store: SettingsStore) -> str:
    saved = store.get("outputFormat")
    if saved in OUTPUT_FORMATS:
        return saved
    if saved is not None:
        logging.warning(f"Unknown saved output format {saved!r}, using {DEFAULT_FORMAT}")
    return DEFAULT_FORMAT


def set_output_format(store: SettingsStore, output_format: str) -> None:
    if output_format not in OUTPUT_FORMATS:
        raise UnknownFormatError(
            f"Unknown output format {output_format!r}; expected one of {', '.join(OUTPUT_FORMATS)}"
        )
    store.set("outputFormat", output_format)


def get_recent_projects(store: SettingsStore) -> List[Dict[str, Any]]:
    projects = store.get("recentProjects", [])
    if not isinstance(projects, list):
        logging.error("Error loading recent projects: stored value is not a list")
        return []
    return projects


def save_recent_project(
    store: SettingsStore,
    name: str,
    path: str,
    file_count: int,
    timestamp: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Put a project at the front of the recent list, de-duplicated by path."""
    entry = {
        "name": name,
        "path": path,
        "fileCount": file_count,
        "timestamp": timestamp if timestamp is not None else int(time.time() * 1000),
    }
    projects = [p for p in get_recent_projects(store) if p.get("path") != path]
    projects.insert(0, entry)
    projects = projects[:MAX_RECENT_PROJECTS]
    store.set("recentProjects", projects)
    return projects


def clear_recent_projects(store: SettingsStore) -> None:
    store.delete("recentProjects")
