# FILE PATH: codepacker/exclusion.py
# LOCATION: codepacker package
# DESCRIPTION: Exclusion engine - layered rule sources and the exclusion set

"""
Decides, per path, whether a file is left out of the packed output.

Three independent rule sources feed the exclusion set:
1. built-in defaults (DEFAULT_EXCLUSIONS)
2. patterns parsed from the project's .gitignore
3. user custom patterns

On top of that the user can toggle any file or folder, and preset profiles
narrow the output to an extension allow-list. A directory path in the set
excludes everything below it.

Mutations build a new set and swap it in, so a reader never observes a
half-applied toggle or preset.
"""

import logging
from typing import FrozenSet, Iterable, List, Sequence

from .patterns import (
    DEFAULT_EXCLUSIONS,
    basename,
    file_extension,
    matches_wildcard,
    parse_gitignore_content,
    split_custom_patterns,
)
from .presets import get_preset
from .source import FileRecord


def matches_pattern_list(file_path: str, patterns: Iterable[str]) -> bool:
    """
    Check a path against patterns by segment, basename or basename wildcard.

    Patterns spanning several segments ('vendor/bundle', '**/backup/*') are
    matched against the whole path instead.
    """
    file_name = basename(file_path)
    path_parts = file_path.split("/")

    for pattern in patterns:
        if pattern in path_parts:
            return True
        if file_name == pattern:
            return True
        if "/" in pattern:
            if matches_wildcard(file_path, pattern):
                return True
        elif "*" in pattern and matches_wildcard(file_name, pattern):
            return True
    return False


def is_default_excluded(file_path: str) -> bool:
    return matches_pattern_list(file_path, DEFAULT_EXCLUSIONS)


class ExclusionEngine:
    def __init__(self):
        self._excluded: FrozenSet[str] = frozenset()
        self.gitignore_patterns: List[str] = []
        self.custom_patterns: List[str] = []

    @property
    def excluded_paths(self) -> FrozenSet[str]:
        return self._excluded

    def reset(self) -> None:
        """Clear exclusions and the gitignore/custom pattern lists."""
        self._excluded = frozenset()
        self.gitignore_patterns = []
        self.custom_patterns = []

    def is_default_excluded(self, file_path: str) -> bool:
        return is_default_excluded(file_path)

    def matches_pattern_list(self, file_path: str, patterns: Iterable[str]) -> bool:
        return matches_pattern_list(file_path, patterns)

    def is_auto_excluded(self, file_path: str) -> bool:
        return (
            is_default_excluded(file_path)
            or matches_pattern_list(file_path, self.gitignore_patterns)
            or matches_pattern_list(file_path, self.custom_patterns)
        )

    def should_exclude(self, file_path: str) -> bool:
        """True if the path or any of its ancestor folders is excluded."""
        excluded = self._excluded
        if file_path in excluded:
            return True

        parts = file_path.split("/")
        for i in range(1, len(parts) + 1):
            if "/".join(parts[:i]) in excluded:
                return True
        return False

    def _auto_excluded(self, files: Sequence[FileRecord]) -> set:
        return {f.relative_path for f in files if self.is_auto_excluded(f.relative_path)}

    def apply_auto_exclusions(self, files: Sequence[FileRecord]) -> None:
        """Add every file matched by defaults, .gitignore or custom patterns."""
        matched = self._auto_excluded(files)
        self._excluded = self._excluded | matched
        logging.debug(f"Auto-excluded {len(matched)} of {len(files)} files")

    def set_custom_patterns(self, text: str) -> int:
        """Replace the custom pattern list; returns the number of patterns."""
        self.custom_patterns = split_custom_patterns(text)
        logging.info(f"Custom patterns: {self.custom_patterns}")
        return len(self.custom_patterns)

    def set_gitignore_content(self, content: str) -> None:
        try:
            self.gitignore_patterns = parse_gitignore_content(content)
        except Exception as e:
            logging.error(f"Error parsing .gitignore: {str(e)}")
            self.gitignore_patterns = []

    async def load_gitignore(self, files: Sequence[FileRecord]) -> None:
        """Read and parse the first '.gitignore' in the file list, if any."""
        gitignore = next((f for f in files if basename(f.relative_path) == ".gitignore"), None)
        if gitignore is None:
            return

        try:
            content = await gitignore.read_text()
        except Exception as e:
            logging.error(f"Error reading .gitignore {gitignore.relative_path}: {str(e)}")
            self.gitignore_patterns = []
            return

        self.set_gitignore_content(content)
        logging.info(f"Loaded .gitignore patterns: {self.gitignore_patterns}")

    def toggle_exclusion(self, path: str, include: bool, files: Sequence[FileRecord]) -> None:
        """Include or exclude a path together with all of its descendants."""
        prefix = path + "/"
        matched = {
            f.relative_path
            for f in files
            if f.relative_path == path or f.relative_path.startswith(prefix)
        }
        if not matched:
            logging.debug(f"Toggled path matches no project file: {path}")
        affected = matched | {path}

        if include:
            # an excluded ancestor would still hide the path; drop it and
            # re-exclude the ancestor's other files instead
            parts = path.split("/")
            ancestors = {
                "/".join(parts[:i]) for i in range(1, len(parts))
            } & self._excluded
            siblings = {
                f.relative_path
                for f in files
                if f.relative_path not in affected
                and any(f.relative_path.startswith(a + "/") for a in ancestors)
            }
            self._excluded = (self._excluded - affected - ancestors) | siblings
        else:
            self._excluded = self._excluded | affected

    def apply_preset(self, preset_id: str, files: Sequence[FileRecord]) -> bool:
        """
        Rebuild the exclusion set for a preset profile.

        Standard exclusions are applied first, then every file whose
        extension is outside the preset's allow-list. Unknown ids leave the
        state untouched and return False.
        """
        preset = get_preset(preset_id)
        if preset is None:
            logging.warning(f"Unknown preset: {preset_id}")
            return False

        excluded = set()
        for f in files:
            if self.is_auto_excluded(f.relative_path):
                excluded.add(f.relative_path)
            elif not preset.allows(file_extension(f.name)):
                excluded.add(f.relative_path)

        self._excluded = frozenset(excluded)
        logging.info(f"Applied preset '{preset_id}': {len(excluded)} files excluded")
        return True
