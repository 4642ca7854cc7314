# FILE PATH: codepacker/presets.py
# LOCATION: codepacker package
# DESCRIPTION: Preset filter profiles and preset export/import documents

"""
Preset profiles narrow the output to a category of file types.

A preset is an extension allow-list applied on top of the standard
exclusions; ``full`` allows every extension. Presets can also be shared as
small JSON documents holding the user's custom exclusion patterns.
"""

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Union

from .errors import PresetImportError

PRESET_VERSION = "1.0"
ALL_EXTENSIONS = "all"

_CODE = (
    "js", "jsx", "ts", "tsx", "py", "java", "c", "cpp", "h", "hpp",
    "cs", "php", "rb", "swift", "kt", "go", "rs", "sql", "html", "css",
    "scss", "sass", "less", "vue", "svelte", "astro",
)
_DOCS = ("md", "markdown", "txt", "rst", "adoc")
_CONFIG = ("json", "yaml", "yml", "toml", "ini", "cfg", "conf", "env")
_MEDIA = (
    "png", "jpg", "jpeg", "gif", "webp", "svg", "ico", "bmp",
    "mp4", "webm", "avi", "mov", "mp3", "wav", "ogg", "flac",
)


@dataclass(frozen=True)
class Preset:
    preset_id: str
    name: str
    include: Union[FrozenSet[str], str]

    def allows(self, extension: str) -> bool:
        if self.include == ALL_EXTENSIONS:
            return True
        return extension in self.include


PRESETS: Dict[str, Preset] = {
    "code-only": Preset("code-only", "Code Only", frozenset(_CODE)),
    "code-docs": Preset("code-docs", "Code + Documentation", frozenset(_CODE + _DOCS)),
    "code-config": Preset("code-config", "Code + Config", frozenset(_CODE + _CONFIG)),
    "docs-only": Preset(
        "docs-only",
        "Documentation Only",
        frozenset(_DOCS + ("textile", "wiki", "pdf", "doc", "docx")),
    ),
    "code-media-list": Preset(
        "code-media-list", "Code + Media Listing", frozenset(_CODE + _MEDIA)
    ),
    "media-list-only": Preset(
        "media-list-only",
        "Media Listing Only",
        frozenset(_MEDIA + ("pdf", "zip", "rar", "7z", "tar", "gz")),
    ),
    "full": Preset("full", "Full Project", ALL_EXTENSIONS),
}


def get_preset(preset_id: str) -> Optional[Preset]:
    return PRESETS.get(preset_id)


def export_preset(name: str, custom_patterns: str, timestamp: Optional[int] = None) -> str:
    """Serialize custom patterns as a shareable preset document."""
    preset = {
        "name": name,
        "version": PRESET_VERSION,
        "customPatterns": custom_patterns,
        "timestamp": timestamp if timestamp is not None else int(time.time() * 1000),
    }
    return json.dumps(preset, indent=2)


def preset_file_name(name: str) -> str:
    slug = re.sub(r"\s+", "-", name.lower())
    return f"code-packer-preset-{slug}.json"


def import_preset(text: str) -> Dict[str, object]:
    """
    Parse and validate a preset document.

    Raises PresetImportError when the JSON is malformed or 'name'/'version'
    are missing.
    """
    try:
        preset = json.loads(text)
    except json.JSONDecodeError as e:
        logging.error(f"Error parsing preset file: {str(e)}")
        raise PresetImportError(f"Invalid preset file format: {e}") from e

    if not isinstance(preset, dict) or not preset.get("name") or not preset.get("version"):
        logging.error("Preset file is missing 'name' or 'version'")
        raise PresetImportError("Invalid preset file format")

    preset.setdefault("customPatterns", "")
    logging.info(f"Imported preset: {preset['name']}")
    return preset
