# FILE PATH: codepacker/config.py
# LOCATION: codepacker package
# DESCRIPTION: Runtime configuration and logging setup

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .folder_tree import DEFAULT_LAZY_THRESHOLD
from .settings import DEFAULT_SETTINGS_FILE
from .text_stats import CHARS_PER_TOKEN

DEFAULT_LOG_FILE = "codepacker.log"


@dataclass
class PackerConfig:
    """Configuration for one packing run."""

    output_format: Optional[str] = None  # None: use the saved format
    custom_patterns: str = ""
    preset: Optional[str] = None
    priorities: Dict[str, int] = field(default_factory=dict)
    lazy_threshold: int = DEFAULT_LAZY_THRESHOLD
    chars_per_token: float = CHARS_PER_TOKEN
    settings_file: Path = DEFAULT_SETTINGS_FILE
    show_progress: bool = False


def setup_logging(log_file: str = DEFAULT_LOG_FILE, enable_logging: bool = True):
    """Configure logging with specified settings."""
    if enable_logging:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG,
            format="%(asctime)s - %(levelname)s - %(message)s",
            filemode="w",
        )
    else:
        logging.basicConfig(level=logging.ERROR, handlers=[logging.NullHandler()])
