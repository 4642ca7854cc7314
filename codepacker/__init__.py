# codepacker/__init__.py

__version__ = "0.1.0"

from .exclusion import ExclusionEngine
from .formatter import OutputFormatter, PackResult
from .priorities import PriorityStore
from .session import PackerSession
from .source import FileRecord, scan_directory
