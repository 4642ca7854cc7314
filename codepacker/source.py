# FILE PATH: codepacker/source.py
# LOCATION: codepacker package
# DESCRIPTION: File records and project folder enumeration

"""
File records handed to the packing pipeline.

A FileRecord carries a project-root-relative posix path (always starting
with the root folder name), the file name, its size and an async reader.
The pipeline never touches the file system directly; it only awaits
``record.read_text()``.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

ENCODINGS_TO_TRY = ("utf-8", "latin-1", "cp1252")


def read_text_with_fallback(file_path: str) -> str:
    """Read a file trying several encodings, like a browser's readAsText."""
    last_error: Optional[Exception] = None
    for encoding in ENCODINGS_TO_TRY:
        try:
            with open(file_path, "r", encoding=encoding) as f:
                content = f.read()
            if encoding != "utf-8":
                logging.warning(f"File {file_path} read with {encoding} encoding")
            return content
        except (UnicodeDecodeError, UnicodeError) as e:
            last_error = e
            continue
    raise last_error


@dataclass(frozen=True)
class FileRecord:
    relative_path: str
    name: str
    size: int
    reader: Callable[[], Awaitable[str]] = field(repr=False, compare=False)

    async def read_text(self) -> str:
        return await self.reader()

    @classmethod
    def from_text(cls, relative_path: str, content: str) -> "FileRecord":
        """Build an in-memory record, mostly for tests and piped input."""

        async def reader() -> str:
            return content

        return cls(
            relative_path=relative_path,
            name=relative_path.rsplit("/", 1)[-1],
            size=len(content.encode("utf-8")),
            reader=reader,
        )

    @classmethod
    def from_path(cls, root: Path, path: Path) -> "FileRecord":
        """Build a record for ``path``, relative to the parent of ``root``."""
        relative_path = path.relative_to(root.parent).as_posix()
        file_path = str(path)

        async def reader() -> str:
            return await asyncio.to_thread(read_text_with_fallback, file_path)

        return cls(
            relative_path=relative_path,
            name=path.name,
            size=path.stat().st_size,
            reader=reader,
        )


def scan_directory(root_path: str) -> List[FileRecord]:
    """
    Enumerate every regular file below ``root_path``.

    Directories and files are visited in sorted order so the file list is
    stable between runs. Entries that cannot be accessed are logged and
    skipped.
    """
    root = Path(root_path).resolve()
    records: List[FileRecord] = []

    def on_error(error: OSError) -> None:
        logging.error(f"Error accessing directory {error.filename}: {error}")

    for current, dirs, files in os.walk(root, onerror=on_error):
        dirs.sort()
        for file_name in sorted(files):
            path = Path(current) / file_name
            try:
                if not path.is_file():
                    continue
                records.append(FileRecord.from_path(root, path))
            except OSError as e:
                logging.error(f"Cannot access file: {path} - {str(e)}")
                continue

    logging.info(f"Scanned {len(records)} files under {root}")
    return records
