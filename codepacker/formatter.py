# FILE PATH: codepacker/formatter.py
# LOCATION: codepacker package
# DESCRIPTION: Packs the included files into plain, XML, JSON, Markdown or tree output

"""
Output formatting for LLM context windows.

Every generator works from the same two views of the project:
- included files, in enumeration order (used for structural listings)
- the same files sorted by priority (used for content and per-file entries)

Media/binary files are listed with their size and never read. Text files
are read one at a time in output order; a file that cannot be read is
skipped and reported in PackResult.warnings instead of aborting the pack.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple, Union
from xml.sax.saxutils import escape

from tqdm import tqdm

from .exclusion import ExclusionEngine
from .patterns import is_media_file, is_text_file
from .priorities import PriorityStore
from .settings import DEFAULT_FORMAT, OUTPUT_FORMATS
from .errors import UnknownFormatError
from .source import FileRecord
from .text_stats import CHARS_PER_TOKEN, count_lines, estimate_tokens, token_tier
from .worker import TextWorker

FileContents = List[Tuple[FileRecord, str]]


@dataclass
class PackResult:
    output: str
    included_count: int
    tokens: int
    tier: str
    output_format: str
    warnings: List[str] = field(default_factory=list)


def format_kb(size: int) -> str:
    return f"{size / 1024:.2f}"


def format_file_size(size: int) -> str:
    """Human-readable size: '0 Bytes', '512 Bytes', '1.5 KB', '2 MB'."""
    if size == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"


def generate_file_name(files: Sequence[FileRecord], now: Optional[datetime] = None) -> str:
    """Download name '{root}_{YYYY-MM-DD}_{HHMM}.txt', whatever the format."""
    now = now or datetime.now()
    project_name = files[0].relative_path.split("/")[0] if files else "project"
    return f"{project_name}_{now:%Y-%m-%d}_{now:%H%M}.txt"


def is_content_file(f: FileRecord) -> bool:
    return is_text_file(f.name) and not is_media_file(f.name)


def _cdata(content: str) -> str:
    # ']]>' would close the section early; split it across two sections
    return "<![CDATA[" + content.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def _attr(value: str) -> str:
    return escape(value, {'"': "&quot;"})


def _code_fence(content: str) -> str:
    longest = max((len(run) for run in re.findall(r"`+", content)), default=0)
    return "`" * max(3, longest + 1)


def _language_tag(name: str) -> str:
    return name.rsplit(".", 1)[1] if "." in name else ""


class OutputFormatter:
    def __init__(
        self,
        engine: ExclusionEngine,
        priorities: PriorityStore,
        chars_per_token: float = CHARS_PER_TOKEN,
        show_progress: bool = False,
        worker: Optional[TextWorker] = None,
    ):
        self.engine = engine
        self.priorities = priorities
        self.chars_per_token = chars_per_token
        self.show_progress = show_progress
        self.worker = worker

    def _star(self, path: str) -> str:
        priority = self.priorities.get(path)
        return f" ⭐{priority}" if priority > 0 else ""

    def included_files(self, files: Sequence[FileRecord]) -> List[FileRecord]:
        return [f for f in files if not self.engine.should_exclude(f.relative_path)]

    async def _read_contents(
        self, files: Sequence[FileRecord], warnings: Optional[List[str]]
    ) -> FileContents:
        """Read text files sequentially, in the given order, skipping failures."""
        text_files = [f for f in files if is_content_file(f)]
        contents: FileContents = []

        with tqdm(
            total=len(text_files),
            desc="Reading files",
            unit="file",
            disable=not self.show_progress,
            leave=False,
        ) as progress:
            for f in text_files:
                try:
                    content = await f.read_text()
                except Exception as e:
                    message = f"Skipped {f.relative_path}: {str(e)}"
                    logging.warning(message)
                    if warnings is not None:
                        warnings.append(message)
                    continue
                finally:
                    progress.update(1)
                contents.append((f, content))

        return contents

    async def _prepare(
        self, files: Sequence[FileRecord], warnings: Optional[List[str]]
    ) -> Tuple[List[FileRecord], List[FileRecord], FileContents]:
        included = self.included_files(files)
        sorted_files = self.priorities.sort_by_priority(included)
        contents = await self._read_contents(sorted_files, warnings)
        return included, sorted_files, contents

    async def generate_plain_format(
        self, files: Sequence[FileRecord], warnings: Optional[List[str]] = None
    ) -> str:
        included, _, contents = await self._prepare(files, warnings)

        parts = ["Folder Structure:\n"]
        media_lines = []
        for f in included:
            star = self._star(f.relative_path)
            parts.append(f"{f.relative_path}{star}\n")
            if is_media_file(f.name):
                media_lines.append(f"{f.relative_path} ({format_kb(f.size)} KB){star}\n")

        if media_lines:
            parts.append("\nMedia/Binary Files (listed but not included):\n")
            parts.extend(media_lines)

        parts.append("\nCode Content:\n")
        for f, content in contents:
            parts.append(f"\n--- {f.relative_path}{self._star(f.relative_path)} ---\n{content}\n")

        return "".join(parts)

    async def generate_xml_format(
        self, files: Sequence[FileRecord], warnings: Optional[List[str]] = None
    ) -> str:
        _, sorted_files, contents = await self._prepare(files, warnings)
        content_by_path = {f.relative_path: content for f, content in contents}

        parts = ['<?xml version="1.0" encoding="UTF-8"?>\n<codebase>\n']
        for f in sorted_files:
            priority = self.priorities.get(f.relative_path)
            priority_attr = f' priority="{priority}"' if priority > 0 else ""
            path_attr = _attr(f.relative_path)

            if is_content_file(f):
                if f.relative_path not in content_by_path:
                    continue
                parts.append(f'  <file path="{path_attr}"{priority_attr}>\n')
                parts.append(f"    <content>{_cdata(content_by_path[f.relative_path])}</content>\n")
                parts.append("  </file>\n")
            elif is_media_file(f.name):
                parts.append(
                    f'  <media-file path="{path_attr}" size="{format_kb(f.size)}KB"{priority_attr} />\n'
                )

        parts.append("</codebase>")
        return "".join(parts)

    async def generate_json_format(
        self, files: Sequence[FileRecord], warnings: Optional[List[str]] = None
    ) -> str:
        _, sorted_files, contents = await self._prepare(files, warnings)
        content_by_path = {f.relative_path: content for f, content in contents}

        entries: List[Dict[str, Union[str, int]]] = []
        for f in sorted_files:
            priority = self.priorities.get(f.relative_path)
            if is_content_file(f):
                if f.relative_path not in content_by_path:
                    continue
                entry = {
                    "path": f.relative_path,
                    "type": "text",
                    "content": content_by_path[f.relative_path],
                }
            elif is_media_file(f.name):
                entry = {
                    "path": f.relative_path,
                    "type": "media",
                    "size": f"{format_kb(f.size)}KB",
                }
            else:
                continue
            if priority > 0:
                entry["priority"] = priority
            entries.append(entry)

        return json.dumps(entries, indent=2, ensure_ascii=False)

    async def generate_markdown_format(
        self, files: Sequence[FileRecord], warnings: Optional[List[str]] = None
    ) -> str:
        _, sorted_files, contents = await self._prepare(files, warnings)

        parts = ["# Codebase Contents\n\n", "## Table of Contents\n\n"]
        for index, (f, _) in enumerate(contents):
            star = self._star(f.relative_path)
            parts.append(f"{index + 1}. [{f.relative_path}{star}](#file-{index})\n")

        parts.append("\n## Files\n\n")
        for index, (f, content) in enumerate(contents):
            star = self._star(f.relative_path)
            fence = _code_fence(content)
            parts.append(f'<details id="file-{index}">\n')
            parts.append(f"<summary><strong>{f.relative_path}{star}</strong></summary>\n\n")
            parts.append(f"{fence}{_language_tag(f.name)}\n{content}\n{fence}\n\n")
            parts.append("</details>\n\n")

        media_files = [f for f in sorted_files if is_media_file(f.name)]
        if media_files:
            parts.append("## Media/Binary Files\n\n")
            for f in media_files:
                star = self._star(f.relative_path)
                parts.append(f"- {f.relative_path}{star} ({format_kb(f.size)} KB)\n")

        return "".join(parts)

    def _render_ascii_tree(self, sorted_files: Sequence[FileRecord]) -> List[str]:
        # insertion order follows the priority-sorted list, not name order
        tree: Dict[str, Union[dict, FileRecord]] = {}
        for f in sorted_files:
            parts = f.relative_path.split("/")
            current = tree
            for index, part in enumerate(parts):
                if part not in current:
                    current[part] = f if index == len(parts) - 1 else {}
                child = current[part]
                if isinstance(child, FileRecord):
                    break
                current = child

        lines: List[str] = []

        def render(node: Dict[str, Union[dict, FileRecord]], prefix: str) -> None:
            entries = list(node.items())
            for index, (name, child) in enumerate(entries):
                is_last = index == len(entries) - 1
                connector = "└── " if is_last else "├── "
                if isinstance(child, FileRecord):
                    media = " [media]" if is_media_file(child.name) else ""
                    lines.append(
                        f"{prefix}{connector}{name}{self._star(child.relative_path)}"
                        f"{media} ({format_kb(child.size)} KB)"
                    )
                else:
                    lines.append(f"{prefix}{connector}{name}/")
                    render(child, prefix + ("    " if is_last else "│   "))

        render(tree, "")
        return lines

    async def generate_tree_format(
        self, files: Sequence[FileRecord], warnings: Optional[List[str]] = None
    ) -> str:
        _, sorted_files, contents = await self._prepare(files, warnings)

        parts = ["Project Structure:\n\n"]
        parts.extend(line + "\n" for line in self._render_ascii_tree(sorted_files))
        parts.append("\n\nFile Contents:\n\n")

        for f, content in contents:
            star = self._star(f.relative_path)
            parts.append(
                f"━━━ {f.relative_path}{star} ({count_lines(content)} lines) ━━━\n{content}\n\n"
            )

        return "".join(parts)

    async def generate(
        self,
        files: Sequence[FileRecord],
        output_format: str = DEFAULT_FORMAT,
        warnings: Optional[List[str]] = None,
    ) -> str:
        generators = {
            "plain": self.generate_plain_format,
            "xml": self.generate_xml_format,
            "json": self.generate_json_format,
            "markdown": self.generate_markdown_format,
            "tree": self.generate_tree_format,
        }
        if output_format not in OUTPUT_FORMATS:
            raise UnknownFormatError(f"Unknown output format {output_format!r}")
        return await generators[output_format](files, warnings)

    async def pack(
        self, files: Sequence[FileRecord], output_format: str = DEFAULT_FORMAT
    ) -> PackResult:
        """Generate the selected format and estimate its token count."""
        warnings: List[str] = []
        included_count = len(self.included_files(files))
        output = await self.generate(files, output_format, warnings)
        if self.worker is not None:
            tokens = await self.worker.estimate_tokens(output, self.chars_per_token)
        else:
            tokens = estimate_tokens(output, self.chars_per_token)

        if warnings:
            logging.warning(f"Packed with {len(warnings)} unreadable file(s) skipped")
        logging.info(
            f"Packed {included_count} files as {output_format}: {len(output)} chars, ~{tokens} tokens"
        )

        return PackResult(
            output=output,
            included_count=included_count,
            tokens=tokens,
            tier=token_tier(tokens),
            output_format=output_format,
            warnings=warnings,
        )


async def count_total_lines(
    files: Sequence[FileRecord],
    engine: ExclusionEngine,
    worker: Optional[TextWorker] = None,
) -> int:
    """
    Total line count of included text files; unreadable files count as zero.

    Statistics are computed by a BATCH_PROCESS request on ``worker``, or on a
    short-lived worker when none is given.
    """
    items = []
    for f in files:
        if engine.should_exclude(f.relative_path) or not is_text_file(f.name):
            continue
        try:
            content = await f.read_text()
        except Exception as e:
            logging.warning(f"Cannot count lines of {f.relative_path}: {str(e)}")
            continue
        items.append({"path": f.relative_path, "name": f.name, "content": content})

    if worker is None:
        async with TextWorker(max_workers=1) as own_worker:
            stats = await own_worker.batch_process(items)
    else:
        stats = await worker.batch_process(items)
    return sum(entry["lines"] for entry in stats)
