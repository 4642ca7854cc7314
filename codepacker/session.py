# FILE PATH: codepacker/session.py
# LOCATION: codepacker package
# DESCRIPTION: Packing session - owns project state and wires the components together

"""
One packing session per loaded project.

The session owns the file list, exclusion engine, folder tree, priorities
and format selection, and hands them explicitly to the components that
need them. Pack requests are serialized: a new request cancels the one in
flight and waits for it to stop before starting.
"""

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .config import PackerConfig
from .exclusion import ExclusionEngine
from .folder_tree import (
    FlatItem,
    LazyLoader,
    TreeNode,
    VirtualWindow,
    build_folder_tree,
    flatten_tree,
    render_tree_lines,
)
from .formatter import (
    OutputFormatter,
    PackResult,
    count_total_lines,
    format_file_size,
    generate_file_name,
)
from .presets import export_preset, import_preset
from .priorities import PriorityStore
from .settings import (
    MemorySettingsStore,
    SettingsStore,
    get_output_format,
    save_recent_project,
    set_output_format,
)
from .source import FileRecord
from .worker import TextWorker


class PackerSession:
    def __init__(
        self,
        settings: Optional[SettingsStore] = None,
        config: Optional[PackerConfig] = None,
    ):
        self.settings = settings if settings is not None else MemorySettingsStore()
        self.config = config or PackerConfig()
        self.engine = ExclusionEngine()
        self.priorities = PriorityStore(self.settings)
        self.worker = TextWorker()
        self.formatter = OutputFormatter(
            self.engine,
            self.priorities,
            chars_per_token=self.config.chars_per_token,
            show_progress=self.config.show_progress,
            worker=self.worker,
        )
        self.lazy_loader = LazyLoader(self.config.lazy_threshold)

        self.files: List[FileRecord] = []
        self.tree: Dict[str, TreeNode] = {}
        self.custom_patterns_text = ""
        self.last_result: Optional[PackResult] = None
        self._pack_task: Optional[asyncio.Task] = None

    # --- Format -----------------------------------------------------------

    @property
    def output_format(self) -> str:
        return get_output_format(self.settings)

    def set_output_format(self, output_format: str) -> None:
        set_output_format(self.settings, output_format)

    # --- Project lifecycle -------------------------------------------------

    @property
    def project_name(self) -> str:
        if not self.files:
            return ""
        return self.files[0].relative_path.split("/")[0]

    @property
    def total_size(self) -> int:
        return sum(f.size for f in self.files)

    async def load_project(
        self, files: Sequence[FileRecord], project_path: Optional[str] = None
    ) -> None:
        """Reset exclusions, read .gitignore, apply auto exclusions and build the tree."""
        self.files = list(files)
        self.engine.reset()
        self.last_result = None

        if not self.files:
            logging.warning("Loaded a project without files")
            self.tree = {}
            return

        logging.info(
            f"Processing {len(self.files)} files ({format_file_size(self.total_size)})"
        )
        save_recent_project(
            self.settings,
            self.project_name,
            project_path or self.project_name,
            len(self.files),
        )

        await self.engine.load_gitignore(self.files)
        if self.custom_patterns_text:
            self.engine.set_custom_patterns(self.custom_patterns_text)
        self.engine.apply_auto_exclusions(self.files)
        self.tree = build_folder_tree(self.files)

    def set_custom_patterns(self, text: str) -> int:
        self.custom_patterns_text = text
        count = self.engine.set_custom_patterns(text)
        self.engine.apply_auto_exclusions(self.files)
        return count

    def apply_preset(self, preset_id: str) -> bool:
        return self.engine.apply_preset(preset_id, self.files)

    def toggle_exclusion(self, path: str, include: bool) -> None:
        self.engine.toggle_exclusion(path, include, self.files)

    def set_priority(self, path: str, priority: int) -> None:
        self.priorities.set(path, priority)

    def cycle_priority(self, path: str) -> int:
        return self.priorities.cycle(path)

    # --- Filter tree --------------------------------------------------------

    def flattened_tree(self) -> List[FlatItem]:
        return flatten_tree(self.tree)

    def tree_lines(self, start: int = 0, count: int = 40) -> List[str]:
        """
        Rows of the filter tree.

        Small trees are rendered whole; above the lazy threshold only the
        window starting at ``start`` is rendered.
        """
        items = self.flattened_tree()
        if self.lazy_loader.should_use_lazy_loading(len(items)):
            window = VirtualWindow(items, visible_count=count)
            window.scroll_to(start)
            items = window.visible()
        return render_tree_lines(items, self.engine.should_exclude, self.priorities.get)

    async def full_tree_lines(self, chunk_size: int = 200) -> List[str]:
        """
        Every row of the filter tree.

        Above the lazy threshold rows are rendered chunk by chunk, yielding
        to the event loop between chunks.
        """
        items = self.flattened_tree()
        if not self.lazy_loader.should_use_lazy_loading(len(items)):
            return render_tree_lines(items, self.engine.should_exclude, self.priorities.get)

        async def render_chunk(chunk: Sequence[FlatItem]) -> List[str]:
            return render_tree_lines(chunk, self.engine.should_exclude, self.priorities.get)

        return await self.lazy_loader.load_in_chunks(items, chunk_size, render_chunk)

    def is_large_project(self) -> bool:
        return self.lazy_loader.should_use_lazy_loading(len(self.flattened_tree()))

    # --- Packing ------------------------------------------------------------

    async def pack(self, output_format: Optional[str] = None) -> PackResult:
        """
        Pack the project, superseding any pack already in flight.

        The superseded caller receives asyncio.CancelledError.
        """
        while self._pack_task is not None and not self._pack_task.done():
            logging.info("Superseding in-flight pack request")
            self._pack_task.cancel()
            await asyncio.wait([self._pack_task])

        selected = output_format or self.output_format
        task = asyncio.ensure_future(self.formatter.pack(self.files, selected))
        self._pack_task = task
        result = await task
        self.last_result = result
        return result

    async def total_lines(self) -> int:
        return await count_total_lines(self.files, self.engine, self.worker)

    def close(self) -> None:
        """Shut down the background text worker."""
        self.worker.close()

    def download_file_name(self, now: Optional[datetime] = None) -> str:
        return generate_file_name(self.files, now)

    # --- Preset sharing -----------------------------------------------------

    def export_preset(self, name: str) -> str:
        return export_preset(name, self.custom_patterns_text)

    def import_preset(self, text: str) -> Dict[str, object]:
        """Validate a preset document and apply its custom patterns."""
        preset = import_preset(text)
        if preset.get("customPatterns"):
            self.set_custom_patterns(str(preset["customPatterns"]))
        return preset
