# FILE PATH: codepacker/folder_tree.py
# LOCATION: codepacker package
# DESCRIPTION: Folder tree construction, deterministic flattening and windowed rendering

"""
Hierarchical view of the flat file list.

The tree is rebuilt from scratch for every project load. ``flatten_tree``
defines the one ordering used by the interactive filter tree: folders
before files, then case-sensitive name order. Large trees are consumed
through ``VirtualWindow`` or ``LazyLoader.load_in_chunks`` instead of being
rendered in one go.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

from .source import FileRecord

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_LAZY_THRESHOLD = 500


@dataclass
class TreeNode:
    name: str
    is_file: bool
    path: str
    children: Dict[str, "TreeNode"] = field(default_factory=dict)


@dataclass(frozen=True)
class FlatItem:
    name: str
    node: TreeNode
    depth: int


def build_folder_tree(files: Sequence[FileRecord]) -> Dict[str, TreeNode]:
    """Build nested TreeNodes from '/'-separated relative paths."""
    root: Dict[str, TreeNode] = {}

    for f in files:
        parts = f.relative_path.split("/")
        current = root
        for index, part in enumerate(parts):
            if part not in current:
                current[part] = TreeNode(
                    name=part,
                    is_file=index == len(parts) - 1,
                    path="/".join(parts[: index + 1]),
                )
            current = current[part].children

    return root


def _sort_key(entry):
    name, node = entry
    return (node.is_file, name)


def flatten_tree(nodes: Dict[str, TreeNode], depth: int = 0) -> List[FlatItem]:
    """Depth-first listing, folders first, then by name."""
    items: List[FlatItem] = []
    for name, node in sorted(nodes.items(), key=_sort_key):
        items.append(FlatItem(name=name, node=node, depth=depth))
        if not node.is_file and node.children:
            items.extend(flatten_tree(node.children, depth + 1))
    return items


class LazyLoader:
    """Decides when a tree is large enough for incremental rendering."""

    def __init__(self, threshold: int = DEFAULT_LAZY_THRESHOLD):
        self.threshold = threshold

    def should_use_lazy_loading(self, item_count: int) -> bool:
        return item_count > self.threshold

    async def load_in_chunks(
        self,
        items: Sequence[T],
        chunk_size: int,
        processor: Callable[[Sequence[T]], Awaitable[List[R]]],
    ) -> List[R]:
        """Process items chunk by chunk, yielding to the event loop in between."""
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")

        results: List[R] = []
        for start in range(0, len(items), chunk_size):
            results.extend(await processor(items[start : start + chunk_size]))
            await asyncio.sleep(0)
        return results


class VirtualWindow:
    """Fixed-size window over a long item list (data side of a virtual scroller)."""

    def __init__(self, items: Sequence[T], visible_count: int = 40):
        self.items = list(items)
        self.visible_count = visible_count
        self.start_index = 0

    def __len__(self) -> int:
        return len(self.items)

    def scroll_to(self, index: int) -> None:
        last_start = max(0, len(self.items) - self.visible_count)
        self.start_index = min(max(0, index), last_start)

    def visible(self) -> List[T]:
        return self.items[self.start_index : self.start_index + self.visible_count]

    def update(self, items: Sequence[T]) -> None:
        self.items = list(items)
        self.scroll_to(self.start_index)


def _folder_excluded(node: TreeNode, should_exclude: Callable[[str], bool]) -> bool:
    """A folder is unchecked when it is excluded or every file below it is."""
    if should_exclude(node.path):
        return True
    return all(
        should_exclude(child.path) if child.is_file else _folder_excluded(child, should_exclude)
        for child in node.children.values()
    )


def render_tree_lines(
    items: Sequence[FlatItem],
    should_exclude: Callable[[str], bool],
    get_priority: Optional[Callable[[str], int]] = None,
) -> List[str]:
    """Printable filter-tree rows: checkbox, indent, icon, name and priority star."""
    lines = []
    for item in items:
        node = item.node
        if node.is_file:
            excluded = should_exclude(node.path)
        else:
            excluded = _folder_excluded(node, should_exclude)
        checkbox = "[ ]" if excluded else "[x]"
        icon = "📄" if node.is_file else "📁"
        line = f"{checkbox} {'    ' * item.depth}{icon} {item.name}"
        if node.is_file and get_priority is not None:
            priority = get_priority(node.path)
            if priority > 0:
                line += f" ⭐{priority}"
        lines.append(line)
    return lines
