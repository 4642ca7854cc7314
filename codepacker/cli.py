# FILE PATH: codepacker/cli.py
# LOCATION: codepacker package
# DESCRIPTION: Command line front end for packing a project folder

"""
Pack a project folder into a single LLM-ready text artifact.

Examples:
  codepacker ./my-project
  codepacker ./my-project --format xml --preset code-only --output ctx.txt
  codepacker ./my-project --exclude "*.log,docs" --priority src/main.py=5 --copy
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pyperclip

from .config import DEFAULT_LOG_FILE, PackerConfig, setup_logging
from .errors import CodePackerError, PresetImportError
from .folder_tree import DEFAULT_LAZY_THRESHOLD
from .formatter import PackResult, format_file_size
from .presets import PRESETS, preset_file_name
from .priorities import MAX_PRIORITY
from .session import PackerSession
from .settings import DEFAULT_SETTINGS_FILE, OUTPUT_FORMATS, JsonFileSettingsStore
from .source import scan_directory
from .text_stats import count_tokens


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codepacker",
        description="Pack a project folder into one text artifact for LLM context windows",
    )
    parser.add_argument("directory_path", help="Path to the project folder to pack")
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: last used format, initially plain)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output file path (default: {project}_{YYYY-MM-DD}_{HHMM}.txt)",
    )
    parser.add_argument(
        "--exclude",
        nargs="+",
        default=[],
        help="Custom exclusion patterns (e.g. 'docs', '*.tmp', '**/backup/*'). "
        "Accepts space-separated or comma-separated values.",
    )
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default=None,
        help="Narrow the output to a preset file-type profile",
    )
    parser.add_argument(
        "--priority",
        nargs="+",
        default=[],
        metavar="PATH=N",
        help="Set file priorities 0-5 (higher appears first; 0 clears)",
    )
    parser.add_argument(
        "--include-path",
        nargs="+",
        default=[],
        metavar="PATH",
        help="Force files or folders back into the output after filtering",
    )
    parser.add_argument(
        "--exclude-path",
        nargs="+",
        default=[],
        metavar="PATH",
        help="Exclude specific files or folders from the output",
    )
    parser.add_argument(
        "--show-tree",
        action="store_true",
        help="Print the filter tree with inclusion checkboxes",
    )
    parser.add_argument(
        "--full-tree",
        action="store_true",
        help="Print every row of the filter tree, even for large projects",
    )
    parser.add_argument(
        "--copy", action="store_true", help="Copy the packed output to the clipboard"
    )
    parser.add_argument(
        "--exact-tokens",
        action="store_true",
        help="Also count tokens exactly with tiktoken (cl100k_base)",
    )
    parser.add_argument(
        "--export-preset",
        metavar="NAME",
        default=None,
        help="Save the custom exclusion patterns as a shareable preset file",
    )
    parser.add_argument(
        "--import-preset",
        metavar="FILE",
        default=None,
        help="Load custom exclusion patterns from a preset file",
    )
    parser.add_argument(
        "--settings-file",
        default=str(DEFAULT_SETTINGS_FILE),
        help=f"Settings file for format, priorities and recent projects (default: {DEFAULT_SETTINGS_FILE})",
    )
    parser.add_argument(
        "--lazy-threshold",
        type=int,
        default=DEFAULT_LAZY_THRESHOLD,
        help=f"Tree size above which the filter tree is windowed (default: {DEFAULT_LAZY_THRESHOLD})",
    )
    parser.add_argument(
        "--enable-logging",
        action="store_true",
        default=False,
        help="Enable detailed logging to file",
    )
    parser.add_argument(
        "--log-file",
        default=DEFAULT_LOG_FILE,
        help=f"Log file path (default: {DEFAULT_LOG_FILE})",
    )
    return parser


def parse_priority_args(values: List[str]) -> List[Tuple[str, int]]:
    """Parse PATH=N arguments; raises ValueError on malformed entries."""
    parsed = []
    for value in values:
        path, sep, number = value.rpartition("=")
        if not sep or not path:
            raise ValueError(f"Invalid priority {value!r}, expected PATH=N")
        priority = int(number)
        if not 0 <= priority <= MAX_PRIORITY:
            raise ValueError(f"Invalid priority {value!r}, expected 0-{MAX_PRIORITY}")
        parsed.append((path.strip().replace("\\", "/"), priority))
    return parsed


def project_path(session: PackerSession, path: str) -> str:
    """Accept paths with or without the leading project folder name."""
    path = path.strip().replace("\\", "/").strip("/")
    root = session.project_name
    if path == root or path.startswith(root + "/"):
        return path
    return f"{root}/{path}"


def print_summary(session: PackerSession, result: PackResult, total_lines: int) -> None:
    print("\nPacking complete!")
    print(f"Files included: {result.included_count:,} of {len(session.files):,}")
    print(f"Project size: {format_file_size(session.total_size)}")
    print(f"Total lines: {total_lines:,}")
    print(f"Estimated tokens: {result.tokens:,} ({result.tier})")
    if result.warnings:
        print(f"\nWarning: {len(result.warnings)} file(s) could not be read and were skipped:")
        for warning in result.warnings[:5]:
            print(f"  - {warning}")
        if len(result.warnings) > 5:
            print(f"  ... and {len(result.warnings) - 5} more")


async def run(args: argparse.Namespace, config: PackerConfig) -> int:
    session = PackerSession(JsonFileSettingsStore(config.settings_file), config)
    try:
        return await pack_project(session, args, config)
    finally:
        session.close()


async def pack_project(
    session: PackerSession, args: argparse.Namespace, config: PackerConfig
) -> int:
    pattern_sources = []
    if args.import_preset:
        with open(args.import_preset, "r", encoding="utf-8") as f:
            preset = session.import_preset(f.read())
        print(f'Preset "{preset["name"]}" imported.')
        pattern_sources.append(session.custom_patterns_text)
    if config.custom_patterns:
        pattern_sources.append(config.custom_patterns)
    # --exclude patterns add to the imported ones
    session.custom_patterns_text = "\n".join(p for p in pattern_sources if p)

    files = scan_directory(args.directory_path)
    if not files:
        print(f"Error: No files found in {args.directory_path}")
        return 1

    await session.load_project(files, str(Path(args.directory_path).resolve()))

    if config.preset:
        session.apply_preset(config.preset)
        print(f'Applied "{config.preset}" preset.')
    for path in args.exclude_path:
        session.toggle_exclusion(project_path(session, path), include=False)
    for path in args.include_path:
        session.toggle_exclusion(project_path(session, path), include=True)
    for path, priority in config.priorities.items():
        session.set_priority(project_path(session, path), priority)

    if config.output_format:
        session.set_output_format(config.output_format)

    if args.full_tree:
        print("\n".join(await session.full_tree_lines()))
    elif args.show_tree:
        if session.is_large_project():
            print(
                f"Large project detected ({len(session.flattened_tree())} items). "
                f"Showing the first rows only; use --full-tree for all of them."
            )
        print("\n".join(session.tree_lines()))

    result = await session.pack()
    total_lines = await session.total_lines()

    output_path = args.output or session.download_file_name()
    with open(output_path, "w", encoding="utf-8") as output_file:
        output_file.write(result.output)
    print(f"Output written to: {output_path}")

    if args.copy:
        try:
            pyperclip.copy(result.output)
            print("Copied to clipboard!")
        except pyperclip.PyperclipException as e:
            logging.error(f"Clipboard copy failed: {str(e)}")
            print("Failed to copy to clipboard.", file=sys.stderr)

    if args.export_preset:
        preset_path = preset_file_name(args.export_preset)
        with open(preset_path, "w", encoding="utf-8") as f:
            f.write(session.export_preset(args.export_preset))
        print(f"Preset exported to: {preset_path}")

    print_summary(session, result, total_lines)
    if args.exact_tokens:
        print(f"Exact tokens (cl100k_base): {count_tokens(result.output):,}")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_file, args.enable_logging)

    if not os.path.isdir(args.directory_path):
        logging.error(f"Invalid directory: {args.directory_path}")
        print(f"Error: Invalid directory: {args.directory_path}")
        sys.exit(1)

    try:
        priorities = dict(parse_priority_args(args.priority))
    except ValueError as e:
        parser.error(str(e))

    config = PackerConfig(
        output_format=args.format,
        custom_patterns="\n".join(args.exclude),
        preset=args.preset,
        priorities=priorities,
        lazy_threshold=args.lazy_threshold,
        settings_file=Path(args.settings_file),
        show_progress=sys.stderr.isatty(),
    )
    logging.info(f"Starting codepacker on {args.directory_path}")

    try:
        exit_code = asyncio.run(run(args, config))
    except PresetImportError as e:
        print(f"Error importing preset: {str(e)}")
        sys.exit(1)
    except (CodePackerError, OSError) as e:
        logging.error(f"Error during processing: {str(e)}")
        print(f"Error during processing: {str(e)}")
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
