# FILE PATH: codepacker/patterns.py
# LOCATION: codepacker package
# DESCRIPTION: Wildcard matching, gitignore parsing and file classification tables

"""
Pattern helpers shared by the exclusion engine and the formatters.

Everything here is a pure function or a constant table, so it can run on
the event loop or inside the worker executor without any shared state.

Matching is deliberately simpler than real gitignore semantics:
- a pattern without '*' matches the full path or any path ending in '/pattern'
- a pattern with '**' is translated to a regex searched against the full path
- a pattern with a single '*' is matched against the basename only
"""

import re
from typing import List

# Text-based file extensions
TEXT_FILE_EXTENSIONS = frozenset(
    [
        "txt", "js", "jsx", "ts", "tsx", "html", "css", "scss", "sass",
        "less", "json", "xml", "md", "markdown", "py", "java", "c", "cpp",
        "h", "hpp", "cs", "php", "rb", "swift", "kt", "go", "rs", "sql",
        "yaml", "yml", "toml", "ini", "cfg", "conf", "sh", "bash", "env",
        "gitignore", "dockerfile", "vue", "svelte", "astro", "graphql",
        "prisma", "csv", "tsv",
    ]
)

# Media/binary extensions: listed with their size, content never read
MEDIA_EXTENSIONS = frozenset(
    [
        # Images
        "png", "jpg", "jpeg", "gif", "bmp", "svg", "ico", "webp", "tiff", "tif",
        # Audio
        "mp3", "wav", "ogg", "flac", "aac", "m4a", "wma",
        # Video
        "mp4", "avi", "mov", "wmv", "flv", "mkv", "webm", "mpeg", "mpg",
        # Fonts
        "ttf", "otf", "woff", "woff2", "eot",
        # Archives
        "zip", "rar", "7z", "tar", "gz", "bz2",
        # Documents
        "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
    ]
)

# Smart default exclusions (folders, files and simple wildcards)
DEFAULT_EXCLUSIONS = (
    # JavaScript/Node.js
    "node_modules",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "npm-debug.log",
    "yarn-error.log",
    ".next",
    ".nuxt",
    # Python
    "__pycache__",
    "*.pyc",
    "*.pyo",
    "*.pyd",
    ".Python",
    "venv",
    "env",
    "ENV",
    "virtualenv",
    ".pytest_cache",
    "*.egg-info",
    "dist",
    "build",
    ".tox",
    # Java
    "target",
    "*.class",
    "*.jar",
    "*.war",
    "*.ear",
    # .NET
    "bin",
    "obj",
    "*.dll",
    "*.exe",
    "*.pdb",
    # Ruby
    "vendor/bundle",
    "*.gem",
    ".bundle",
    # Go
    "vendor",
    "*.test",
    # Rust
    "Cargo.lock",
    # Version control
    ".git",
    ".svn",
    ".hg",
    # Build/cache directories
    ".cache",
    "cache",
    "tmp",
    "temp",
    "coverage",
    ".nyc_output",
    # Environment files
    ".env",
    ".env.local",
    ".env.development",
    ".env.production",
    ".env.test",
    # IDE/editor files
    ".vscode",
    ".idea",
    ".DS_Store",
    "Thumbs.db",
    "*.swp",
    "*.swo",
    "*~",
)


def basename(path: str) -> str:
    """Return the final '/'-separated segment of a path."""
    return path.rsplit("/", 1)[-1]


def file_extension(name: str) -> str:
    """
    Lower-cased text after the last dot of a file name.

    A name without a dot yields the whole name, so 'Dockerfile' maps to
    'dockerfile' and '.gitignore' maps to 'gitignore'.
    """
    return name.rsplit(".", 1)[-1].lower()


def is_text_file(name: str) -> bool:
    return file_extension(name) in TEXT_FILE_EXTENSIONS or name.lower().endswith(
        "gitignore"
    )


def is_media_file(name: str) -> bool:
    return file_extension(name) in MEDIA_EXTENSIONS


def _double_star_regex(pattern: str) -> str:
    anchored = pattern.startswith("**/")
    if anchored:
        pattern = pattern[3:]

    parts = [re.escape(chunk).replace(r"\*", "[^/]*") for chunk in pattern.split("**")]
    regex = ".*".join(parts)

    if anchored:
        regex = "(^|/)" + regex
    return regex


def matches_wildcard(filepath: str, pattern: str) -> bool:
    """Match a path against an exact name, a '**' glob or a basename wildcard."""
    if "*" not in pattern:
        # whole-segment match anywhere: covers the exact path, a '/name'
        # suffix and an intermediate directory such as 'b' in 'a/b/c.js'
        return f"/{pattern}/" in f"/{filepath}/"

    if "**" in pattern:
        return re.search(_double_star_regex(pattern), filepath) is not None

    regex = re.escape(pattern).replace(r"\*", ".*")
    return re.fullmatch(regex, basename(filepath)) is not None


def parse_gitignore_content(content: str) -> List[str]:
    """
    Parse .gitignore text into a flat list of patterns.

    Comments and blank lines are dropped, a leading and a trailing '/' are
    stripped. Negation ('!pattern') and anchoring are not interpreted.

    Stripping repeats until the pattern is stable ('a//' becomes 'a'), so
    parsing the joined output again returns the same list.
    """
    if not content:
        return []

    patterns = []
    for line in content.splitlines():
        pattern = line.strip()
        if not pattern or pattern.startswith("#"):
            continue
        while True:
            stripped = pattern
            if stripped.startswith("/"):
                stripped = stripped[1:]
            if stripped.endswith("/"):
                stripped = stripped[:-1]
            stripped = stripped.strip()
            if stripped == pattern:
                break
            pattern = stripped
        if pattern and not pattern.startswith("#"):
            patterns.append(pattern)
    return patterns


def split_custom_patterns(text: str) -> List[str]:
    """Split user input on commas and newlines, dropping empty entries."""
    if not text:
        return []
    return [p.strip() for p in re.split(r"[,\n]", text) if p.strip()]
