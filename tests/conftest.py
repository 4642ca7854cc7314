import logging
import sys
from typing import Dict, List

import pytest

from codepacker.source import FileRecord

# Configure logging for tests
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


def make_files(structure: Dict[str, str]) -> List[FileRecord]:
    """Build in-memory file records, in dict order, from {relative_path: content}."""
    return [FileRecord.from_text(path, content) for path, content in structure.items()]


def make_media(relative_path: str, size: int) -> FileRecord:
    """A media record whose content must never be read."""

    async def reader() -> str:
        raise AssertionError(f"media file {relative_path} should not be read")

    return FileRecord(
        relative_path=relative_path,
        name=relative_path.rsplit("/", 1)[-1],
        size=size,
        reader=reader,
    )


def make_unreadable(relative_path: str) -> FileRecord:
    async def reader() -> str:
        raise OSError(f"Permission denied: {relative_path}")

    return FileRecord(
        relative_path=relative_path,
        name=relative_path.rsplit("/", 1)[-1],
        size=10,
        reader=reader,
    )


@pytest.fixture
def sample_project_files():
    """A small web/python project as seen by the folder picker."""
    return make_files(
        {
            "demo/.gitignore": "# build output\n/dist/\nsecrets.txt\n*.log\n",
            "demo/README.md": "# Demo\n\nA sample project.\n",
            "demo/package.json": '{"name": "demo"}',
            "demo/src/index.js": "console.log('hi');\n",
            "demo/src/utils/helpers.js": "export const add = (a, b) => a + b;\n",
            "demo/src/app.py": "print('hello')\n",
            "demo/node_modules/lodash/index.js": "module.exports = {};\n",
            "demo/dist/bundle.js": "!function(){}();\n",
            "demo/secrets.txt": "token=abc\n",
            "demo/server.log": "started\n",
            "demo/__pycache__/app.cpython-312.pyc": "binary",
        }
    ) + [make_media("demo/assets/logo.png", 2048)]


@pytest.fixture
def sample_project_dir(tmp_path):
    """Create a sample project structure on disk for scanning tests."""
    project = tmp_path / "webapp"
    structure = {
        "README.md": "# Web app\n",
        "src/main.py": "def main():\n    return 1\n",
        "src/utils.py": "def helper():\n    return True\n",
        "src/__pycache__/main.cpython-312.pyc": "compiled",
        "tests/test_main.py": "def test_main():\n    assert True\n",
        ".gitignore": "*.tmp\nlogs/\n",
        "logs/app.txt": "log line\n",
        "notes.tmp": "scratch\n",
        "node_modules/pkg/index.js": "module.exports = 1;\n",
    }
    for path, content in structure.items():
        full_path = project / path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(content, encoding="utf-8")
    (project / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00")
    return project


def pytest_configure(config):
    config.addinivalue_line("markers", "critical: marks tests as critical (must pass)")
    config.addinivalue_line(
        "markers", "important: marks tests as important (should pass)"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "slow: marks tests as slow running")
    config.addinivalue_line("markers", "skip_on_windows: skip test on Windows")


def pytest_runtest_setup(item):
    """Skip certain tests on Windows"""
    if "skip_on_windows" in [marker.name for marker in item.iter_markers()]:
        if sys.platform.startswith("win"):
            pytest.skip("Skipped on Windows")
