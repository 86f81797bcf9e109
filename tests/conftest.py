"""Shared test fixtures."""

from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

import npkl.display as display


@pytest.fixture
def make_files():
    """Create files of given sizes below a root: make_files(root, {"a/b.js": 10})."""

    def _make(root: Path, files: dict[str, int]) -> Path:
        for rel, size in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"x" * size)
        return root

    return _make


@pytest.fixture
def two_projects(tmp_path, make_files):
    """a/node_modules with 500 + 1500 + 1024000 bytes, b/node_modules with 2048 bytes."""
    make_files(
        tmp_path,
        {
            "a/node_modules/left-pad/index.js": 500,
            "a/node_modules/left-pad/package.json": 1500,
            "a/node_modules/big/dist/bundle.js": 1024000,
            "a/src/index.js": 77,
            "b/node_modules/tiny/index.js": 2048,
        },
    )
    return tmp_path


@pytest.fixture
def captured_console(monkeypatch):
    """Swap the display console for one writing to a buffer; returns the buffer."""
    buffer = StringIO()
    monkeypatch.setattr(display, "console", Console(file=buffer, width=200, color_system=None))
    return buffer
