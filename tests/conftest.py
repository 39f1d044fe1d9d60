"""
Shared fixtures for scan core tests.
Builds in-memory file sources and isolated temporary files with controlled content.
"""
import io
import sys
import pytest
from pathlib import Path
from typing import Dict

# Add src/ to sys.path so 'filededup' is importable without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from filededup.core.models import FileSource


def make_source(path: str, content: bytes, name: str = None) -> FileSource:
    """In-memory FileSource whose stream yields `content`."""
    return FileSource(path=path, size=len(content), opener=lambda: io.BytesIO(content), name=name)


def failing_source(path: str, size: int = 10, error: Exception = None) -> FileSource:
    """FileSource whose stream cannot be opened."""
    def opener():
        raise error or PermissionError(13, "Permission denied", path)
    return FileSource(path=path, size=size, opener=opener)


@pytest.fixture
def source_factory():
    return make_source


@pytest.fixture
def failing_source_factory():
    return failing_source


@pytest.fixture
def test_files(tmp_path) -> Dict[str, Path]:
    """
    Creates controlled test files for scan scenarios:
    - 2 identical installers (duplicates, browser names)
    - 1 identical copy in a subdirectory
    - 2 unique files
    """
    files = {}

    content_a = b"A" * 1024
    files["chrome_a"] = tmp_path / "chrome-installer.exe"
    files["chrome_b"] = tmp_path / "chrome-copy.exe"
    files["chrome_a"].write_bytes(content_a)
    files["chrome_b"].write_bytes(content_a)

    subdir = tmp_path / "backup"
    subdir.mkdir()
    files["chrome_sub"] = subdir / "setup.exe"
    files["chrome_sub"].write_bytes(content_a)

    files["readme"] = tmp_path / "readme.txt"
    files["readme"].write_bytes(b"read me first")
    files["photo"] = tmp_path / "photo.JPG"
    files["photo"].write_bytes(b"\xff\xd8\xff" + b"P" * 500)

    return files
