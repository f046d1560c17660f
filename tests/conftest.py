"""
Shared fixtures for dupscan tests.
Creates isolated temporary directory trees with controlled file contents.
"""
import tempfile
import threading
from pathlib import Path
from typing import Dict

import pytest


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


def write(path: Path, content: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Tree used by most end-to-end tests:
    - A, B, C: identical 10-byte files (one in a subdirectory)
    - D: 10 bytes, different content
    - unique: different size
    - empty1/empty2: zero-byte files
    - node_modules/copy: identical to A, inside a folder tests may hide
    """
    files = {
        "a": write(temp_dir / "a.txt", b"0123456789"),
        "b": write(temp_dir / "b.txt", b"0123456789"),
        "c": write(temp_dir / "sub" / "c.txt", b"0123456789"),
        "d": write(temp_dir / "d.txt", b"abcdefghij"),
        "unique": write(temp_dir / "unique.bin", b"X" * 1500),
        "empty1": write(temp_dir / "empty1.txt", b""),
        "empty2": write(temp_dir / "sub" / "empty2.txt", b""),
        "hidden_copy": write(temp_dir / "node_modules" / "copy.txt", b"0123456789"),
    }
    return files


class EventRecorder:
    """Progress sink that keeps every event; safe to call from worker threads."""

    def __init__(self):
        self._lock = threading.Lock()
        self.events = []

    def __call__(self, event):
        with self._lock:
            self.events.append(event)

    def of_kind(self, kind: str):
        return [e for e in self.events if e.kind == kind]


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()
