"""Shared test fixtures for all test modules."""

import asyncio
import os
from pathlib import Path

import pytest

from superscript.models.config import Config
from superscript.services.file_operations import LocalFileSystem
from superscript.services.naming import MonotonicClock
from superscript.services.session import EditorSession


# Fixed wall clock for timestamp names: 2023-11-14 22:13:20 UTC
FIXED_NOW = 1700000000.0


class RecordingFileSystem(LocalFileSystem):
    """
    Local filesystem that records mutating calls and can be told to fail.

    ``write_gate`` holds every write until the event is set, which lets a test
    observe the coordinator while a write is in flight.
    """

    def __init__(self):
        self.writes: list[tuple[str, str]] = []
        self.moves: list[tuple[str, str]] = []
        self.removes: list[str] = []
        self.fail_writes = False
        self.fail_moves = False
        self.fail_removes = False
        self.write_gate: asyncio.Event | None = None

    async def write_text(self, path: str, content: str) -> None:
        self.writes.append((path, content))
        if self.write_gate is not None:
            await self.write_gate.wait()
        if self.fail_writes:
            raise PermissionError(f"Permission denied: {path}")
        await super().write_text(path, content)

    async def move(self, source: str, destination: str) -> None:
        self.moves.append((source, destination))
        if self.fail_moves:
            raise PermissionError(f"Permission denied: {source}")
        await super().move(source, destination)

    async def remove(self, path: str) -> None:
        self.removes.append(path)
        if self.fail_removes:
            raise PermissionError(f"Permission denied: {path}")
        await super().remove(path)


@pytest.fixture
def notes_dir(tmp_path) -> Path:
    """Empty notes folder."""
    directory = tmp_path / "notes"
    directory.mkdir()
    return directory


@pytest.fixture
def make_note(notes_dir):
    """Create a document in the notes folder, optionally with a fixed mtime."""
    def _make(name: str, content: str = "", mtime: float | None = None) -> Path:
        path = notes_dir / name
        path.write_text(content, encoding="utf-8")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _make


@pytest.fixture
def config() -> Config:
    """Configuration with a short quiet period and case-sensitive collisions."""
    return Config(autosave={"debounce_ms": 20}, collisions={"case_policy": "sensitive"})


@pytest.fixture
def fs() -> RecordingFileSystem:
    return RecordingFileSystem()


@pytest.fixture
def fixed_now() -> float:
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now) -> MonotonicClock:
    return MonotonicClock(now=lambda: fixed_now)


@pytest.fixture
def session(config, notes_dir, fs, clock) -> EditorSession:
    """Session on the notes folder showing an empty draft."""
    return EditorSession(config, notes_dir.as_posix(), filesystem=fs, clock=clock)


async def _wait_until(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.fixture
def wait_until():
    """Poll a predicate on the running loop until it holds."""
    return _wait_until


@pytest.fixture
def settled(wait_until):
    """Wait until a save coordinator has nothing armed, pending or in flight."""
    async def _settled(saver) -> None:
        await wait_until(
            lambda: saver.pending is None and not saver.timer_armed and not saver.flushing
        )

    return _settled
