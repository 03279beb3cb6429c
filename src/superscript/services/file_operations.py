"""Filesystem operations used by the persistence coordinators.

All LocalFileSystem methods are coroutines; the blocking work runs in a worker
thread. The save coordinator runs at most one write at a time.
"""

import asyncio
import os
import structlog
from dataclasses import dataclass
from pathlib import Path

logger = structlog.get_logger()


@dataclass(frozen=True)
class ListedEntry:
    """A directory entry as reported by list_dir."""

    name: str
    is_file: bool


def atomic_write(path: Path, content: str) -> None:
    """
    Atomically write content to file with temp-file-rename pattern.

    1. Write to temporary file in the same directory
    2. fsync to ensure data is on disk
    3. Atomic rename to replace original file

    Args:
        path: Target file path
        content: Content to write

    Raises:
        OSError: On file I/O errors
        PermissionError: On permission errors
    """
    # Same directory keeps the rename on one filesystem
    temp_path = path.parent / f".{path.name}.tmp.{os.getpid()}"

    try:
        temp_path.write_text(content, encoding='utf-8')

        with open(temp_path, 'r+', encoding='utf-8') as f:
            f.flush()
            os.fsync(f.fileno())

        temp_path.replace(path)

        logger.debug(
            "atomic_write_success",
            path=str(path),
            size=len(content)
        )

    except Exception as e:
        if temp_path.exists():
            temp_path.unlink()
        logger.error(
            "atomic_write_failed",
            path=str(path),
            error=str(e)
        )
        raise


def safe_move(source: Path, destination: Path) -> None:
    """
    Move a file without ever replacing a different file.

    A destination that resolves to the source itself (a case-only rename on a
    case-insensitive filesystem) is allowed.

    Args:
        source: Existing file
        destination: New location

    Raises:
        FileExistsError: If destination names another existing file
        OSError: On file I/O errors
    """
    if destination.exists() and not _same_file(source, destination):
        raise FileExistsError(f"Destination already exists: {destination}")
    source.rename(destination)


def _same_file(a: Path, b: Path) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


class LocalFileSystem:
    """Async facade over the local filesystem.

    Tests substitute a subclass to count or fail individual operations.
    """

    async def list_dir(self, directory: str) -> list[ListedEntry]:
        """List directory entries.

        Raises:
            OSError: If the directory cannot be read
        """
        def _list() -> list[ListedEntry]:
            with os.scandir(directory) as entries:
                return [ListedEntry(entry.name, entry.is_file()) for entry in entries]

        return await asyncio.to_thread(_list)

    async def modified_time(self, path: str) -> float:
        """Return the modification time of a file as a POSIX timestamp."""
        return (await asyncio.to_thread(os.stat, path)).st_mtime

    async def read_text(self, path: str) -> str:
        """Read a whole document."""
        return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")

    async def write_text(self, path: str, content: str) -> None:
        """Replace a document's content, creating the file when needed."""
        await asyncio.to_thread(atomic_write, Path(path), content)

    async def move(self, source: str, destination: str) -> None:
        """Rename a document without clobbering another file."""
        await asyncio.to_thread(safe_move, Path(source), Path(destination))

    async def remove(self, path: str) -> None:
        """Delete a document."""
        await asyncio.to_thread(os.remove, path)

    async def make_dir(self, directory: str) -> None:
        """Create a directory and its parents if missing."""
        await asyncio.to_thread(os.makedirs, directory, exist_ok=True)
