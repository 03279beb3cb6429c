"""Recency-ordered index of the documents in the notes folder."""

from datetime import datetime, timezone
from typing import Iterable, Optional

from superscript.models.directory import DirectoryEntry
from superscript.services.exceptions import DirectoryUnavailable
from superscript.services.file_operations import LocalFileSystem
from superscript.utils.logging import get_logger
from superscript.utils.paths import DOCUMENT_EXTENSIONS, display_name, file_name, join

logger = get_logger(__name__)


class DirectoryIndex:
    """
    Cached listing of document files, most recently modified first.

    The cache is only replaced after a complete refresh, so readers see either
    the previous listing or the new one. Entries with identical modification
    times keep the order the filesystem listed them in; callers must not rely
    on that order.

    Example:
        >>> index = DirectoryIndex(LocalFileSystem())
        >>> files = await index.refresh("/home/me/Notes")
        >>> files[0]  # most recently edited document
    """

    def __init__(
        self,
        filesystem: LocalFileSystem,
        extensions: Iterable[str] = DOCUMENT_EXTENSIONS,
    ) -> None:
        """
        Initialize an empty index.

        Args:
            filesystem: Filesystem collaborator used for listing and stat
            extensions: Recognized document extensions (lower-case, with dot)
        """
        self._fs = filesystem
        self._extensions = tuple(extension.lower() for extension in extensions)
        self._directory: Optional[str] = None
        self._entries: list[DirectoryEntry] = []

    @property
    def directory(self) -> Optional[str]:
        """Directory of the last successful refresh."""
        return self._directory

    @property
    def entries(self) -> list[DirectoryEntry]:
        """Cached entries, most recent first."""
        return list(self._entries)

    @property
    def files(self) -> list[str]:
        """Cached document paths, most recent first."""
        return [entry.path for entry in self._entries]

    def is_document(self, name: str) -> bool:
        """Whether a file name carries one of the recognized extensions."""
        return name.lower().endswith(self._extensions)

    async def refresh(self, directory: str) -> list[str]:
        """
        Rebuild the index from the filesystem.

        Args:
            directory: Folder to list

        Returns:
            Document paths sorted by modification time, newest first

        Raises:
            DirectoryUnavailable: If the folder cannot be listed
        """
        try:
            listed = await self._fs.list_dir(directory)
        except OSError as e:
            logger.error("directory_list_failed", directory=directory, error=str(e))
            raise DirectoryUnavailable(directory) from e

        entries: list[DirectoryEntry] = []
        for item in listed:
            if not item.is_file or not self.is_document(item.name):
                continue
            path = join(directory, item.name)
            try:
                mtime = await self._fs.modified_time(path)
            except OSError as e:
                # Removed between listing and stat
                logger.debug("directory_entry_skipped", path=path, error=str(e))
                continue
            entries.append(
                DirectoryEntry(
                    path=path,
                    name=display_name(path, self._extensions),
                    modified_at=datetime.fromtimestamp(mtime, tz=timezone.utc),
                )
            )

        entries.sort(key=lambda entry: entry.modified_at, reverse=True)

        self._directory = directory
        self._entries = entries
        logger.debug("directory_indexed", directory=directory, count=len(entries))
        return self.files

    def position_of(self, path: str) -> Optional[int]:
        """Return the index of ``path`` in the cached ordering, or None."""
        for position, entry in enumerate(self._entries):
            if entry.path == path:
                return position
        return None

    def matches(self, query: str) -> list[DirectoryEntry]:
        """
        Filter cached entries for the file finder.

        Matching is a case-insensitive substring test on the display name or
        the file name; recency order is preserved.

        Args:
            query: Text typed into the finder (blank returns everything)

        Returns:
            Matching entries, most recent first
        """
        needle = query.strip().lower()
        if not needle:
            return self.entries
        return [
            entry for entry in self._entries
            if needle in entry.name.lower() or needle in file_name(entry.path).lower()
        ]

    def clear(self) -> None:
        """Forget the cached listing (used when switching folders)."""
        self._directory = None
        self._entries = []
