"""Opening, creating and deleting documents.

Every navigation flushes pending edits first, so switching documents never
drops unsaved content. If the flush fails the navigation is abandoned and the
active document stays as it was.
"""

from typing import Callable, Optional

from superscript.models.document import ActiveDocument, Addressed, Unaddressed
from superscript.models.workspace import WorkspaceSettings
from superscript.services.directory_index import DirectoryIndex
from superscript.services.exceptions import DeleteFailed, DirectoryUnavailable, ReadFailed
from superscript.services.file_operations import LocalFileSystem
from superscript.services.save_coordinator import SaveCoordinator
from superscript.utils.logging import get_logger
from superscript.utils.paths import parent

logger = get_logger(__name__)


class NavigationCoordinator:
    """Switch the active document safely."""

    def __init__(
        self,
        settings: WorkspaceSettings,
        filesystem: LocalFileSystem,
        index: DirectoryIndex,
        saver: SaveCoordinator,
        get_document: Callable[[], ActiveDocument],
        set_document: Callable[[ActiveDocument], None],
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            settings: Active folder settings
            filesystem: Filesystem collaborator
            index: Directory index used to pick the document shown after a delete
            saver: Save coordinator flushed before every switch
            get_document: Returns the active document
            set_document: Replaces the active document
        """
        self._settings = settings
        self._fs = filesystem
        self._index = index
        self._saver = saver
        self._get_document = get_document
        self._set_document = set_document

    async def open(self, path: str) -> ActiveDocument:
        """
        Flush, then show the document stored at ``path``.

        Args:
            path: Document to open

        Returns:
            The new active document

        Raises:
            WriteFailed: If pending edits could not be saved first
            ReadFailed: If the document cannot be read
        """
        await self._saver.flush()
        content = await self._read(path)
        document = ActiveDocument(identity=Addressed(path=path), content=content)
        self._set_document(document)
        logger.info("document_opened", path=path, size=len(content))
        return document

    async def new_draft(self) -> ActiveDocument:
        """
        Flush, then show an empty draft.

        Raises:
            WriteFailed: If pending edits could not be saved first
        """
        await self._saver.flush()
        return self._show_draft()

    async def refresh(self) -> list[str]:
        """
        Re-list the notes folder, e.g. before showing the file finder.

        Raises:
            DirectoryUnavailable: If the folder cannot be listed
        """
        if self._settings.root_dir is None:
            return []
        return await self._index.refresh(self._settings.root_dir)

    async def delete(self) -> Optional[ActiveDocument]:
        """
        Delete the active document and show its neighbor.

        The next document is the one that slides into the deleted document's
        position in the recency ordering, clamped to the end of the list. When
        the folder is left empty an empty draft is shown.

        Returns:
            The new active document, or None when the active document is a
            draft (nothing to delete)

        Raises:
            WriteFailed: If pending edits could not be saved first
            DeleteFailed: If the file could not be removed (active document unchanged)
            DirectoryUnavailable: If the folder could not be listed afterwards
                (an empty draft is shown)
        """
        if not isinstance(self._get_document().identity, Addressed):
            logger.debug("delete_skipped_draft")
            return None

        await self._saver.flush()

        # The flush may have moved a placeholder-named document
        identity = self._get_document().identity
        if not isinstance(identity, Addressed):
            return None
        path = identity.path
        directory = parent(path) or self._settings.root_dir or ""

        position = self._index.position_of(path)
        if position is None and directory:
            await self._index.refresh(directory)
            position = self._index.position_of(path)
        if position is None:
            logger.warning("delete_position_unknown", path=path)
            position = 0

        try:
            await self._fs.remove(path)
        except FileNotFoundError:
            logger.warning("delete_target_missing", path=path)
        except OSError as e:
            logger.error("document_delete_failed", path=path, error=str(e))
            raise DeleteFailed(path) from e
        self._saver.discard(identity)
        logger.info("document_deleted", path=path)

        if not directory:
            return self._show_draft()
        try:
            files = await self._index.refresh(directory)
        except DirectoryUnavailable:
            self._show_draft()
            raise

        if not files:
            return self._show_draft()

        neighbor = files[min(position, len(files) - 1)]
        try:
            content = await self._read(neighbor)
        except ReadFailed:
            return self._show_draft()

        document = ActiveDocument(identity=Addressed(path=neighbor), content=content)
        self._set_document(document)
        logger.info("document_opened", path=neighbor, size=len(content), after_delete=True)
        return document

    async def _read(self, path: str) -> str:
        try:
            return await self._fs.read_text(path)
        except OSError as e:
            logger.error("document_read_failed", path=path, error=str(e))
            raise ReadFailed(path) from e

    def _show_draft(self) -> ActiveDocument:
        document = ActiveDocument(identity=Unaddressed(), content="")
        self._set_document(document)
        return document
