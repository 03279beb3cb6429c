"""Editor session: the active document plus the coordinators acting on it.

The session stands in for the UI layer. It owns the active document and
forwards editor events to the coordinators, which only see the document
through accessors.
"""

from typing import Optional

from superscript.models.config import Config
from superscript.models.directory import DirectoryEntry
from superscript.models.document import ActiveDocument, Addressed, DocumentIdentity
from superscript.models.rename import RenameResult
from superscript.models.workspace import WorkspaceSettings
from superscript.services.directory_index import DirectoryIndex
from superscript.services.file_operations import LocalFileSystem
from superscript.services.naming import MonotonicClock
from superscript.services.navigation import NavigationCoordinator
from superscript.services.path_allocator import resolve_case_policy
from superscript.services.rename_coordinator import RenameCoordinator
from superscript.services.root_directory import RootDirectoryStore, resolve_startup_root
from superscript.services.save_coordinator import SaveCoordinator
from superscript.utils.logging import get_logger

logger = get_logger(__name__)


class EditorSession:
    """
    One editing window over one notes folder.

    Example:
        >>> session = await EditorSession.start(config)
        >>> session.edit("# Groceries\\n- milk")
        >>> await session.flush()
        >>> session.document.path
        '/home/me/Notes/Groceries.md'
    """

    def __init__(
        self,
        config: Config,
        root_dir: Optional[str] = None,
        filesystem: Optional[LocalFileSystem] = None,
        store: Optional[RootDirectoryStore] = None,
        clock: Optional[MonotonicClock] = None,
    ) -> None:
        """
        Create a session showing an empty draft.

        Call ``switch_root`` (or use ``start``) to list the folder before
        navigating.

        Args:
            config: Loaded configuration
            root_dir: Notes folder, or None until the user picks one
            filesystem: Filesystem collaborator
            store: Remembered-folder store updated by switch_root
            clock: Timestamp source for fallback names
        """
        self._config = config
        self._fs = filesystem or LocalFileSystem()
        self._store = store
        self._clock = clock
        self._document = ActiveDocument()
        self._build(self._settings_for(root_dir))

    @classmethod
    async def start(
        cls,
        config: Config,
        store: Optional[RootDirectoryStore] = None,
        filesystem: Optional[LocalFileSystem] = None,
    ) -> "EditorSession":
        """
        Create a session on the folder chosen at startup and list it.

        When no folder can be resolved the session has no root; the caller
        should ask the user for one and call ``switch_root``.
        """
        store = store or RootDirectoryStore()
        fs = filesystem or LocalFileSystem()
        root = await resolve_startup_root(store, config, fs)
        session = cls(config, root, filesystem=fs, store=store)
        if root is not None:
            await session.index.refresh(root)
        logger.info("session_started", root_dir=root)
        return session

    def _settings_for(self, root_dir: Optional[str]) -> WorkspaceSettings:
        policy = resolve_case_policy(self._config.collisions.case_policy, root_dir)
        return WorkspaceSettings.from_config(self._config, root_dir, policy)

    def _build(self, settings: WorkspaceSettings, index: Optional[DirectoryIndex] = None) -> None:
        self._settings = settings
        self.index = index or DirectoryIndex(self._fs, settings.extensions)
        self.saver = SaveCoordinator(
            settings, self._fs, self.index, self._identity, self._promote, self._clock
        )
        self.renamer = RenameCoordinator(settings, self._fs, self.index, self.saver, self._get_document)
        self.navigator = NavigationCoordinator(
            settings, self._fs, self.index, self.saver, self._get_document, self._set_document
        )

    # Accessors handed to the coordinators

    def _identity(self) -> DocumentIdentity:
        return self._document.identity

    def _get_document(self) -> ActiveDocument:
        return self._document

    def _set_document(self, document: ActiveDocument) -> None:
        self._document = document

    def _promote(self, old: DocumentIdentity, new: Addressed) -> None:
        # Only the document that was saved or renamed follows the new path
        if self._document.identity == old:
            self._document.identity = new
            logger.debug("active_document_readdressed", path=new.path)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def document(self) -> ActiveDocument:
        """The document currently shown."""
        return self._document

    @property
    def settings(self) -> WorkspaceSettings:
        return self._settings

    @property
    def root_dir(self) -> Optional[str]:
        return self._settings.root_dir

    @property
    def files(self) -> list[str]:
        """Known documents, most recent first."""
        return self.index.files

    def edit(self, content: str) -> None:
        """Content-change notification from the editing surface."""
        self._document.content = content
        self.saver.on_change(content)

    async def flush(self) -> None:
        await self.saver.flush()

    async def open(self, path: str) -> ActiveDocument:
        return await self.navigator.open(path)

    async def new_draft(self) -> ActiveDocument:
        return await self.navigator.new_draft()

    async def delete(self) -> Optional[ActiveDocument]:
        return await self.navigator.delete()

    def suggest_name(self) -> str:
        return self.renamer.suggest()

    async def rename(self, name: str) -> RenameResult:
        return await self.renamer.submit(name)

    async def find(self, query: str = "") -> list[DirectoryEntry]:
        """Refresh the listing and filter it for the file finder."""
        await self.navigator.refresh()
        return self.index.matches(query)

    async def switch_root(self, directory: str) -> list[str]:
        """
        Flush, then make ``directory`` the notes folder and show an empty draft.

        Args:
            directory: Folder picked by the user

        Returns:
            Documents in the new folder, most recent first

        Raises:
            WriteFailed: If pending edits could not be saved (nothing changes)
            DirectoryUnavailable: If the folder cannot be listed (nothing changes)
        """
        await self.saver.flush()

        settings = self._settings_for(directory)
        index = DirectoryIndex(self._fs, settings.extensions)
        files = await index.refresh(settings.root_dir)

        await self.saver.aclose()
        self._build(settings, index)
        self._document = ActiveDocument()
        if self._store is not None:
            self._store.save(settings.root_dir)
        logger.info("root_dir_switched", root_dir=settings.root_dir, count=len(files))
        return files

    async def aclose(self) -> None:
        """Flush outstanding edits before the window closes."""
        await self.saver.aclose()
