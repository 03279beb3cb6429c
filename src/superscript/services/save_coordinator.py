"""Debounced, coalesced autosave for the active document.

Edits arrive as full-content change notifications. Each one replaces the single
pending save and re-arms a quiet-period timer; when the timer fires, or when a
caller asks for a flush, the pending save is taken and written. At most one
write runs at a time: the timer and every flush() caller share one in-flight
task.

State per document::

    Idle -> TimerArmed -> Flushing -> Idle

Persisting a pending save:

- Addressed note named after the placeholder ("Untitled"): derive a name from
  the content, move the file to a collision-free path, write, refresh index
- Any other addressed document: overwrite the file
- Draft with blank content: nothing is written
- Draft with content: allocate a collision-free path in the root folder,
  write, promote the draft to that path, refresh index
"""

import asyncio
from typing import Callable, Optional

from superscript.models.document import Addressed, DocumentIdentity, PendingSave
from superscript.models.workspace import WorkspaceSettings
from superscript.services.directory_index import DirectoryIndex
from superscript.services.exceptions import DirectoryUnavailable, WriteFailed
from superscript.services.file_operations import LocalFileSystem
from superscript.services.naming import MonotonicClock, resolve_stem, stem_from_content
from superscript.services.path_allocator import unique_file_path
from superscript.utils.logging import get_logger
from superscript.utils.paths import NOTE_EXTENSION, document_kind, known_extension, parent, stem

logger = get_logger(__name__)

PromotionCallback = Callable[[DocumentIdentity, Addressed], None]


class SaveCoordinator:
    """
    Turns content-change notifications into durable writes.

    The pending save keeps the identity captured when the edit happened, so a
    save meant for one document is never written under another document's
    path, even if the user switches documents before the timer fires.

    Example:
        >>> saver = SaveCoordinator(settings, fs, index, lambda: doc.identity, promote)
        >>> saver.on_change("# Groceries\\n- milk")   # arms the timer
        >>> await saver.flush()                         # written now
    """

    def __init__(
        self,
        settings: WorkspaceSettings,
        filesystem: LocalFileSystem,
        index: DirectoryIndex,
        get_identity: Callable[[], DocumentIdentity],
        on_promote: PromotionCallback,
        clock: Optional[MonotonicClock] = None,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            settings: Active folder settings (root, debounce, naming, case policy)
            filesystem: Filesystem collaborator
            index: Directory index refreshed after files are created or moved
            get_identity: Returns the identity of the document being edited
            on_promote: Called with (old, new) when a document gets a new path
            clock: Timestamp source for fallback names (process-wide by default)
        """
        self._settings = settings
        self._fs = filesystem
        self._index = index
        self._get_identity = get_identity
        self._on_promote = on_promote
        self._clock = clock

        self._pending: Optional[PendingSave] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._inflight: Optional[asyncio.Task] = None
        self._background: set[asyncio.Task] = set()
        self._promotions: dict[DocumentIdentity, Addressed] = {}

    @property
    def pending(self) -> Optional[PendingSave]:
        """The edit waiting to be written, if any."""
        return self._pending

    @property
    def timer_armed(self) -> bool:
        """Whether a debounce timer is waiting to fire."""
        return self._timer is not None

    @property
    def flushing(self) -> bool:
        """Whether a write is currently in flight."""
        return self._inflight is not None

    # ------------------------------------------------------------------ #
    # Edit notifications and flushing
    # ------------------------------------------------------------------ #

    def on_change(self, content: str) -> None:
        """
        Record the latest content and restart the quiet-period timer.

        Must be called from the event loop thread. Earlier pending content is
        replaced, not queued.

        Args:
            content: Full serialized document content
        """
        self._pending = PendingSave(identity=self._get_identity(), content=content)
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._settings.debounce_seconds, self._on_timer)
        logger.debug("autosave_armed", delay_ms=self._settings.debounce_ms, size=len(content))

    async def flush(self) -> None:
        """
        Make every accepted edit durable before returning.

        If a write is already running the caller waits for it instead of
        starting a second one; edits that arrived meanwhile are written after.

        Raises:
            WriteFailed: If the pending content could not be written
        """
        self._cancel_timer()
        await self._drain()

    async def aclose(self) -> None:
        """Flush outstanding edits and wait for background saves (shutdown)."""
        await self.flush()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        task = asyncio.ensure_future(self._autosave())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _autosave(self) -> None:
        try:
            await self._drain()
        except WriteFailed as e:
            # Background saves never interrupt the user; the edit stays pending
            logger.error("autosave_failed", path=e.path, error=str(e.__cause__ or e))

    async def _drain(self) -> None:
        while True:
            if self._inflight is not None:
                await asyncio.shield(self._inflight)
                continue
            if self._pending is None:
                return
            self._inflight = asyncio.ensure_future(self._run_inflight())
            await asyncio.shield(self._inflight)

    async def _run_inflight(self) -> None:
        try:
            save = self._pending
            self._pending = None
            self._promotions.clear()
            if save is not None:
                await self._persist_taken(save)
        finally:
            self._inflight = None

    async def _persist_taken(self, save: PendingSave) -> None:
        try:
            await self._persist(save)
        except WriteFailed:
            if self._pending is None:
                identity = self._promotions.get(save.identity, save.identity)
                self._pending = PendingSave(identity=identity, content=save.content)
            raise

    # ------------------------------------------------------------------ #
    # Persisting
    # ------------------------------------------------------------------ #

    async def _persist(self, save: PendingSave) -> None:
        identity = save.identity
        if isinstance(identity, Addressed):
            if self._is_placeholder(identity.path):
                new_stem = stem_from_content(save.content, self._settings.max_stem_length)
                directory = parent(identity.path)
                if new_stem and directory and not self._is_placeholder_name(new_stem):
                    await self._name_placeholder(identity, directory, new_stem, save.content)
                    return
            await self._write(identity.path, save.content)
            return

        if not save.content.strip():
            logger.debug("draft_save_skipped_blank")
            return

        root = self._settings.root_dir
        if root is None:
            logger.warning("draft_save_skipped_no_root", size=len(save.content))
            return

        stem_ = resolve_stem(save.content, self._settings.max_stem_length, self._clock)
        known = await self._fresh_listing(root)
        path = unique_file_path(root, stem_, known, NOTE_EXTENSION, self._settings.case_policy)
        await self._write(path, save.content)
        logger.info("draft_saved", path=path)
        self._promote(identity, Addressed(path=path))
        await self._refresh_after_change(root)

    async def _name_placeholder(
        self,
        identity: Addressed,
        directory: str,
        new_stem: str,
        content: str,
    ) -> None:
        known = await self._fresh_listing(directory)
        extension = known_extension(identity.path, self._settings.extensions) or NOTE_EXTENSION
        target = unique_file_path(directory, new_stem, known, extension, self._settings.case_policy)

        try:
            await self._fs.move(identity.path, target)
        except OSError as e:
            logger.error("placeholder_rename_failed", path=identity.path, target=target, error=str(e))
            raise WriteFailed(identity.path) from e

        # The file now lives at target whatever happens to the write
        self._promote(identity, Addressed(path=target))
        logger.info("placeholder_renamed", source=identity.path, destination=target)
        await self._write(target, content)
        await self._refresh_after_change(directory)

    async def _write(self, path: str, content: str) -> None:
        try:
            await self._fs.write_text(path, content)
        except OSError as e:
            logger.error("document_write_failed", path=path, error=str(e))
            raise WriteFailed(path) from e
        logger.info("document_saved", path=path, size=len(content))

    async def _fresh_listing(self, directory: str) -> list[str]:
        try:
            return await self._index.refresh(directory)
        except DirectoryUnavailable as e:
            raise WriteFailed(directory, "Could not list folder before saving") from e

    async def _refresh_after_change(self, directory: str) -> None:
        try:
            await self._index.refresh(directory)
        except DirectoryUnavailable as e:
            # The write itself succeeded; a stale index is tolerated until the next refresh
            logger.warning("index_refresh_failed", directory=directory, error=str(e))

    def _promote(self, old: DocumentIdentity, new: Addressed) -> None:
        self._promotions[old] = new
        self.readdress(old, new)

    # ------------------------------------------------------------------ #
    # Identity changes made by other coordinators
    # ------------------------------------------------------------------ #

    def readdress(self, old: DocumentIdentity, new: Addressed) -> None:
        """
        Record that a document now lives at a new path.

        A pending save still keyed to the old identity follows the document,
        so it is not written back to the old location.

        Args:
            old: Identity before the move or first save
            new: Identity after it
        """
        if self._pending is not None and self._pending.identity == old:
            self._pending = PendingSave(identity=new, content=self._pending.content)
        self._on_promote(old, new)

    def discard(self, identity: DocumentIdentity) -> bool:
        """
        Drop a pending save for a document that no longer exists.

        Args:
            identity: Identity of the deleted document

        Returns:
            True if a pending save was dropped
        """
        if self._pending is not None and self._pending.identity == identity:
            self._pending = None
            self._cancel_timer()
            logger.debug("pending_save_discarded", identity=identity.model_dump())
            return True
        return False

    def _is_placeholder(self, path: str) -> bool:
        if document_kind(path) != "note":
            return False
        return self._is_placeholder_name(stem(path, self._settings.extensions))

    def _is_placeholder_name(self, name: str) -> bool:
        return name.casefold() == self._settings.placeholder.casefold()
