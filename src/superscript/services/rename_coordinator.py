"""User-initiated renames of the active document.

Workflow:
1. Clean the input (separators removed, a typed document extension dropped)
2. "Untitled" means: derive the name from the content (no text: nothing to do)
3. Typed name already taken: blocked before anything is written
4. Flush pending edits; a draft may get its first path here
5. Refresh the folder listing and check the target name again
   - Typed name already taken: blocked, the rename field stays open
   - Derived name already taken: add " (2)", " (3)", ...
6. Move the file (or create it, for a draft) and re-address the document

A name the user typed never replaces another file.
"""

import re
from typing import Callable, Optional, Union

from superscript.models.document import ActiveDocument, Addressed, Unaddressed
from superscript.models.rename import RenameResult
from superscript.models.workspace import WorkspaceSettings
from superscript.services.directory_index import DirectoryIndex
from superscript.services.exceptions import DirectoryUnavailable, WriteFailed
from superscript.services.file_operations import LocalFileSystem
from superscript.services.naming import stem_from_content
from superscript.services.path_allocator import path_in, unique_file_path
from superscript.services.save_coordinator import SaveCoordinator
from superscript.utils.logging import get_logger
from superscript.utils.paths import NOTE_EXTENSION, join, known_extension, parent, stem

logger = get_logger(__name__)

_SEPARATORS = re.compile(r"[\\/]")


class RenameCoordinator:
    """Validate and apply a new name for the active document."""

    def __init__(
        self,
        settings: WorkspaceSettings,
        filesystem: LocalFileSystem,
        index: DirectoryIndex,
        saver: SaveCoordinator,
        get_document: Callable[[], ActiveDocument],
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            settings: Active folder settings
            filesystem: Filesystem collaborator
            index: Directory index used for collision checks
            saver: Save coordinator, flushed before moving files and told about new paths
            get_document: Returns the active document
        """
        self._settings = settings
        self._fs = filesystem
        self._index = index
        self._saver = saver
        self._get_document = get_document

    def suggest(self) -> str:
        """Initial text for the rename field: current name, or the placeholder for drafts."""
        document = self._get_document()
        if isinstance(document.identity, Addressed):
            return stem(document.identity.path, self._settings.extensions)
        return self._settings.placeholder

    async def submit(self, value: str) -> RenameResult:
        """
        Apply the name typed by the user.

        Args:
            value: Raw text from the rename field

        Returns:
            RenameResult describing what happened; ``keep_editing`` tells the
            caller whether to leave the rename field open
        """
        name = _SEPARATORS.sub("", value).strip()
        typed_extension = known_extension(name, self._settings.extensions)
        if typed_extension:
            name = name[: -len(typed_extension)].strip()
        if not name:
            return self._noop("Name is empty")

        generated = False
        if name.casefold() == self._settings.placeholder.casefold():
            derived = stem_from_content(self._get_document().content, self._settings.max_stem_length)
            if not derived:
                return self._noop("Document has no text to derive a name from")
            name = derived
            generated = True

        # A taken typed name is refused before pending edits are written
        if not generated:
            resolved = await self._resolve_target(name, generated=False)
            if isinstance(resolved, RenameResult):
                return resolved

        try:
            await self._saver.flush()
        except WriteFailed as e:
            return self._failed(e.path, "Could not save before renaming", e)

        # The flush may have given the document a new path
        resolved = await self._resolve_target(name, generated)
        if isinstance(resolved, RenameResult):
            return resolved

        identity = self._get_document().identity
        if isinstance(identity, Addressed):
            return await self._move(identity, resolved)
        return await self._create(identity, resolved)

    async def _resolve_target(self, name: str, generated: bool) -> Union[str, RenameResult]:
        """
        Pick the path the active document should get.

        Returns:
            The target path, or the RenameResult that ends the rename
            (noop, unchanged, blocked or failed)
        """
        identity = self._get_document().identity
        if isinstance(identity, Addressed):
            directory = parent(identity.path)
            extension = known_extension(identity.path, self._settings.extensions) or NOTE_EXTENSION
            own_path: Optional[str] = identity.path
        else:
            directory = self._settings.root_dir
            extension = NOTE_EXTENSION
            own_path = None
        if not directory:
            return self._noop("No notes folder selected")

        target = join(directory, f"{name}{extension}")
        if target == own_path:
            return RenameResult(status="unchanged", identity=identity)

        try:
            known = await self._index.refresh(directory)
        except DirectoryUnavailable as e:
            return self._failed(directory, "Could not list folder", e)

        others = [path for path in known if path != own_path]
        if not path_in(target, others, self._settings.case_policy):
            return target
        if not generated:
            logger.warning("rename_blocked", target=target, source=own_path)
            return RenameResult(
                status="blocked",
                identity=identity,
                message=f"A document named '{name}' already exists",
            )
        target = unique_file_path(directory, name, others, extension, self._settings.case_policy)
        if target == own_path:
            return RenameResult(status="unchanged", identity=identity)
        return target

    async def _move(self, identity: Addressed, target: str) -> RenameResult:
        try:
            await self._fs.move(identity.path, target)
        except OSError as e:
            return self._failed(identity.path, "Could not rename document", e)

        new = Addressed(path=target)
        self._saver.readdress(identity, new)
        await self._refresh(parent(target))
        logger.info("document_renamed", source=identity.path, destination=target)
        return RenameResult(status="renamed", identity=new)

    async def _create(self, identity: Unaddressed, target: str) -> RenameResult:
        try:
            await self._fs.write_text(target, self._get_document().content)
        except OSError as e:
            return self._failed(target, "Could not create document", e)

        new = Addressed(path=target)
        self._saver.readdress(identity, new)
        await self._refresh(parent(target))
        logger.info("draft_named", path=target)
        return RenameResult(status="created", identity=new)

    async def _refresh(self, directory: str) -> None:
        try:
            await self._index.refresh(directory)
        except DirectoryUnavailable as e:
            logger.warning("index_refresh_failed", directory=directory, error=str(e))

    def _noop(self, message: str) -> RenameResult:
        logger.debug("rename_skipped", reason=message)
        return RenameResult(status="noop", identity=self._get_document().identity, message=message)

    def _failed(self, path: str, message: str, error: Exception) -> RenameResult:
        cause = error.__cause__ or error
        logger.error("rename_failed", path=path, error=str(cause))
        return RenameResult(
            status="failed",
            identity=self._get_document().identity,
            message=f"{message}: {cause}",
        )
