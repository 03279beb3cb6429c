"""Remembered notes folder, persisted across restarts."""

from pathlib import Path
from typing import Optional

import yaml

from superscript.models.config import Config
from superscript.services.file_operations import LocalFileSystem, atomic_write
from superscript.utils.logging import get_logger

logger = get_logger(__name__)


def default_state_path() -> Path:
    """Return ~/.local/state/superscript/state.yaml for the current user."""
    return Path.home() / ".local" / "state" / "superscript" / "state.yaml"


class RootDirectoryStore:
    """
    Persist the folder the user picked.

    Example:
        >>> store = RootDirectoryStore()
        >>> store.save("/home/me/Notes")
        >>> store.load()
        '/home/me/Notes'
    """

    def __init__(self, state_path: Optional[Path] = None) -> None:
        """
        Args:
            state_path: YAML file holding the state (defaults to ~/.local/state/superscript/state.yaml)
        """
        self._state_path = state_path or default_state_path()

    @property
    def state_path(self) -> Path:
        return self._state_path

    def load(self) -> Optional[str]:
        """
        Return the remembered folder, or None.

        An unreadable or malformed state file is treated as "nothing
        remembered"; the user is asked for a folder again.
        """
        if not self._state_path.exists():
            return None
        try:
            data = yaml.safe_load(self._state_path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("root_state_unreadable", path=str(self._state_path), error=str(e))
            return None
        if not isinstance(data, dict):
            return None
        root = data.get("root_dir")
        return root if isinstance(root, str) and root else None

    def save(self, directory: str) -> None:
        """Remember ``directory`` as the notes folder."""
        self._state_path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write(self._state_path, yaml.safe_dump({"root_dir": directory}, sort_keys=False))
        logger.info("root_dir_saved", root_dir=directory)

    def forget(self) -> None:
        """Drop the remembered folder."""
        if self._state_path.exists():
            self._state_path.unlink()
            logger.info("root_dir_forgotten")


async def resolve_startup_root(
    store: RootDirectoryStore,
    config: Config,
    filesystem: Optional[LocalFileSystem] = None,
) -> Optional[str]:
    """
    Pick the notes folder to open at startup.

    Order of preference:
    1. ``notes.root_dir`` from configuration, if it can be listed
    2. The remembered folder, if it can still be listed (otherwise forgotten)
    3. ``notes.default_folder``, created if missing, then remembered

    Args:
        store: Remembered-folder store
        config: Loaded configuration
        filesystem: Filesystem collaborator

    Returns:
        Folder to open, or None when the user has to choose one
    """
    fs = filesystem or LocalFileSystem()

    if config.notes.root_dir:
        if await _readable(fs, config.notes.root_dir):
            return config.notes.root_dir
        logger.warning("configured_root_unavailable", root_dir=config.notes.root_dir)

    saved = store.load()
    if saved:
        if await _readable(fs, saved):
            return saved
        logger.warning("saved_root_unavailable", root_dir=saved)
        store.forget()

    default = config.notes.default_folder
    if default:
        try:
            await fs.make_dir(default)
        except OSError as e:
            logger.warning("default_folder_unavailable", root_dir=default, error=str(e))
            return None
        if await _readable(fs, default):
            store.save(default)
            return default

    return None


async def peek_startup_root(
    store: RootDirectoryStore,
    config: Config,
    filesystem: Optional[LocalFileSystem] = None,
) -> Optional[str]:
    """
    Report the folder ``resolve_startup_root`` would open, without side effects.

    Nothing is created, remembered or forgotten; a default folder that does
    not exist yet is not reported.
    """
    fs = filesystem or LocalFileSystem()
    for candidate in (config.notes.root_dir, store.load(), config.notes.default_folder):
        if candidate and await _readable(fs, candidate):
            return candidate
    return None


async def _readable(fs: LocalFileSystem, directory: str) -> bool:
    try:
        await fs.list_dir(directory)
    except OSError:
        return False
    return True
