"""Collision-free file paths for new and renamed documents."""

import os
import tempfile
from typing import Iterable

from superscript.models.workspace import CasePolicy
from superscript.utils.logging import get_logger
from superscript.utils.paths import NOTE_EXTENSION, join

logger = get_logger(__name__)


def _key(path: str, policy: CasePolicy) -> str:
    return path.casefold() if policy is CasePolicy.INSENSITIVE else path


def path_in(path: str, known: Iterable[str], policy: CasePolicy = CasePolicy.SENSITIVE) -> bool:
    """Whether ``path`` names one of the ``known`` files under ``policy``."""
    target = _key(path, policy)
    return any(_key(candidate, policy) == target for candidate in known)


def unique_file_path(
    directory: str,
    stem: str,
    known: Iterable[str],
    extension: str = NOTE_EXTENSION,
    policy: CasePolicy = CasePolicy.SENSITIVE,
) -> str:
    """
    Return a path in ``directory`` that is not one of the ``known`` files.

    Tries ``stem.ext``, then ``stem (2).ext``, ``stem (3).ext`` and so on.
    No filesystem access happens here; pass a freshly refreshed listing when
    it matters.

    Args:
        directory: Folder for the new file
        stem: Desired file name without extension
        known: Existing document paths in the folder
        extension: Extension to append (with leading dot)
        policy: Whether names that differ only in case collide

    Returns:
        A path guaranteed not to collide with ``known``

    Example:
        >>> unique_file_path("/notes", "Plan", ["/notes/Plan.md"])
        '/notes/Plan (2).md'
    """
    taken = {_key(path, policy) for path in known}

    candidate = join(directory, f"{stem}{extension}")
    counter = 2
    while _key(candidate, policy) in taken:
        candidate = join(directory, f"{stem} ({counter}){extension}")
        counter += 1
    return candidate


def detect_case_policy(directory: str) -> CasePolicy:
    """
    Probe whether the filesystem holding ``directory`` ignores case.

    Creates a short-lived hidden file with a mixed-case name and checks whether
    its lower-case spelling resolves to it.

    Args:
        directory: Existing folder to probe

    Returns:
        INSENSITIVE if the lower-case spelling exists, SENSITIVE otherwise
        (including when the probe cannot be created)
    """
    try:
        with tempfile.NamedTemporaryFile(prefix=".Superscript-Case-", dir=directory) as probe:
            head, name = os.path.split(probe.name)
            insensitive = os.path.exists(os.path.join(head, name.lower()))
    except OSError as e:
        logger.warning("case_probe_failed", directory=directory, error=str(e))
        return CasePolicy.SENSITIVE

    policy = CasePolicy.INSENSITIVE if insensitive else CasePolicy.SENSITIVE
    logger.debug("case_policy_detected", directory=directory, policy=policy.value)
    return policy


def resolve_case_policy(setting: str, directory: str | None) -> CasePolicy:
    """Turn the configured policy ('sensitive', 'insensitive', 'auto') into a CasePolicy."""
    if setting == "auto":
        if directory is None:
            return CasePolicy.SENSITIVE
        return detect_case_policy(directory)
    return CasePolicy(setting)
