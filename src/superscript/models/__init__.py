"""Pydantic data models for Superscript."""

from superscript.models.document import (
    ActiveDocument,
    Addressed,
    DocumentIdentity,
    PendingSave,
    Unaddressed,
)
from superscript.models.directory import DirectoryEntry
from superscript.models.rename import RenameResult

__all__ = [
    "ActiveDocument",
    "Addressed",
    "DirectoryEntry",
    "DocumentIdentity",
    "PendingSave",
    "RenameResult",
    "Unaddressed",
]
