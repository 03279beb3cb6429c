"""Per-folder settings handed to every coordinator."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from superscript.models.config import Config


class CasePolicy(str, Enum):
    """How file names are compared when checking for collisions."""

    SENSITIVE = "sensitive"
    INSENSITIVE = "insensitive"


class WorkspaceSettings(BaseModel):
    """Everything the coordinators need to know about the active notes folder.

    Built once per folder selection and passed explicitly, so there is no
    process-wide "current folder".
    """

    root_dir: Optional[str] = Field(
        default=None,
        description="Active notes folder; required before new files can be created"
    )

    extensions: tuple[str, ...] = Field(
        default=(".md", ".excalidraw"),
        description="Recognized document extensions"
    )

    case_policy: CasePolicy = Field(
        default=CasePolicy.SENSITIVE,
        description="Collision comparison policy for this folder"
    )

    debounce_ms: int = Field(default=800, ge=0, description="Autosave quiet period")

    max_stem_length: int = Field(default=50, ge=1, description="Longest content-derived name")

    placeholder: str = Field(default="Untitled", description="Name of unnamed documents")

    model_config = {"frozen": True}

    @classmethod
    def from_config(
        cls,
        config: Config,
        root_dir: Optional[str],
        case_policy: CasePolicy = CasePolicy.SENSITIVE,
    ) -> "WorkspaceSettings":
        """Combine loaded configuration with the folder being opened.

        ``case_policy`` is the already resolved policy for ``root_dir``;
        resolving 'auto' touches the filesystem, so callers do it first.
        """
        return cls(
            root_dir=(root_dir.rstrip("/") or "/") if root_dir else None,
            extensions=tuple(config.notes.extensions),
            case_policy=case_policy,
            debounce_ms=config.autosave.debounce_ms,
            max_stem_length=config.naming.max_stem_length,
            placeholder=config.naming.placeholder,
        )

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000
