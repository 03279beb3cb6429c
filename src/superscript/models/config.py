"""Configuration models for Superscript."""

from pydantic import BaseModel, Field, field_validator
from pathlib import Path
from typing import Literal, Optional


class NotesConfig(BaseModel):
    """Configuration for the notes folder."""

    root_dir: Optional[str] = Field(
        default=None,
        description="Notes folder to use; overrides the remembered folder when set"
    )

    default_folder: Optional[str] = Field(
        default=None,
        description="Folder to create and use on first start when none is remembered"
    )

    extensions: list[str] = Field(
        default_factory=lambda: [".md", ".excalidraw"],
        min_length=1,
        description="File extensions recognized as documents"
    )

    @field_validator('root_dir', 'default_folder')
    @classmethod
    def expand_user(cls, v: Optional[str]) -> Optional[str]:
        """Expand ~ so folders can be written relative to the home directory."""
        if v is None:
            return v
        return str(Path(v).expanduser())

    @field_validator('extensions')
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lower-case extensions and make sure each starts with a dot."""
        normalized = []
        for extension in v:
            extension = extension.strip().lower()
            if not extension:
                raise ValueError("Document extensions must not be empty")
            if not extension.startswith("."):
                extension = f".{extension}"
            normalized.append(extension)
        return normalized

    model_config = {"frozen": True}


class AutosaveConfig(BaseModel):
    """Configuration for background saving."""

    debounce_ms: int = Field(
        default=800,
        ge=0,
        description="Quiet period after the last edit before it is written"
    )

    model_config = {"frozen": True}


class NamingConfig(BaseModel):
    """Configuration for deriving file names from content."""

    max_stem_length: int = Field(
        default=50,
        ge=1,
        description="Longest file name (without extension) derived from content"
    )

    placeholder: str = Field(
        default="Untitled",
        min_length=1,
        description="Name shown for documents without a user-assigned name"
    )

    model_config = {"frozen": True}


class CollisionConfig(BaseModel):
    """Configuration for file name collision checks."""

    case_policy: Literal["sensitive", "insensitive", "auto"] = Field(
        default="auto",
        description="Whether names differing only in case collide ('auto' probes the folder)"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for Superscript."""

    notes: NotesConfig = Field(default_factory=NotesConfig, description="Notes folder settings")
    autosave: AutosaveConfig = Field(default_factory=AutosaveConfig, description="Autosave settings")
    naming: NamingConfig = Field(default_factory=NamingConfig, description="Naming settings")
    collisions: CollisionConfig = Field(default_factory=CollisionConfig, description="Collision settings")

    model_config = {"frozen": True}
