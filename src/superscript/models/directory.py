"""Directory index entry model."""

from datetime import datetime

from pydantic import BaseModel, Field

from superscript.utils.paths import DocumentKind, document_kind


class DirectoryEntry(BaseModel):
    """A document file found in the notes folder."""

    path: str = Field(
        ...,
        description="Absolute '/'-separated path of the file"
    )

    name: str = Field(
        ...,
        description="Display name (file name without its document extension)"
    )

    modified_at: datetime = Field(
        ...,
        description="Last modification time (timezone-aware)"
    )

    model_config = {"frozen": True}

    @property
    def kind(self) -> DocumentKind:
        """Whether the entry is a note or a canvas."""
        return document_kind(self.path)
