"""Document identity and editing state models."""

import uuid
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class Unaddressed(BaseModel):
    """A draft that has never been written to disk."""

    kind: Literal["unaddressed"] = "unaddressed"

    draft_id: str = Field(
        default_factory=lambda: uuid.uuid4().hex,
        description="Random identifier so two drafts never compare equal"
    )

    model_config = {"frozen": True}


class Addressed(BaseModel):
    """A document backed by a file inside the notes folder."""

    kind: Literal["addressed"] = "addressed"

    path: str = Field(
        ...,
        description="Absolute '/'-separated path of the backing file"
    )

    model_config = {"frozen": True}


DocumentIdentity = Annotated[Union[Unaddressed, Addressed], Field(discriminator="kind")]


class ActiveDocument(BaseModel):
    """The document currently shown in the editor."""

    identity: DocumentIdentity = Field(
        default_factory=Unaddressed,
        description="Where the document lives (or that it is a draft)"
    )

    content: str = Field(
        default="",
        description="Latest serialized content reported by the editing surface"
    )

    model_config = {"frozen": False}  # Identity and content change while editing

    @property
    def path(self) -> str | None:
        """Backing file path, or None for drafts."""
        if isinstance(self.identity, Addressed):
            return self.identity.path
        return None


class PendingSave(BaseModel):
    """Most recent edit not yet known to be durable."""

    identity: DocumentIdentity = Field(
        ...,
        description="Identity captured when the edit happened, not when it is written"
    )

    content: str = Field(
        ...,
        description="Full content to write"
    )

    model_config = {"frozen": True}
