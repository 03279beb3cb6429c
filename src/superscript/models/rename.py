"""Rename outcome model."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from superscript.models.document import DocumentIdentity


class RenameResult(BaseModel):
    """Outcome of a rename request.

    A collision with a name the user typed is not an error: it comes back as
    ``status="blocked"`` with the rename field left open.
    """

    status: Literal["renamed", "created", "unchanged", "noop", "blocked", "failed"] = Field(
        ...,
        description="What happened to the document"
    )

    identity: Optional[DocumentIdentity] = Field(
        default=None,
        description="Identity of the document after the request"
    )

    message: Optional[str] = Field(
        default=None,
        description="Explanation for blocked, no-op and failed requests"
    )

    model_config = {"frozen": True}

    @property
    def keep_editing(self) -> bool:
        """Whether the rename field should stay open so the user can retry."""
        return self.status in ("blocked", "failed")

    @property
    def committed(self) -> bool:
        """Whether the document now lives at a new path."""
        return self.status in ("renamed", "created")
