# src/storage/blob_models.py — v1
"""Remote blob store models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from paperchat.llm.models import FileReference


class BlobHandle(BaseModel):
    """Handle to a stored document, as returned by fetch or create."""

    model_config = ConfigDict(frozen=True)

    name: str
    uri: str
    mime_type: str = "application/pdf"
    display_name: str = ""
    size_bytes: int | None = None
    state: str | None = None

    def as_file_reference(self) -> FileReference:
        """Reference usable in a generation call."""
        return FileReference(name=self.name, uri=self.uri, mime_type=self.mime_type)
