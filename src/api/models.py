# src/api/models.py — v2
"""HTTP request and response bodies.

Field names on the wire are camelCase; request models also accept the
older ``messages`` / ``paperId`` / ``source`` spelling.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from paperchat.cache.models import CacheStats
from paperchat.chat.contract import StructuredResponse
from paperchat.chat.session import ConversationTurn


class ChatRequest(BaseModel):
    """Body of POST /api/papers/chat."""

    transcript: list[ConversationTurn] = Field(
        validation_alias=AliasChoices("transcript", "messages"),
    )
    document_id: str = Field(validation_alias=AliasChoices("documentId", "paperId"))
    source_tag: str | None = Field(
        default=None, validation_alias=AliasChoices("sourceTag", "source"),
    )


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    main_text: str = Field(alias="mainText")
    structured: StructuredResponse


class ErrorResponse(BaseModel):
    """Failure shape shared by every endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    details: str | None = None
    error_type: str = Field(default="PaperChatError", alias="errorType")


class ReferenceGuideUploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    file_name: str = Field(alias="fileName")
    extracted_length: int = Field(alias="extractedLength")
    cache_stats: CacheStats = Field(alias="cacheStats")
