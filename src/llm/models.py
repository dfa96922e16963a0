# src/llm/models.py — v2
"""LLM-specific types: Message, FileReference, LLMResponse."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel


class Message(BaseModel):
    """Single message in a conversation."""

    role: Literal["user", "assistant", "system"]
    content: str


class FileReference(BaseModel):
    """A document already held by the blob store, attached to a generation call.

    ``uri`` is either a provider-hosted URI (https://...) or a local
    ``file://`` path that adapters inline as bytes.
    """

    name: str
    uri: str
    mime_type: str = "application/pdf"


class LLMResponse(BaseModel):
    """Normalized response from any LLM provider."""

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    provider: str
    latency_ms: int
    raw_response: Any = None
