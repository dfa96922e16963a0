# src/llm/base_client.py — v2
"""Abstract LLM client interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from paperchat.llm.models import FileReference, LLMResponse, Message


class BaseLLMClient(ABC):
    """Unified interface for all LLM providers.

    Implementations raise GenerationError for backend failures and let
    asyncio.CancelledError propagate so an abandoned request releases
    the in-flight call.
    """

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        """Text completion, optionally constrained to ``response_format``."""

    @abstractmethod
    async def complete_with_files(
        self,
        messages: list[Message],
        files: list[FileReference],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        """Completion over previously stored documents plus text."""

    @property
    @abstractmethod
    def supports_files(self) -> bool:
        """Whether this provider can reference stored documents."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (google, openai)."""
