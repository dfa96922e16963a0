# src/llm/adapters/openai_adapter.py — v2
"""OpenAI-compatible chat adapter implementing BaseLLMClient.

Uses the official openai SDK. Pointing ``base_url`` at OpenRouter routes the
same calls through any model it hosts. Used for text-only work such as
reference-guide extraction; it cannot reference stored documents.
"""

from __future__ import annotations

import time
from typing import Any

import openai
from pydantic import BaseModel

from paperchat.core.errors import GenerationError, TransientNetworkError
from paperchat.llm.base_client import BaseLLMClient
from paperchat.llm.models import FileReference, LLMResponse, Message


class OpenAIAdapter(BaseLLMClient):
    """OpenAI / OpenRouter chat completions adapter."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: str = "",
        base_url: str | None = None,
        timeout_s: float = 120.0,
        **kwargs: Any,
    ):
        self._model = model
        self._client = openai.AsyncOpenAI(
            api_key=api_key or None, base_url=base_url or None, timeout=timeout_s,
        )

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        oai_messages: list[dict[str, Any]] = []
        if system:
            oai_messages.append({"role": "system", "content": system})
        for m in messages:
            oai_messages.append({"role": m.role, "content": m.content})

        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": oai_messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if response_format is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": response_format.__name__,
                    "schema": response_format.model_json_schema(),
                },
            }

        t0 = time.monotonic()
        try:
            resp = await self._client.chat.completions.create(**kwargs)
        except openai.APIConnectionError as e:
            # Includes APITimeoutError.
            raise TransientNetworkError(
                "OpenAI-compatible request did not complete", details=str(e)
            ) from e
        except openai.APIError as e:
            raise GenerationError(
                "OpenAI-compatible request failed", details=str(e)
            ) from e
        latency = int((time.monotonic() - t0) * 1000)

        if not resp.choices:
            raise GenerationError("OpenAI-compatible backend returned no choices")
        usage = resp.usage
        return LLMResponse(
            content=resp.choices[0].message.content or "",
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=self._model,
            provider="openai",
            latency_ms=latency,
            raw_response=resp,
        )

    async def complete_with_files(
        self,
        messages: list[Message],
        files: list[FileReference],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        raise GenerationError(
            "The openai provider cannot reference stored documents; "
            "route paper_chat to the google provider"
        )

    @property
    def supports_files(self) -> bool:
        return False

    @property
    def provider_name(self) -> str:
        return "openai"
