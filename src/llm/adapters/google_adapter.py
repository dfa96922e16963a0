# src/llm/adapters/google_adapter.py — v2
"""Google Gemini adapter implementing BaseLLMClient.

Uses the google-genai SDK. Structured output is enforced through
``response_schema`` (schema-constrained decoding), and stored documents are
attached as file parts.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel

from paperchat.core.errors import GenerationError, TransientNetworkError
from paperchat.llm.base_client import BaseLLMClient
from paperchat.llm.models import FileReference, LLMResponse, Message


class GoogleAdapter(BaseLLMClient):
    """Google Gemini adapter."""

    def __init__(
        self,
        model: str = "gemini-2.5-flash-lite",
        api_key: str = "",
        timeout_s: float = 120.0,
        client: genai.Client | None = None,
        **kwargs: Any,
    ):
        self._model = model
        self._api_key = api_key
        self._timeout_s = timeout_s
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                api_key=self._api_key,
                http_options=types.HttpOptions(timeout=int(self._timeout_s * 1000)),
            )
        return self._client

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        contents = [
            types.Content(
                role="model" if m.role == "assistant" else "user",
                parts=[types.Part.from_text(text=m.content)],
            )
            for m in messages
        ]
        config = self._build_config(system, max_tokens, temperature, response_format)
        return await self._generate(contents, config)

    async def complete_with_files(
        self,
        messages: list[Message],
        files: list[FileReference],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        # Documents first, then the text, as one user turn.
        parts = [_file_part(f) for f in files]
        parts.extend(types.Part.from_text(text=m.content) for m in messages)
        contents = [types.Content(role="user", parts=parts)]
        config = self._build_config(system, max_tokens, temperature, response_format)
        return await self._generate(contents, config)

    def _build_config(
        self,
        system: str | None,
        max_tokens: int,
        temperature: float,
        response_format: type[BaseModel] | None,
    ) -> types.GenerateContentConfig:
        config_kwargs: dict[str, Any] = {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
        }
        if system:
            config_kwargs["system_instruction"] = system
        if response_format is not None:
            config_kwargs["response_mime_type"] = "application/json"
            config_kwargs["response_schema"] = response_format
        return types.GenerateContentConfig(**config_kwargs)

    async def _generate(
        self, contents: list[types.Content], config: types.GenerateContentConfig
    ) -> LLMResponse:
        t0 = time.monotonic()
        try:
            resp = await self.client.aio.models.generate_content(
                model=self._model, contents=contents, config=config,
            )
        except genai_errors.APIError as e:
            raise GenerationError(
                f"Gemini request failed ({e.code})", details=str(e)
            ) from e
        except httpx.TransportError as e:
            raise TransientNetworkError(
                "Gemini request did not complete", details=str(e)
            ) from e
        latency = int((time.monotonic() - t0) * 1000)

        usage = getattr(resp, "usage_metadata", None)
        return LLMResponse(
            content=resp.text or "",
            input_tokens=(getattr(usage, "prompt_token_count", 0) or 0) if usage else 0,
            output_tokens=(getattr(usage, "candidates_token_count", 0) or 0) if usage else 0,
            model=self._model,
            provider="google",
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def supports_files(self) -> bool:
        return True

    @property
    def provider_name(self) -> str:
        return "google"


def _file_part(ref: FileReference) -> types.Part:
    """Hosted URIs are referenced; local file:// blobs are inlined."""
    parsed = urlparse(ref.uri)
    if parsed.scheme == "file":
        data = Path(url2pathname(parsed.path)).read_bytes()
        return types.Part.from_bytes(data=data, mime_type=ref.mime_type)
    return types.Part.from_uri(file_uri=ref.uri, mime_type=ref.mime_type)
