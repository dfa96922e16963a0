# tests/unit/llm/test_unit_openai_adapter.py — v1
"""Tests for llm/adapters/openai_adapter.py — SDK client mocked."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import openai
import pytest

from paperchat.chat.contract import StructuredResponse
from paperchat.core.errors import GenerationError, TransientNetworkError
from paperchat.llm.adapters.openai_adapter import OpenAIAdapter
from paperchat.llm.models import FileReference, Message


def _adapter(create: AsyncMock) -> OpenAIAdapter:
    adapter = OpenAIAdapter(model="gpt-4o-mini", api_key="sk-test")
    adapter._client.chat.completions.create = create  # type: ignore[method-assign]
    return adapter


def _completion(content: str) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=11, completion_tokens=7),
    )


class TestOpenAIAdapter:
    @pytest.mark.asyncio
    async def test_complete(self):
        create = AsyncMock(return_value=_completion("guide"))
        resp = await _adapter(create).complete(
            [Message(role="user", content="condense")], system="sys",
        )
        assert resp.content == "guide"
        assert resp.input_tokens == 11
        messages = create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "sys"}
        assert messages[1] == {"role": "user", "content": "condense"}

    @pytest.mark.asyncio
    async def test_json_schema_response_format(self):
        create = AsyncMock(return_value=_completion("{}"))
        await _adapter(create).complete(
            [Message(role="user", content="q")], response_format=StructuredResponse,
        )
        fmt = create.call_args.kwargs["response_format"]
        assert fmt["type"] == "json_schema"
        assert fmt["json_schema"]["name"] == "StructuredResponse"

    @pytest.mark.asyncio
    async def test_no_choices(self):
        create = AsyncMock(return_value=SimpleNamespace(choices=[], usage=None))
        with pytest.raises(GenerationError, match="no choices"):
            await _adapter(create).complete([Message(role="user", content="q")])

    @pytest.mark.asyncio
    async def test_connection_error_is_transient(self):
        request = httpx.Request("POST", "https://api.test/v1/chat/completions")
        create = AsyncMock(side_effect=openai.APIConnectionError(request=request))
        with pytest.raises(TransientNetworkError):
            await _adapter(create).complete([Message(role="user", content="q")])

    @pytest.mark.asyncio
    async def test_files_not_supported(self):
        adapter = _adapter(AsyncMock())
        assert adapter.supports_files is False
        with pytest.raises(GenerationError):
            await adapter.complete_with_files(
                [Message(role="user", content="q")],
                files=[FileReference(name="x", uri="https://files.test/x")],
            )
