# tests/unit/llm/test_unit_google_adapter.py — v1
"""Tests for llm/adapters/google_adapter.py — SDK client mocked."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from google.genai import errors as genai_errors

from paperchat.chat.contract import StructuredResponse
from paperchat.core.errors import GenerationError, TransientNetworkError
from paperchat.llm.adapters.google_adapter import GoogleAdapter
from paperchat.llm.models import FileReference, Message


def _client(text: str = '{"ok": true}') -> MagicMock:
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(
        return_value=SimpleNamespace(
            text=text,
            usage_metadata=SimpleNamespace(prompt_token_count=120, candidates_token_count=30),
        )
    )
    return client


class TestGoogleAdapter:
    @pytest.mark.asyncio
    async def test_complete(self):
        client = _client("hello")
        adapter = GoogleAdapter(model="gemini-2.5-flash", client=client)
        resp = await adapter.complete(
            [Message(role="user", content="hi"), Message(role="assistant", content="yo")],
            system="be brief",
        )
        assert resp.content == "hello"
        assert resp.input_tokens == 120
        assert resp.output_tokens == 30
        assert resp.provider == "google"
        kwargs = client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        assert [c.role for c in kwargs["contents"]] == ["user", "model"]
        assert kwargs["config"].system_instruction == "be brief"

    @pytest.mark.asyncio
    async def test_structured_output_schema(self):
        client = _client()
        adapter = GoogleAdapter(client=client)
        await adapter.complete(
            [Message(role="user", content="q")], response_format=StructuredResponse
        )
        config = client.aio.models.generate_content.call_args.kwargs["config"]
        assert config.response_mime_type == "application/json"
        assert config.response_schema is StructuredResponse

    @pytest.mark.asyncio
    async def test_complete_with_files_puts_document_first(self):
        client = _client()
        adapter = GoogleAdapter(client=client)
        ref = FileReference(name="arxiv-2301-12345", uri="https://files.test/arxiv-2301-12345")
        await adapter.complete_with_files([Message(role="user", content="prompt")], files=[ref])
        contents = client.aio.models.generate_content.call_args.kwargs["contents"]
        assert len(contents) == 1
        parts = contents[0].parts
        assert parts[0].file_data.file_uri == ref.uri
        assert parts[1].text == "prompt"

    @pytest.mark.asyncio
    async def test_local_file_uri_inlined(self, tmp_path, sample_pdf):
        blob = tmp_path / "arxiv-2301-12345.blob"
        blob.write_bytes(sample_pdf)
        client = _client()
        adapter = GoogleAdapter(client=client)
        ref = FileReference(name="arxiv-2301-12345", uri=blob.resolve().as_uri())
        await adapter.complete_with_files([Message(role="user", content="p")], files=[ref])
        part = client.aio.models.generate_content.call_args.kwargs["contents"][0].parts[0]
        assert part.inline_data.data == sample_pdf

    @pytest.mark.asyncio
    async def test_api_error_maps_to_generation_error(self):
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(
            side_effect=genai_errors.ServerError(
                500, {"error": {"code": 500, "message": "internal", "status": "INTERNAL"}}
            )
        )
        with pytest.raises(GenerationError):
            await GoogleAdapter(client=client).complete([Message(role="user", content="q")])

    @pytest.mark.asyncio
    async def test_transport_error_maps_to_transient(self):
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(side_effect=httpx.ConnectError("down"))
        with pytest.raises(TransientNetworkError):
            await GoogleAdapter(client=client).complete([Message(role="user", content="q")])

    @pytest.mark.asyncio
    async def test_empty_text(self):
        client = _client()
        client.aio.models.generate_content.return_value = SimpleNamespace(
            text=None, usage_metadata=None
        )
        resp = await GoogleAdapter(client=client).complete([Message(role="user", content="q")])
        assert resp.content == ""
        assert resp.input_tokens == 0
