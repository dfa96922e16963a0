# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides a scripted LLM client, an in-memory blob store that can simulate
creation races, sample PDF bytes and temp directories. No network access:
every external boundary is faked.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import BaseModel

from paperchat.core.errors import BlobAlreadyExistsError, BlobNotFoundError
from paperchat.llm.base_client import BaseLLMClient
from paperchat.llm.models import FileReference, LLMResponse, Message
from paperchat.storage.base_blob_store import BaseBlobStore
from paperchat.storage.blob_models import BlobHandle

SAMPLE_PDF = b"%PDF-1.7\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n%%EOF\n"


def structured_json(
    main_text: str = "This paper studies sparse attention (page 3).",
    kind: str = "answer",
    follow_ups: list[dict] | None = None,
) -> str:
    """Backend output satisfying the response contract."""
    return json.dumps({
        "mainText": main_text,
        "kind": kind,
        "followUps": follow_ups if follow_ups is not None else [
            {"text": "What datasets were used?", "description": "Evaluation setup"},
        ],
    })


# === Fakes ===


class FakeLLMClient(BaseLLMClient):
    """Records every call and returns scripted outputs in order."""

    def __init__(self, outputs: list[str] | None = None, supports_files: bool = True) -> None:
        self.outputs = list(outputs or [structured_json()])
        self.calls: list[dict] = []
        self._supports_files = supports_files

    def _next(self, **call: object) -> LLMResponse:
        self.calls.append(call)
        content = self.outputs.pop(0) if len(self.outputs) > 1 else self.outputs[0]
        return LLMResponse(
            content=content,
            input_tokens=100,
            output_tokens=50,
            model="fake-model",
            provider="fake",
            latency_ms=5,
        )

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        return self._next(
            method="complete", messages=messages, system=system,
            response_format=response_format, files=[],
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
        return self._next(
            method="complete_with_files", messages=messages, system=system,
            response_format=response_format, files=files,
        )

    @property
    def supports_files(self) -> bool:
        return self._supports_files

    @property
    def provider_name(self) -> str:
        return "fake"


class FakeBlobStore(BaseBlobStore):
    """In-memory blob store with a switch to simulate a lost creation race.

    With ``race_on_create`` set, create stores the blob as if another
    caller had just won and reports the name as taken.
    """

    def __init__(self, race_on_create: bool = False) -> None:
        self.blobs: dict[str, bytes] = {}
        self.fetch_calls: list[str] = []
        self.create_calls: list[str] = []
        self.race_on_create = race_on_create

    async def fetch(self, name: str) -> BlobHandle:
        self.fetch_calls.append(name)
        if name not in self.blobs:
            raise BlobNotFoundError(f"No stored file named {name}")
        return self._handle(name)

    async def create(
        self,
        name: str,
        data: bytes,
        display_name: str,
        mime_type: str = "application/pdf",
    ) -> BlobHandle:
        self.create_calls.append(name)
        if name in self.blobs:
            raise BlobAlreadyExistsError(f"File {name} already exists")
        self.blobs[name] = data
        if self.race_on_create:
            raise BlobAlreadyExistsError(f"File {name} already exists")
        return self._handle(name)

    def _handle(self, name: str) -> BlobHandle:
        return BlobHandle(
            name=name,
            uri=f"https://blobs.test/files/{name}",
            size_bytes=len(self.blobs[name]),
            state="ACTIVE",
        )


# === FIXTURES ===


@pytest.fixture
def sample_pdf() -> bytes:
    return SAMPLE_PDF


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def fake_blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def tmp_cache_dir(tmp_path: Path) -> Path:
    """Temporary cache directory."""
    cache = tmp_path / "cache"
    cache.mkdir()
    return cache


@pytest.fixture
def llm_factory() -> type[FakeLLMClient]:
    """FakeLLMClient class, for tests that script their own outputs."""
    return FakeLLMClient


@pytest.fixture
def blob_store_factory() -> type[FakeBlobStore]:
    return FakeBlobStore


@pytest.fixture
def make_structured():
    """Builder for contract-conforming backend output."""
    return structured_json
