# tests/unit/api/conftest.py — v1
"""App fixtures for HTTP tests: real wiring, faked network edges."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
import pytest
from fastapi.testclient import TestClient

from paperchat.api.app import build_services, create_app
from paperchat.config.settings import Settings


@dataclass
class Upstream:
    """Scripted preprint server behind httpx.MockTransport."""

    body: bytes
    status: int = 200
    requests: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, content=self.body)


@pytest.fixture
def upstream(sample_pdf) -> Upstream:
    return Upstream(body=sample_pdf)


@pytest.fixture
def api_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        cache_backend="json",
        cache_root=tmp_path / "cache",
        pdf_cache_enabled=False,
        blob_store_backend="local",
        blob_store_root=tmp_path / "blobs",
        spec_upload_max_size_mb=1,
    )


@pytest.fixture
def services(api_settings, upstream, fake_blob_store, fake_llm):
    return build_services(
        api_settings,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)),
        blob_store=fake_blob_store,
        chat_llm=fake_llm,
        extractor_llm=fake_llm,
    )


@pytest.fixture
def client(services):
    with TestClient(create_app(services=services)) as c:
        yield c
