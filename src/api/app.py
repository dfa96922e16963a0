# src/api/app.py — v1
"""FastAPI application factory and service wiring.

Usage:
    from paperchat.api.app import create_app
    app = create_app()            # wires everything from Settings
    app = create_app(services=s)  # tests inject their own AppServices
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from paperchat.api.dependencies import AppServices
from paperchat.api.errors import register_error_handlers
from paperchat.api.routes import chat, pdf_proxy, reference_guides
from paperchat.cache.base_cache_store import BaseCacheStore
from paperchat.cache.cache_factory import create_cache_store
from paperchat.chat.service import PaperChatService
from paperchat.config.components import PAPER_CHAT, SPEC_EXTRACTOR
from paperchat.config.settings import ConfigurationError, Settings
from paperchat.extraction.spec_extractor import SpecExtractor
from paperchat.ingestion.controller import DocumentIngestionController
from paperchat.ingestion.downloader import SourceDocumentFetcher
from paperchat.llm.base_client import BaseLLMClient
from paperchat.llm.client_factory import create_component_client
from paperchat.llm.config import resolve_all
from paperchat.logging.context import clear_context, new_request_id, set_request_context
from paperchat.storage.base_blob_store import BaseBlobStore
from paperchat.storage.store_factory import create_blob_store
from paperchat.version import __version__

logger = logging.getLogger(__name__)


def build_services(
    settings: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
    blob_store: BaseBlobStore | None = None,
    cache_store: BaseCacheStore | None = None,
    chat_llm: BaseLLMClient | None = None,
    extractor_llm: BaseLLMClient | None = None,
) -> AppServices:
    """Wire services from settings; any collaborator can be passed in instead.

    Raises:
        ConfigurationError: The chat model cannot read stored documents.
    """
    http_client = http_client or httpx.AsyncClient(
        timeout=httpx.Timeout(settings.download_timeout_s)
    )
    blob_store = blob_store or create_blob_store(settings)
    cache_store = cache_store or create_cache_store(settings)
    chat_llm = chat_llm or create_component_client(PAPER_CHAT, settings)
    extractor_llm = extractor_llm or create_component_client(SPEC_EXTRACTOR, settings)

    if not chat_llm.supports_files:
        raise ConfigurationError(
            f"Provider {chat_llm.provider_name!r} cannot attach stored documents; "
            "LLM_PAPER_CHAT must use a provider with file support"
        )

    fetcher = SourceDocumentFetcher(
        http_client,
        max_size_bytes=settings.max_document_size_bytes,
        user_agent=settings.download_user_agent,
        cache_dir=settings.pdf_cache_dir if settings.pdf_cache_enabled else None,
    )
    controller = DocumentIngestionController(blob_store, fetcher)
    return AppServices(
        settings=settings,
        http_client=http_client,
        cache_store=cache_store,
        fetcher=fetcher,
        chat_service=PaperChatService(
            controller,
            chat_llm,
            max_output_tokens=settings.llm_max_output_tokens,
            temperature=settings.llm_default_temperature,
        ),
        spec_extractor=SpecExtractor(
            cache_store,
            extractor_llm,
            max_input_chars=settings.spec_extract_max_input_chars,
            max_output_tokens=settings.spec_extract_max_output_tokens,
        ),
    )


def create_app(
    settings: Settings | None = None,
    services: AppServices | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    Args:
        settings: Application settings. Loaded from .env if None.
        services: Pre-built services; wired from ``settings`` if None.
    """
    if services is None:
        services = build_services(settings or Settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "PaperChat %s starting (blob store: %s, cache: %s)",
            __version__,
            services.settings.blob_store_backend,
            services.settings.cache_backend,
        )
        for component, assignment in resolve_all(services.settings).items():
            logger.info("LLM routing: %s → %s (%s)", component, assignment.key, assignment.source)
        try:
            yield
        finally:
            await services.aclose()

    app = FastAPI(title="PaperChat API", version=__version__, lifespan=lifespan)
    app.state.services = services

    @app.middleware("http")
    async def request_context(request: Request, call_next):  # type: ignore[no-untyped-def]
        request_id = request.headers.get("X-Request-ID") or new_request_id()
        set_request_context(request_id)
        try:
            response = await call_next(request)
        finally:
            clear_context()
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/api/healthz", tags=["system"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    register_error_handlers(app)
    app.include_router(chat.router)
    app.include_router(pdf_proxy.router)
    app.include_router(reference_guides.router)
    return app

