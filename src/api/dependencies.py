# src/api/dependencies.py — v1
"""Shared services and the FastAPI dependency that hands them to routes."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from fastapi import Request

from paperchat.cache.base_cache_store import BaseCacheStore
from paperchat.chat.service import PaperChatService
from paperchat.config.settings import Settings
from paperchat.extraction.spec_extractor import SpecExtractor
from paperchat.ingestion.downloader import SourceDocumentFetcher


@dataclass
class AppServices:
    """Long-lived collaborators shared by all requests. None hold session state."""

    settings: Settings
    http_client: httpx.AsyncClient
    cache_store: BaseCacheStore
    fetcher: SourceDocumentFetcher
    chat_service: PaperChatService
    spec_extractor: SpecExtractor

    async def aclose(self) -> None:
        await self.http_client.aclose()
        close = getattr(self.cache_store, "close", None)
        if callable(close):
            close()


def get_services(request: Request) -> AppServices:
    """The services attached to the running app."""
    return request.app.state.services
