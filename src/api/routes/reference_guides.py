# src/api/routes/reference_guides.py — v1
"""Reference-guide upload: condense a YAML/JSON API description and cache it."""

from __future__ import annotations

import logging
from pathlib import PurePath

from fastapi import APIRouter, Depends, File, UploadFile

from paperchat.api.dependencies import AppServices, get_services
from paperchat.api.models import ErrorResponse, ReferenceGuideUploadResponse
from paperchat.cache.models import CacheStats
from paperchat.core.errors import RequestValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reference-guides", tags=["reference-guides"])

ALLOWED_SUFFIXES = (".yaml", ".yml", ".json")


@router.post(
    "",
    response_model=ReferenceGuideUploadResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def upload_reference_guide(
    file: UploadFile = File(...),
    services: AppServices = Depends(get_services),
) -> ReferenceGuideUploadResponse:
    name = file.filename or ""
    if not name:
        raise RequestValidationError("No file uploaded")
    if PurePath(name).suffix.lower() not in ALLOWED_SUFFIXES:
        raise RequestValidationError("Only YAML and JSON files are allowed")

    limit = services.settings.spec_upload_max_size_bytes
    # Read one byte past the limit so oversize uploads are rejected without
    # buffering the whole body.
    raw = await file.read(limit + 1)
    if len(raw) > limit:
        raise RequestValidationError(
            f"File size exceeds {services.settings.spec_upload_max_size_mb}MB limit"
        )
    logger.info("Received reference guide upload: %s (%d bytes)", name, len(raw))

    guide = await services.spec_extractor.extract(raw, name)
    return ReferenceGuideUploadResponse(
        message=f"Reference guide {name} processed and cached",
        file_name=name,
        extracted_length=len(guide),
        cache_stats=await services.cache_store.stats(),
    )


@router.get("/cache", response_model=CacheStats)
async def cache_stats(services: AppServices = Depends(get_services)) -> CacheStats:
    return await services.cache_store.stats()


__all__ = ["router"]
