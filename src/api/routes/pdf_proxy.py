# src/api/routes/pdf_proxy.py — v2
"""PDF proxy: serve a paper's PDF with CORS headers for in-browser viewers.

Some sources do not send CORS headers, so a pdf.js viewer cannot load
their PDFs directly. The proxy validates the id, fetches the PDF (from the
local PDF cache when present), checks the signature and returns it with
caching and permissive cross-origin headers.
"""

from __future__ import annotations

import logging
import re

from fastapi import APIRouter, Depends, Query, Request, Response

from paperchat.api.dependencies import AppServices, get_services
from paperchat.api.errors import error_response
from paperchat.core.errors import PaperChatError, RequestValidationError
from paperchat.papers.identifiers import PDF_PROXY_PATH, require_valid_reference
from paperchat.papers.models import DocumentReference

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pdf"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS",
    "Access-Control-Allow-Headers": "Range",
}
_EXPOSE_HEADERS = "Accept-Ranges, Content-Length, Content-Range, Content-Encoding"
_CACHE_CONTROL = "public, max-age=86400"
_RANGE = re.compile(r"^bytes=(\d*)-(\d*)$")


def _reference_from_query(paper_id: str | None, source: str | None) -> DocumentReference:
    if not paper_id or not source:
        raise RequestValidationError("Missing paper ID or source")
    return require_valid_reference(paper_id, source)


def _parse_range(header: str, size: int) -> tuple[int, int] | None:
    """Inclusive (start, end) for a single ``bytes=`` range; None if unsatisfiable."""
    match = _RANGE.match(header.strip())
    if not match or not (match.group(1) or match.group(2)):
        return None
    first, last = match.group(1), match.group(2)
    if not first:
        # Suffix range: the last N bytes.
        length = int(last)
        if length == 0:
            return None
        return max(size - length, 0), size - 1
    start = int(first)
    end = int(last) if last else size - 1
    if start >= size or end < start:
        return None
    return start, min(end, size - 1)


@router.get(PDF_PROXY_PATH)
async def get_pdf(
    request: Request,
    paper_id: str | None = Query(default=None, alias="id"),
    source: str | None = Query(default=None),
    services: AppServices = Depends(get_services),
) -> Response:
    try:
        reference = _reference_from_query(paper_id, source)
    except RequestValidationError as e:
        return error_response(e, headers=CORS_HEADERS)
    try:
        data = await services.fetcher.fetch(reference)
    except PaperChatError as e:
        logger.warning("PDF proxy failed for %s: %s", reference.canonical_key, e)
        return error_response(e, public_message="Failed to fetch PDF", headers=CORS_HEADERS)

    headers = {
        **CORS_HEADERS,
        "Content-Disposition": f'inline; filename="{reference.derived_blob_name}.pdf"',
        "Accept-Ranges": "bytes",
        "Access-Control-Expose-Headers": _EXPOSE_HEADERS,
        "Cache-Control": _CACHE_CONTROL,
    }

    range_header = request.headers.get("range")
    if range_header:
        span = _parse_range(range_header, len(data))
        if span is None:
            headers["Content-Range"] = f"bytes */{len(data)}"
            return Response(status_code=416, headers=headers)
        start, end = span
        headers["Content-Range"] = f"bytes {start}-{end}/{len(data)}"
        return Response(
            content=data[start : end + 1],
            status_code=206,
            media_type="application/pdf",
            headers=headers,
        )

    return Response(content=data, media_type="application/pdf", headers=headers)


@router.head(PDF_PROXY_PATH)
async def head_pdf(
    paper_id: str | None = Query(default=None, alias="id"),
    source: str | None = Query(default=None),
) -> Response:
    try:
        _reference_from_query(paper_id, source)
    except RequestValidationError:
        return Response(status_code=400, headers=CORS_HEADERS)
    return Response(
        status_code=200,
        headers={
            **CORS_HEADERS,
            "Content-Type": "application/pdf",
            "Accept-Ranges": "bytes",
        },
    )


@router.options(PDF_PROXY_PATH)
async def preflight_pdf() -> Response:
    return Response(
        status_code=200,
        headers={**CORS_HEADERS, "Access-Control-Max-Age": "86400"},
    )


__all__ = ["router"]
