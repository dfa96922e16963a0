# src/api/routes/chat.py — v1
"""POST /api/papers/chat."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from paperchat.api.dependencies import AppServices, get_services
from paperchat.api.models import ChatRequest, ChatResponse, ErrorResponse

router = APIRouter(prefix="/api/papers", tags=["chat"])


@router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def chat(
    request: ChatRequest,
    services: AppServices = Depends(get_services),
) -> ChatResponse:
    structured = await services.chat_service.respond(
        request.transcript, request.document_id, request.source_tag
    )
    return ChatResponse(main_text=structured.main_text, structured=structured)


__all__ = ["router"]
