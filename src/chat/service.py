# src/chat/service.py — v1
"""Paper chat orchestration: one stateless request in, one structured reply out.

Flow per request:
  validate transcript + paper id → classify turn
  FIRST_TURN: ensure the PDF is in the blob store, generate over blob + prompt
  FOLLOW_UP:  generate over rendered history + current question only
  → parse against the response contract → rewrite page citations
"""

from __future__ import annotations

import logging

from paperchat.chat.contract import (
    StructuredResponse,
    apply_citation_rewrite,
    parse_structured_response,
)
from paperchat.chat.prompts import (
    build_answer_prompt,
    build_follow_up_prompt,
    build_welcome_prompt,
)
from paperchat.chat.session import (
    ChatIntent,
    ConversationTurn,
    TurnKind,
    classify_turn,
    detect_intent,
    render_history,
    validate_transcript,
)
from paperchat.config.components import PAPER_CHAT
from paperchat.core.errors import PaperChatError
from paperchat.ingestion.controller import DocumentIngestionController
from paperchat.llm.base_client import BaseLLMClient
from paperchat.llm.models import LLMResponse, Message
from paperchat.logging.context import set_component_context, set_document_context
from paperchat.papers.identifiers import require_valid_reference
from paperchat.papers.models import DocumentReference

logger = logging.getLogger(__name__)


class PaperChatService:
    """Answer questions about a paper from a client-held transcript."""

    def __init__(
        self,
        controller: DocumentIngestionController,
        llm_client: BaseLLMClient,
        max_output_tokens: int = 8192,
        temperature: float = 0.2,
    ) -> None:
        self._controller = controller
        self._llm = llm_client
        self._max_output_tokens = max_output_tokens
        self._temperature = temperature

    async def respond(
        self,
        transcript: list[ConversationTurn],
        document_id: str | None,
        source_tag: str | None,
    ) -> StructuredResponse:
        """Produce the assistant reply for the last user turn.

        Raises:
            RequestValidationError: Malformed transcript or paper id.
            PaperChatError: Ingestion, generation or contract failure.
        """
        current = validate_transcript(transcript)
        reference = require_valid_reference(document_id, source_tag)
        set_document_context(reference.derived_blob_name)

        turn = classify_turn(transcript)
        logger.info(
            "Chat turn for %s: %s (%d messages)",
            reference.canonical_key, turn.value, len(transcript),
        )

        set_component_context(PAPER_CHAT)
        try:
            if turn is TurnKind.FIRST_TURN:
                result = await self._first_turn(reference, current.content)
            else:
                result = await self._follow_up(reference, transcript, current.content)
        finally:
            set_component_context(None)

        logger.info(
            "Generated %s reply (%d in / %d out tokens, %d ms)",
            turn.value, result.input_tokens, result.output_tokens, result.latency_ms,
        )
        return apply_citation_rewrite(parse_structured_response(result.content))

    async def _first_turn(self, reference: DocumentReference, question: str) -> LLMResponse:
        ingestion = await self._controller.ensure_document(reference)
        if not ingestion.ok or ingestion.handle is None:
            raise ingestion.error or PaperChatError(
                f"Could not retrieve {reference.canonical_key}"
            )

        if detect_intent(question) is ChatIntent.WELCOME:
            prompt = build_welcome_prompt(reference)
        else:
            prompt = build_answer_prompt(reference, question)

        return await self._llm.complete_with_files(
            [Message(role="user", content=prompt)],
            files=[ingestion.handle.as_file_reference()],
            max_tokens=self._max_output_tokens,
            temperature=self._temperature,
            response_format=StructuredResponse,
        )

    async def _follow_up(
        self,
        reference: DocumentReference,
        transcript: list[ConversationTurn],
        question: str,
    ) -> LLMResponse:
        prompt = build_follow_up_prompt(reference, render_history(transcript), question)
        return await self._llm.complete(
            [Message(role="user", content=prompt)],
            max_tokens=self._max_output_tokens,
            temperature=self._temperature,
            response_format=StructuredResponse,
        )
