# src/chat/session.py — v1
"""Conversation turn classification.

The server keeps no conversation state: everything it knows about a
conversation comes from the transcript in the current request. A
transcript holding only the current user message is a first turn; once
any earlier turn exists the conversation is a follow-up for good.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel

from paperchat.core.errors import RequestValidationError

_WELCOME_PHRASES = ("welcome message", "suggested questions")


class ConversationTurn(BaseModel):
    """One transcript entry as sent by the client."""

    role: Literal["user", "assistant"]
    content: str


class TurnKind(str, Enum):
    FIRST_TURN = "first_turn"
    FOLLOW_UP = "follow_up"


class ChatIntent(str, Enum):
    WELCOME = "welcome"
    QUESTION = "question"


def validate_transcript(transcript: list[ConversationTurn]) -> ConversationTurn:
    """Return the current user message, rejecting malformed transcripts."""
    if not transcript:
        raise RequestValidationError("Transcript must contain at least one message")
    current = transcript[-1]
    if current.role != "user":
        raise RequestValidationError("Last message must be from user")
    return current


def classify_turn(transcript: list[ConversationTurn]) -> TurnKind:
    """FIRST_TURN iff the transcript holds exactly one message."""
    return TurnKind.FIRST_TURN if len(transcript) == 1 else TurnKind.FOLLOW_UP


def detect_intent(message: str) -> ChatIntent:
    """WELCOME when the user asks for an orientation message."""
    lowered = message.lower()
    if any(phrase in lowered for phrase in _WELCOME_PHRASES):
        return ChatIntent.WELCOME
    return ChatIntent.QUESTION


def render_history(transcript: list[ConversationTurn]) -> str:
    """Serialize every turn except the current one for a follow-up prompt.

    Returns an empty string for a first turn.
    """
    prior = transcript[:-1]
    if not prior:
        return ""
    lines = [
        f"{'Human' if turn.role == 'user' else 'Assistant'}: {turn.content}"
        for turn in prior
    ]
    return "\n\n".join(lines) + "\n\n---\n\n"
