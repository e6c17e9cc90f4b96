"""Conversation layer: one chat turn at a time, history kept in memory."""

from cohora.conversation.controller import ConversationController
from cohora.conversation.models import (
    DEFAULT_MATCH_REASON,
    FALLBACK_MESSAGE,
    SUGGESTIONS,
    WELCOME_MESSAGE,
    EnrichedPerson,
    Message,
    TurnResult,
)
from cohora.conversation.session import ChatSession

__all__ = [
    "DEFAULT_MATCH_REASON",
    "FALLBACK_MESSAGE",
    "SUGGESTIONS",
    "WELCOME_MESSAGE",
    "ChatSession",
    "ConversationController",
    "EnrichedPerson",
    "Message",
    "TurnResult",
]
