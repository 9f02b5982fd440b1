"""Ports the application layer depends on (DIP)."""

from align.application.interfaces.llm import ILanguageModelClient, ModelRequest
from align.application.interfaces.repositories import (
    IConversationSession,
    ISessionRepository,
    ISessionStore,
)

__all__ = [
    "ILanguageModelClient",
    "ModelRequest",
    "IConversationSession",
    "ISessionRepository",
    "ISessionStore",
]
