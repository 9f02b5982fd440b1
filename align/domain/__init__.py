"""
Domain layer - Enterprise Business Rules.

This is the innermost layer containing the conversation vocabulary
(messages, participants, session kinds) and domain exceptions.
It has no dependencies on other layers.
"""

from align.domain.enums import HistorySource, MessageRole, SessionKind, SubjectRole
from align.domain.exceptions import (
    AlignException,
    AuthenticationException,
    ConcurrentAppendError,
    PersistenceError,
    ResourceNotFoundException,
    TurnCancelledError,
    UpstreamModelError,
    ValidationException,
)
from align.domain.value_objects import Message, Participants

__all__ = [
    # Value Objects
    "Message",
    "Participants",
    # Enums
    "SessionKind",
    "MessageRole",
    "SubjectRole",
    "HistorySource",
    # Exceptions
    "AlignException",
    "ValidationException",
    "AuthenticationException",
    "ResourceNotFoundException",
    "UpstreamModelError",
    "PersistenceError",
    "ConcurrentAppendError",
    "TurnCancelledError",
]
