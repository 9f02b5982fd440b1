""" Repository module for the persistence layer. """

from align.infrastructure.persistence.repositories.base import BaseRepository
from align.infrastructure.persistence.repositories.session_repo import (
    ConversationSessionRepository,
)
from align.infrastructure.persistence.repositories.session_store import SqlSessionStore
from align.infrastructure.persistence.repositories.subject_repo import SubjectRepository

__all__ = [
    "BaseRepository",
    "ConversationSessionRepository",
    "SqlSessionStore",
    "SubjectRepository",
]
