"""
Repository interfaces (ports) for the application layer.

The turn pipeline only sees these protocols; the SQLAlchemy implementations
live in align.infrastructure.persistence.repositories.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Any, Protocol

from align.domain.enums import SessionKind
from align.domain.value_objects import Message, Participants


class IConversationSession(Protocol):
    """Shape of a stored session as seen by the application layer"""

    id: int
    owner_id: int
    title: str
    messages: list[dict[str, Any]]
    message_count: int
    created_at: datetime
    updated_at: datetime


class ISessionRepository(Protocol):
    """Protocol for owner-scoped session access (DIP)"""

    async def create_session(
        self,
        owner_id: int,
        title: str,
        messages: Sequence[Message] = (),
        participants: Participants | None = None,
    ) -> IConversationSession:
        """Create a session; raises PersistenceError on constraint failure"""
        ...

    async def get_session(self, session_id: int, owner_id: int) -> IConversationSession:
        """Get an owned session; raises ResourceNotFoundException otherwise"""
        ...

    async def append_and_touch(
        self,
        session_id: int,
        owner_id: int,
        new_messages: Sequence[Message],
        expected_count: int | None = None,
    ) -> IConversationSession:
        """Compare-and-append; raises ConcurrentAppendError on a lost race"""
        ...

    async def list_sessions(
        self, owner_id: int, limit: int | None = None
    ) -> list[IConversationSession]:
        """Owned sessions, most recently updated first"""
        ...


class ISessionStore(Protocol):
    """Protocol for opening short units of work over one session kind (DIP)"""

    def sessions(self, kind: SessionKind) -> AbstractAsyncContextManager[ISessionRepository]:
        """Repository bound to a transaction committed when the block exits"""
        ...
