from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from align.domain.enums import SessionKind
from align.domain.exceptions import (
    ConcurrentAppendError,
    PersistenceError,
    ResourceNotFoundException,
)
from align.domain.value_objects import Message, Participants
from align.infrastructure.persistence.models.conversation import SESSION_MODELS
from align.infrastructure.persistence.models.mixins import (
    ConversationSessionMixin,
    utc_now,
)
from align.infrastructure.persistence.repositories.base import BaseRepository


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    """Translate driver errors into PersistenceError, keeping the cause for logs"""
    try:
        yield
    except SQLAlchemyError as e:
        raise PersistenceError(operation, type(e).__name__) from e


class ConversationSessionRepository(BaseRepository[ConversationSessionMixin]):
    """
    Owner-scoped access to vent or mediation sessions.

    Every read and write goes through _owned_query/_owned_criteria, so a
    session ID alone never grants access: another subject's session is
    reported exactly like a missing one.
    """

    def __init__(self, db: AsyncSession, kind: SessionKind):
        super().__init__(db, SESSION_MODELS[kind])
        self.kind = kind

    def _owned_criteria(self, session_id: int, owner_id: int) -> tuple[Any, ...]:
        model: Any = self.model
        return (model.id == session_id, model.owner_id == owner_id)

    def _owned_query(self, session_id: int, owner_id: int):
        return select(self.model).where(*self._owned_criteria(session_id, owner_id))

    def _not_found(self, session_id: int) -> ResourceNotFoundException:
        return ResourceNotFoundException(f"{self.kind.value} session", session_id)

    async def create_session(
        self,
        owner_id: int,
        title: str,
        messages: Sequence[Message] = (),
        participants: Participants | None = None,
    ) -> ConversationSessionMixin:
        """Create a session whose log starts with the given messages"""
        fields: dict[str, Any] = {
            "owner_id": owner_id,
            "title": title,
            "messages": [m.to_dict() for m in messages],
            "message_count": len(messages),
        }
        if self.kind == SessionKind.MEDIATION:
            if participants is None:
                raise ValueError("Mediation sessions require participants")
            fields["participant_user"] = participants.user
            fields["participant_other"] = participants.other

        with _storage_errors("create_session"):
            return await self.create(self.model(**fields))

    async def get_session(self, session_id: int, owner_id: int) -> ConversationSessionMixin:
        """Get a session owned by owner_id, or raise ResourceNotFoundException"""
        with _storage_errors("get_session"):
            result = await self.db.execute(self._owned_query(session_id, owner_id))
            session = result.scalar_one_or_none()
        if session is None:
            raise self._not_found(session_id)
        return session

    async def append_and_touch(
        self,
        session_id: int,
        owner_id: int,
        new_messages: Sequence[Message],
        expected_count: int | None = None,
    ) -> ConversationSessionMixin:
        """
        Append messages to the session log and refresh updated_at.

        Compare-and-append: the UPDATE only matches while the stored log still
        has expected_count entries (defaults to the count read here), so a
        concurrent writer causes ConcurrentAppendError instead of a lost update.
        """
        session = await self.get_session(session_id, owner_id)
        expected = session.message_count if expected_count is None else expected_count
        if session.message_count != expected:
            raise ConcurrentAppendError(session_id, expected)

        log = list(session.messages) + [m.to_dict() for m in new_messages]
        model: Any = self.model
        with _storage_errors("append_and_touch"):
            result = await self.db.execute(
                update(self.model)
                .where(
                    *self._owned_criteria(session_id, owner_id),
                    model.message_count == expected,
                )
                .values(messages=log, message_count=len(log), updated_at=utc_now())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise ConcurrentAppendError(session_id, expected)
            await self.db.refresh(session)
        return session

    async def list_sessions(
        self, owner_id: int, limit: int | None = None
    ) -> list[ConversationSessionMixin]:
        """List the owner's sessions, most recently updated first"""
        model: Any = self.model
        query = (
            select(self.model)
            .where(model.owner_id == owner_id)
            .order_by(model.updated_at.desc(), model.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        with _storage_errors("list_sessions"):
            result = await self.db.execute(query)
            return list(result.scalars().all())
