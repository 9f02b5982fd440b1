"""
Conversation turn use case.

Orchestrates one vent or mediation turn:
Session Store lookup -> Context Builder -> Mediation Engine -> Transcript Persister.
The identity check happens before this service is reached.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from align.application.modes.base import ConversationMode, TurnInput
from align.domain.enums import SessionKind
from align.domain.value_objects import Message
from align.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from align.application.interfaces.repositories import IConversationSession, ISessionStore
    from align.application.services.context_builder import ContextBuilder
    from align.application.services.mediation_engine import MediationEngine
    from align.application.services.transcript_persister import TranscriptPersister

logger = get_logger(__name__)


@dataclass(frozen=True)
class TurnResult:
    """Outcome of a turn as reported to the client"""

    reply: str
    session_id: int | None
    fallback: bool = False


class ConversationService:
    """Conversation service following DIP - depends on abstractions, not concretions"""

    def __init__(
        self,
        store: "ISessionStore",
        engine: "MediationEngine",
        context_builder: "ContextBuilder",
        persister: "TranscriptPersister",
    ) -> None:
        self.store = store
        self.engine = engine
        self.context_builder = context_builder
        self.persister = persister

    async def take_turn(
        self,
        mode: ConversationMode,
        owner_id: int,
        turn: TurnInput,
        cancel: asyncio.Event | None = None,
    ) -> TurnResult:
        """
        Run one turn end to end.

        Args:
            mode: Vent or mediation policy
            owner_id: Authenticated subject id
            turn: Incoming turn
            cancel: Set on client disconnect

        Returns:
            The reply and the session it was written to (None if the write failed)

        Raises:
            ValidationException: Bad input, or client history inconsistent with the session
            ResourceNotFoundException: sessionId missing or owned by someone else
            PersistenceError: The session lookup failed
            TurnCancelledError: The client disconnected while the reply was drafted
        """
        # 1. Reject bad input before touching storage or the model
        mode.validate_turn(turn)

        # 2. Load the stored log when continuing a session (owner-checked)
        stored_history = None
        if turn.session_id is not None:
            async with self.store.sessions(mode.kind) as repo:
                session = await repo.get_session(turn.session_id, owner_id)
                participants = mode.resolve_participants(session, turn.participants)
                stored_history = self._decode_log(session)
            if participants is not None:
                turn = replace(turn, participants=participants)

        # 3. Assemble the bounded context
        context = self.context_builder.build(mode, turn, stored_history)

        # 4. Draft the reply (fallback on model failure)
        reply = await self.engine.resolve(mode, context, cancel)

        # 5. Persist the pair; a failure here still returns the reply
        session_id = await self.persister.persist(mode, owner_id, turn, context, reply)

        logger.info(
            "%s turn for subject %s: session=%s fallback=%s source=%s",
            mode.kind.value,
            owner_id,
            session_id,
            reply.fallback,
            context.source.value,
        )
        return TurnResult(reply=reply.content, session_id=session_id, fallback=reply.fallback)

    async def list_sessions(
        self, kind: SessionKind, owner_id: int, limit: int | None = None
    ) -> list["IConversationSession"]:
        """The owner's sessions of one kind, newest activity first"""
        async with self.store.sessions(kind) as repo:
            return await repo.list_sessions(owner_id, limit=limit)

    @staticmethod
    def _decode_log(session: "IConversationSession") -> tuple[Message, ...]:
        return tuple(Message.from_dict(entry) for entry in session.messages)
