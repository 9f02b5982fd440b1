"""
Transcript persister: writes the resolved turn pair to the session log.

Runs after the reply is known, in its own unit of work. A failure here
never costs the user their reply: it is logged and the turn is returned
without a session id.
"""

from __future__ import annotations

from align.application.interfaces.repositories import ISessionStore
from align.application.modes.base import ConversationMode, TurnInput
from align.application.services.context_builder import ConversationContext
from align.application.services.mediation_engine import Reply
from align.domain.exceptions import (
    ConcurrentAppendError,
    PersistenceError,
    ResourceNotFoundException,
)
from align.shared.telemetry.logging import get_logger
from align.shared.telemetry.tracing import add_span_attributes, get_tracer, set_span_error

logger = get_logger(__name__)
tracer = get_tracer(__name__)


class TranscriptPersister:
    """Create-or-append of one turn pair"""

    def __init__(self, store: ISessionStore):
        self.store = store

    async def persist(
        self,
        mode: ConversationMode,
        owner_id: int,
        turn: TurnInput,
        context: ConversationContext,
        reply: Reply,
    ) -> int | None:
        """
        Persist the turn pair and return the session id.

        With turn.session_id the pair is appended with a compare-and-append
        against the log length the context was built from. Without it a new
        session is created (title and initial log per mode) and the pair is
        appended in the same transaction.

        Returns:
            The session id, or None if the write failed
        """
        pair = mode.build_turn(turn, reply.content)
        with tracer.start_as_current_span("transcript.persist"):
            add_span_attributes(
                session_kind=mode.kind.value,
                new_session=turn.session_id is None,
                fallback=reply.fallback,
            )
            try:
                async with self.store.sessions(mode.kind) as repo:
                    if turn.session_id is not None:
                        session = await repo.append_and_touch(
                            turn.session_id,
                            owner_id,
                            pair,
                            expected_count=len(context.history),
                        )
                    else:
                        created = await repo.create_session(
                            owner_id,
                            mode.derive_title(turn, context.history),
                            context.history,
                            participants=turn.participants,
                        )
                        session = await repo.append_and_touch(
                            created.id,
                            owner_id,
                            pair,
                            expected_count=len(context.history),
                        )
            except ConcurrentAppendError as e:
                logger.warning(
                    "Concurrent append on %s session %s: %s",
                    mode.kind.value,
                    turn.session_id,
                    e.details.get("reason"),
                )
                set_span_error(e)
                return None
            except (PersistenceError, ResourceNotFoundException) as e:
                logger.error(
                    "Failed to persist %s turn for subject %s: %s %s",
                    mode.kind.value,
                    owner_id,
                    e.message,
                    e.details,
                )
                set_span_error(e)
                return None

            add_span_attributes(session_id=session.id)
            return session.id
