"""Test transcript persistence after a reply is resolved"""

from contextlib import asynccontextmanager

import pytest

from align.application.modes import MediationMode, TurnInput, VentMode
from align.application.services import ContextBuilder, Reply, TranscriptPersister
from align.domain.enums import MessageRole, SessionKind
from align.domain.exceptions import PersistenceError
from align.domain.value_objects import Participants
from align.infrastructure.persistence.repositories import SqlSessionStore


class BrokenStore:
    """Store whose every unit of work fails at the storage layer"""

    @asynccontextmanager
    async def sessions(self, kind):
        raise PersistenceError("connect", "OperationalError")
        yield  # pragma: no cover


@pytest.fixture
def store(database):
    return SqlSessionStore(database)


class TestTranscriptPersister:
    async def test_new_vent_session_created_with_turn_pair(self, store, test_subject):
        """
        GIVEN a first vent turn without a session id
        WHEN the resolved reply is persisted
        THEN a session titled after the message holds exactly the turn pair.
        """
        mode = VentMode()
        turn = TurnInput(message="I feel unheard")
        context = ContextBuilder().build(mode, turn)
        reply = Reply(content="Tell me more.", role=MessageRole.ASSISTANT)

        session_id = await TranscriptPersister(store).persist(
            mode, test_subject.id, turn, context, reply
        )

        async with store.sessions(SessionKind.VENT) as repo:
            session = await repo.get_session(session_id, test_subject.id)
        assert session.title == "I feel unheard"
        assert session.messages == [
            {"role": "user", "content": "I feel unheard"},
            {"role": "assistant", "content": "Tell me more."},
        ]
        assert session.message_count == 2

    async def test_new_mediation_session_starts_with_welcome(self, store, test_subject):
        mode = MediationMode()
        turn = TurnInput(message="He never listens", participants=Participants("Ana", "Ben"))
        context = ContextBuilder().build(mode, turn)
        reply = Reply(content=mode.fallback_text, role=MessageRole.MEDIATOR, fallback=True)

        session_id = await TranscriptPersister(store).persist(
            mode, test_subject.id, turn, context, reply
        )

        async with store.sessions(SessionKind.MEDIATION) as repo:
            session = await repo.get_session(session_id, test_subject.id)
        assert session.title == "Ana & Ben"
        assert (session.participant_user, session.participant_other) == ("Ana", "Ben")
        assert [m["role"] for m in session.messages] == ["mediator", "user", "mediator"]
        assert session.messages[1]["sender"] == "Ana"
        assert session.messages[2]["content"] == mode.fallback_text

    async def test_storage_failure_returns_no_session_id(self):
        """
        GIVEN a store that cannot be reached
        WHEN a reply is persisted
        THEN the failure is absorbed and no session id is returned.
        """
        mode = VentMode()
        turn = TurnInput(message="I feel unheard")
        context = ContextBuilder().build(mode, turn)
        reply = Reply(content="Tell me more.", role=MessageRole.ASSISTANT)

        session_id = await TranscriptPersister(BrokenStore()).persist(mode, 1, turn, context, reply)

        assert session_id is None

    async def test_stale_append_returns_no_session_id(self, store, test_subject):
        """
        GIVEN a context built from a log another writer has since extended
        WHEN the reply is persisted
        THEN the compare-and-append fails and no session id is returned.
        """
        mode = VentMode()
        async with store.sessions(SessionKind.VENT) as repo:
            session = await repo.create_session(test_subject.id, "Stale")

        turn = TurnInput(message="First", session_id=session.id)
        context = ContextBuilder().build(mode, turn, ())
        persister = TranscriptPersister(store)
        reply = Reply(content="ok", role=MessageRole.ASSISTANT)

        assert await persister.persist(mode, test_subject.id, turn, context, reply) == session.id
        assert await persister.persist(mode, test_subject.id, turn, context, reply) is None
