"""Test context assembly and the bounded history window"""

import pytest

from align.application.modes import MediationMode, TurnInput, VentMode
from align.application.modes.base import MAX_CLIENT_HISTORY
from align.application.services import ContextBuilder, ContextWindow
from align.domain.enums import HistorySource, MessageRole
from align.domain.exceptions import ValidationException
from align.domain.value_objects import Message, Participants


def _log(*contents: str) -> tuple[Message, ...]:
    roles = [MessageRole.USER, MessageRole.ASSISTANT]
    return tuple(Message(role=roles[i % 2], content=c) for i, c in enumerate(contents))


class TestContextWindow:
    def test_unbounded_keeps_everything(self):
        history = _log("a", "b", "c")

        assert ContextWindow().apply(history) == history

    def test_message_bound_keeps_most_recent_in_order(self):
        history = _log("one", "two", "three", "four")

        assert ContextWindow(max_messages=2).apply(history) == history[2:]

    def test_char_bound_drops_oldest(self):
        """
        GIVEN a history whose total content exceeds the character budget
        WHEN the window is applied
        THEN only the newest messages that fit are kept.
        """
        history = _log("x" * 50, "y" * 30, "z" * 30)

        window = ContextWindow(max_chars=70).apply(history)

        assert [m.content for m in window] == ["y" * 30, "z" * 30]

    def test_both_bounds_apply(self):
        history = _log("a" * 10, "b" * 10, "c" * 10)

        assert len(ContextWindow(max_messages=5, max_chars=15).apply(history)) == 1


class TestContextBuilder:
    def test_new_vent_conversation_is_first_turn(self):
        context = ContextBuilder().build(VentMode(), TurnInput(message="I feel unheard"))

        assert context.source == HistorySource.CLIENT
        assert context.history == ()
        assert context.first_turn
        assert context.request.messages[-1] == {"role": "user", "content": "I feel unheard"}

    def test_client_history_used_without_session(self):
        history = _log("I feel unheard", "Tell me more.")

        context = ContextBuilder().build(
            VentMode(), TurnInput(message="What should I do?", client_history=history)
        )

        assert context.source == HistorySource.CLIENT
        assert context.history == history
        assert not context.first_turn

    def test_stored_history_is_authoritative(self):
        stored = _log("I feel unheard", "Tell me more.")

        context = ContextBuilder().build(
            VentMode(), TurnInput(message="What should I do?", session_id=1), stored
        )

        assert context.source == HistorySource.SERVER
        assert context.history == stored

    def test_client_history_matching_stored_tail_accepted(self):
        stored = _log("I feel unheard", "Tell me more.", "He walked away", "Why?")
        turn = TurnInput(message="Not sure", session_id=1, client_history=stored[-2:])

        context = ContextBuilder().build(VentMode(), turn, stored)

        assert context.history == stored

    def test_client_history_diverging_from_stored_rejected(self):
        """
        GIVEN a stored session log
        WHEN the client sends history that is not its tail
        THEN the turn is rejected as a validation error.
        """
        stored = _log("I feel unheard", "Tell me more.")
        forged = _log("I feel great", "Tell me more.")
        turn = TurnInput(message="Next", session_id=1, client_history=forged)

        with pytest.raises(ValidationException):
            ContextBuilder().build(VentMode(), turn, stored)

    def test_client_history_longer_than_stored_rejected(self):
        stored = _log("I feel unheard")
        turn = TurnInput(message="Next", session_id=1, client_history=_log("x", "I feel unheard"))

        with pytest.raises(ValidationException):
            ContextBuilder().build(VentMode(), turn, stored)

    def test_full_echo_of_long_stored_log_accepted(self):
        """
        GIVEN a stored log longer than the new-session history limit
        WHEN the client echoes all of it back
        THEN the echo is accepted because it matches the stored log.
        """
        stored = _log(*(f"entry {i}" for i in range(MAX_CLIENT_HISTORY + 50)))
        turn = TurnInput(message="Next", session_id=1, client_history=stored)

        context = ContextBuilder().build(VentMode(), turn, stored)

        assert context.history == stored
        assert context.source == HistorySource.SERVER

    def test_long_history_without_session_rejected(self):
        history = _log(*(f"entry {i}" for i in range(MAX_CLIENT_HISTORY + 1)))

        with pytest.raises(ValidationException):
            ContextBuilder().build(VentMode(), TurnInput(message="Next", client_history=history))

    def test_new_mediation_starts_from_welcome(self):
        turn = TurnInput(message="He never listens", participants=Participants("Ana", "Ben"))

        context = ContextBuilder().build(MediationMode(), turn)

        assert len(context.history) == 1
        assert context.history[0].role == MessageRole.MEDIATOR
        assert len(context.request.messages) == 1

    def test_window_limits_model_input_not_history(self):
        stored = _log(*[f"message {i}" for i in range(10)])

        context = ContextBuilder(ContextWindow(max_messages=3)).build(
            VentMode(), TurnInput(message="Next", session_id=1), stored
        )

        assert len(context.history) == 10
        assert context.window == stored[-3:]
        assert context.truncated
        # system + 3 window messages + new user message
        assert len(context.request.messages) == 5
