"""
Context assembly for a conversation turn.

Decides which history the turn is built on (the stored session log or the
client-supplied history), checks the two agree, and cuts the bounded
window the model actually sees. The stored transcript is never truncated;
only the model input is.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from align.application.interfaces.llm import ModelRequest
from align.application.modes.base import ConversationMode, TurnInput
from align.domain.enums import HistorySource
from align.domain.exceptions import ValidationException
from align.domain.value_objects import Message
from align.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ContextWindow:
    """Upper bounds on the prior history sent to the model (0 disables a bound)"""

    max_messages: int = 0
    max_chars: int = 0

    def apply(self, history: Sequence[Message]) -> tuple[Message, ...]:
        """Keep the most recent messages that fit both bounds, in original order"""
        kept: list[Message] = []
        chars = 0
        for message in reversed(history):
            if self.max_messages and len(kept) >= self.max_messages:
                break
            if self.max_chars and chars + len(message.content) > self.max_chars:
                break
            kept.append(message)
            chars += len(message.content)
        kept.reverse()
        return tuple(kept)


@dataclass(frozen=True)
class ConversationContext:
    """Everything the engine and the persister need to know about a turn's history"""

    source: HistorySource
    history: tuple[Message, ...]
    window: tuple[Message, ...]
    request: ModelRequest

    @property
    def first_turn(self) -> bool:
        return not self.history

    @property
    def truncated(self) -> bool:
        return len(self.window) < len(self.history)


class ContextBuilder:
    """Builds the model context from a mode, the incoming turn and the stored log"""

    def __init__(self, window: ContextWindow | None = None):
        self.window = window or ContextWindow()

    def build(
        self,
        mode: ConversationMode,
        turn: TurnInput,
        stored_history: Sequence[Message] | None = None,
    ) -> ConversationContext:
        """
        Assemble the context for one turn.

        Args:
            mode: Mode policy deciding the model input shape
            turn: Validated incoming turn
            stored_history: The session log when the turn targets an existing
                session, None for a new conversation

        Raises:
            ValidationException: If client history is malformed or does not
                match the tail of the stored log
        """
        client_history = (
            mode.sanitize_history(turn.client_history, bounded=stored_history is None)
            if turn.client_history
            else None
        )

        if stored_history is not None:
            history = tuple(stored_history)
            if client_history is not None:
                self._check_tail(history, client_history)
            source = HistorySource.SERVER
        elif client_history is not None:
            history = client_history
            source = HistorySource.CLIENT
        else:
            history = mode.seed_messages(turn)
            source = HistorySource.CLIENT

        window = self.window.apply(history)
        if len(window) < len(history):
            logger.debug(
                "Context window cut %s history from %d to %d messages",
                mode.kind.value,
                len(history),
                len(window),
            )

        request = mode.build_context(turn, window, first_turn=not history)
        return ConversationContext(
            source=source, history=history, window=window, request=request
        )

    @staticmethod
    def _check_tail(stored: tuple[Message, ...], client: tuple[Message, ...]) -> None:
        """Client history must be a suffix of the stored log"""
        if len(client) > len(stored):
            raise ValidationException(
                "Conversation history does not match the stored session", field="history"
            )
        tail = stored[len(stored) - len(client):]
        if not all(a.same_turn_as(b) for a, b in zip(tail, client)):
            raise ValidationException(
                "Conversation history does not match the stored session", field="history"
            )
