"""
Conversation mode capability objects.

Vent and mediation share one pipeline (store, context builder, engine,
persister). Everything that differs between them lives on a
ConversationMode: which roles exist, how the model input is shaped, what
the fallback says, how a new session is titled and seeded.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from align.application.interfaces.llm import ModelRequest
from align.domain.enums import MessageRole, SessionKind
from align.domain.exceptions import ValidationException
from align.domain.value_objects import Message, Participants

if TYPE_CHECKING:
    from align.infrastructure.persistence.models.mixins import ConversationSessionMixin

MAX_MESSAGE_CHARS = 20_000
MAX_CLIENT_HISTORY = 200
TITLE_MAX_CHARS = 60


@dataclass(frozen=True)
class TurnInput:
    """One incoming turn, as validated by the API layer"""

    message: str
    session_id: int | None = None
    client_history: tuple[Message, ...] | None = None
    participants: Participants | None = None
    speaker: MessageRole = MessageRole.USER


class ConversationMode(ABC):
    """Mode-specific policy consumed by the mode-agnostic pipeline"""

    kind: SessionKind
    assistant_role: MessageRole
    history_roles: frozenset[MessageRole]
    speaker_roles: frozenset[MessageRole] = frozenset({MessageRole.USER})
    fallback_text: str

    def validate_turn(self, turn: TurnInput) -> None:
        """Reject a turn before any persistence access or model call"""
        if not turn.message.strip():
            raise ValidationException("Message is required", field="message")
        if len(turn.message) > MAX_MESSAGE_CHARS:
            raise ValidationException(
                f"Message must not exceed {MAX_MESSAGE_CHARS} characters", field="message"
            )
        if turn.speaker not in self.speaker_roles:
            raise ValidationException(
                f"Speaker '{turn.speaker.value}' is not valid in {self.kind.value} mode",
                field="speaker",
            )

    def sanitize_history(
        self, messages: Sequence[Message], *, bounded: bool = True
    ) -> tuple[Message, ...]:
        """
        Validate client-supplied history.

        Only conversational roles are accepted (never 'system'), and every
        entry needs non-empty, bounded content. The message-count bound only
        applies when the history seeds a new session (bounded=True); an echo
        of a stored log is limited by the tail check instead.
        """
        if bounded and len(messages) > MAX_CLIENT_HISTORY:
            raise ValidationException(
                f"History must not exceed {MAX_CLIENT_HISTORY} messages", field="history"
            )
        for position, message in enumerate(messages):
            if message.role not in self.history_roles:
                raise ValidationException(
                    f"Role '{message.role.value}' is not allowed in {self.kind.value} history",
                    field=f"history[{position}].role",
                )
            if not message.content.strip() or len(message.content) > MAX_MESSAGE_CHARS:
                raise ValidationException(
                    "History messages need non-empty content within the size limit",
                    field=f"history[{position}].content",
                )
        return tuple(messages)

    def seed_messages(self, turn: TurnInput) -> tuple[Message, ...]:
        """Initial log of a new session when the client sent no history"""
        return ()

    def resolve_participants(
        self, session: ConversationSessionMixin, requested: Participants | None
    ) -> Participants | None:
        """Participants to use for a turn on an existing session"""
        return None

    def session_fields(self, session: ConversationSessionMixin) -> dict[str, Any]:
        """Mode-specific fields exposed when listing sessions"""
        return {}

    @abstractmethod
    def derive_title(self, turn: TurnInput, history: Sequence[Message]) -> str:
        """Title of a new session, computed once at creation"""

    @abstractmethod
    def build_context(
        self, turn: TurnInput, window: Sequence[Message], *, first_turn: bool
    ) -> ModelRequest:
        """Model input from the bounded history window and the new turn"""

    @abstractmethod
    def build_turn(self, turn: TurnInput, reply: str) -> tuple[Message, Message]:
        """The (incoming, reply) pair appended to the log"""


def truncate_title(text: str, limit: int = TITLE_MAX_CHARS) -> str:
    collapsed = " ".join(text.split())
    if len(collapsed) <= limit:
        return collapsed
    return collapsed[: limit - 3].rstrip() + "..."
