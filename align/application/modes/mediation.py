from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from align.application.interfaces.llm import ModelRequest
from align.application.modes.base import ConversationMode, TurnInput, truncate_title
from align.application.modes.prompts import (
    EMPTY_TRANSCRIPT,
    MEDIATION_FALLBACK,
    MEDIATION_INSTRUCTION,
    MEDIATION_WELCOME,
    MEDIATOR_NAME,
)
from align.domain.enums import MessageRole, SessionKind
from align.domain.exceptions import ValidationException
from align.domain.value_objects import Message, Participants

if TYPE_CHECKING:
    from align.infrastructure.persistence.models.mixins import ConversationSessionMixin


class MediationMode(ConversationMode):
    """
    Two-party mediation narrated by the AI mediator.

    The model never sees a role-tagged list: the transcript is rendered as
    "<sender>: <content>" lines inside one synthesized instruction.
    """

    kind = SessionKind.MEDIATION
    assistant_role = MessageRole.MEDIATOR
    history_roles = frozenset({MessageRole.USER, MessageRole.OTHER, MessageRole.MEDIATOR})
    speaker_roles = frozenset({MessageRole.USER, MessageRole.OTHER})
    fallback_text = MEDIATION_FALLBACK

    def validate_turn(self, turn: TurnInput) -> None:
        if turn.participants is None:
            raise ValidationException(
                "Both participant names are required", field="participants"
            )
        super().validate_turn(turn)

    def seed_messages(self, turn: TurnInput) -> tuple[Message, ...]:
        assert turn.participants is not None
        welcome = MEDIATION_WELCOME.format(
            user=turn.participants.user, other=turn.participants.other
        )
        return (Message(role=MessageRole.MEDIATOR, content=welcome, sender=MEDIATOR_NAME),)

    def resolve_participants(
        self, session: ConversationSessionMixin, requested: Participants | None
    ) -> Participants:
        stored = Participants(user=session.participant_user, other=session.participant_other)
        if requested is not None and requested != stored:
            raise ValidationException(
                "Participants do not match the existing session", field="participants"
            )
        return stored

    def session_fields(self, session: ConversationSessionMixin) -> dict[str, Any]:
        return {
            "participant_user": session.participant_user,
            "participant_other": session.participant_other,
        }

    def derive_title(self, turn: TurnInput, history: Sequence[Message]) -> str:
        assert turn.participants is not None
        return truncate_title(f"{turn.participants.user} & {turn.participants.other}")

    def sender_of(self, message: Message, participants: Participants) -> str:
        if message.sender:
            return message.sender
        if message.role == MessageRole.MEDIATOR:
            return MEDIATOR_NAME
        return participants.name_for(message.role)

    def build_context(
        self, turn: TurnInput, window: Sequence[Message], *, first_turn: bool
    ) -> ModelRequest:
        participants = turn.participants
        assert participants is not None
        transcript = "\n".join(
            f"{self.sender_of(m, participants)}: {m.content}" for m in window
        )
        prompt = MEDIATION_INSTRUCTION.format(
            user=participants.user,
            other=participants.other,
            transcript=transcript or EMPTY_TRANSCRIPT,
            speaker=participants.name_for(turn.speaker),
            message=turn.message,
        )
        return ModelRequest.from_prompt(prompt)

    def build_turn(self, turn: TurnInput, reply: str) -> tuple[Message, Message]:
        assert turn.participants is not None
        return (
            Message(
                role=turn.speaker,
                content=turn.message,
                sender=turn.participants.name_for(turn.speaker),
            ),
            Message(role=self.assistant_role, content=reply, sender=MEDIATOR_NAME),
        )
