from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic.alias_generators import to_camel

from align.application.modes.base import ConversationMode, TurnInput
from align.application.use_cases import TurnResult
from align.domain.enums import MessageRole
from align.domain.exceptions import ValidationException
from align.domain.value_objects import Message, Participants


class CamelModel(BaseModel):
    """JSON bodies use camelCase; Python code uses snake_case"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessagePayload(CamelModel):
    role: StrictStr
    content: StrictStr
    sender: StrictStr | None = None

    def to_message(self, position: int) -> Message:
        try:
            role = MessageRole(self.role)
        except ValueError:
            raise ValidationException(
                f"Unknown message role '{self.role}'", field=f"history[{position}].role"
            ) from None
        return Message(role=role, content=self.content, sender=self.sender)


def _history(payloads: list[MessagePayload] | None) -> tuple[Message, ...] | None:
    if not payloads:
        return None
    return tuple(p.to_message(i) for i, p in enumerate(payloads))


class ParticipantsPayload(CamelModel):
    user: StrictStr
    other: StrictStr


class VentTurnRequest(CamelModel):
    message: StrictStr
    conversation_history: list[MessagePayload] | None = None
    session_id: int | None = Field(default=None, ge=1)

    def to_turn(self) -> TurnInput:
        return TurnInput(
            message=self.message,
            session_id=self.session_id,
            client_history=_history(self.conversation_history),
        )


class MediationTurnRequest(CamelModel):
    message: StrictStr
    conversation: list[MessagePayload] = Field(default_factory=list)
    participants: ParticipantsPayload | None = None
    session_id: int | None = Field(default=None, ge=1)
    speaker: Literal["user", "other"] = "user"

    def to_turn(self) -> TurnInput:
        """Convert to a TurnInput; a blank participant name is a validation error"""
        participants = None
        if self.participants is not None:
            try:
                participants = Participants(
                    user=self.participants.user, other=self.participants.other
                )
            except ValueError as e:
                raise ValidationException(str(e), field="participants") from None
        return TurnInput(
            message=self.message,
            session_id=self.session_id,
            client_history=_history(self.conversation),
            participants=participants,
            speaker=MessageRole(self.speaker),
        )


class TurnResponse(CamelModel):
    response: str
    session_id: int | None
    success: bool = True
    fallback: bool | None = None

    @classmethod
    def from_result(cls, result: TurnResult) -> "TurnResponse":
        """Build the body; 'fallback' is only present on fallback replies"""
        if result.fallback:
            return cls(
                response=result.reply, session_id=result.session_id, success=True, fallback=True
            )
        return cls(response=result.reply, session_id=result.session_id, success=True)


class SessionResponse(CamelModel):
    id: int
    title: str
    created_at: datetime
    updated_at: datetime
    messages: list[dict[str, Any]]
    participant_user: str | None = None
    participant_other: str | None = None

    @classmethod
    def from_session(cls, session: Any, mode: ConversationMode) -> "SessionResponse":
        return cls(
            id=session.id,
            title=session.title,
            created_at=session.created_at,
            updated_at=session.updated_at,
            messages=list(session.messages),
            **mode.session_fields(session),
        )


class SessionListResponse(CamelModel):
    sessions: list[SessionResponse]
    success: bool = True
