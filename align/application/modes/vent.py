from collections.abc import Sequence

from align.application.interfaces.llm import ModelRequest
from align.application.modes.base import ConversationMode, TurnInput, truncate_title
from align.application.modes.prompts import (
    VENT_CONTINUATION_INSTRUCTION,
    VENT_FALLBACK,
    VENT_FIRST_TURN_INSTRUCTION,
)
from align.domain.enums import MessageRole, SessionKind
from align.domain.value_objects import Message


class VentMode(ConversationMode):
    """Private reflection: system instruction, prior history, new message last"""

    kind = SessionKind.VENT
    assistant_role = MessageRole.ASSISTANT
    history_roles = frozenset({MessageRole.USER, MessageRole.ASSISTANT})
    fallback_text = VENT_FALLBACK

    def derive_title(self, turn: TurnInput, history: Sequence[Message]) -> str:
        first_user_message = next(
            (m.content for m in history if m.role == MessageRole.USER), turn.message
        )
        return truncate_title(first_user_message)

    def build_context(
        self, turn: TurnInput, window: Sequence[Message], *, first_turn: bool
    ) -> ModelRequest:
        instruction = VENT_FIRST_TURN_INSTRUCTION if first_turn else VENT_CONTINUATION_INSTRUCTION
        messages = [{"role": MessageRole.SYSTEM.value, "content": instruction}]
        messages.extend({"role": m.role.value, "content": m.content} for m in window)
        messages.append({"role": MessageRole.USER.value, "content": turn.message})
        return ModelRequest(messages=tuple(messages))

    def build_turn(self, turn: TurnInput, reply: str) -> tuple[Message, Message]:
        return (
            Message(role=MessageRole.USER, content=turn.message),
            Message(role=self.assistant_role, content=reply),
        )
