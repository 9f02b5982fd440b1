from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from align.domain.enums import SessionKind
from align.infrastructure.persistence.database import Base
from align.infrastructure.persistence.models.mixins import ConversationSessionMixin


class VentSession(ConversationSessionMixin, Base):
    """
    Private reflection session between one subject and the assistant.

    Inherits from ConversationSessionMixin:
        - id, owner_id, title, messages, message_count
        - created_at, updated_at
    """

    __tablename__ = "vent_session"

    kind = SessionKind.VENT


class MediationSession(ConversationSessionMixin, Base):
    """
    Mediated conversation between two named parties, narrated by the AI mediator.

    Participant names are fixed at creation.
    """

    __tablename__ = "mediation_session"

    kind = SessionKind.MEDIATION

    participant_user: Mapped[str] = mapped_column(String(100), nullable=False)
    participant_other: Mapped[str] = mapped_column(String(100), nullable=False)


SESSION_MODELS: dict[SessionKind, type[ConversationSessionMixin]] = {
    SessionKind.VENT: VentSession,
    SessionKind.MEDIATION: MediationSession,
}
