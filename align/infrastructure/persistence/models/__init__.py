from align.infrastructure.persistence.models.conversation import (
    SESSION_MODELS,
    MediationSession,
    VentSession,
)

# Mixins for model composition
from align.infrastructure.persistence.models.mixins import (
    ConversationSessionMixin,
    IntegerIdMixin,
    SoftDeleteMixin,
    TimestampMixin,
)
from align.infrastructure.persistence.models.subject import Subject

__all__ = [
    # Models
    "Subject",
    "VentSession",
    "MediationSession",
    "SESSION_MODELS",
    # Mixins
    "IntegerIdMixin",
    "TimestampMixin",
    "SoftDeleteMixin",
    "ConversationSessionMixin",
]
