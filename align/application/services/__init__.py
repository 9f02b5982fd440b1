from align.application.services.context_builder import (
    ContextBuilder,
    ContextWindow,
    ConversationContext,
)
from align.application.services.mediation_engine import MediationEngine, Reply
from align.application.services.transcript_persister import TranscriptPersister

__all__ = [
    "ContextBuilder",
    "ContextWindow",
    "ConversationContext",
    "MediationEngine",
    "Reply",
    "TranscriptPersister",
]
