"""Conversation modes: the per-mode policy behind the shared turn pipeline."""

from align.application.modes.base import ConversationMode, TurnInput
from align.application.modes.mediation import MediationMode
from align.application.modes.vent import VentMode
from align.domain.enums import SessionKind

MODES: dict[SessionKind, ConversationMode] = {
    SessionKind.VENT: VentMode(),
    SessionKind.MEDIATION: MediationMode(),
}


def get_mode(kind: SessionKind) -> ConversationMode:
    return MODES[kind]


__all__ = [
    "ConversationMode",
    "TurnInput",
    "VentMode",
    "MediationMode",
    "MODES",
    "get_mode",
]
