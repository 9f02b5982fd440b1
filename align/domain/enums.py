"""Domain enumerations for the Align application."""

from enum import Enum


class SessionKind(str, Enum):
    """Conversation session kind"""

    VENT = "vent"
    MEDIATION = "mediation"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [kind.value for kind in cls]


class MessageRole(str, Enum):
    """
    Role of a transcript entry.

    Vent transcripts use USER/ASSISTANT; mediation transcripts use
    USER/OTHER for the two human parties and MEDIATOR for the AI.
    """

    USER = "user"
    ASSISTANT = "assistant"
    MEDIATOR = "mediator"
    SYSTEM = "system"
    OTHER = "other"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [role.value for role in cls]


class SubjectRole(str, Enum):
    """Subject (account) role enumeration"""

    MEMBER = "member"
    ADMIN = "admin"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [role.value for role in cls]


class HistorySource(str, Enum):
    """Where the prior transcript of a turn came from"""

    SERVER = "server"  # stored session log
    CLIENT = "client"  # client-supplied history, no session yet
