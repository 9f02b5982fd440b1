from dataclasses import dataclass
from typing import Any

from align.domain.enums import MessageRole


@dataclass(frozen=True)
class Message:
    """
    Value object for one transcript entry.

    Messages are embedded in a session's log rather than stored as rows,
    so they serialize to plain dicts: {"role", "content", "sender"?}.
    """

    role: MessageRole
    content: str
    sender: str | None = None

    def __post_init__(self):
        if not isinstance(self.role, MessageRole):
            raise ValueError(f"Invalid message role: {self.role!r}")
        if not isinstance(self.content, str):
            raise ValueError("Message content must be a string")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.sender is not None:
            data["sender"] = self.sender
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        """Rebuild a message from its stored form. Raises ValueError on bad data."""
        try:
            role = MessageRole(data["role"])
        except (KeyError, ValueError) as e:
            raise ValueError(f"Invalid message role: {data.get('role')!r}") from e
        return cls(role=role, content=data.get("content", ""), sender=data.get("sender"))

    def same_turn_as(self, other: "Message") -> bool:
        """Compare role and content, ignoring the display-only sender name."""
        return self.role == other.role and self.content == other.content


@dataclass(frozen=True)
class Participants:
    """
    Value object for the two human parties of a mediation.

    Names are display names, fixed when the mediation session is created.
    """

    user: str
    other: str

    def __post_init__(self):
        for field_name in ("user", "other"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Participant '{field_name}' name is required")
            if len(value) > 100:
                raise ValueError(
                    f"Participant '{field_name}' name must not exceed 100 characters"
                )
        object.__setattr__(self, "user", self.user.strip())
        object.__setattr__(self, "other", self.other.strip())

    def name_for(self, role: MessageRole) -> str:
        """Display name of the party speaking with the given role."""
        if role == MessageRole.OTHER:
            return self.other
        return self.user
