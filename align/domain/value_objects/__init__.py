"""Domain value objects."""

from align.domain.value_objects.core import Message, Participants

__all__ = ["Message", "Participants"]
