"""Language model port used by the mediation engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ModelRequest:
    """
    Chat-completion input: an ordered tuple of {"role", "content"} dicts.

    A single-instruction request (mediation) is one user-role entry.
    """

    messages: tuple[dict[str, str], ...]

    @classmethod
    def from_prompt(cls, prompt: str) -> ModelRequest:
        return cls(messages=({"role": "user", "content": prompt},))

    @property
    def total_chars(self) -> int:
        return sum(len(m["content"]) for m in self.messages)


class ILanguageModelClient(Protocol):
    """Protocol for the pooled language model client (DIP)"""

    async def complete(self, request: ModelRequest) -> str:
        """
        Return the model's reply text.

        Raises:
            UpstreamModelError: On network failure, non-2xx or malformed response
        """
        ...

    async def close(self) -> None:
        """Release pooled connections (called once at shutdown)"""
        ...
