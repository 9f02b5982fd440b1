"""Language model client implementations."""

from align.infrastructure.external.llm.client import (
    OpenAIChatClient,
    UnconfiguredModelClient,
)

__all__ = ["OpenAIChatClient", "UnconfiguredModelClient"]
