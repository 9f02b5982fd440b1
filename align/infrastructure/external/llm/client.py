"""
OpenAI / Azure OpenAI chat-completion client.

One instance is built at startup and shared by all requests; the
underlying SDK client pools its HTTP connections. Retries are disabled:
a single attempt either succeeds or the caller falls back.
"""

import logging

import openai
from openai import AsyncAzureOpenAI, AsyncOpenAI

from align.application.interfaces.llm import ILanguageModelClient, ModelRequest
from align.domain.exceptions import UpstreamModelError
from align.infrastructure.config.settings import Settings

logger = logging.getLogger(__name__)


class OpenAIChatClient:
    """Chat completions over an AsyncOpenAI or AsyncAzureOpenAI client"""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        *,
        max_output_tokens: int | None = None,
        temperature: float | None = None,
    ):
        self._client = client
        self.model = model
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature

    @classmethod
    def from_settings(cls, settings: Settings) -> ILanguageModelClient:
        """
        Build the client for the configured provider.

        Missing credentials are not fatal: the returned client fails every
        call, which the engine turns into fallback replies.
        """
        if not settings.llm_api_key:
            logger.warning("LLM_API_KEY not set; every turn will use the fallback reply")
            return UnconfiguredModelClient("missing api key")

        if settings.llm_provider == "azure":
            endpoint = settings.azure_endpoint
            if not endpoint and settings.azure_resource_name:
                endpoint = f"https://{settings.azure_resource_name}.openai.azure.com"
            if not endpoint:
                logger.warning(
                    "Neither AZURE_ENDPOINT nor AZURE_RESOURCE_NAME set; "
                    "every turn will use the fallback reply"
                )
                return UnconfiguredModelClient("missing azure endpoint")
            client: AsyncOpenAI = AsyncAzureOpenAI(
                api_key=settings.llm_api_key,
                azure_endpoint=endpoint,
                api_version=settings.azure_api_version,
                timeout=settings.llm_timeout_seconds,
                max_retries=0,
            )
        else:
            client = AsyncOpenAI(
                api_key=settings.llm_api_key,
                base_url=settings.openai_base_url,
                timeout=settings.llm_timeout_seconds,
                max_retries=0,
            )

        logger.info(
            "Language model client ready: provider=%s, model=%s",
            settings.llm_provider,
            settings.llm_model,
        )
        return cls(
            client,
            settings.llm_model,
            max_output_tokens=settings.llm_max_output_tokens,
            temperature=settings.llm_temperature,
        )

    async def complete(self, request: ModelRequest) -> str:
        options: dict = {}
        if self.max_output_tokens is not None:
            options["max_tokens"] = self.max_output_tokens
        if self.temperature is not None:
            options["temperature"] = self.temperature

        try:
            completion = await self._client.chat.completions.create(
                model=self.model, messages=list(request.messages), **options
            )
        except openai.APIStatusError as e:
            raise UpstreamModelError(f"HTTP {e.status_code}") from e
        except openai.OpenAIError as e:
            raise UpstreamModelError(type(e).__name__) from e

        if not completion.choices:
            raise UpstreamModelError("response has no choices")
        content = completion.choices[0].message.content
        if not content or not content.strip():
            raise UpstreamModelError("empty completion")
        return content.strip()

    async def close(self) -> None:
        await self._client.close()


class UnconfiguredModelClient:
    """Stand-in used when no credentials are configured; every call fails"""

    def __init__(self, reason: str):
        self.reason = reason

    async def complete(self, request: ModelRequest) -> str:
        raise UpstreamModelError(f"language model not configured ({self.reason})")

    async def close(self) -> None:
        return None
