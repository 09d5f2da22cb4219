"""
OpenAI client using the OpenAI SDK.

Uses gpt-4o-mini by default (configurable via LLM_MODEL).
"""

import logging

from openai import AsyncOpenAI

from event_scout.agents.llm.base_llm_client import BaseLLMClient
from event_scout.configs.settings import get_settings
from event_scout.ingestion.errors import ConfigurationError

logger = logging.getLogger(__name__)


class OpenAILLMClient(BaseLLMClient):
    """
    OpenAI chat completions client for event extraction.

    Lazy initialization: the SDK client is only created on first call.
    """

    provider = "openai"

    def __init__(
        self,
        model_name: str = "gpt-4o-mini",
        api_key: str | None = None,
        temperature: float = 0.1,
        max_tokens: int = 4000,
    ):
        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens

        settings = get_settings()
        self._api_key: str | None = api_key or (
            settings.OPENAI_API_KEY.get_secret_value()
            if settings.OPENAI_API_KEY
            else None
        )
        self._client: AsyncOpenAI | None = None
        self._last_usage: dict[str, int] = self._empty_usage()

    @property
    def is_available(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is not None:
            return self._client
        if not self._api_key:
            raise ConfigurationError("OPENAI_API_KEY is not configured")
        self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        client = self._get_client()
        resp = await client.chat.completions.create(
            model=self.model_name,
            temperature=temperature if temperature is not None else self.temperature,
            max_tokens=max_tokens or self.max_tokens,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
        if resp.usage:
            self._last_usage = {
                "prompt_tokens": resp.usage.prompt_tokens,
                "completion_tokens": resp.usage.completion_tokens,
                "total": resp.usage.total_tokens,
            }
        return resp.choices[0].message.content or ""

    def get_token_usage(self) -> dict[str, int]:
        return self._last_usage
