"""
Anthropic Claude client using the Anthropic SDK.

Uses claude-haiku-4-5-20251001 by default (configurable via LLM_MODEL).
"""

import logging

import anthropic

from event_scout.agents.llm.base_llm_client import BaseLLMClient
from event_scout.configs.settings import get_settings
from event_scout.ingestion.errors import ConfigurationError

logger = logging.getLogger(__name__)


class AnthropicLLMClient(BaseLLMClient):
    """
    Anthropic Claude client for event extraction.

    Lazy initialization: the SDK client is only created on first call.
    """

    provider = "anthropic"

    def __init__(
        self,
        model_name: str = "claude-haiku-4-5-20251001",
        api_key: str | None = None,
        temperature: float = 0.1,
        max_tokens: int = 4000,
    ):
        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens

        settings = get_settings()
        self._api_key: str | None = api_key or (
            settings.ANTHROPIC_API_KEY.get_secret_value()
            if settings.ANTHROPIC_API_KEY
            else None
        )
        self._client: anthropic.AsyncAnthropic | None = None
        self._last_usage: dict[str, int] = self._empty_usage()

    @property
    def is_available(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is not None:
            return self._client
        if not self._api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY is not configured")
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        client = self._get_client()
        resp = await client.messages.create(
            model=self.model_name,
            max_tokens=max_tokens or self.max_tokens,
            temperature=temperature if temperature is not None else self.temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        self._last_usage = {
            "prompt_tokens": resp.usage.input_tokens,
            "completion_tokens": resp.usage.output_tokens,
            "total": resp.usage.input_tokens + resp.usage.output_tokens,
        }
        return "".join(
            block.text for block in resp.content if getattr(block, "type", "") == "text"
        )

    def get_token_usage(self) -> dict[str, int]:
        return self._last_usage
