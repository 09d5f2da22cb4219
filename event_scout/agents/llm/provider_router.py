"""
Provider router: selects the correct LLM client by provider name.

Supported providers:
  "anthropic"  - Claude via Anthropic SDK
  "openai"     - GPT via OpenAI SDK
"""

import logging

from event_scout.agents.llm.base_llm_client import BaseLLMClient
from event_scout.ingestion.errors import ConfigurationError

logger = logging.getLogger(__name__)


def get_llm_client(
    provider: str = "anthropic",
    model_name: str | None = None,
    temperature: float = 0.1,
    max_tokens: int = 4000,
    api_key: str | None = None,
) -> BaseLLMClient:
    """
    Factory: returns the appropriate LLM client for the given provider.

    Args:
        provider: "anthropic" | "openai"
        model_name: Model identifier. Defaults per provider:
                    anthropic → claude-haiku-4-5-20251001
                    openai    → gpt-4o-mini
        temperature: Sampling temperature
        max_tokens: Max response tokens
        api_key: Explicit key; falls back to settings

    Returns:
        Concrete BaseLLMClient instance (may report is_available=False if
        the provider is missing an API key)

    Raises:
        ConfigurationError: If the provider is unknown
    """
    provider = provider.lower().strip()

    if provider == "anthropic":
        from event_scout.agents.llm.anthropic_client import AnthropicLLMClient

        return AnthropicLLMClient(
            model_name=model_name or "claude-haiku-4-5-20251001",
            api_key=api_key,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    if provider == "openai":
        from event_scout.agents.llm.openai_client import OpenAILLMClient

        return OpenAILLMClient(
            model_name=model_name or "gpt-4o-mini",
            api_key=api_key,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    raise ConfigurationError(
        f"Unknown LLM provider '{provider}'. Supported: anthropic, openai."
    )
