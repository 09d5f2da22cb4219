"""
Abstract LLM client interface.

All provider implementations (Anthropic, OpenAI) extend BaseLLMClient.
The interface is async-first and returns raw completion text; callers parse it.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class BaseLLMClient(ABC):
    """
    Abstract async LLM client.

    Providers implement complete() for raw text completions.
    """

    provider: str = "base"

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Raw text completion."""
        ...

    @abstractmethod
    def get_token_usage(self) -> dict[str, int]:
        """Returns {'prompt_tokens': N, 'completion_tokens': N, 'total': N} for last call."""
        ...

    @property
    def is_available(self) -> bool:
        """Returns True if the client has a valid API key and can make calls."""
        return False

    def _empty_usage(self) -> dict[str, int]:
        return {"prompt_tokens": 0, "completion_tokens": 0, "total": 0}
