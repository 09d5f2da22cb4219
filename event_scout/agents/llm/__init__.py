"""LLM clients used by the extraction step."""

from event_scout.agents.llm.base_llm_client import BaseLLMClient
from event_scout.agents.llm.provider_router import get_llm_client

__all__ = ["BaseLLMClient", "get_llm_client"]
