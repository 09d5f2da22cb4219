"""
Search Source Adapter.

Query-based retrieval through the Serper web search API. The organic
results are serialized to JSON text and handed to the extraction step.
"""

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime

import httpx

from event_scout.schemas.event import SourceMode

from .base_adapter import AdapterConfig, BaseSourceAdapter, FetchResult

logger = logging.getLogger(__name__)


@dataclass
class SearchAdapterConfig(AdapterConfig):
    """Configuration for the search backend."""

    location: str = "Campinas, Sao Paulo, Brazil"
    country: str = "br"
    language: str = "pt-br"
    num_results: int = 20
    time_range: str | None = "qdr:m"


class SearchAdapter(BaseSourceAdapter):
    """Adapter for query-based sources (Serper Google search)."""

    mode = SourceMode.QUERY

    @property
    def search_config(self) -> SearchAdapterConfig:
        """Get typed config."""
        return self.config  # type: ignore[return-value]

    def _auth_headers(self) -> dict[str, str]:
        return {"X-API-KEY": self.config.api_key} if self.config.api_key else {}

    def _build_payload(self, query: str) -> dict:
        payload = {
            "q": query,
            "location": self.search_config.location,
            "gl": self.search_config.country,
            "hl": self.search_config.language,
            "num": self.search_config.num_results,
        }
        if self.search_config.time_range:
            payload["tbs"] = self.search_config.time_range
        return payload

    async def fetch(self, target: str) -> FetchResult:
        """
        Run a web search and return the organic results as JSON text.

        Args:
            target: Search query string

        Returns:
            FetchResult whose content is the pretty-printed organic result list
        """
        fetch_started = datetime.now(UTC)
        errors: list[str] = []
        content = ""
        metadata: dict = {"results": 0}

        try:
            client = self._get_client()
            response = await client.post(
                self.config.endpoint, json=self._build_payload(target)
            )
            response.raise_for_status()
            organic = response.json().get("organic") or []
            metadata["results"] = len(organic)
            content = json.dumps(organic, indent=2, ensure_ascii=False)
        except httpx.TimeoutException as e:
            logger.warning(f"Search timed out for '{target}': {e!r}")
            errors.append("timeout")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Search failed for '{target}': {e}")
            errors.append(str(e))

        return FetchResult(
            success=not errors,
            mode=self.mode,
            content=content,
            errors=errors,
            metadata=metadata,
            fetch_started_at=fetch_started,
            fetch_ended_at=datetime.now(UTC),
        )
