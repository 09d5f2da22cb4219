"""
Scrape Source Adapter.

URL-based retrieval through the Firecrawl scrape API, returning the page's
main content rendered as markdown.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

import httpx

from event_scout.schemas.event import SourceMode

from .base_adapter import AdapterConfig, BaseSourceAdapter, FetchResult

logger = logging.getLogger(__name__)


@dataclass
class ScrapeAdapterConfig(AdapterConfig):
    """Configuration for the scrape backend."""

    only_main_content: bool = True


class ScrapeAdapter(BaseSourceAdapter):
    """Adapter for URL-based sources (Firecrawl scrape)."""

    mode = SourceMode.SCRAPE

    @property
    def scrape_config(self) -> ScrapeAdapterConfig:
        """Get typed config."""
        return self.config  # type: ignore[return-value]

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"} if self.config.api_key else {}

    async def fetch(self, target: str) -> FetchResult:
        """
        Scrape a page and return its markdown.

        Args:
            target: URL to scrape

        Returns:
            FetchResult whose content is the page markdown (may be empty)
        """
        fetch_started = datetime.now(UTC)
        errors: list[str] = []
        content = ""

        try:
            client = self._get_client()
            response = await client.post(
                self.config.endpoint,
                json={
                    "url": target,
                    "formats": ["markdown"],
                    "onlyMainContent": self.scrape_config.only_main_content,
                },
            )
            response.raise_for_status()
            data = response.json().get("data") or {}
            content = data.get("markdown") or ""
        except httpx.TimeoutException as e:
            logger.warning(f"Scrape timed out for {target}: {e!r}")
            errors.append("timeout")
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.warning(f"Scrape failed for {target}: {e}")
            errors.append(str(e))

        return FetchResult(
            success=not errors,
            mode=self.mode,
            content=content,
            errors=errors,
            metadata={"chars": len(content)},
            fetch_started_at=fetch_started,
            fetch_ended_at=datetime.now(UTC),
        )
