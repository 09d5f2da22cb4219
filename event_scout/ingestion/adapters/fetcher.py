"""
Source fetcher.

Routes a (mode, target) pair to the backend adapter for that mode.
"""

import logging

from event_scout.configs.settings import Settings, get_settings
from event_scout.schemas.event import SourceMode

from .base_adapter import BaseSourceAdapter, FetchResult
from .scrape_adapter import ScrapeAdapter, ScrapeAdapterConfig
from .search_adapter import SearchAdapter, SearchAdapterConfig

logger = logging.getLogger(__name__)


class SourceFetcher:
    """Selects the search or scrape backend by source mode."""

    def __init__(self, adapters: dict[SourceMode, BaseSourceAdapter]):
        self.adapters = adapters

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SourceFetcher":
        """Build both backends from application settings."""
        settings = settings or get_settings()
        search = SearchAdapter(
            SearchAdapterConfig(
                endpoint=settings.SERPER_URL,
                api_key=settings.fetch_api_key(SourceMode.QUERY),
                request_timeout=settings.SEARCH_TIMEOUT_S,
                location=settings.SEARCH_LOCATION,
                country=settings.SEARCH_COUNTRY,
                language=settings.SEARCH_LANGUAGE,
                num_results=settings.SEARCH_NUM_RESULTS,
                time_range=settings.SEARCH_TIME_RANGE or None,
            )
        )
        scrape = ScrapeAdapter(
            ScrapeAdapterConfig(
                endpoint=settings.FIRECRAWL_URL,
                api_key=settings.fetch_api_key(SourceMode.SCRAPE),
                request_timeout=settings.SCRAPE_TIMEOUT_S,
            )
        )
        return cls({SourceMode.QUERY: search, SourceMode.SCRAPE: scrape})

    def get_adapter(self, mode: SourceMode) -> BaseSourceAdapter:
        adapter = self.adapters.get(mode)
        if adapter is None:
            raise ValueError(f"No fetch backend registered for mode '{mode.value}'")
        return adapter

    def is_configured(self, mode: SourceMode) -> bool:
        """True when the backend for ``mode`` exists and has its credential."""
        adapter = self.adapters.get(mode)
        return adapter is not None and adapter.is_configured

    async def fetch(self, mode: SourceMode, target: str) -> FetchResult:
        return await self.get_adapter(mode).fetch(target)

    async def close(self) -> None:
        for adapter in self.adapters.values():
            await adapter.close()
