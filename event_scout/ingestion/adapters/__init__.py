"""
Source Adapters (SourceFetcher boundary).

Adapters provide a unified interface for retrieving raw text:
- Search backend (query-based, Serper)
- Scrape backend (URL-based, Firecrawl)

Usage:
    from event_scout.ingestion.adapters import SourceFetcher

    fetcher = SourceFetcher.from_settings()
    result = await fetcher.fetch(SourceMode.SCRAPE, "https://example.com/events")
"""

from .base_adapter import AdapterConfig, BaseSourceAdapter, FetchResult
from .fetcher import SourceFetcher
from .scrape_adapter import ScrapeAdapter, ScrapeAdapterConfig
from .search_adapter import SearchAdapter, SearchAdapterConfig

__all__ = [
    "AdapterConfig",
    "BaseSourceAdapter",
    "FetchResult",
    "ScrapeAdapter",
    "ScrapeAdapterConfig",
    "SearchAdapter",
    "SearchAdapterConfig",
    "SourceFetcher",
]
