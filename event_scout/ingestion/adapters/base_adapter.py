"""
Base Source Adapter.

Abstract base class defining the interface for source fetch backends.
Each backend retrieves raw text for one kind of source target (a search
query or a URL) and reports the outcome as a FetchResult.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

from event_scout.schemas.event import SourceMode


@dataclass
class FetchResult:
    """
    Result of a fetch operation.

    Provides a unified result format for both search and scrape backends.
    """

    success: bool
    mode: SourceMode
    content: str = ""
    errors: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    fetch_started_at: datetime | None = None
    fetch_ended_at: datetime | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate fetch duration."""
        if self.fetch_started_at and self.fetch_ended_at:
            return (self.fetch_ended_at - self.fetch_started_at).total_seconds()
        return 0.0


@dataclass
class AdapterConfig:
    """Base configuration for fetch backends."""

    endpoint: str
    api_key: str | None = None
    request_timeout: float = 30.0
    headers: dict[str, str] = field(default_factory=dict)
    transport: httpx.AsyncBaseTransport | None = None


class BaseSourceAdapter(ABC):
    """
    Abstract base class for fetch backends.

    Subclasses must implement:
        - fetch(): retrieve raw text for a target
        - _auth_headers(): backend-specific authentication headers
    """

    mode: SourceMode

    def __init__(self, config: AdapterConfig):
        """
        Initialize the adapter.

        Args:
            config: AdapterConfig with backend settings
        """
        self.config = config
        self._client: httpx.AsyncClient | None = None
        self._validate_config()

    @property
    def is_configured(self) -> bool:
        """True when the backend has the credential it needs."""
        return bool(self.config.api_key)

    def _validate_config(self) -> None:
        """Validate adapter configuration."""
        if not self.config.endpoint:
            raise ValueError(f"{type(self).__name__} requires an endpoint")

    @abstractmethod
    def _auth_headers(self) -> dict[str, str]:
        """Return the authentication headers for the backend."""

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            headers = {
                "Content-Type": "application/json",
                **self._auth_headers(),
                **self.config.headers,
            }
            self._client = httpx.AsyncClient(
                headers=headers,
                timeout=self.config.request_timeout,
                transport=self.config.transport,
            )
        return self._client

    @abstractmethod
    async def fetch(self, target: str) -> FetchResult:
        """
        Fetch raw text for a target.

        Args:
            target: Search query or URL, depending on the backend

        Returns:
            FetchResult with the raw content or the errors encountered
        """

    async def close(self) -> None:
        """Close async HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
