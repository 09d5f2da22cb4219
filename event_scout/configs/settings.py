"""Centralized settings management for Event Scout."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from event_scout.schemas.event import DEFAULT_RELEVANCE, SourceMode


class Settings(BaseSettings):
    """
    Application settings powered by pydantic-settings.

    Loads configuration from environment variables and a .env file located
    in the current working directory.
    """

    # -------------------------------------------------------------------------
    # ENVIRONMENT
    # -------------------------------------------------------------------------
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False

    # -------------------------------------------------------------------------
    # SOURCE BACKEND API KEYS
    # -------------------------------------------------------------------------
    SERPER_API_KEY: SecretStr | None = None
    FIRECRAWL_API_KEY: SecretStr | None = None

    # -------------------------------------------------------------------------
    # EXTRACTION (LLM)
    # -------------------------------------------------------------------------
    LLM_PROVIDER: str = "anthropic"
    LLM_MODEL: str | None = None
    ANTHROPIC_API_KEY: SecretStr | None = None
    OPENAI_API_KEY: SecretStr | None = None

    # -------------------------------------------------------------------------
    # TIMEOUTS (seconds)
    # -------------------------------------------------------------------------
    SEARCH_TIMEOUT_S: float = 30.0
    SCRAPE_TIMEOUT_S: float = 90.0
    EXTRACTION_TIMEOUT_S: float = 60.0
    CLIENT_TIMEOUT_S: float = 40.0

    # -------------------------------------------------------------------------
    # PIPELINE
    # -------------------------------------------------------------------------
    DEFAULT_CONCURRENCY: int = 3
    MIN_CONTENT_LENGTH: int = 50
    MAX_CONTENT_CHARS: int = 25_000
    RELEVANCE_PLACEHOLDER: str = DEFAULT_RELEVANCE
    DEDUP_STRATEGY: str = "prefix"

    # -------------------------------------------------------------------------
    # SEARCH BACKEND (Serper)
    # -------------------------------------------------------------------------
    SERPER_URL: str = "https://google.serper.dev/search"
    SEARCH_LOCATION: str = "Campinas, Sao Paulo, Brazil"
    SEARCH_COUNTRY: str = "br"
    SEARCH_LANGUAGE: str = "pt-br"
    SEARCH_NUM_RESULTS: int = 20
    SEARCH_TIME_RANGE: str = "qdr:m"

    # -------------------------------------------------------------------------
    # SCRAPE BACKEND (Firecrawl)
    # -------------------------------------------------------------------------
    FIRECRAWL_URL: str = "https://api.firecrawl.dev/v2/scrape"

    # -------------------------------------------------------------------------
    # PATHS
    # -------------------------------------------------------------------------
    SOURCES_CONFIG_PATH: Path = Path(__file__).resolve().parent / "sources.yaml"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def llm_api_key(self) -> str | None:
        """Return the API key of the configured LLM provider, if any."""
        provider = self.LLM_PROVIDER.lower().strip()
        secret = self.OPENAI_API_KEY if provider == "openai" else self.ANTHROPIC_API_KEY
        return secret.get_secret_value() if secret else None

    def fetch_api_key(self, mode: SourceMode) -> str | None:
        """Return the backend API key used to fetch sources of ``mode``."""
        secret = self.SERPER_API_KEY if mode == SourceMode.QUERY else self.FIRECRAWL_API_KEY
        return secret.get_secret_value() if secret else None

    def has_credentials_for(self, mode: SourceMode) -> bool:
        """True when both the fetch backend and the LLM are configured."""
        return bool(self.fetch_api_key(mode)) and bool(self.llm_api_key())

    def fetch_timeout(self, mode: SourceMode) -> float:
        """Fetch budget for a source mode; scraping gets the longer budget."""
        return self.SEARCH_TIMEOUT_S if mode == SourceMode.QUERY else self.SCRAPE_TIMEOUT_S


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns
    -------
    Settings
        The singleton settings instance.
    """
    return Settings()
