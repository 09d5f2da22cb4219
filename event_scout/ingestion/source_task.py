"""
Source task.

Binds one SourceDescriptor to fetch + extract and classifies the result as a
TaskOutcome. ``execute`` never raises: every failure path is folded into a
SoftWarning or HardError.

Flow:
  0. preflight   - missing credential → HardError (nothing is attempted)
  1. fetch       - timeout / transport failure → SoftWarning
  2. sufficiency - empty or short content → SoftWarning (extractor skipped)
  3. extract     - failure / timeout → SoftWarning, unparsable output → SoftWarning
  4. normalize   - blank relevance text → placeholder → Success
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import date

from event_scout.configs.settings import Settings, get_settings
from event_scout.ingestion.adapters import SourceFetcher
from event_scout.ingestion.errors import ConfigurationError, ExtractionParseError
from event_scout.ingestion.extraction import EventExtractor
from event_scout.ingestion.outcomes import (
    EXTRACTION_FAILURE,
    FETCH_FAILURE,
    INSUFFICIENT_CONTENT,
    PARSE_FAILURE,
    HardError,
    SoftWarning,
    Success,
    TaskOutcome,
)
from event_scout.monitoring.logging import with_context
from event_scout.schemas.event import DEFAULT_RELEVANCE, EventCandidate, SourceDescriptor, SourceMode

logger = logging.getLogger(__name__)


class BaseSourceTask(ABC):
    """Unit of work the scheduler runs once per source."""

    @abstractmethod
    async def execute(self, source: SourceDescriptor) -> TaskOutcome:
        """Process one source and classify the result."""

    async def close(self) -> None:
        """Release resources held by the task's collaborators."""


class SourceTask(BaseSourceTask):
    """In-process fetch + extract for one source."""

    def __init__(
        self,
        fetcher: SourceFetcher,
        extractor: EventExtractor,
        *,
        search_timeout: float = 30.0,
        scrape_timeout: float = 90.0,
        extraction_timeout: float = 60.0,
        min_content_length: int = 50,
        relevance_placeholder: str = DEFAULT_RELEVANCE,
        today: Callable[[], date] = date.today,
    ):
        self.fetcher = fetcher
        self.extractor = extractor
        self.fetch_timeouts = {
            SourceMode.QUERY: search_timeout,
            SourceMode.SCRAPE: scrape_timeout,
        }
        self.extraction_timeout = extraction_timeout
        self.min_content_length = min_content_length
        self.relevance_placeholder = relevance_placeholder
        self._today = today

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SourceTask":
        settings = settings or get_settings()
        return cls(
            SourceFetcher.from_settings(settings),
            EventExtractor.from_settings(settings),
            search_timeout=settings.SEARCH_TIMEOUT_S,
            scrape_timeout=settings.SCRAPE_TIMEOUT_S,
            extraction_timeout=settings.EXTRACTION_TIMEOUT_S,
            min_content_length=settings.MIN_CONTENT_LENGTH,
            relevance_placeholder=settings.RELEVANCE_PLACEHOLDER,
        )

    def preflight(self, source: SourceDescriptor) -> HardError | None:
        """Return a HardError if ``source`` cannot be attempted with this configuration."""
        if not self.fetcher.is_configured(source.mode):
            return HardError(f"missing credential for {source.mode.value} backend")
        if not self.extractor.is_available:
            return HardError("missing credential for extraction backend")
        return None

    async def execute(self, source: SourceDescriptor) -> TaskOutcome:
        """
        Fetch, check, extract and normalize one source.

        Args:
            source: Source to process

        Returns:
            Exactly one TaskOutcome variant
        """
        log = with_context(logger, source_id=source.id)

        hard_error = self.preflight(source)
        if hard_error:
            log.error(f"{source.display_name}: {hard_error.message}")
            return hard_error

        # Step 1: fetch
        try:
            result = await asyncio.wait_for(
                self.fetcher.fetch(source.mode, source.target),
                timeout=self.fetch_timeouts[source.mode],
            )
        except ConfigurationError as e:
            return HardError(str(e))
        except asyncio.TimeoutError:
            log.warning(f"{source.display_name}: fetch timed out")
            return SoftWarning(FETCH_FAILURE)
        except Exception as e:
            log.warning(f"{source.display_name}: fetch failed: {e}")
            return SoftWarning(FETCH_FAILURE)

        if not result.success:
            log.warning(f"{source.display_name}: fetch failed: {result.errors}")
            return SoftWarning(FETCH_FAILURE)

        # Step 2: content sufficiency
        content = result.content or ""
        if len(content.strip()) < self.min_content_length:
            log.info(f"{source.display_name}: only {len(content.strip())} chars, skipping extraction")
            return SoftWarning(INSUFFICIENT_CONTENT)

        # Step 3: extract
        try:
            events = await asyncio.wait_for(
                self.extractor.extract(content, source.display_name, source.mode, self._today()),
                timeout=self.extraction_timeout,
            )
        except ConfigurationError as e:
            return HardError(str(e))
        except ExtractionParseError as e:
            log.warning(f"{source.display_name}: {e}")
            return SoftWarning(PARSE_FAILURE)
        except asyncio.TimeoutError:
            log.warning(f"{source.display_name}: extraction timed out")
            return SoftWarning(EXTRACTION_FAILURE)
        except Exception as e:
            log.warning(f"{source.display_name}: extraction failed: {e}")
            return SoftWarning(EXTRACTION_FAILURE)

        # Step 4: normalize
        normalized = [self._normalize(event) for event in events]
        log.info(f"{source.display_name}: {len(normalized)} events")
        return Success(normalized)

    def _normalize(self, event: EventCandidate) -> EventCandidate:
        if event.domain_relevance.strip():
            return event
        return event.model_copy(update={"domain_relevance": self.relevance_placeholder})

    async def close(self) -> None:
        await self.fetcher.close()
