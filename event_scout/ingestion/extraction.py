"""
Event extraction (Extractor boundary).

Turns raw page markdown or search results into EventCandidates by prompting
an LLM and defensively parsing its semi-structured JSON answer:
- markdown code fences and surrounding prose are tolerated
- either spelling of the relevance field is accepted
- items that fail validation are dropped individually
- events dated before the current date are discarded
"""

import json
import logging
import re
from datetime import date, timedelta
from typing import Any

from pydantic import ValidationError

from event_scout.agents.llm.base_llm_client import BaseLLMClient
from event_scout.agents.llm.provider_router import get_llm_client
from event_scout.agents.registry.prompt_registry import PromptRegistry, get_prompt_registry
from event_scout.configs.settings import Settings, get_settings
from event_scout.ingestion.errors import (
    ConfigurationError,
    ExtractionError,
    ExtractionParseError,
)
from event_scout.schemas.event import DEFAULT_RELEVANCE, EventCandidate, SourceMode

logger = logging.getLogger(__name__)

RELEVANCE_KEYS = ("domainRelevance", "domain_relevance")

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_ISO_DATE_RE = re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b")
_BR_DATE_RE = re.compile(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{2,4}))?\b")

# A year-less date further than this in the past is read as next year's.
_YEARLESS_ROLLOVER = timedelta(days=180)


# ============================================================================
# OUTPUT PARSING
# ============================================================================


def _strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def _loads_lenient(text: str) -> Any:
    """json.loads, retrying on the outermost [...] or {...} span."""
    try:
        return json.loads(text)
    except ValueError:
        pass
    for opener, closer in (("[", "]"), ("{", "}")):
        start, end = text.find(opener), text.rfind(closer)
        if start != -1 and end > start:
            try:
                return json.loads(text[start : end + 1])
            except ValueError:
                continue
    raise ExtractionParseError(f"Extractor output is not valid JSON: {text[:120]!r}")


def normalize_relevance(item: dict[str, Any], placeholder: str = DEFAULT_RELEVANCE) -> dict[str, Any]:
    """Coalesce the relevance spellings into ``domain_relevance``."""
    normalized = {k: v for k, v in item.items() if k not in RELEVANCE_KEYS}
    value = next(
        (item[k] for k in RELEVANCE_KEYS if isinstance(item.get(k), str) and item[k].strip()),
        None,
    )
    normalized["domain_relevance"] = value.strip() if value else placeholder
    return normalized


def parse_extraction_output(
    text: str | None, placeholder: str = DEFAULT_RELEVANCE
) -> list[EventCandidate]:
    """
    Parse raw extractor output into candidates.

    Empty output means "no events". A JSON object is accepted when it wraps
    the list under ``events`` or is itself a single event.

    Raises:
        ExtractionParseError: If the output is not parsable as an event list
    """
    cleaned = _strip_fences(text or "")
    if not cleaned:
        return []

    data = _loads_lenient(cleaned)
    if isinstance(data, dict):
        if isinstance(data.get("events"), list):
            data = data["events"]
        elif "title" in data:
            data = [data]
        else:
            raise ExtractionParseError("Extractor output object has no 'events' list")
    if not isinstance(data, list):
        raise ExtractionParseError(f"Extractor output is a {type(data).__name__}, expected a list")

    candidates: list[EventCandidate] = []
    for idx, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning(f"Skipping non-object extractor item #{idx}")
            continue
        try:
            candidates.append(EventCandidate.model_validate(normalize_relevance(item, placeholder)))
        except ValidationError as e:
            logger.warning(f"Skipping invalid extractor item #{idx}: {e.error_count()} errors")
    return candidates


# ============================================================================
# DATE POLICY
# ============================================================================


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_event_date(text: str, today: date) -> date | None:
    """
    Return the latest date mentioned in ``text``, or None if none parses.

    Accepts YYYY-MM-DD, DD/MM/YYYY, DD/MM/YY and DD/MM. The latest date is
    used so that a multi-day range still counts while it is ongoing.
    """
    if not text:
        return None

    found: list[date] = []
    for y, m, d in _ISO_DATE_RE.findall(text):
        parsed = _safe_date(int(y), int(m), int(d))
        if parsed:
            found.append(parsed)

    for d, m, y in _BR_DATE_RE.findall(_ISO_DATE_RE.sub(" ", text)):
        if y:
            year = int(y) + 2000 if len(y) == 2 else int(y)
            parsed = _safe_date(year, int(m), int(d))
        else:
            parsed = _safe_date(today.year, int(m), int(d))
            if parsed and parsed < today - _YEARLESS_ROLLOVER:
                parsed = _safe_date(today.year + 1, int(m), int(d))
        if parsed:
            found.append(parsed)

    return max(found) if found else None


def is_upcoming(candidate: EventCandidate, today: date) -> bool:
    """True unless the candidate's date is known to be before ``today``."""
    event_date = parse_event_date(candidate.date, today)
    return event_date is None or event_date >= today


# ============================================================================
# EXTRACTOR
# ============================================================================


class EventExtractor:
    """
    LLM-backed extractor.

    ``extract`` raises ExtractionError when the backend fails and
    ExtractionParseError when its answer cannot be parsed; the caller owns
    the timeout.
    """

    prompt_name = "event_extraction"

    def __init__(
        self,
        llm_client: BaseLLMClient,
        registry: PromptRegistry | None = None,
        max_content_chars: int = 25_000,
        relevance_placeholder: str = DEFAULT_RELEVANCE,
    ):
        self.llm_client = llm_client
        self.registry = registry or get_prompt_registry()
        self.max_content_chars = max_content_chars
        self.relevance_placeholder = relevance_placeholder

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "EventExtractor":
        settings = settings or get_settings()
        client = get_llm_client(
            provider=settings.LLM_PROVIDER,
            model_name=settings.LLM_MODEL,
            api_key=settings.llm_api_key(),
        )
        return cls(
            client,
            max_content_chars=settings.MAX_CONTENT_CHARS,
            relevance_placeholder=settings.RELEVANCE_PLACEHOLDER,
        )

    @property
    def is_available(self) -> bool:
        return self.llm_client.is_available

    def build_prompt(
        self, content: str, source_name: str, mode: SourceMode, current_date: date
    ) -> tuple[str, str]:
        return self.registry.render(
            self.prompt_name,
            variables={
                "content": content[: self.max_content_chars],
                "source_name": source_name,
                "mode": mode.value,
                "current_date": current_date.strftime("%d/%m/%Y"),
            },
        )

    async def extract(
        self,
        content: str,
        source_name: str,
        mode: SourceMode,
        current_date: date,
    ) -> list[EventCandidate]:
        """
        Extract upcoming event candidates from raw content.

        Args:
            content: Raw page markdown or serialized search results
            source_name: Display name of the source, given to the model as context
            mode: How the content was retrieved
            current_date: Events dated before this are discarded

        Returns:
            Candidates in the order the model produced them
        """
        system_prompt, user_prompt = self.build_prompt(content, source_name, mode, current_date)

        try:
            raw = await self.llm_client.complete(system_prompt, user_prompt)
        except (ConfigurationError, ExtractionError):
            raise
        except Exception as e:
            raise ExtractionError(f"{self.llm_client.provider} completion failed: {e}") from e

        candidates = parse_extraction_output(raw, self.relevance_placeholder)
        upcoming = [c for c in candidates if is_upcoming(c, current_date)]
        if len(upcoming) < len(candidates):
            logger.info(
                f"{source_name}: dropped {len(candidates) - len(upcoming)} past events"
            )
        return upcoming
