"""
Task outcomes.

Every completed SourceTask yields exactly one of:
- Success: zero or more extracted events
- SoftWarning: expected per-source miss (timeout, empty page, bad parse)
- HardError: configuration or precondition failure

Outcomes are never retried automatically.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from event_scout.ingestion.extraction import normalize_relevance
from event_scout.schemas.event import EventCandidate

FETCH_FAILURE = "fetch timeout/failure"
INSUFFICIENT_CONTENT = "insufficient content"
EXTRACTION_FAILURE = "extraction failure"
PARSE_FAILURE = "parse failure"
UNEXPECTED_FAILURE = "unexpected error"


class OutcomeKind(str, Enum):
    """Discriminator of the TaskOutcome union."""

    SUCCESS = "success"
    SOFT_WARNING = "soft_warning"
    HARD_ERROR = "hard_error"


@dataclass(frozen=True)
class Success:
    """Events extracted from one source."""

    events: list[EventCandidate] = field(default_factory=list)
    kind = OutcomeKind.SUCCESS

    @property
    def event_count(self) -> int:
        return len(self.events)


@dataclass(frozen=True)
class SoftWarning:
    """Zero events, with the expected reason."""

    message: str
    kind = OutcomeKind.SOFT_WARNING


@dataclass(frozen=True)
class HardError:
    """Zero events because the source could not be attempted."""

    message: str
    kind = OutcomeKind.HARD_ERROR


TaskOutcome = Union[Success, SoftWarning, HardError]


def outcome_to_response(outcome: TaskOutcome) -> dict[str, Any]:
    """Encode an outcome as the ``/search-source`` response body."""
    if isinstance(outcome, Success):
        return {"events": [e.to_dict() for e in outcome.events]}
    if isinstance(outcome, SoftWarning):
        return {"events": [], "warning": outcome.message}
    return {"events": [], "error": outcome.message}


def outcome_from_response(data: dict[str, Any]) -> TaskOutcome:
    """
    Decode a ``/search-source`` response body.

    ``error`` wins over ``warning``; a body with neither is a Success. Event
    items go through the same defensive parsing as extractor output.
    """
    if data.get("error"):
        return HardError(str(data["error"]))
    if data.get("warning"):
        return SoftWarning(str(data["warning"]))

    events = []
    for item in data.get("events") or []:
        if isinstance(item, dict) and str(item.get("title") or "").strip():
            events.append(EventCandidate.model_validate(normalize_relevance(item)))
    return Success(events)
