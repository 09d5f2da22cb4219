"""
Result merging.

AggregatedResult is the caller-visible accumulation of one run: the merged
event list plus the de-duplicated warning messages. Merger is its only
writer and folds each completed source's events in under the result's lock,
because de-duplication depends on what has already been accumulated.
"""

import threading
from collections.abc import Sequence

from event_scout.ingestion.deduplication import EventDeduplicator, PrefixTitleDeduplicator
from event_scout.schemas.event import EventCandidate, SourceDescriptor


class AggregatedResult:
    """Merged events and warnings of one run. Grows monotonically except for curation."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[EventCandidate] = []
        self._warnings: set[str] = set()

    @property
    def events(self) -> list[EventCandidate]:
        with self._lock:
            return list(self._events)

    @property
    def warnings(self) -> list[str]:
        """Warning messages, sorted for stable display."""
        with self._lock:
            return sorted(self._warnings)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def extend(
        self, incoming: Sequence[EventCandidate], deduplicator: EventDeduplicator
    ) -> list[EventCandidate]:
        """
        Append the incoming candidates that ``deduplicator`` keeps.

        Returns:
            The accepted candidates, in order
        """
        with self._lock:
            merged = deduplicator.merge(self._events, incoming)
            accepted = merged[len(self._events):]
            self._events = merged
        return accepted

    def add_warning(self, text: str) -> None:
        with self._lock:
            self._warnings.add(text)

    def remove(self, index: int) -> EventCandidate:
        """
        Discard one accumulated event (manual curation).

        Raises:
            IndexError: If ``index`` is out of range
        """
        with self._lock:
            return self._events.pop(index)

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "events": [e.to_dict() for e in self._events],
                "warnings": sorted(self._warnings),
            }


class Merger:
    """Folds per-source event lists into an AggregatedResult."""

    def __init__(
        self,
        deduplicator: EventDeduplicator | None = None,
        result: AggregatedResult | None = None,
    ):
        # An empty result is falsy (__len__), so test against None.
        self.deduplicator = deduplicator if deduplicator is not None else PrefixTitleDeduplicator()
        self.result = result if result is not None else AggregatedResult()

    def merge(self, incoming: Sequence[EventCandidate]) -> list[EventCandidate]:
        """
        Merge one source's events.

        Returns:
            The incoming candidates that survived de-duplication, in order
        """
        return self.result.extend(incoming, self.deduplicator)

    def add_warning(self, source: SourceDescriptor, message: str) -> str:
        """Record ``"<display name>: <message>"``; repeats collapse."""
        text = f"{source.display_name}: {message}"
        self.result.add_warning(text)
        return text
