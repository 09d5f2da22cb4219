"""
Module for event de-duplication strategies.

Provides merge-time de-duplication strategies using the Strategy pattern.
Each strategy decides whether an incoming candidate duplicates one already
accumulated; candidates are compared against the accumulated list only,
never against siblings from the same incoming batch.

- PrefixTitleDeduplicator: accumulated title contains the incoming title's
  first 15 characters (case-insensitive). Default.
- ExactMatchDeduplicator: same title (case-insensitive) and same link
- FuzzyMatchDeduplicator: title similarity ratio via difflib

The prefix rule is a deliberate heuristic. It misses duplicates whose titles
diverge early and merges unrelated events that share a 15-character prefix.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from difflib import SequenceMatcher
from enum import Enum

from event_scout.schemas.event import EventCandidate


class DeduplicationStrategy(str, Enum):
    """Available de-duplication strategies."""

    PREFIX = "prefix"
    EXACT = "exact"
    FUZZY = "fuzzy"


class EventDeduplicator(ABC):
    """Abstract base for de-duplication strategies."""

    @abstractmethod
    def is_duplicate(
        self, candidate: EventCandidate, existing: Sequence[EventCandidate]
    ) -> bool:
        """Return True if ``candidate`` duplicates any of ``existing``."""

    def merge(
        self,
        existing: Sequence[EventCandidate],
        incoming: Sequence[EventCandidate],
    ) -> list[EventCandidate]:
        """
        Append the non-duplicate incoming candidates to ``existing``.

        Survivors keep the order their source produced them in.

        Returns:
            A new list; ``existing`` is not modified
        """
        kept = [c for c in incoming if not self.is_duplicate(c, existing)]
        return [*existing, *kept]


class PrefixTitleDeduplicator(EventDeduplicator):
    """Directional title-prefix containment."""

    def __init__(self, prefix_length: int = 15):
        self.prefix_length = prefix_length

    def is_duplicate(
        self, candidate: EventCandidate, existing: Sequence[EventCandidate]
    ) -> bool:
        prefix = candidate.title.lower()[: self.prefix_length]
        return any(prefix in kept.title.lower() for kept in existing)


class ExactMatchDeduplicator(EventDeduplicator):
    """Match by title (case-insensitive) + link."""

    def is_duplicate(
        self, candidate: EventCandidate, existing: Sequence[EventCandidate]
    ) -> bool:
        key = (candidate.title.lower(), candidate.link)
        return any((kept.title.lower(), kept.link) == key for kept in existing)


class FuzzyMatchDeduplicator(EventDeduplicator):
    """
    Fuzzy title match for typos and slight variations in event names.

    Uses difflib.SequenceMatcher; titles with a similarity ratio >= threshold
    are duplicates.
    """

    def __init__(self, threshold: float = 0.85):
        """
        Initialize with similarity threshold.

        Args:
            threshold: Similarity threshold (0.0-1.0) for title matching
        """
        self.threshold = threshold

    def is_duplicate(
        self, candidate: EventCandidate, existing: Sequence[EventCandidate]
    ) -> bool:
        title = candidate.title.lower()
        return any(
            SequenceMatcher(None, title, kept.title.lower()).ratio() >= self.threshold
            for kept in existing
        )


def get_deduplicator(
    strategy: DeduplicationStrategy | str = DeduplicationStrategy.PREFIX,
) -> EventDeduplicator:
    """
    Create a deduplicator instance for the given strategy.

    Args:
        strategy: DeduplicationStrategy enum value or its string value

    Returns:
        Configured EventDeduplicator instance

    Raises:
        ValueError: If the strategy is unknown
    """
    strategy = DeduplicationStrategy(strategy)
    if strategy == DeduplicationStrategy.EXACT:
        return ExactMatchDeduplicator()
    if strategy == DeduplicationStrategy.FUZZY:
        return FuzzyMatchDeduplicator()
    return PrefixTitleDeduplicator()
