"""Pydantic schemas shared across the ingestion pipeline and the API."""

from .event import DEFAULT_RELEVANCE, EventCandidate, SourceDescriptor, SourceMode

__all__ = [
    "DEFAULT_RELEVANCE",
    "EventCandidate",
    "SourceDescriptor",
    "SourceMode",
]
