# event_scout/schemas/event.py
"""
Canonical schemas for sources and event candidates.

A SourceDescriptor names one external location to query (a search query or
a URL to scrape). An EventCandidate is one structured event produced by the
extraction step for a source. Both are immutable once created.
"""

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_RELEVANCE = "Relevância não avaliada"


# ============================================================================
# SOURCES
# ============================================================================


class SourceMode(str, Enum):
    """How a source's target is retrieved."""

    QUERY = "search"
    SCRAPE = "scrape"

    @classmethod
    def parse(cls, value: "str | SourceMode") -> "SourceMode":
        """
        Accept the enum value ('search'/'scrape') or member name ('query'/'scrape').

        Raises:
            ValueError: If the value names no mode
        """
        if isinstance(value, SourceMode):
            return value
        normalized = str(value).strip().lower()
        for member in cls:
            if normalized in (member.value, member.name.lower()):
                return member
        raise ValueError(f"Unknown source mode '{value}'. Valid modes: search, scrape")


class SourceDescriptor(BaseModel):
    """
    One configured source.

    ``target`` is a search query string when ``mode`` is QUERY and a URL when
    ``mode`` is SCRAPE. Created once from configuration; never mutated.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1, description="Unique source identifier")
    display_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("display_name", "displayName", "name"),
        description="Human readable source name",
    )
    target: str = Field(
        min_length=1,
        validation_alias=AliasChoices("target", "url", "query"),
        description="Search query (QUERY) or URL (SCRAPE)",
    )
    mode: SourceMode = SourceMode.SCRAPE

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, v):
        return SourceMode.parse(v)

    @field_validator("id", "display_name", "target")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


# ============================================================================
# EVENT CANDIDATES
# ============================================================================


class EventCandidate(BaseModel):
    """
    Structured event produced by the extraction step.

    ``title`` and ``link`` are the identity-relevant fields for
    de-duplication. The relevance text accepts both ``domainRelevance`` and
    ``domain_relevance`` on input and serializes as ``domainRelevance``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(min_length=1)
    date: str = ""
    location: str = ""
    link: str = ""
    analysis: str = ""
    opportunity: str = ""
    domain_relevance: str = Field(
        default=DEFAULT_RELEVANCE,
        validation_alias=AliasChoices("domain_relevance", "domainRelevance"),
        serialization_alias="domainRelevance",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    @field_validator(
        "date", "location", "link", "analysis", "opportunity", mode="before"
    )
    @classmethod
    def coerce_text(cls, v):
        """LLM output sometimes carries nulls or numbers in text fields."""
        if v is None:
            return ""
        return str(v).strip()

    def to_dict(self) -> dict[str, str]:
        """Serialize with the public (camelCase) relevance key."""
        return self.model_dump(by_alias=True)
