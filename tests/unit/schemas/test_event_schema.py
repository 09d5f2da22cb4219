"""
Unit tests for the event schemas.

Tests for SourceMode, SourceDescriptor and EventCandidate.
"""

import pytest
from pydantic import ValidationError

from event_scout.schemas.event import (
    DEFAULT_RELEVANCE,
    EventCandidate,
    SourceDescriptor,
    SourceMode,
)


class TestSourceMode:
    """Tests for SourceMode parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("search", SourceMode.QUERY),
            ("query", SourceMode.QUERY),
            ("SCRAPE", SourceMode.SCRAPE),
            (" scrape ", SourceMode.SCRAPE),
            (SourceMode.QUERY, SourceMode.QUERY),
        ],
    )
    def test_parse(self, value, expected):
        """Should accept values and member names, case-insensitively."""
        assert SourceMode.parse(value) == expected

    def test_parse_unknown(self):
        """Should reject unknown modes."""
        with pytest.raises(ValueError, match="Unknown source mode"):
            SourceMode.parse("crawl")


class TestSourceDescriptor:
    """Tests for SourceDescriptor."""

    def test_aliases(self):
        """Should accept config-style field names."""
        source = SourceDescriptor.model_validate(
            {"id": "meetup", "name": "Meetup", "url": "https://meetup.com", "mode": "scrape"}
        )
        assert source.display_name == "Meetup"
        assert source.target == "https://meetup.com"

    def test_default_mode_is_scrape(self):
        """Should default to scrape mode."""
        source = SourceDescriptor(id="a", display_name="A", target="https://a.example.com")
        assert source.mode == SourceMode.SCRAPE

    def test_strips_text(self):
        """Should strip surrounding whitespace."""
        source = SourceDescriptor(id=" a ", display_name=" A ", target=" q ")
        assert (source.id, source.display_name, source.target) == ("a", "A", "q")

    def test_blank_target_rejected(self):
        """Should reject a blank target."""
        with pytest.raises(ValidationError):
            SourceDescriptor(id="a", display_name="A", target="   ")

    def test_immutable(self):
        """Should not allow mutation after creation."""
        source = SourceDescriptor(id="a", display_name="A", target="q")
        with pytest.raises(ValidationError):
            source.target = "other"


class TestEventCandidate:
    """Tests for EventCandidate."""

    def test_defaults(self):
        """Should default optional text fields and the relevance placeholder."""
        event = EventCandidate(title="Networking RH")
        assert event.date == ""
        assert event.link == ""
        assert event.domain_relevance == DEFAULT_RELEVANCE

    def test_title_required(self):
        """Should reject a blank title."""
        with pytest.raises(ValidationError):
            EventCandidate(title="  ")

    def test_none_fields_coerced(self):
        """Should coerce None text fields to empty strings."""
        event = EventCandidate(title="X", location=None, link=None)
        assert event.location == ""
        assert event.link == ""

    @pytest.mark.parametrize("key", ["domainRelevance", "domain_relevance"])
    def test_relevance_spellings(self, key):
        """Should accept either relevance field spelling."""
        event = EventCandidate.model_validate({"title": "X", key: "Alta"})
        assert event.domain_relevance == "Alta"

    def test_to_dict_uses_camel_case_relevance(self, create_candidate):
        """Should serialize relevance as domainRelevance."""
        data = create_candidate(domain_relevance="Média").to_dict()
        assert data["domainRelevance"] == "Média"
        assert "domain_relevance" not in data
        assert data["title"] == "Workshop de Inovação"
