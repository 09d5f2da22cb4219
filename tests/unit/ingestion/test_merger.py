"""
Unit tests for AggregatedResult and Merger.
"""

import threading

import pytest

from event_scout.ingestion.deduplication import ExactMatchDeduplicator
from event_scout.ingestion.merger import AggregatedResult, Merger


class TestMerger:
    """Tests for Merger."""

    def test_merge_returns_accepted(self, create_candidate):
        """Should return only the candidates that survived de-duplication."""
        merger = Merger()
        merger.merge([create_candidate(title="Annual HR Summit 2024")])

        accepted = merger.merge(
            [
                create_candidate(title="Annual HR Summit - Main Hall"),
                create_candidate(title="Completely Different Talk"),
            ]
        )

        assert [e.title for e in accepted] == ["Completely Different Talk"]
        assert [e.title for e in merger.result.events] == [
            "Annual HR Summit 2024",
            "Completely Different Talk",
        ]

    def test_writes_into_given_empty_result(self, create_candidate, make_source):
        """Should merge into the result it was given, even while that result is empty."""
        result = AggregatedResult()
        merger = Merger(result=result)

        merger.merge([create_candidate(title="Annual HR Summit 2024")])
        merger.add_warning(make_source("meetup", display_name="Meetup"), "parse failure")

        assert merger.result is result
        assert [e.title for e in result.events] == ["Annual HR Summit 2024"]
        assert result.warnings == ["Meetup: parse failure"]

    def test_custom_strategy(self, create_candidate):
        """Should use the given deduplicator."""
        merger = Merger(ExactMatchDeduplicator())
        merger.merge([create_candidate(title="Summit", link="https://a")])
        merger.merge([create_candidate(title="Summit", link="https://b")])
        assert len(merger.result) == 2

    def test_warning_format(self, make_source):
        """Should store warnings as '<display name>: <message>' and collapse repeats."""
        merger = Merger()
        source = make_source("meetup", display_name="Meetup")

        text = merger.add_warning(source, "fetch timeout/failure")
        merger.add_warning(source, "fetch timeout/failure")

        assert text == "Meetup: fetch timeout/failure"
        assert merger.result.warnings == ["Meetup: fetch timeout/failure"]

    def test_concurrent_merges(self, create_candidate):
        """Should not lose events when merging from several threads."""
        merger = Merger()

        def worker(n):
            merger.merge([create_candidate(title=f"W{n} palestra {i:02d} exclusiva") for i in range(20)])

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(merger.result) == 160


class TestAggregatedResult:
    """Tests for AggregatedResult."""

    def test_events_are_copies(self, create_candidate):
        """Should hand out a copy of the event list."""
        merger = Merger()
        merger.merge([create_candidate()])
        merger.result.events.clear()
        assert len(merger.result) == 1

    def test_warnings_sorted(self, make_source):
        """Should expose warnings sorted."""
        merger = Merger()
        merger.add_warning(make_source("b", display_name="Sympla"), "insufficient content")
        merger.add_warning(make_source("a", display_name="ACIC"), "parse failure")
        assert merger.result.warnings == ["ACIC: parse failure", "Sympla: insufficient content"]

    def test_remove(self, create_candidate):
        """Should remove one event for curation."""
        merger = Merger()
        merger.merge([create_candidate(title="Manter este"), create_candidate(title="Descartar este")])

        removed = merger.result.remove(1)

        assert removed.title == "Descartar este"
        assert [e.title for e in merger.result.events] == ["Manter este"]

    def test_extend_returns_accepted(self, create_candidate):
        """Should append only the candidates the deduplicator keeps."""
        result = AggregatedResult()
        result.extend([create_candidate(title="Annual HR Summit 2024")], ExactMatchDeduplicator())

        accepted = result.extend(
            [
                create_candidate(title="Annual HR Summit 2024"),
                create_candidate(title="Completely Different Talk"),
            ],
            ExactMatchDeduplicator(),
        )

        assert [e.title for e in accepted] == ["Completely Different Talk"]
        assert len(result) == 2

    def test_add_warning_collapses_repeats(self):
        """Should keep one copy of a repeated warning."""
        result = AggregatedResult()
        result.add_warning("Meetup: parse failure")
        result.add_warning("Meetup: parse failure")
        assert result.warnings == ["Meetup: parse failure"]

    def test_remove_out_of_range(self):
        """Should raise IndexError for an unknown index."""
        with pytest.raises(IndexError):
            AggregatedResult().remove(0)

    def test_to_dict(self, create_candidate, make_source):
        """Should serialize events and warnings."""
        merger = Merger()
        merger.merge([create_candidate(title="X")])
        merger.add_warning(make_source(display_name="S"), "w")
        data = merger.result.to_dict()
        assert data["warnings"] == ["S: w"]
        assert data["events"][0]["title"] == "X"
        assert "domainRelevance" in data["events"][0]
