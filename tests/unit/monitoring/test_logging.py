"""
Unit tests for structured logging and run events.
"""

import json
import logging

import pytest

from event_scout.monitoring.events import emit_event
from event_scout.monitoring.logging import (
    ROOT_LOGGER,
    JsonFormatter,
    LoggingOptions,
    TextFormatter,
    setup_logging,
    with_context,
)


def _record(msg="hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("event_scout.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def captured():
    """Attach a list-collecting handler to the package logger."""
    records: list[logging.LogRecord] = []

    class _ListHandler(logging.Handler):
        def emit(self, record):
            records.append(record)

    logger = setup_logging(LoggingOptions(level="DEBUG"))
    handler = _ListHandler()
    logger.addHandler(handler)
    yield records
    logger.removeHandler(handler)


class TestFormatters:
    """Tests for JsonFormatter and TextFormatter."""

    def test_json_includes_context_and_payload(self):
        """Should emit one JSON object with context keys and payload."""
        line = JsonFormatter().format(
            _record(run_id="r1", source_id="meetup", event="source_completed", payload={"events": 3})
        )
        data = json.loads(line)
        assert data["msg"] == "hello"
        assert data["level"] == "INFO"
        assert data["run_id"] == "r1"
        assert data["source_id"] == "meetup"
        assert data["event"] == "source_completed"
        assert data["payload"] == {"events": 3}

    def test_json_keeps_accents(self):
        """Should not escape non-ASCII text."""
        assert "Relevância" in JsonFormatter().format(_record("Relevância"))

    def test_text_shows_context(self):
        """Should render run and source context in brackets."""
        line = TextFormatter().format(_record(run_id="r1", source_id="meetup"))
        assert "[run=r1 source=meetup]" in line
        assert line.endswith("hello")

    def test_text_without_context(self):
        """Should omit the brackets when there is no context."""
        assert "[" not in TextFormatter().format(_record())


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_idempotent(self):
        """Should keep a single handler across repeated calls."""
        setup_logging(LoggingOptions())
        logger = setup_logging(LoggingOptions(level="WARNING", json_logs=True))
        assert logger.name == ROOT_LOGGER
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)
        assert logger.level == logging.WARNING


class TestContextAndEvents:
    """Tests for with_context and emit_event."""

    def test_with_context_injects_fields(self, captured):
        """Should attach run and source ids to every record."""
        log = with_context(logging.getLogger("event_scout.tests"), run_id="r1")
        log = with_context(log, source_id="acic")
        log.info("working")

        assert captured[-1].run_id == "r1"
        assert captured[-1].source_id == "acic"

    def test_emit_event(self, captured):
        """Should log the event name and payload as extras."""
        emit_event(logging.getLogger("event_scout.tests"), "run_completed", {"completed": 9})

        record = captured[-1]
        assert record.getMessage() == "Event: run_completed"
        assert record.event == "run_completed"
        assert record.payload == {"completed": 9}

    def test_emit_event_level(self, captured):
        """Should honour the requested level."""
        emit_event(logging.getLogger("event_scout.tests"), "source_failed", level="warning")
        assert captured[-1].levelno == logging.WARNING
        assert captured[-1].payload == {}
