"""
Unit tests for RemoteSourceTask.

The API is answered by httpx.MockTransport handlers.
"""

import asyncio
import json

import httpx
import pytest

from event_scout.client import CLIENT_TIMEOUT, REQUEST_FAILURE, RemoteSourceTask
from event_scout.ingestion.outcomes import HardError, SoftWarning, Success
from event_scout.schemas.event import SourceMode


@pytest.fixture
def make_task():
    """Return a function that builds a RemoteSourceTask over a mock handler."""

    def _make(handler) -> RemoteSourceTask:
        return RemoteSourceTask(
            "http://api.test/", timeout=0.5, transport=httpx.MockTransport(handler)
        )

    return _make


def _execute(task, source):
    async def scenario():
        try:
            return await task.execute(source)
        finally:
            await task.close()

    return asyncio.run(scenario())


class TestRemoteSourceTask:
    """Tests for RemoteSourceTask.execute."""

    def test_posts_source(self, make_task, make_source):
        """Should post the source name, target and mode."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"events": []})

        source = make_source("google", mode=SourceMode.QUERY, display_name="Google Search")
        outcome = _execute(make_task(handler), source)

        assert outcome == Success([])
        assert seen["url"] == "http://api.test/search-source"
        assert seen["body"] == {
            "sourceName": "Google Search",
            "url": "eventos b2b campinas",
            "mode": "search",
        }

    def test_events_decoded(self, make_task, make_source):
        """Should decode events, accepting either relevance spelling."""
        body = {
            "events": [
                {"title": "Fórum RH", "domainRelevance": "Alta"},
                {"title": "Meetup Dados", "domain_relevance": "Média"},
            ]
        }
        outcome = _execute(make_task(lambda r: httpx.Response(200, json=body)), make_source())
        assert [e.domain_relevance for e in outcome.events] == ["Alta", "Média"]

    def test_warning_body(self, make_task, make_source):
        """Should map a warning body to a SoftWarning."""
        outcome = _execute(
            make_task(lambda r: httpx.Response(200, json={"events": [], "warning": "insufficient content"})),
            make_source(),
        )
        assert outcome == SoftWarning("insufficient content")

    def test_error_body(self, make_task, make_source):
        """Should map an error body to a HardError."""
        outcome = _execute(
            make_task(lambda r: httpx.Response(200, json={"events": [], "error": "missing credential"})),
            make_source(),
        )
        assert outcome == HardError("missing credential")

    def test_client_timeout(self, make_task, make_source):
        """Should treat a client-side timeout as a SoftWarning."""

        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        assert _execute(make_task(handler), make_source()) == SoftWarning(CLIENT_TIMEOUT)

    def test_http_status_error(self, make_task, make_source):
        """Should treat a non-2xx answer as a SoftWarning."""
        outcome = _execute(make_task(lambda r: httpx.Response(400, json={"detail": "x"})), make_source())
        assert outcome == SoftWarning(f"{REQUEST_FAILURE} (400)")

    def test_connection_error(self, make_task, make_source):
        """Should treat a transport error as a SoftWarning."""

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert _execute(make_task(handler), make_source()) == SoftWarning(REQUEST_FAILURE)

    def test_non_json_body(self, make_task, make_source):
        """Should treat a non-JSON body as a SoftWarning."""
        outcome = _execute(make_task(lambda r: httpx.Response(200, text="<html>")), make_source())
        assert outcome == SoftWarning(REQUEST_FAILURE)

    def test_close_is_idempotent(self, make_task):
        """Should allow closing before any request and twice."""
        task = make_task(lambda r: httpx.Response(200, json={}))

        async def scenario():
            await task.close()
            await task.close()

        asyncio.run(scenario())
        assert task._client is None
