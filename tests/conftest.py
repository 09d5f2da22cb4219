"""
Shared pytest fixtures for the Event Scout test suite.

Provides factories for EventCandidate / SourceDescriptor objects and
scriptable stand-ins for the source task and its collaborators.
"""

import asyncio
from collections.abc import Callable

import pytest

from event_scout.configs.settings import Settings
from event_scout.ingestion.adapters.base_adapter import FetchResult
from event_scout.ingestion.outcomes import Success, TaskOutcome
from event_scout.ingestion.source_task import BaseSourceTask
from event_scout.schemas.event import EventCandidate, SourceDescriptor, SourceMode


@pytest.fixture
def create_candidate():
    """
    Return a function that creates EventCandidate objects with sensible defaults.

    Example:
        event = create_candidate(title="Networking RH", date="20/06/2025")
    """

    def _create_candidate(title: str = "Workshop de Inovação", **kwargs) -> EventCandidate:
        defaults = {
            "title": title,
            "date": "20/06/2025",
            "location": "Campinas, SP",
            "link": "https://example.com/evento",
            "analysis": "Evento com público de gestores.",
            "opportunity": "Apresentar soluções para RH.",
        }
        defaults.update(kwargs)
        return EventCandidate(**defaults)

    return _create_candidate


@pytest.fixture
def make_source():
    """
    Return a function that creates SourceDescriptor objects.

    Example:
        source = make_source("meetup", mode=SourceMode.QUERY)
    """

    def _make_source(
        source_id: str = "test_source",
        mode: SourceMode = SourceMode.SCRAPE,
        **kwargs,
    ) -> SourceDescriptor:
        defaults = {
            "id": source_id,
            "display_name": kwargs.pop("display_name", source_id.replace("_", " ").title()),
            "target": "eventos b2b campinas" if mode == SourceMode.QUERY else f"https://{source_id}.example.com",
            "mode": mode,
        }
        defaults.update(kwargs)
        return SourceDescriptor(**defaults)

    return _make_source


@pytest.fixture
def isolated_settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        SERPER_API_KEY="serper-key",
        FIRECRAWL_API_KEY="firecrawl-key",
        ANTHROPIC_API_KEY="anthropic-key",
        OPENAI_API_KEY=None,
        LLM_PROVIDER="anthropic",
    )


@pytest.fixture
def long_content():
    """Content comfortably above the minimum length threshold."""
    return "## Agenda de eventos\n" + "Palestra sobre liderança em Campinas. " * 10


@pytest.fixture
def fetch_result():
    """Return a function that builds FetchResults."""

    def _fetch_result(content: str = "", success: bool = True, mode=SourceMode.SCRAPE, errors=None):
        return FetchResult(success=success, mode=mode, content=content, errors=errors or [])

    return _fetch_result


class ScriptedTask(BaseSourceTask):
    """
    Source task whose outcome per source id is scripted.

    Script values may be a TaskOutcome, an exception instance (raised), or a
    callable returning either. ``delays`` adds a per-source sleep.
    """

    def __init__(
        self,
        script: dict[str, "TaskOutcome | BaseException | Callable"] | None = None,
        delays: dict[str, float] | None = None,
    ):
        self.script = script or {}
        self.delays = delays or {}
        self.calls: list[str] = []
        self.active = 0
        self.max_active = 0
        self.closed = False

    async def execute(self, source: SourceDescriptor) -> TaskOutcome:
        self.calls.append(source.id)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(source.id, 0))
            outcome = self.script.get(source.id, Success([]))
            if callable(outcome) and not isinstance(outcome, BaseException):
                outcome = outcome()
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        finally:
            self.active -= 1

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def scripted_task():
    """Return the ScriptedTask class for building scripted source tasks."""
    return ScriptedTask
