"""
event_scout.main.

FastAPI entrypoint for Event Scout.

Responsibilities
----------------
• Health and configuration-presence check
• Single-source search (``POST /search-source``)
• Configured source listing
• Full scheduled runs with a partial-results bound (``POST /search``)

Environment
-----------
Reads credentials and budgets through ``event_scout.configs.settings``
(environment variables or a ``.env`` file).
"""

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from event_scout import __version__
from event_scout.configs.config import load_sources, select_sources
from event_scout.configs.settings import Settings, get_settings
from event_scout.ingestion.deduplication import get_deduplicator
from event_scout.ingestion.orchestrator import SourceScheduler
from event_scout.ingestion.outcomes import outcome_to_response
from event_scout.ingestion.source_task import BaseSourceTask, SourceTask
from event_scout.monitoring.logging import LoggingOptions, setup_logging
from event_scout.schemas.event import SourceDescriptor, SourceMode

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SOURCE TASK
# ---------------------------------------------------------------------------


# Shared task instance; its HTTP clients are reused across requests
_TASK: BaseSourceTask | None = None


def get_source_task() -> BaseSourceTask:
    """
    Get or build the in-process source task.

    Returns
    -------
    BaseSourceTask
        Task wired to the configured fetch and extraction backends.
    """
    global _TASK
    if _TASK is None:
        _TASK = SourceTask.from_settings(get_settings())
    return _TASK


def get_scheduler(
    task: BaseSourceTask = Depends(get_source_task),
    settings: Settings = Depends(get_settings),
) -> SourceScheduler:
    """Scheduler over the shared task, using the configured dedup strategy."""
    return SourceScheduler(task, get_deduplicator(settings.DEDUP_STRATEGY))


def get_configured_sources(settings: Settings = Depends(get_settings)) -> list[SourceDescriptor]:
    """Sources from SOURCES_CONFIG_PATH."""
    return load_sources(settings.SOURCES_CONFIG_PATH)


# ---------------------------------------------------------------------------
# APP INITIALIZATION
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle app startup and shutdown events."""
    settings = get_settings()
    setup_logging(LoggingOptions(level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS))
    logger.info(f"Event Scout API {__version__} starting ({settings.ENV})")

    yield

    # Shutdown: release the backend HTTP clients
    global _TASK
    if _TASK is not None:
        await _TASK.close()
        _TASK = None


app = FastAPI(
    title="Event Scout API",
    version=__version__,
    description="Aggregates upcoming B2B events from search results and scraped pages.",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# REQUEST MODELS
# ---------------------------------------------------------------------------


class SearchSourceRequest(BaseModel):
    """Body of ``POST /search-source``."""

    model_config = ConfigDict(populate_by_name=True)

    source_name: str | None = Field(default=None, alias="sourceName")
    url: str | None = None
    mode: str = SourceMode.SCRAPE.value


class SearchRequest(BaseModel):
    """Body of ``POST /search``."""

    model_config = ConfigDict(populate_by_name=True)

    concurrency: int | None = Field(default=None, ge=1)
    source_ids: list[str] | None = Field(default=None, alias="sourceIds")
    wait_seconds: float | None = Field(default=None, alias="waitSeconds", ge=0)


def _source_id(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_") or "source"


# ---------------------------------------------------------------------------
# HEALTH ENDPOINT
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Monitoring"])
def health_check(settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    """
    Check API health and which backends have credentials.

    Returns
    -------
    dict
        Status, server time and credential presence flags.
    """
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "env": {
            "has_llm": bool(settings.llm_api_key()),
            "has_serper": bool(settings.fetch_api_key(SourceMode.QUERY)),
            "has_firecrawl": bool(settings.fetch_api_key(SourceMode.SCRAPE)),
        },
    }


# ---------------------------------------------------------------------------
# SEARCH ENDPOINTS
# ---------------------------------------------------------------------------


@app.post("/search-source", tags=["Search"])
async def search_source(
    request: SearchSourceRequest,
    task: BaseSourceTask = Depends(get_source_task),
) -> dict[str, Any]:
    """
    Fetch and extract one source.

    Always answers 200 once the request is valid; the outcome is encoded in
    the body as ``events`` plus an optional ``warning`` or ``error``.

    Raises
    ------
    HTTPException
        400 if ``url`` or ``sourceName`` is missing, or ``mode`` is unknown.
    """
    name = (request.source_name or "").strip()
    target = (request.url or "").strip()
    if not name or not target:
        raise HTTPException(status_code=400, detail="url and sourceName are required")

    try:
        mode = SourceMode.parse(request.mode)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    source = SourceDescriptor(id=_source_id(name), display_name=name, target=target, mode=mode)
    outcome = await task.execute(source)
    return outcome_to_response(outcome)


@app.get("/sources", tags=["Search"])
def list_sources(
    sources: list[SourceDescriptor] = Depends(get_configured_sources),
) -> list[dict[str, str]]:
    """List configured sources in queue order."""
    return [
        {"id": s.id, "name": s.display_name, "target": s.target, "mode": s.mode.value}
        for s in sources
    ]


@app.post("/search", tags=["Search"])
async def search(
    request: SearchRequest,
    scheduler: SourceScheduler = Depends(get_scheduler),
    sources: list[SourceDescriptor] = Depends(get_configured_sources),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    Run every configured source (or ``sourceIds``) through the scheduler.

    ``waitSeconds`` bounds how long the request waits. Past it, the partial
    result is returned and sources still in flight finish in the background.

    Raises
    ------
    HTTPException
        400 if ``sourceIds`` names an unknown source.
    """
    try:
        selected = select_sources(sources, request.source_ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    run = scheduler.start(selected, request.concurrency or settings.DEFAULT_CONCURRENCY)
    finished = await run.wait(request.wait_seconds)
    if not finished:
        run.release()
    return run.to_dict()
