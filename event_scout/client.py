"""
Remote source task.

Runs each source through a running Event Scout API (``POST /search-source``)
instead of in-process. The client-side timeout is shorter than the backend's
own budgets; hitting it only means the caller stops waiting, so it is
reported as a SoftWarning like any other per-source miss.
"""

import logging

import httpx

from event_scout.ingestion.outcomes import SoftWarning, TaskOutcome, outcome_from_response
from event_scout.ingestion.source_task import BaseSourceTask
from event_scout.monitoring.logging import with_context
from event_scout.schemas.event import SourceDescriptor

logger = logging.getLogger(__name__)

CLIENT_TIMEOUT = "client timeout"
REQUEST_FAILURE = "request failure"


class RemoteSourceTask(BaseSourceTask):
    """SourceTask that delegates to the HTTP API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 40.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def execute(self, source: SourceDescriptor) -> TaskOutcome:
        log = with_context(logger, source_id=source.id)
        payload = {
            "sourceName": source.display_name,
            "url": source.target,
            "mode": source.mode.value,
        }

        try:
            response = await self._get_client().post("/search-source", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException:
            log.warning(f"{source.display_name}: no answer within {self.timeout}s")
            return SoftWarning(CLIENT_TIMEOUT)
        except httpx.HTTPStatusError as e:
            log.warning(f"{source.display_name}: API returned {e.response.status_code}")
            return SoftWarning(f"{REQUEST_FAILURE} ({e.response.status_code})")
        except httpx.HTTPError as e:
            log.warning(f"{source.display_name}: request failed: {e}")
            return SoftWarning(REQUEST_FAILURE)
        except ValueError:
            log.warning(f"{source.display_name}: response body is not JSON")
            return SoftWarning(REQUEST_FAILURE)

        if not isinstance(data, dict):
            return SoftWarning(REQUEST_FAILURE)
        return outcome_from_response(data)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
