"""
Run progress.

ProgressTracker holds one SourceStatus per source of a run. Each entry is
written only by the worker that dequeued its source; the progress consumer
reads copies taken under the tracker lock, so it never observes a
half-written record. RunEventBus fans status and merge changes out to
subscribers (the presentation layer).
"""

import asyncio
import threading
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any

from event_scout.ingestion.errors import InvalidTransitionError
from event_scout.schemas.event import SourceDescriptor


class SourceState(str, Enum):
    """Per-source state. Transitions only move forward."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


_ALLOWED_TRANSITIONS: dict[SourceState, frozenset[SourceState]] = {
    SourceState.PENDING: frozenset({SourceState.RUNNING}),
    SourceState.RUNNING: frozenset({SourceState.COMPLETED, SourceState.FAILED}),
    SourceState.COMPLETED: frozenset(),
    SourceState.FAILED: frozenset(),
}

TERMINAL_STATES = frozenset({SourceState.COMPLETED, SourceState.FAILED})


@dataclass
class SourceStatus:
    """Progress record for one source."""

    id: str
    display_name: str
    state: SourceState = SourceState.PENDING
    event_count: int = 0
    message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["state"] = self.state.value
        return data


class ProgressTracker:
    """
    Status table for one run.

    Created with every source in PENDING. Thread-safe: the scheduler's
    workers write, any thread may read.
    """

    def __init__(self, sources: Sequence[SourceDescriptor]):
        self._lock = threading.Lock()
        self._statuses: dict[str, SourceStatus] = {}
        for source in sources:
            if source.id in self._statuses:
                raise ValueError(f"Duplicate source id '{source.id}' in run")
            self._statuses[source.id] = SourceStatus(id=source.id, display_name=source.display_name)

    # ========================================================================
    # WRITES (owning worker only)
    # ========================================================================

    def mark_running(self, source_id: str) -> SourceStatus:
        return self._transition(source_id, SourceState.RUNNING)

    def mark_completed(self, source_id: str, event_count: int) -> SourceStatus:
        return self._transition(source_id, SourceState.COMPLETED, event_count=event_count)

    def mark_failed(self, source_id: str, message: str | None = None) -> SourceStatus:
        return self._transition(source_id, SourceState.FAILED, event_count=0, message=message)

    def _transition(self, source_id: str, new_state: SourceState, **updates: Any) -> SourceStatus:
        with self._lock:
            status = self._statuses.get(source_id)
            if status is None:
                raise InvalidTransitionError(f"Unknown source '{source_id}'")
            if new_state not in _ALLOWED_TRANSITIONS[status.state]:
                raise InvalidTransitionError(
                    f"Source '{source_id}' cannot move {status.state.value} -> {new_state.value}"
                )
            status.state = new_state
            for key, value in updates.items():
                setattr(status, key, value)
            return replace(status)

    # ========================================================================
    # READS (copies)
    # ========================================================================

    def get(self, source_id: str) -> SourceStatus:
        with self._lock:
            return replace(self._statuses[source_id])

    def snapshot(self) -> list[SourceStatus]:
        """Copies of every status, in source order."""
        with self._lock:
            return [replace(s) for s in self._statuses.values()]

    @property
    def total(self) -> int:
        return len(self._statuses)

    @property
    def terminal_count(self) -> int:
        with self._lock:
            return sum(1 for s in self._statuses.values() if s.is_terminal)

    @property
    def percentage(self) -> int:
        """Share of sources in a terminal state, 0-100."""
        if not self._statuses:
            return 100
        return round(self.terminal_count / self.total * 100)

    @property
    def is_quiescent(self) -> bool:
        """True once every source is COMPLETED or FAILED."""
        return self.terminal_count == self.total

    def counts(self) -> dict[str, int]:
        result = {state.value: 0 for state in SourceState}
        for status in self.snapshot():
            result[status.state.value] += 1
        return result


# ============================================================================
# EVENT CHANNEL
# ============================================================================


class RunEventKind(str, Enum):
    STATUS_CHANGED = "status_changed"
    EVENTS_MERGED = "events_merged"
    RUN_COMPLETED = "run_completed"


@dataclass(frozen=True)
class RunEvent:
    """One change emitted by the scheduler."""

    kind: RunEventKind
    source_id: str | None = None
    status: SourceStatus | None = None
    payload: dict[str, Any] = field(default_factory=dict)


class Subscription:
    """Async iterator over the events published after it was created."""

    def __init__(self, queue: "asyncio.Queue[RunEvent | None]"):
        self._queue = queue

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> RunEvent:
        event = await self._queue.get()
        if event is None:
            raise StopAsyncIteration
        return event


class RunEventBus:
    """
    Fan-out channel for RunEvents.

    Subscribers get every event published after they subscribed; iteration
    ends when the bus is closed at the end of the run.
    """

    def __init__(self) -> None:
        self._queues: list[asyncio.Queue[RunEvent | None]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self) -> Subscription:
        queue: asyncio.Queue[RunEvent | None] = asyncio.Queue()
        if self._closed:
            queue.put_nowait(None)
        else:
            self._queues.append(queue)
        return Subscription(queue)

    def publish(self, event: RunEvent) -> None:
        if self._closed:
            return
        for queue in self._queues:
            queue.put_nowait(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for queue in self._queues:
            queue.put_nowait(None)
