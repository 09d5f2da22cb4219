"""
Source Scheduler.

Fans a run out over a fixed pool of asyncio workers and fans the outcomes back
in. Each run gets a fresh ProgressTracker, AggregatedResult and RunEventBus;
callers observe them through the ScheduledRun handle while the run is in
flight.

Worker loop:
  1. pop the next source from the shared FIFO queue (stop when empty)
  2. mark it RUNNING
  3. execute its SourceTask
  4. merge events / record the warning, then mark it COMPLETED or FAILED

Any exception escaping a task is caught at the worker boundary and recorded
as a FAILED status; it never stops the other workers.
"""

import asyncio
import logging
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime

from event_scout.ingestion.deduplication import EventDeduplicator, PrefixTitleDeduplicator
from event_scout.ingestion.merger import AggregatedResult, Merger
from event_scout.ingestion.outcomes import (
    UNEXPECTED_FAILURE,
    HardError,
    SoftWarning,
    Success,
    TaskOutcome,
)
from event_scout.ingestion.progress import (
    ProgressTracker,
    RunEvent,
    RunEventBus,
    RunEventKind,
    SourceState,
    SourceStatus,
    Subscription,
)
from event_scout.ingestion.source_task import BaseSourceTask
from event_scout.monitoring.events import emit_event
from event_scout.monitoring.logging import with_context
from event_scout.schemas.event import SourceDescriptor

logger = logging.getLogger(__name__)


class ScheduledRun:
    """
    Handle on one in-flight run.

    ``wait`` returns when every worker has finished or when the caller
    releases the run. Releasing only stops the waiting: workers still in
    flight keep running and keep updating this run's tracker and result.
    """

    def __init__(
        self,
        run_id: str,
        sources: Sequence[SourceDescriptor],
        tracker: ProgressTracker,
        result: AggregatedResult,
        bus: RunEventBus,
    ):
        self.run_id = run_id
        self.sources = list(sources)
        self.tracker = tracker
        self.result = result
        self.bus = bus
        self.started_at = datetime.now(UTC)
        self.finished_at: datetime | None = None
        self._released = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def done(self) -> bool:
        """True once every worker has terminated."""
        return self._task is not None and self._task.done()

    @property
    def released(self) -> bool:
        return self._released.is_set()

    def subscribe(self) -> Subscription:
        """Stream of RunEvents published from now until the run completes."""
        return self.bus.subscribe()

    def release(self) -> None:
        """Stop waiting on the barrier and expose the partial result."""
        if self._released.is_set() or self.done:
            return
        self._released.set()
        emit_event(
            with_context(logger, run_id=self.run_id),
            "run_released",
            {"terminal": self.tracker.terminal_count, "total": self.tracker.total},
        )

    async def wait(self, timeout: float | None = None) -> bool:
        """
        Wait for the run to finish, be released, or for ``timeout`` seconds.

        The timeout only bounds the wait; it never cancels workers.

        Returns:
            True if every worker had terminated when the wait ended
        """
        if self._task is None:
            raise RuntimeError("Run has not been started")
        if self._task.done() or self._released.is_set():
            return self._task.done()

        release_waiter = asyncio.ensure_future(self._released.wait())
        try:
            await asyncio.wait(
                {self._task, release_waiter},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            release_waiter.cancel()
        return self._task.done()

    def statuses(self) -> list[SourceStatus]:
        return self.tracker.snapshot()

    def to_dict(self) -> dict:
        """Serializable view of the run as it currently stands."""
        return {
            "run_id": self.run_id,
            "done": self.done,
            "released": self.released,
            "progress": self.tracker.percentage,
            "counts": self.tracker.counts(),
            "statuses": [s.to_dict() for s in self.tracker.snapshot()],
            **self.result.to_dict(),
        }


class SourceScheduler:
    """
    Bounded-concurrency scheduler over a list of sources.

    Responsibilities:
    - Seed a FIFO work queue and launch exactly ``concurrency`` workers
    - Keep each source's status moving PENDING -> RUNNING -> COMPLETED/FAILED
    - Feed successful outcomes through the Merger, warnings into the warning set
    - Publish every change on the run's event bus
    """

    def __init__(self, task: BaseSourceTask, deduplicator: EventDeduplicator | None = None):
        self.task = task
        self.deduplicator = deduplicator if deduplicator is not None else PrefixTitleDeduplicator()
        self.last_run: ScheduledRun | None = None

    # ========================================================================
    # ENTRY POINTS
    # ========================================================================

    def start(self, sources: Sequence[SourceDescriptor], concurrency: int = 3) -> ScheduledRun:
        """
        Start a run in the background of the running event loop.

        Args:
            sources: Sources to process, in queue order
            concurrency: Number of workers; more workers than sources simply idle out

        Returns:
            The ScheduledRun handle for observing and awaiting the run
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")

        run = ScheduledRun(
            run_id=uuid.uuid4().hex[:12],
            sources=sources,
            tracker=ProgressTracker(sources),
            result=AggregatedResult(),
            bus=RunEventBus(),
        )
        merger = Merger(self.deduplicator, run.result)

        queue: asyncio.Queue[SourceDescriptor] = asyncio.Queue()
        for source in sources:
            queue.put_nowait(source)

        emit_event(
            with_context(logger, run_id=run.run_id),
            "run_started",
            {"sources": len(run.sources), "concurrency": concurrency},
        )
        run._task = asyncio.create_task(self._drive(run, merger, queue, concurrency))
        self.last_run = run
        return run

    async def run(
        self,
        sources: Sequence[SourceDescriptor],
        concurrency: int = 3,
        timeout: float | None = None,
    ) -> ScheduledRun:
        """Start a run and wait for it (or for ``timeout``)."""
        run = self.start(sources, concurrency)
        await run.wait(timeout)
        return run

    # ========================================================================
    # WORKERS
    # ========================================================================

    async def _drive(
        self,
        run: ScheduledRun,
        merger: Merger,
        queue: "asyncio.Queue[SourceDescriptor]",
        concurrency: int,
    ) -> None:
        workers = [
            asyncio.create_task(self._worker(run, merger, queue), name=f"{run.run_id}-worker-{n}")
            for n in range(concurrency)
        ]
        await asyncio.gather(*workers)

        run.finished_at = datetime.now(UTC)
        duration = (run.finished_at - run.started_at).total_seconds()
        counts = run.tracker.counts()
        run.bus.publish(RunEvent(RunEventKind.RUN_COMPLETED, payload=counts))
        run.bus.close()
        emit_event(
            with_context(logger, run_id=run.run_id),
            "run_completed",
            {
                **counts,
                "events": len(run.result),
                "warnings": len(run.result.warnings),
                "duration_seconds": round(duration, 3),
            },
        )

    async def _worker(
        self,
        run: ScheduledRun,
        merger: Merger,
        queue: "asyncio.Queue[SourceDescriptor]",
    ) -> None:
        while True:
            try:
                source = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            await self._process(run, merger, source)

    async def _process(self, run: ScheduledRun, merger: Merger, source: SourceDescriptor) -> None:
        log = with_context(logger, run_id=run.run_id, source_id=source.id)

        status = run.tracker.mark_running(source.id)
        run.bus.publish(RunEvent(RunEventKind.STATUS_CHANGED, source.id, status))
        emit_event(log, "source_started", {"name": source.display_name, "mode": source.mode.value})

        try:
            outcome = await self.task.execute(source)
            status = self._record(run, merger, source, outcome)
        except Exception as e:
            log.error(f"{source.display_name}: unexpected failure: {e}", exc_info=True)
            status = run.tracker.mark_failed(source.id, UNEXPECTED_FAILURE)

        run.bus.publish(RunEvent(RunEventKind.STATUS_CHANGED, source.id, status))
        if status.state == SourceState.COMPLETED:
            emit_event(log, "source_completed", {"events": status.event_count})
        else:
            emit_event(log, "source_failed", {"message": status.message}, level="warning")

    def _record(
        self,
        run: ScheduledRun,
        merger: Merger,
        source: SourceDescriptor,
        outcome: TaskOutcome,
    ) -> SourceStatus:
        if isinstance(outcome, Success):
            accepted = merger.merge(outcome.events)
            run.bus.publish(
                RunEvent(
                    RunEventKind.EVENTS_MERGED,
                    source.id,
                    payload={
                        "received": outcome.event_count,
                        "accepted": len(accepted),
                        "total": len(run.result),
                    },
                )
            )
            return run.tracker.mark_completed(source.id, outcome.event_count)

        if isinstance(outcome, SoftWarning):
            merger.add_warning(source, outcome.message)
            return run.tracker.mark_failed(source.id, outcome.message)

        if isinstance(outcome, HardError):
            return run.tracker.mark_failed(source.id, outcome.message)

        raise TypeError(f"Unknown task outcome {outcome!r}")
