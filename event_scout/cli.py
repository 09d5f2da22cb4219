#!/usr/bin/env python3
"""Command-line interface for Event Scout.

Commands:
  - event-scout run      : Run the configured sources and print/export the merged events
  - event-scout sources  : List configured sources
  - event-scout doctor   : Check which backends have credentials
  - event-scout serve    : Run the HTTP API

Typical usage:
  event-scout run --concurrency 3 --output events.json
  event-scout run --only sympla_network meetup --wait 45
  event-scout run --api-url http://localhost:8000
  event-scout doctor
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from event_scout.configs.config import load_sources, select_sources
from event_scout.configs.settings import Settings, get_settings
from event_scout.ingestion.deduplication import get_deduplicator
from event_scout.ingestion.errors import ConfigurationError
from event_scout.ingestion.orchestrator import ScheduledRun, SourceScheduler
from event_scout.ingestion.progress import RunEventKind, SourceState, Subscription
from event_scout.ingestion.source_task import BaseSourceTask, SourceTask
from event_scout.monitoring.logging import LoggingOptions, setup_logging
from event_scout.schemas.event import SourceDescriptor, SourceMode

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="event-scout", description="Event Scout CLI")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("--sources-config", default=None, help="Override the sources YAML path")
    sub = p.add_subparsers(dest="cmd")

    # run
    pr = sub.add_parser("run", help="Run the configured sources")
    pr.add_argument(
        "--concurrency", "-c", type=int, default=None, help="Number of concurrent workers"
    )
    pr.add_argument("--only", nargs="*", default=None, help="Run only these source ids")
    pr.add_argument(
        "--api-url",
        default=None,
        help="Run each source through a remote Event Scout API instead of in-process",
    )
    pr.add_argument(
        "--wait",
        type=float,
        default=None,
        help="Stop waiting after this many seconds and show the partial result",
    )
    pr.add_argument("--output", "-o", default=None, help="Write the result as JSON to this path")
    pr.add_argument("--json-logs", action="store_true", help="Emit JSON logs")
    pr.add_argument("--quiet", "-q", action="store_true", help="Do not print progress lines")

    # sources
    sub.add_parser("sources", help="List configured sources")

    # doctor
    pd = sub.add_parser("doctor", help="Check credential presence")
    pd.add_argument("--verbose", "-v", action="store_true", help="Print the source list too")

    # serve
    ps = sub.add_parser("serve", help="Run the HTTP API")
    ps.add_argument("--host", default="127.0.0.1", help="Host")
    ps.add_argument("--port", type=int, default=8000, help="Port")
    ps.add_argument("--reload", action="store_true", help="Auto-reload")

    return p.parse_args(argv)


# ---------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------


def build_report(run: ScheduledRun) -> dict[str, Any]:
    """Export document for a run: progress, statuses, warnings and merged events."""
    result = run.result.to_dict()
    return {
        "generated_at": datetime.now(UTC).isoformat(),
        "progress": run.tracker.percentage,
        "statuses": [s.to_dict() for s in run.tracker.snapshot()],
        "warnings": result["warnings"],
        "events": result["events"],
    }


def _build_task(args: argparse.Namespace, settings: Settings) -> BaseSourceTask:
    if args.api_url:
        from event_scout.client import RemoteSourceTask

        return RemoteSourceTask(args.api_url, timeout=settings.CLIENT_TIMEOUT_S)
    return SourceTask.from_settings(settings)


async def _print_progress(run: ScheduledRun, subscription: Subscription) -> None:
    async for event in subscription:
        if event.kind != RunEventKind.STATUS_CHANGED or event.status is None:
            continue
        status = event.status
        line = f"[{run.tracker.percentage:>3}%] {status.display_name}: {status.state.value}"
        if status.state == SourceState.COMPLETED:
            line += f" ({status.event_count} events)"
        elif status.message:
            line += f" ({status.message})"
        print(line, flush=True)


async def _execute_run(
    task: BaseSourceTask,
    sources: list[SourceDescriptor],
    concurrency: int,
    dedup_strategy: str,
    wait: float | None,
    quiet: bool = False,
) -> tuple[ScheduledRun, bool]:
    scheduler = SourceScheduler(task, get_deduplicator(dedup_strategy))
    try:
        run = scheduler.start(sources, concurrency)
        printer = None if quiet else asyncio.create_task(_print_progress(run, run.subscribe()))
        finished = await run.wait(wait)
        if not finished:
            run.release()
        if printer is not None:
            if finished:
                await printer
            else:
                printer.cancel()
        return run, finished
    finally:
        await task.close()


def _cmd_run(args: argparse.Namespace, settings: Settings) -> int:
    sources = select_sources(load_sources(args.sources_config or settings.SOURCES_CONFIG_PATH), args.only)
    concurrency = settings.DEFAULT_CONCURRENCY if args.concurrency is None else args.concurrency
    if concurrency < 1:
        raise ValueError(f"--concurrency must be >= 1, got {concurrency}")

    task = _build_task(args, settings)
    run, finished = asyncio.run(
        _execute_run(task, sources, concurrency, settings.DEDUP_STRATEGY, args.wait, args.quiet)
    )

    report = build_report(run)
    counts = run.tracker.counts()
    print("-" * 40)
    print(f"Run {'COMPLETE' if finished else 'PARTIAL'} ({report['progress']}%)")
    print(f"Run ID:      {run.run_id}")
    print(f"Sources:     {counts['completed']} completed, {counts['failed']} failed")
    print(f"Events:      {len(report['events'])}")
    for warning in report["warnings"]:
        print(f"Warning:     {warning}")
    print("-" * 40)

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")
        print(f"Result written to {out_path}")
    else:
        for event in report["events"]:
            print(f"* {event['title']} | {event['date']} | {event['location']} | {event['link']}")

    return EXIT_OK


# ---------------------------------------------------------------------
# Other commands
# ---------------------------------------------------------------------


def _cmd_sources(args: argparse.Namespace, settings: Settings) -> int:
    sources = load_sources(args.sources_config or settings.SOURCES_CONFIG_PATH)
    print(f"{'ID':<20} {'MODE':<8} {'NAME'}")
    print("-" * 60)
    for s in sources:
        print(f"{s.id:<20} {s.mode.value:<8} {s.display_name}")
    return EXIT_OK


def doctor_report(settings: Settings) -> dict[str, Any]:
    """Credential presence per backend, and whether each mode can run."""
    return {
        "ok": all(settings.has_credentials_for(mode) for mode in SourceMode),
        "llm_provider": settings.LLM_PROVIDER,
        "credentials": {
            "llm": bool(settings.llm_api_key()),
            "search": bool(settings.fetch_api_key(SourceMode.QUERY)),
            "scrape": bool(settings.fetch_api_key(SourceMode.SCRAPE)),
        },
        "modes": {mode.value: settings.has_credentials_for(mode) for mode in SourceMode},
    }


def _cmd_doctor(args: argparse.Namespace, settings: Settings) -> int:
    report = doctor_report(settings)
    if args.verbose:
        report["sources"] = [
            s.id for s in load_sources(args.sources_config or settings.SOURCES_CONFIG_PATH)
        ]
    print(json.dumps(report, indent=2, ensure_ascii=False))
    return EXIT_OK if report["ok"] else EXIT_FAILURE


def _cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    uvicorn.run(
        "event_scout.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
    )
    return EXIT_OK


# ---------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Run the CLI with the given arguments."""
    try:
        return _main_impl(argv)
    except (ConfigurationError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE


def _main_impl(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.version:
        from event_scout import __version__

        print(f"event-scout version {__version__}")
        return EXIT_OK

    if not args.cmd:
        print("Error: Command required. Use --help for usage info.", file=sys.stderr)
        return EXIT_FAILURE

    settings = get_settings()
    setup_logging(
        LoggingOptions(
            level=settings.LOG_LEVEL,
            json_logs=bool(getattr(args, "json_logs", False)) or settings.JSON_LOGS,
        )
    )

    commands = {
        "run": _cmd_run,
        "sources": _cmd_sources,
        "doctor": _cmd_doctor,
        "serve": _cmd_serve,
    }
    return commands[args.cmd](args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
