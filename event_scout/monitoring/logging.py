"""Structured logging with context injection.

Features:
- console handler
- JSON logs optional (easy ingestion)
- context injection (run_id/source_id) without needing a big framework
"""

from __future__ import annotations

import json
import logging
import sys
import time
from dataclasses import dataclass
from typing import Any

ROOT_LOGGER = "event_scout"

_CONTEXT_KEYS = ("run_id", "source_id", "event")

# ---------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------


class JsonFormatter(logging.Formatter):
    """Format log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k in _CONTEXT_KEYS:
            if hasattr(record, k):
                base[k] = getattr(record, k)

        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)

        payload = getattr(record, "payload", None)
        if isinstance(payload, dict):
            base["payload"] = payload

        return json.dumps(base, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Format log records as human-readable text."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [self.formatTime(record, "%H:%M:%S"), record.levelname, record.name]

        ctx = []
        run_id = getattr(record, "run_id", None)
        source_id = getattr(record, "source_id", None)
        if run_id:
            ctx.append(f"run={run_id}")
        if source_id:
            ctx.append(f"source={source_id}")
        if ctx:
            parts.append("[" + " ".join(ctx) + "]")

        parts.append(record.getMessage())
        s = " ".join(parts)

        if record.exc_info:
            s += "\n" + self.formatException(record.exc_info)
        return s


# ---------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingOptions:
    """Configure logging behavior."""

    level: str = "INFO"
    json_logs: bool = False


def setup_logging(options: LoggingOptions | None = None) -> logging.Logger:
    """
    Configure the package logger with a single console handler.

    Calling it again replaces the handler, so the level and format can be
    changed at runtime (e.g. by the CLI).
    """
    options = options or LoggingOptions()
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, options.level.upper(), logging.INFO))
    logger.propagate = False

    for h in list(logger.handlers):
        logger.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logger.level)
    handler.setFormatter(JsonFormatter() if options.json_logs else TextFormatter())
    logger.addHandler(handler)
    return logger


# ---------------------------------------------------------------------
# Context injection
# ---------------------------------------------------------------------


class ContextAdapter(logging.LoggerAdapter):
    """Inject context fields into log records."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra", {})
        merged = dict(self.extra)
        merged.update(extra)
        kwargs["extra"] = merged
        return msg, kwargs


def with_context(
    logger: logging.Logger | logging.LoggerAdapter,
    *,
    run_id: str | None = None,
    source_id: str | None = None,
) -> ContextAdapter:
    """Wrap ``logger`` so every record carries the given context."""
    ctx: dict[str, Any] = {}
    if isinstance(logger, logging.LoggerAdapter):
        ctx.update(logger.extra or {})
        logger = logger.logger
    if run_id:
        ctx["run_id"] = run_id
    if source_id:
        ctx["source_id"] = source_id
    return ContextAdapter(logger, ctx)
