"""Standardized run events for better traceability."""

from __future__ import annotations

import logging
from typing import Any


def emit_event(
    logger: logging.Logger | logging.LoggerAdapter,
    event: str,
    payload: dict[str, Any] | None = None,
    *,
    level: str = "info",
) -> None:
    """Emit a structured event to the logger."""
    lvl = getattr(logging, level.upper(), logging.INFO)
    logger.log(lvl, f"Event: {event}", extra={"event": event, "payload": payload or {}})
