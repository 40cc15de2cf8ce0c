"""Status reporting for cache outcomes."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from cachevars.core.utils.logging import get_logger, with_context

from .models import CacheEvent, CacheOutcome

logger = get_logger(__name__)

_HEADLINES = {
    CacheOutcome.CREATE: "Saved cached values to {location}.",
    CacheOutcome.OVERWRITE: "Overwrote {location} with cached values.",
    CacheOutcome.HIT: "Loaded cached values from {location}.",
}


class StatusReporter(Protocol):
    """Protocol for status event sinks."""

    def report(self, event: CacheEvent) -> None:
        """Emit one status event."""
        ...


def format_event(event: CacheEvent) -> str:
    """Render a status event as a human-readable message.

    Example:
        Saved cached values to results/run.pkl.
          Run Timestamp : 2026-01-01T00:00:00.000 UTC (run took 0.123 sec)
          Python Version : 3.12.4
    """
    headline = _HEADLINES[event.outcome].format(location=event.location)
    timestamp = event.started_at.replace(tzinfo=None).isoformat(timespec="milliseconds")
    return (
        f"{headline}\n"
        f"  Run Timestamp : {timestamp} UTC (run took {event.duration_seconds:.3f} sec)\n"
        f"  Python Version : {event.tool_version}"
    )


class LoggingReporter:
    """Report status events as INFO records through ``logging``.

    Each record carries the event as ``cache_*`` fields, merged with any
    context already bound to the given logger or adapter.
    """

    def __init__(self, log: logging.Logger | logging.LoggerAdapter | None = None) -> None:
        self._logger = log or logger

    def report(self, event: CacheEvent) -> None:
        with_context(self._logger, event_fields(event)).info(format_event(event))


def event_fields(event: CacheEvent) -> dict[str, Any]:
    """Flatten a status event into ``cache_*`` log fields."""
    return {
        "cache_outcome": event.outcome.value,
        "cache_location": str(event.location),
        "cache_started_at": event.started_at.isoformat(),
        "cache_duration_seconds": event.duration_seconds,
        "cache_tool_version": event.tool_version,
    }


class NullReporter:
    """Discards all status events."""

    def report(self, event: CacheEvent) -> None:
        pass
