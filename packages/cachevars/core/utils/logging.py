"""Logging helpers for cachevars.

The library never configures logging on import. Applications opt in with
``configure_logging`` (or ``cachevars.core.config.configure_logging`` to read
the settings from ``cachevars.json``).

Records can carry context two ways: ``extra=`` on the call, or a
``ContextAdapter`` from ``get_logger(name, **context)``. Unlike a plain
``logging.LoggerAdapter``, the adapter merges its context with a call's
``extra`` instead of replacing it.

Fields named ``cache_<field>`` are cache status fields; the JSON formatter
groups them under ``"cache"``.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping, MutableMapping
from datetime import UTC, datetime
from typing import Any

CACHE_FIELD_PREFIX = "cache_"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord has; anything else arrived through ``extra``
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Return the public fields a record received through ``extra``."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class StructuredJSONFormatter(logging.Formatter):
    """Render each record as one JSON line.

    Example output (wrapped)::

        {"timestamp": "2026-01-01T12:00:00.000000+00:00", "level": "INFO",
         "logger": "cachevars.core.caching.reporting",
         "message": "Loaded cached values from results/run.pkl. ...",
         "source": {"module": "reporting", "function": "report", "line": 60,
                    "process": 4242, "thread_name": "MainThread"},
         "cache": {"outcome": "hit", "location": "results/run.pkl", ...},
         "context": {}}

    ``error`` is added when the record carries exception info.
    """

    def format(self, record: logging.LogRecord) -> str:
        cache_fields: dict[str, Any] = {}
        context: dict[str, Any] = {}
        for key, value in record_extras(record).items():
            if key.startswith(CACHE_FIELD_PREFIX):
                cache_fields[key.removeprefix(CACHE_FIELD_PREFIX)] = value
            else:
                context[key] = value

        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": self._source(record),
        }
        if cache_fields:
            entry["cache"] = cache_fields
        entry["context"] = context
        if record.exc_info:
            entry["error"] = self._error(record)

        return json.dumps(entry, default=str)

    @staticmethod
    def _source(record: logging.LogRecord) -> dict[str, Any]:
        return {
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
            "thread_name": record.threadName,
        }

    def _error(self, record: logging.LogRecord) -> dict[str, Any]:
        exc_type, exc_value, _ = record.exc_info  # type: ignore[misc]
        return {
            "type": exc_type.__name__ if exc_type else None,
            "message": str(exc_value) if exc_value is not None else None,
            "stack_trace": record.exc_text or self.formatException(record.exc_info),  # type: ignore[arg-type]
        }


class ContextAdapter(logging.LoggerAdapter):
    """LoggerAdapter whose context is merged into each call's ``extra``.

    Keys passed as ``extra`` on a call win over the adapter's context.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs

    def bind(self, **context: Any) -> ContextAdapter:
        """Return a new adapter with additional context."""
        return ContextAdapter(self.logger, {**(self.extra or {}), **context})


def with_context(
    log: logging.Logger | logging.LoggerAdapter, context: Mapping[str, Any]
) -> ContextAdapter:
    """Attach context to a logger or adapter, keeping any context it already has."""
    if isinstance(log, ContextAdapter):
        return log.bind(**context)
    if isinstance(log, logging.LoggerAdapter):
        return ContextAdapter(log.logger, {**(log.extra or {}), **context})
    return ContextAdapter(log, dict(context))


def get_logger(name: str, **context: Any) -> logging.Logger | ContextAdapter:
    """Get a named logger, wrapped in a ContextAdapter when context is given.

    Example:
        >>> log = get_logger(__name__, cache_location="results/run.pkl")
        >>> log.info("Recomputing")  # record carries cache_location
    """
    named = logging.getLogger(name)
    return with_context(named, context) if context else named


def configure_logging(
    level: str = "INFO",
    format_string: str | None = None,
    filename: str | None = None,
    structured: bool = False,
) -> None:
    """Install one root handler (stdout or a file); safe to call again.

    Args:
        level: Level name, case-insensitive
        format_string: Text format; ignored when structured is True
        filename: Log file path; stdout if None
        structured: Emit JSON lines via StructuredJSONFormatter

    Raises:
        ValueError: If level is not a known level name
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level!r}")

    handler: logging.Handler = logging.FileHandler(filename) if filename else logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        StructuredJSONFormatter() if structured else logging.Formatter(format_string or DEFAULT_FORMAT)
    )
    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)
