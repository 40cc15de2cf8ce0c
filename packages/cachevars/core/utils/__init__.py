"""Shared utilities for cachevars."""

from cachevars.core.utils.logging import (
    ContextAdapter,
    StructuredJSONFormatter,
    configure_logging,
    get_logger,
    record_extras,
    with_context,
)

__all__ = [
    "ContextAdapter",
    "StructuredJSONFormatter",
    "configure_logging",
    "get_logger",
    "record_extras",
    "with_context",
]
