"""Filesystem helpers for artifact locations."""

from .paths import Location, artifact_exists, as_location, ensure_parent_dirs, format_tag

__all__ = [
    "Location",
    "as_location",
    "format_tag",
    "artifact_exists",
    "ensure_parent_dirs",
]
