"""Location helpers for artifact files."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

Location = str | os.PathLike[str] | None


def as_location(location: Location) -> Path | None:
    """Normalize a caller-supplied location.

    Args:
        location: Path-like location, or None to disable caching

    Returns:
        Path (user-expanded), or None for the no-caching sentinel
    """
    if location is None:
        return None
    return Path(location).expanduser()


def format_tag(path: Path) -> str:
    """Return the format tag (lower-cased suffix) of a location.

    Example:
        >>> format_tag(Path("results/run.H5"))
        '.h5'
    """
    return path.suffix.lower()


def artifact_exists(path: Path) -> bool:
    """Check whether anything occupies the artifact location."""
    return path.exists()


def ensure_parent_dirs(path: Path) -> None:
    """Create missing parent directories of an artifact location."""
    parent = path.parent
    if not parent.exists():
        logger.debug(f"Creating artifact directory {parent}")
    parent.mkdir(parents=True, exist_ok=True)
