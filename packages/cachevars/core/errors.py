"""Exception taxonomy for cachevars.

Exceptions raised by a cached computation itself are never wrapped: they
propagate verbatim (with a note naming the location) and nothing is written.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class CacheVarsError(Exception):
    """Base exception for all cachevars errors."""

    pass


class UnsupportedFormatError(CacheVarsError, ValueError):
    """Raised when a location suffix does not map to a registered codec.

    Always raised before any filesystem access.

    Attributes:
        location: Offending location
        supported: Suffixes that are registered
    """

    def __init__(self, location: Path | str, supported: Iterable[str]) -> None:
        self.location = location
        self.supported = tuple(sorted(supported))
        suffix = Path(location).suffix or "<none>"
        super().__init__(
            f"Unsupported artifact format {suffix!r} for {location}. "
            f"Supported suffixes: {', '.join(self.supported)}"
        )


class DecodeError(CacheVarsError):
    """Raised when an existing artifact cannot be decoded.

    Covers empty, truncated or foreign files and records with missing or
    invalid fields. A decode failure is never treated as a cache miss.

    Attributes:
        location: Artifact location
    """

    def __init__(self, location: Path | str, reason: str) -> None:
        self.location = location
        self.reason = reason
        super().__init__(f"Cannot decode artifact {location}: {reason}")


class ArgumentError(CacheVarsError, TypeError):
    """Raised eagerly for invalid call setup (bad block, bad namespace)."""

    pass
