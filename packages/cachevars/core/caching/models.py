"""Models for the persistence engine.

Provides provenance, outcome, result and status-event models.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class CacheOutcome(str, Enum):
    """Terminal outcome of one engine call."""

    CREATE = "create"
    OVERWRITE = "overwrite"
    HIT = "hit"
    BYPASS = "bypass"


class Provenance(BaseModel):
    """Metadata persisted alongside every artifact value.

    Loaded provenance is reported as-is; it is never checked against the
    current runtime.
    """

    model_config = ConfigDict(frozen=True)

    tool_version: str = Field(description="Python version that ran the computation")
    started_at: datetime = Field(description="UTC wall-clock time the computation started")
    duration_seconds: float = Field(ge=0.0, description="Computation runtime in seconds")

    def to_record(self) -> dict[str, Any]:
        """Flatten to the on-disk record fields."""
        return {
            "tool_version": self.tool_version,
            "started_at": self.started_at.isoformat(),
            "duration_seconds": self.duration_seconds,
        }


class CachedResult(BaseModel, Generic[T]):
    """Value plus metadata returned by ``PersistenceEngine.run``."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    value: T
    outcome: CacheOutcome
    location: Path | None = None
    provenance: Provenance | None = Field(
        default=None, description="None only for Bypass (no metadata recorded)"
    )


class CacheEvent(BaseModel):
    """Status event emitted on Create, Overwrite and Hit."""

    model_config = ConfigDict(frozen=True)

    outcome: CacheOutcome
    location: Path
    started_at: datetime
    duration_seconds: float
    tool_version: str

    @classmethod
    def from_result(cls, result: CachedResult[Any]) -> CacheEvent:
        if result.location is None or result.provenance is None:
            raise ValueError("Bypass results carry no status event")
        return cls(
            outcome=result.outcome,
            location=result.location,
            **result.provenance.model_dump(),
        )
