"""Persistence decision engine.

Decides per call whether to run-and-save (Create), re-run-and-replace
(Overwrite), load (Hit) or simply run (Bypass), and wraps values in a
provenance record.

Concurrency: calls are synchronous and there is no locking. Existence is
checked once on entry, so two processes racing to create the same missing
location both compute and the last writer wins. Each write goes to a sibling
temporary file that replaces the location only once encoding succeeded, so
an encode failure never leaves a partial artifact behind.
"""

from __future__ import annotations

import logging
import platform
import time
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypeVar

from pydantic import ValidationError

from cachevars.core.codecs import CodecRegistry, default_registry
from cachevars.core.config import CacheConfig, load_cache_config
from cachevars.core.errors import DecodeError
from cachevars.core.io import Location, artifact_exists, as_location, ensure_parent_dirs

from .models import CachedResult, CacheEvent, CacheOutcome, Provenance
from .reporting import LoggingReporter, StatusReporter

logger = logging.getLogger(__name__)

T = TypeVar("T")

_default_engine: PersistenceEngine | None = None


def tool_version() -> str:
    """Version string recorded as provenance (the running Python)."""
    return platform.python_version()


class PersistenceEngine:
    """Run-once-then-load engine over suffix-selected codecs."""

    def __init__(
        self,
        registry: CodecRegistry | None = None,
        reporter: StatusReporter | None = None,
        config: CacheConfig | None = None,
    ) -> None:
        """
        Initialize engine.

        Args:
            registry: Codec registry (built-in codecs if None)
            reporter: Status event sink (logging if None)
            config: Configuration (loaded default if None)
        """
        self.config = config or load_cache_config()
        self.registry = registry or default_registry(self.config.codecs)
        self.reporter = reporter or LoggingReporter()

    def run(
        self,
        location: Location,
        thunk: Callable[[], T],
        overwrite: bool = False,
        *,
        context: Any = None,
        verbose: bool | None = None,
    ) -> CachedResult[T]:
        """
        Run thunk once per location and persist its value.

        Workflow:
        1. No location: call thunk and return (Bypass)
        2. Select codec from suffix (fails before any I/O)
        3. Missing artifact, or overwrite: time thunk, save record
        4. Otherwise: load record and return the stored value

        Args:
            location: Artifact path (suffix selects format), or None
            thunk: Zero-argument computation
            overwrite: Recompute and replace an existing artifact
            context: Deserialization context passed to the codec on load
            verbose: Emit a status event (config default if None)

        Returns:
            CachedResult with value, outcome and provenance

        Raises:
            UnsupportedFormatError: Unknown location suffix
            DecodeError: Existing artifact cannot be decoded
        """
        path = as_location(location)
        if path is None:
            return CachedResult(value=thunk(), outcome=CacheOutcome.BYPASS)

        codec = self.registry.for_location(path)
        exists = artifact_exists(path)

        if exists and not overwrite:
            record = codec.load(path, context=context)
            provenance = _provenance_from_record(path, record)
            result = CachedResult(
                value=record["value"],
                outcome=CacheOutcome.HIT,
                location=path,
                provenance=provenance,
            )
        else:
            started_at = datetime.now(UTC)
            start = time.perf_counter()
            try:
                value = thunk()
            except Exception as e:
                e.add_note(f"cachevars: computation for {path} failed; nothing was written")
                raise
            duration = time.perf_counter() - start

            provenance = Provenance(
                tool_version=tool_version(),
                started_at=started_at,
                duration_seconds=duration,
            )
            ensure_parent_dirs(path)
            codec.save(path, {**provenance.to_record(), "value": value})

            result = CachedResult(
                value=value,
                outcome=CacheOutcome.OVERWRITE if exists else CacheOutcome.CREATE,
                location=path,
                provenance=provenance,
            )

        report = self.config.verbose if verbose is None else verbose
        if report:
            self.reporter.report(CacheEvent.from_result(result))
        else:
            logger.debug(f"{result.outcome.value}: {path}")

        return result

    def run_or_load(
        self,
        location: Location,
        thunk: Callable[[], T],
        overwrite: bool = False,
        *,
        context: Any = None,
        verbose: bool | None = None,
    ) -> T:
        """Like ``run`` but return only the value."""
        return self.run(location, thunk, overwrite, context=context, verbose=verbose).value


def _provenance_from_record(path: Path, record: dict[str, Any]) -> Provenance:
    if "value" not in record:
        raise DecodeError(path, "record has no 'value' field")
    try:
        return Provenance.model_validate(
            {key: record.get(key) for key in ("tool_version", "started_at", "duration_seconds")}
        )
    except ValidationError as e:
        raise DecodeError(path, f"invalid provenance: {e}") from e


def get_default_engine() -> PersistenceEngine:
    """Return the lazily built module-level engine."""
    global _default_engine
    if _default_engine is None:
        _default_engine = PersistenceEngine()
    return _default_engine


def set_default_engine(engine: PersistenceEngine | None) -> None:
    """Replace (or reset with None) the module-level engine."""
    global _default_engine
    _default_engine = engine


def cached(
    location: Location,
    thunk: Callable[[], T],
    *,
    overwrite: bool = False,
    context: Any = None,
    engine: PersistenceEngine | None = None,
) -> CachedResult[T]:
    """
    Cache the output of ``thunk()`` at location and return value plus metadata.

    Never emits status events; use ``cache`` for logged calls.

    Example:
        >>> result = cached("results/sweep.pkl", run_sweep)
        >>> result.value, result.outcome, result.provenance.duration_seconds

    Raises:
        TypeError: Unknown keyword option (raised by the call itself)
        UnsupportedFormatError: Unknown location suffix
        DecodeError: Existing artifact cannot be decoded
    """
    engine = engine or get_default_engine()
    return engine.run(location, thunk, overwrite, context=context, verbose=False)


def cache(
    location: Location,
    thunk: Callable[[], T],
    *,
    overwrite: bool = False,
    verbose: bool | None = None,
    context: Any = None,
    engine: PersistenceEngine | None = None,
) -> T:
    """
    Cache the output of ``thunk()`` at location and return it.

    The value is loaded if the file exists and computed and saved otherwise.
    Pass ``location=None`` to disable caching (e.g. while a sweep is still
    incomplete).

    Example:
        >>> out = cache("results/sweep.h5", lambda: {"a": expensive(), "b": 2})

    Raises:
        TypeError: Unknown keyword option (raised by the call itself)
        UnsupportedFormatError: Unknown location suffix
        DecodeError: Existing artifact cannot be decoded
    """
    engine = engine or get_default_engine()
    return engine.run_or_load(location, thunk, overwrite, context=context, verbose=verbose)
