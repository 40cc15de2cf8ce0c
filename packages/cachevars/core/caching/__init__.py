"""Run-once, load-thereafter caching of computations.

Key features:
- Suffix-selected artifact formats (pickle, joblib, HDF5)
- Provenance record (Python version, UTC start time, runtime) per artifact
- Create / Overwrite / Hit / Bypass outcomes with status events
- Decode failures surface as errors, never as silent recomputation

Example:
    >>> from cachevars.core.caching import cache
    >>> out = cache("results/sweep.pkl", lambda: run_sweep(n=1000))
"""

from cachevars.core.caching.engine import (
    PersistenceEngine,
    cache,
    cached,
    get_default_engine,
    set_default_engine,
    tool_version,
)
from cachevars.core.caching.models import CachedResult, CacheEvent, CacheOutcome, Provenance
from cachevars.core.caching.reporting import (
    LoggingReporter,
    NullReporter,
    StatusReporter,
    event_fields,
    format_event,
)

__all__ = [
    # Engine
    "PersistenceEngine",
    "cache",
    "cached",
    "get_default_engine",
    "set_default_engine",
    "tool_version",
    # Models
    "CachedResult",
    "CacheEvent",
    "CacheOutcome",
    "Provenance",
    # Reporting
    "StatusReporter",
    "LoggingReporter",
    "NullReporter",
    "event_fields",
    "format_event",
]
