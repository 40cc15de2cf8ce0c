"""Shared pytest fixtures for cachevars tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from cachevars.core.caching import CacheEvent, PersistenceEngine, set_default_engine
from cachevars.core.codecs import default_registry
from cachevars.core.config import CacheConfig, clear_config_cache

# ============================================================================
# Global State
# ============================================================================


@pytest.fixture(autouse=True)
def reset_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate module-level engine/config state and the working directory."""
    monkeypatch.chdir(tmp_path)
    set_default_engine(None)
    clear_config_cache()
    yield
    set_default_engine(None)
    clear_config_cache()


# ============================================================================
# Engine Fixtures
# ============================================================================


class RecordingReporter:
    """Reporter that keeps every event it receives."""

    def __init__(self) -> None:
        self.events: list[CacheEvent] = []

    def report(self, event: CacheEvent) -> None:
        self.events.append(event)


@pytest.fixture
def reporter() -> RecordingReporter:
    """Provide a fresh recording reporter."""
    return RecordingReporter()


@pytest.fixture
def engine(reporter: RecordingReporter) -> PersistenceEngine:
    """Provide an engine with default codecs and a recording reporter."""
    config = CacheConfig()
    return PersistenceEngine(
        registry=default_registry(config.codecs),
        reporter=reporter,
        config=config,
    )


# ============================================================================
# Location Fixtures
# ============================================================================


@pytest.fixture(params=[".pkl", ".joblib", ".h5"], ids=["pickle", "joblib", "hdf5"])
def suffix(request: pytest.FixtureRequest) -> str:
    """Each built-in artifact format."""
    return request.param


@pytest.fixture
def artifact_path(tmp_path: Path, suffix: str) -> Path:
    """Artifact location (in a not-yet-existing directory) for each format."""
    return tmp_path / "results" / f"artifact{suffix}"


class Counter:
    """Callable thunk that counts its invocations."""

    def __init__(self, value: object = None) -> None:
        self.calls = 0
        self.value = value

    def __call__(self) -> object:
        self.calls += 1
        return self.value


@pytest.fixture
def counter() -> Counter:
    """Provide a counting thunk returning a nested value."""
    return Counter({"a": [1, 2, 3], "b": "hello", "c": 2.5})
