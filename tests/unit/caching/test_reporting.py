"""Tests for cache status events and reporters."""

from __future__ import annotations

from datetime import UTC, datetime
import logging
from pathlib import Path

import pytest

from cachevars.core.caching import (
    CachedResult,
    CacheEvent,
    CacheOutcome,
    LoggingReporter,
    NullReporter,
    Provenance,
    event_fields,
    format_event,
)
from cachevars.core.utils.logging import get_logger


@pytest.fixture
def provenance() -> Provenance:
    """Provide a fixed provenance record."""
    return Provenance(
        tool_version="3.12.4",
        started_at=datetime(2026, 3, 14, 15, 9, 26, 535000, tzinfo=UTC),
        duration_seconds=1.23456,
    )


def make_event(outcome: CacheOutcome, provenance: Provenance) -> CacheEvent:
    return CacheEvent.from_result(
        CachedResult(
            value=None,
            outcome=outcome,
            location=Path("results/run.pkl"),
            provenance=provenance,
        )
    )


class TestFormatEvent:
    """Tests for human-readable status messages."""

    @pytest.mark.parametrize(
        ("outcome", "headline"),
        [
            (CacheOutcome.CREATE, "Saved cached values to results/run.pkl."),
            (CacheOutcome.HIT, "Loaded cached values from results/run.pkl."),
            (CacheOutcome.OVERWRITE, "Overwrote results/run.pkl with cached values."),
        ],
    )
    def test_headline_per_outcome(self, provenance, outcome, headline):
        """Test each outcome has its own headline."""
        message = format_event(make_event(outcome, provenance))

        assert message.splitlines()[0] == headline

    def test_timestamp_and_duration_line(self, provenance):
        """Test run timestamp is UTC with milliseconds and duration in seconds."""
        message = format_event(make_event(CacheOutcome.CREATE, provenance))

        assert "  Run Timestamp : 2026-03-14T15:09:26.535 UTC (run took 1.235 sec)" in message

    def test_version_line(self, provenance):
        """Test the recorded Python version is shown."""
        message = format_event(make_event(CacheOutcome.HIT, provenance))

        assert message.splitlines()[-1] == "  Python Version : 3.12.4"


class TestCacheEvent:
    """Tests for building events from results."""

    def test_from_result_copies_provenance(self, provenance):
        """Test event fields mirror the result."""
        event = make_event(CacheOutcome.HIT, provenance)

        assert event.outcome == CacheOutcome.HIT
        assert event.location == Path("results/run.pkl")
        assert event.started_at == provenance.started_at
        assert event.duration_seconds == provenance.duration_seconds
        assert event.tool_version == "3.12.4"

    def test_bypass_result_has_no_event(self):
        """Test Bypass results cannot produce an event."""
        result = CachedResult(value=1, outcome=CacheOutcome.BYPASS)

        with pytest.raises(ValueError):
            CacheEvent.from_result(result)


class TestProvenance:
    """Tests for the provenance model."""

    def test_to_record_uses_iso_timestamp(self, provenance):
        """Test the on-disk form stores an ISO-8601 string."""
        record = provenance.to_record()

        assert record == {
            "tool_version": "3.12.4",
            "started_at": "2026-03-14T15:09:26.535000+00:00",
            "duration_seconds": 1.23456,
        }

    def test_record_round_trips_through_validation(self, provenance):
        """Test a stored record validates back to an equal model."""
        assert Provenance.model_validate(provenance.to_record()) == provenance

    def test_negative_duration_rejected(self):
        """Test durations cannot be negative."""
        with pytest.raises(ValueError):
            Provenance(tool_version="3.12", started_at=datetime.now(UTC), duration_seconds=-0.5)


class TestLoggingReporter:
    """Tests for the logging-backed reporter."""

    def test_reports_info_record(self, provenance, caplog):
        """Test events are logged at INFO with the formatted message."""
        reporter = LoggingReporter()

        with caplog.at_level(logging.INFO, logger="cachevars.core.caching.reporting"):
            reporter.report(make_event(CacheOutcome.CREATE, provenance))

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.levelno == logging.INFO
        assert record.getMessage().startswith("Saved cached values to results/run.pkl.")

    def test_event_fields_attached_as_extra(self, provenance, caplog):
        """Test structured fields are available on the log record."""
        reporter = LoggingReporter()

        with caplog.at_level(logging.INFO, logger="cachevars.core.caching.reporting"):
            reporter.report(make_event(CacheOutcome.HIT, provenance))

        record = caplog.records[0]
        assert record.cache_outcome == "hit"
        assert record.cache_location == str(Path("results/run.pkl"))
        assert record.cache_started_at == "2026-03-14T15:09:26.535000+00:00"
        assert record.cache_duration_seconds == 1.23456
        assert record.cache_tool_version == "3.12.4"

    def test_custom_logger(self, provenance, caplog):
        """Test a caller-supplied logger receives the events."""
        custom = logging.getLogger("my.notebook")
        reporter = LoggingReporter(custom)

        with caplog.at_level(logging.INFO, logger="my.notebook"):
            reporter.report(make_event(CacheOutcome.OVERWRITE, provenance))

        assert caplog.records[0].name == "my.notebook"

    def test_adapter_context_is_kept(self, provenance, caplog):
        """Test context bound to a caller's adapter survives next to the event fields."""
        adapter = get_logger("my.notebook", experiment="sweep-7")
        reporter = LoggingReporter(adapter)

        with caplog.at_level(logging.INFO, logger="my.notebook"):
            reporter.report(make_event(CacheOutcome.HIT, provenance))

        record = caplog.records[0]
        assert record.experiment == "sweep-7"
        assert record.cache_outcome == "hit"

    def test_plain_logger_adapter_context_is_kept(self, provenance, caplog):
        """Test a standard LoggerAdapter's extra is merged, not dropped."""
        adapter = logging.LoggerAdapter(logging.getLogger("my.notebook"), {"user_tag": "a"})

        with caplog.at_level(logging.INFO, logger="my.notebook"):
            LoggingReporter(adapter).report(make_event(CacheOutcome.HIT, provenance))

        assert caplog.records[0].user_tag == "a"
        assert caplog.records[0].cache_location == str(Path("results/run.pkl"))


class TestEventFields:
    """Tests for flattening events into log fields."""

    def test_all_fields_are_cache_prefixed(self, provenance):
        """Test every field carries the cache_ prefix."""
        fields = event_fields(make_event(CacheOutcome.CREATE, provenance))

        assert fields["cache_outcome"] == "create"
        assert all(key.startswith("cache_") for key in fields)


class TestNullReporter:
    """Tests for the silent reporter."""

    def test_discards_events(self, provenance, caplog):
        """Test nothing is logged."""
        with caplog.at_level(logging.DEBUG):
            NullReporter().report(make_event(CacheOutcome.CREATE, provenance))

        assert caplog.records == []
