"""
Unit tests for record and snapshot schemas.

Tests the Pydantic models and schema definitions.
"""

import pytest
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from src.aggregation.schema import StatsSnapshot, TopError, WindowPhase
from src.data.schema import Record, Rejection, Severity


class TestSeverity:
    """Test Severity enum."""

    def test_valid_severities(self):
        """Test that all tracked severities exist."""
        assert Severity.ERROR == "ERROR"
        assert Severity.INFO == "INFO"
        assert Severity.DEBUG == "DEBUG"
        assert Severity.OTHER == "OTHER"

    @pytest.mark.parametrize("token,expected", [
        ("ERROR", Severity.ERROR),
        ("INFO", Severity.INFO),
        (" DEBUG ", Severity.DEBUG),
        ("info", Severity.OTHER),
        ("Debug", Severity.OTHER),
        ("error", Severity.OTHER),
        ("WARNING", Severity.OTHER),
        ("FATAL", Severity.OTHER),
    ])
    def test_from_token(self, token, expected):
        """Test token mapping, unknown tokens become OTHER."""
        assert Severity.from_token(token) == expected


class TestRecord:
    """Test Record model."""

    def test_record_is_frozen(self):
        """Test records cannot be mutated after creation."""
        record = Record(
            severity=Severity.INFO,
            message="ok",
            timestamp=datetime(2025, 2, 7, 10, 30, tzinfo=timezone.utc),
        )

        with pytest.raises(ValidationError):
            record.message = "changed"

    def test_naive_timestamp_assumed_utc(self):
        """Test naive timestamps are treated as UTC."""
        record = Record(severity=Severity.INFO, message="ok", timestamp=datetime(2025, 2, 7, 10, 30))

        assert record.timestamp.tzinfo == timezone.utc

    def test_offset_timestamp_converted_to_utc(self):
        """Test aware timestamps are normalised to UTC."""
        plus_two = timezone(timedelta(hours=2))
        record = Record(
            severity=Severity.INFO,
            message="ok",
            timestamp=datetime(2025, 2, 7, 12, 30, tzinfo=plus_two),
        )

        assert record.timestamp == datetime(2025, 2, 7, 10, 30, tzinfo=timezone.utc)

    def test_bucket_key_truncates_to_second(self):
        """Test sub-second timestamps share a bucket."""
        record = Record(
            severity=Severity.DEBUG,
            message="tick",
            timestamp=datetime(2025, 2, 7, 10, 30, 5, 750000, tzinfo=timezone.utc),
        )

        assert record.bucket_key == datetime(2025, 2, 7, 10, 30, 5, tzinfo=timezone.utc)


class TestRejection:
    """Test Rejection model."""

    def test_defaults(self):
        rejection = Rejection(reason="too short")

        assert rejection.line == ""


class TestStatsSnapshot:
    """Test StatsSnapshot model."""

    def test_minimal_snapshot(self):
        """Test a snapshot for an empty window."""
        snapshot = StatsSnapshot(
            sequence=1,
            generated_at=datetime(2025, 2, 7, 10, 30, tzinfo=timezone.utc),
            phase=WindowPhase.WARMUP,
            window_seconds=1,
            next_window_seconds=120,
        )

        assert snapshot.total_processed == 0
        assert snapshot.top_errors == ()
        assert snapshot.queue_depth is None
        assert snapshot.severity_total == 0

    def test_snapshot_is_frozen(self):
        """Test snapshots cannot be mutated after creation."""
        snapshot = StatsSnapshot(
            sequence=1,
            generated_at=datetime(2025, 2, 7, 10, 30, tzinfo=timezone.utc),
            phase=WindowPhase.STEADY,
            window_seconds=60,
            next_window_seconds=60,
        )

        with pytest.raises(ValidationError):
            snapshot.total_processed = 5

    def test_percent_bounds(self):
        """Test percentages above 100 are rejected."""
        with pytest.raises(ValidationError):
            StatsSnapshot(
                sequence=1,
                generated_at=datetime(2025, 2, 7, 10, 30, tzinfo=timezone.utc),
                phase=WindowPhase.STEADY,
                window_seconds=60,
                next_window_seconds=60,
                error_percent=150.0,
            )

    def test_top_error_requires_positive_count(self):
        with pytest.raises(ValidationError):
            TopError(message="A", count=0)
