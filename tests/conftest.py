"""
Pytest configuration and shared fixtures.

Provides test configuration instances, a controllable clock, and raw log line
factories for unit and integration tests.
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, List

from src.core.config import Config


class FakeClock:
    """Manually advanced UTC clock for deterministic engine tests."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def t0() -> datetime:
    """Fixed start instant shared by time-dependent tests."""
    return datetime(2025, 2, 7, 10, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(t0) -> FakeClock:
    """
    Fixture providing a FakeClock starting at t0.

    Pass it to AggregationEngine(clock=...) and call advance() between ticks.
    """
    return FakeClock(t0)


@pytest.fixture
def mock_config(tmp_path):
    """
    Fixture providing test configuration with explicit values.

    Ensures tests run consistently regardless of .env settings.

    Returns:
        Config: Test instance writing logs under a temporary directory
    """
    return Config(
        log_level="WARNING",
        logs_dir=tmp_path / "logs",
        debug_mode=False,
    )


@pytest.fixture
def make_line() -> Callable[..., str]:
    """
    Fixture returning a factory for raw log lines in the expected layout.

    Example:
        make_line(ts, "ERROR", "Connection timeout")
        -> '"2025-02-07T10:30:00Z" ERROR api worker-1 Connection timeout'
    """
    def _make(ts: datetime, level: str, message: str, logger: str = "api", thread: str = "worker-1") -> str:
        stamp = ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        return f'"{stamp}" {level} {logger} {thread} {message}'

    return _make


@pytest.fixture
def sample_lines(t0, make_line) -> List[str]:
    """
    Fixture providing realistic raw lines spread over 30 seconds.

    70% INFO, 20% DEBUG, 10% ERROR with two distinct error messages.
    """
    lines = []
    for i in range(100):
        ts = t0 + timedelta(seconds=i * 0.3)
        if i % 10 == 0:
            message = "Connection timeout" if i % 20 == 0 else "Disk quota exceeded"
            lines.append(make_line(ts, "ERROR", message))
        elif i % 5 == 0:
            lines.append(make_line(ts, "DEBUG", f"Cache probe {i}"))
        else:
            lines.append(make_line(ts, "INFO", f"Request {i} processed"))
    return lines


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (deferred CI)"
    )
