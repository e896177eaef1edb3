"""
Custom exceptions for Log Pulse.

Per-record errors (MalformedLine, MalformedTimestamp) are recovered where they
occur and never interrupt the tick cadence. SourceUnavailable is the only
fatal error: without a source there is nothing to aggregate.
"""


class LogPulseError(Exception):
    """Base exception for Log Pulse failures."""
    pass


class MalformedLine(LogPulseError):
    """Raised when a raw line does not have the expected field layout."""

    def __init__(self, line: str, field_count: int):
        super().__init__(f"expected at least 5 fields, got {field_count}: {line[:80]!r}")
        self.line = line
        self.field_count = field_count


class MalformedTimestamp(LogPulseError):
    """Raised when a timestamp token is not a strict ISO-8601 UTC instant."""

    def __init__(self, token: str):
        super().__init__(f"unparseable timestamp: {token[:64]!r}")
        self.token = token


class EmptyWindowDivision(LogPulseError, ZeroDivisionError):
    """Raised when a per-second rate is requested over a window shorter than 1s."""
    pass


class SourceUnavailable(LogPulseError):
    """Raised when a log source cannot be opened or followed."""
    pass


class ConfigurationError(LogPulseError, ValueError):
    """Raised when configuration is invalid or missing."""
    pass
