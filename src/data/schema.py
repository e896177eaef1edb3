"""
Canonical record schema for the live-tail pipeline.

This module defines the typed representation of a single log line after
parsing. Producers build Records (or Rejections for unusable lines) and hand
them to the aggregation engine through the ingestion queue.

Design rationale:
- Minimal fields (only what the windowed summary needs)
- All timestamps in UTC for consistency
- Unknown severities are kept as OTHER rather than dropped
- Instances are frozen: a record is consumed exactly once and never mutated
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    """
    Severity categories tracked by the summary.

    ERROR, INFO and DEBUG get their own percentages; any other token
    (WARN, TRACE, CRITICAL, ...) is counted as OTHER.
    """
    ERROR = "ERROR"
    INFO = "INFO"
    DEBUG = "DEBUG"
    OTHER = "OTHER"

    @classmethod
    def from_token(cls, token: str) -> "Severity":
        """Map a raw severity token to a category; only exact upper-case names match."""
        try:
            severity = cls(token.strip())
        except ValueError:
            return cls.OTHER
        return severity


class Record(BaseModel):
    """
    A single parsed log line.

    Attributes:
        severity: Severity category
        message: Message text (fields 4+ of the raw line, single-space joined)
        timestamp: UTC instant of the event (ingestion time if unparseable)
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity = Field(..., description="Severity category")
    message: str = Field(..., description="Log message text")
    timestamp: datetime = Field(..., description="UTC timestamp of the event")

    @field_validator("timestamp")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def bucket_key(self) -> datetime:
        """Timestamp truncated to the whole second; records sharing it share a bucket."""
        return self.timestamp.replace(microsecond=0)


class Rejection(BaseModel):
    """
    Marker for a line the parser could not turn into a Record.

    Travels through the ingestion queue so the malformed-line counter is
    owned by the engine like every other counter.
    """

    model_config = ConfigDict(frozen=True)

    reason: str = Field(..., description="Why the line was rejected")
    line: str = Field("", description="Offending line (truncated)")
