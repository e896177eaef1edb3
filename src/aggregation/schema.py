"""
Snapshot schema for the aggregation engine.

A StatsSnapshot is the only way engine state reaches the outside world: it is
built fresh on every tick from a single consistent view of the bucket store
and is never mutated afterwards.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class WindowPhase(str, Enum):
    WARMUP = "warmup"
    STEADY = "steady"


class TopError(BaseModel):
    """One entry of the most-frequent-errors list."""

    model_config = ConfigDict(frozen=True)

    message: str
    count: int = Field(..., ge=1)


class StatsSnapshot(BaseModel):
    """
    Immutable statistics for one tick.

    Notes:
    - total_processed counts records inside the active window; it can shrink
      as buckets roll off. lifetime_processed never decreases.
    - Percentages are 0.0 when the window holds no records.
    - OTHER severities count towards totals but have no percentage.
    - top_errors holds 0 to 3 entries, most frequent first.
    - queue_depth is only populated in debug mode.
    """

    model_config = ConfigDict(frozen=True)

    sequence: int = Field(..., ge=1, description="Tick number, starting at 1")
    generated_at: datetime
    phase: WindowPhase

    total_processed: int = Field(0, ge=0)
    lifetime_processed: int = Field(0, ge=0)
    current_rate: int = Field(0, ge=0, description="Records per second over the window")
    peak_rate: int = Field(0, ge=0)
    window_seconds: int = Field(..., ge=1)
    next_window_seconds: int = Field(..., ge=1)

    error_count: int = Field(0, ge=0)
    info_count: int = Field(0, ge=0)
    debug_count: int = Field(0, ge=0)
    other_count: int = Field(0, ge=0)

    error_percent: float = Field(0.0, ge=0.0, le=100.0)
    info_percent: float = Field(0.0, ge=0.0, le=100.0)
    debug_percent: float = Field(0.0, ge=0.0, le=100.0)

    error_rate: int = Field(0, ge=0, description="Errors per second over the window")
    top_errors: Tuple[TopError, ...] = ()

    malformed_lines: int = Field(0, ge=0)
    queue_depth: Optional[int] = None

    @property
    def severity_total(self) -> int:
        """Sum of per-severity counts; always equals total_processed."""
        return self.error_count + self.info_count + self.debug_count + self.other_count
