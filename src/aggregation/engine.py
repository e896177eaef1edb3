"""
Streaming aggregation engine.

Owns all mutable aggregation state: the bucket store, the window state, the
running counters and the peak rate. Records arrive through ``ingest`` and a
snapshot is computed on every ``tick``. Both are called from a single thread
(the pipeline's aggregation loop), so no locking is needed.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Union

from src.core.exceptions import EmptyWindowDivision
from src.data.schema import Record, Rejection, Severity

from .buckets import BucketStore
from .schema import StatsSnapshot
from .topk import top_errors
from .window import WindowState, rate_per_second

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _percent(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return 100.0 * count / total


@dataclass
class AggregationEngine:
    """
    Sliding-window aggregation with an adaptive window.

    Per tick:
    1. effective window (warm-up clamp or last tick's adaptive choice)
    2. evict buckets older than the window
    3. one pass over live records for counts and error frequencies
    4. rates, peak, percentages
    5. adaptive window for the next tick
    6. top errors
    7. immutable snapshot
    """

    clock: Callable[[], datetime] = utc_now
    confirm_ticks: int = 1

    def __post_init__(self) -> None:
        self._store = BucketStore()
        self._window = WindowState(start_time=self.clock(), confirm_ticks=self.confirm_ticks)
        self._peak_rate = 0
        self._lifetime_processed = 0
        self._malformed_lines = 0
        self._sequence = 0
        self._clamp_warned = False

    @property
    def window(self) -> WindowState:
        return self._window

    @property
    def store(self) -> BucketStore:
        return self._store

    @property
    def malformed_lines(self) -> int:
        return self._malformed_lines

    def ingest(self, item: Union[Record, Rejection]) -> None:
        """Add a parsed record to its bucket, or count a rejected line."""
        if isinstance(item, Rejection):
            self._malformed_lines += 1
            return
        self._store.add(item)
        self._lifetime_processed += 1

    def tick(self, now: Optional[datetime] = None, queue_depth: Optional[int] = None) -> StatsSnapshot:
        """
        Recompute statistics and return this tick's snapshot.

        Never raises: an unexpected failure yields a zeroed snapshot and the
        next tick starts from the same state.
        """
        now = now or self.clock()
        self._sequence += 1
        try:
            return self._compute(now, queue_depth)
        except Exception as e:
            logger.exception(f"Tick {self._sequence} failed, publishing empty snapshot: {e}")
            window = max(1, self._window.current_window_seconds)
            return StatsSnapshot(
                sequence=self._sequence,
                generated_at=now,
                phase=self._window.phase(now),
                lifetime_processed=self._lifetime_processed,
                peak_rate=self._peak_rate,
                window_seconds=window,
                next_window_seconds=window,
                malformed_lines=self._malformed_lines,
                queue_depth=queue_depth,
            )

    def _compute(self, now: datetime, queue_depth: Optional[int]) -> StatsSnapshot:
        phase = self._window.phase(now)
        window = self._window.effective_window(now)

        self._store.evict(now, window)

        severity_counts: Dict[Severity, int] = Counter()
        error_frequencies: Dict[str, int] = Counter()
        total = 0
        for record in self._store.records(now):
            total += 1
            severity_counts[record.severity] += 1
            if record.severity == Severity.ERROR:
                error_frequencies[record.message] += 1

        try:
            current_rate = rate_per_second(total, window)
            error_rate = rate_per_second(severity_counts[Severity.ERROR], window)
        except EmptyWindowDivision:
            if not self._clamp_warned:
                logger.warning(f"Window of {window}s cannot hold a rate, clamping to 1s")
                self._clamp_warned = True
            window = 1
            current_rate = total
            error_rate = severity_counts[Severity.ERROR]

        self._peak_rate = max(self._peak_rate, current_rate)
        next_window = self._window.adapt(current_rate)

        return StatsSnapshot(
            sequence=self._sequence,
            generated_at=now,
            phase=phase,
            total_processed=total,
            lifetime_processed=self._lifetime_processed,
            current_rate=current_rate,
            peak_rate=self._peak_rate,
            window_seconds=window,
            next_window_seconds=next_window,
            error_count=severity_counts[Severity.ERROR],
            info_count=severity_counts[Severity.INFO],
            debug_count=severity_counts[Severity.DEBUG],
            other_count=severity_counts[Severity.OTHER],
            error_percent=_percent(severity_counts[Severity.ERROR], total),
            info_percent=_percent(severity_counts[Severity.INFO], total),
            debug_percent=_percent(severity_counts[Severity.DEBUG], total),
            error_rate=error_rate,
            top_errors=top_errors(error_frequencies),
            malformed_lines=self._malformed_lines,
            queue_depth=queue_depth,
        )
