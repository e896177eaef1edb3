"""
Adaptive window sizing.

The window trades recency for stability: a busy stream gets a short window,
a quiet one a long window. The size chosen on one tick applies to the next.

Policy (fixed):
- rate > 2500/s  -> 30s
- rate < 600/s   -> 120s
- otherwise      -> 60s

While the elapsed time since start is below the default window (warm-up),
the effective window is the elapsed whole seconds, never less than 1.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from src.core.exceptions import EmptyWindowDivision

from .schema import WindowPhase

logger = logging.getLogger(__name__)

TICK_SECONDS = 1

MIN_WINDOW_SECONDS = 30
DEFAULT_WINDOW_SECONDS = 60
MAX_WINDOW_SECONDS = 120

HIGH_RATE_THRESHOLD = 2500
LOW_RATE_THRESHOLD = 600


def choose_window(rate: int) -> int:
    """Three-tier window policy for a records-per-second rate."""
    if rate > HIGH_RATE_THRESHOLD:
        return MIN_WINDOW_SECONDS
    if rate < LOW_RATE_THRESHOLD:
        return MAX_WINDOW_SECONDS
    return DEFAULT_WINDOW_SECONDS


def rate_per_second(count: int, window_seconds: int) -> int:
    """
    Integer per-second rate over a window.

    Raises:
        EmptyWindowDivision: If window_seconds < 1
    """
    if window_seconds < 1:
        raise EmptyWindowDivision(f"window of {window_seconds}s cannot carry a rate")
    return count // window_seconds


@dataclass
class WindowState:
    """
    Current window size and the instant aggregation started.

    Mutated only by the aggregation engine at tick boundaries.

    confirm_ticks > 1 adds hysteresis: a new size is adopted only after that
    many consecutive ticks propose it. The default of 1 switches immediately.
    """

    start_time: datetime
    current_window_seconds: int = DEFAULT_WINDOW_SECONDS
    confirm_ticks: int = 1
    _candidate: Optional[int] = field(default=None, repr=False)
    _candidate_streak: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        if self.confirm_ticks < 1:
            raise ValueError("confirm_ticks must be >= 1")

    def elapsed_seconds(self, now: datetime) -> float:
        return max(0.0, (now - self.start_time).total_seconds())

    def phase(self, now: datetime) -> WindowPhase:
        if self.elapsed_seconds(now) < DEFAULT_WINDOW_SECONDS:
            return WindowPhase.WARMUP
        return WindowPhase.STEADY

    def effective_window(self, now: datetime) -> int:
        """Window to aggregate over at ``now``."""
        if self.phase(now) == WindowPhase.WARMUP:
            elapsed = int(self.elapsed_seconds(now))
            if elapsed < 1:
                logger.debug("Warm-up window below 1s, clamping to 1s")
                return 1
            return elapsed
        return self.current_window_seconds

    def adapt(self, rate: int) -> int:
        """
        Feed this tick's rate and return the window for the next tick.
        """
        proposed = choose_window(rate)
        if proposed == self.current_window_seconds:
            self._candidate = None
            self._candidate_streak = 0
            return self.current_window_seconds

        if proposed == self._candidate:
            self._candidate_streak += 1
        else:
            self._candidate = proposed
            self._candidate_streak = 1

        if self._candidate_streak >= self.confirm_ticks:
            logger.debug(
                f"Window {self.current_window_seconds}s -> {proposed}s at {rate} records/s"
            )
            self.current_window_seconds = proposed
            self._candidate = None
            self._candidate_streak = 0

        return self.current_window_seconds
