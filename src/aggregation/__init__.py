"""
Aggregation module: sliding-window statistics over a live record stream.

Implements the bucket store, adaptive window policy, top-error tracking, the
aggregation engine and the threads that feed it and publish its snapshots.
"""

from .buckets import BucketStore
from .engine import AggregationEngine
from .ingestion_queue import QUEUE_CAPACITY, IngestionQueue
from .pipeline import StreamPipeline
from .publisher import SnapshotPublisher
from .schema import StatsSnapshot, TopError, WindowPhase
from .topk import top_errors
from .window import (
    DEFAULT_WINDOW_SECONDS,
    MAX_WINDOW_SECONDS,
    MIN_WINDOW_SECONDS,
    TICK_SECONDS,
    WindowState,
    choose_window,
    rate_per_second,
)

__all__ = [
    "AggregationEngine",
    "BucketStore",
    "IngestionQueue",
    "QUEUE_CAPACITY",
    "SnapshotPublisher",
    "StreamPipeline",
    "StatsSnapshot",
    "TopError",
    "WindowPhase",
    "WindowState",
    "choose_window",
    "rate_per_second",
    "top_errors",
    "TICK_SECONDS",
    "MIN_WINDOW_SECONDS",
    "DEFAULT_WINDOW_SECONDS",
    "MAX_WINDOW_SECONDS",
]
