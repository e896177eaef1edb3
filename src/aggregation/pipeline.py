"""
Concurrency wiring for the live-tail pipeline.

    source -> reader thread (parse) --\
    source -> reader thread (parse) ---> IngestionQueue -> aggregation thread
                                                               |  every tick
                                                               v
                                                       SnapshotPublisher -> sink

Parallelism is used only at the ingestion edge. The aggregation thread is
the single owner of the engine; it waits on the queue with a timeout equal to
the time left before the next tick, so an idle stream never delays a tick.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import List, Optional, Sequence

from src.core.exceptions import SourceUnavailable
from src.data.ingestion import BaseLogSource
from src.data.parsers import LineParser

from .engine import AggregationEngine
from .ingestion_queue import IngestionQueue
from .publisher import SnapshotPublisher
from .window import TICK_SECONDS

logger = logging.getLogger(__name__)


class StreamPipeline:
    """
    Runs readers and the aggregation loop until stopped.

    Notes:
    - A reader hitting EOF ends quietly; ticks keep flowing.
    - A reader raising SourceUnavailable records the error and stops
      everything; callers inspect ``fatal_error`` after ``wait``.
    """

    def __init__(
        self,
        sources: Sequence[BaseLogSource],
        publisher: Optional[SnapshotPublisher] = None,
        engine: Optional[AggregationEngine] = None,
        debug_mode: bool = False,
        ingestion_queue: Optional[IngestionQueue] = None,
        tick_seconds: float = TICK_SECONDS,
    ):
        if not sources:
            raise ValueError("at least one source is required")
        self.sources = list(sources)
        self.publisher = publisher or SnapshotPublisher()
        self.engine = engine or AggregationEngine()
        self.debug_mode = debug_mode
        self.queue = ingestion_queue or IngestionQueue()
        self.tick_seconds = tick_seconds

        self._stop_event = threading.Event()
        self._threads: List[threading.Thread] = []
        self._fatal_lock = threading.Lock()
        self._fatal_error: Optional[SourceUnavailable] = None

    @property
    def fatal_error(self) -> Optional[SourceUnavailable]:
        return self._fatal_error

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> None:
        if self._threads:
            raise RuntimeError("pipeline already started")

        for index, source in enumerate(self.sources):
            thread = threading.Thread(
                target=self._read,
                args=(source,),
                name=f"reader-{index}",
                daemon=True,
            )
            self._threads.append(thread)

        self._threads.append(
            threading.Thread(target=self._aggregate, name="aggregator", daemon=True)
        )

        for thread in self._threads:
            thread.start()
        logger.info(f"Pipeline started with {len(self.sources)} reader(s)")

    def stop(self) -> None:
        self._stop_event.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the pipeline stops; returns True if it did."""
        return self._stop_event.wait(timeout)

    def join(self, timeout: Optional[float] = None) -> None:
        """Join the aggregation thread and any reader that can finish."""
        deadline = None if timeout is None else time.monotonic() + timeout
        for thread in self._threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)

    def _fail(self, error: SourceUnavailable) -> None:
        with self._fatal_lock:
            if self._fatal_error is None:
                self._fatal_error = error
        self.stop()

    def _read(self, source: BaseLogSource) -> None:
        parser = LineParser()
        try:
            for line in source.lines(self._stop_event):
                item = parser.parse(line)
                if item is None:
                    continue
                if not self.queue.put(item, self._stop_event):
                    break
        except SourceUnavailable as e:
            logger.error(f"Source {source.name} unavailable: {e}")
            self._fail(e)
        finally:
            logger.info(
                f"Reader for {source.name} finished: {parser.parsed} parsed, "
                f"{parser.rejected} malformed, {parser.timestamp_fallbacks} timestamp fallbacks"
            )

    def _aggregate(self) -> None:
        next_tick = time.monotonic() + self.tick_seconds
        while not self._stop_event.is_set():
            remaining = next_tick - time.monotonic()
            if remaining > 0:
                item = self.queue.get(timeout=remaining)
                if item is not None:
                    self.engine.ingest(item)
                continue

            queue_depth = self.queue.depth if self.debug_mode else None
            snapshot = self.engine.tick(queue_depth=queue_depth)
            if not self.publisher.publish(snapshot, self._stop_event):
                break
            next_tick = time.monotonic() + self.tick_seconds

        logger.info("Aggregation loop stopped")
