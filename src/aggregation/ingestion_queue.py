"""
Bounded ingestion queue between producers and the aggregation engine.
"""

import logging
import queue
import threading
from typing import Optional, Union

from src.data.schema import Record, Rejection

logger = logging.getLogger(__name__)

QUEUE_CAPACITY = 10_000

Item = Union[Record, Rejection]


class IngestionQueue:
    """
    Many-producer / single-consumer channel of parsed items.

    Producers block while the queue is full (backpressure) instead of
    dropping records, which bounds memory for an unbounded stream.
    """

    def __init__(self, capacity: int = QUEUE_CAPACITY, block_poll: float = 0.1):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._block_poll = block_poll
        self._queue: "queue.Queue[Item]" = queue.Queue(maxsize=capacity)

    def put(self, item: Item, stop_event: Optional[threading.Event] = None) -> bool:
        """
        Enqueue an item, blocking while the queue is full.

        Args:
            item: Record or Rejection
            stop_event: When set, a blocked producer gives up

        Returns:
            True if enqueued, False if abandoned because of shutdown
        """
        if stop_event is None:
            self._queue.put(item)
            return True

        while not stop_event.is_set():
            try:
                self._queue.put(item, timeout=self._block_poll)
                return True
            except queue.Full:
                continue
        return False

    def get(self, timeout: Optional[float] = None) -> Optional[Item]:
        """Dequeue one item, or return None if nothing arrives within timeout."""
        try:
            if timeout is not None and timeout <= 0:
                return self._queue.get_nowait()
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    @property
    def depth(self) -> int:
        """Approximate number of queued items (diagnostic gauge)."""
        return self._queue.qsize()

    def __len__(self) -> int:
        return self.depth
