"""
Single-slot snapshot hand-off between the engine and the display sink.
"""

import logging
import queue
import threading
from typing import Optional

from .schema import StatsSnapshot

logger = logging.getLogger(__name__)


class SnapshotPublisher:
    """
    Hands snapshots to one consumer, one at a time, in tick order.

    The slot holds a single snapshot: publishing blocks until the previous
    one has been taken, so the sink is throttled to one render per tick and
    never misses or reorders a tick.
    """

    def __init__(self, block_poll: float = 0.1):
        self._slot: "queue.Queue[StatsSnapshot]" = queue.Queue(maxsize=1)
        self._block_poll = block_poll
        self.published = 0

    def publish(self, snapshot: StatsSnapshot, stop_event: Optional[threading.Event] = None) -> bool:
        """
        Offer a snapshot to the sink.

        Returns:
            True once the snapshot is in the slot, False if stop_event was set
            while waiting for the sink
        """
        while stop_event is None or not stop_event.is_set():
            try:
                self._slot.put(snapshot, timeout=self._block_poll)
            except queue.Full:
                continue
            self.published += 1
            return True

        logger.debug(f"Dropping snapshot {snapshot.sequence} during shutdown")
        return False

    def next_snapshot(self, timeout: Optional[float] = None) -> Optional[StatsSnapshot]:
        """Take the pending snapshot, waiting up to timeout; None if none arrived."""
        try:
            return self._slot.get(timeout=timeout)
        except queue.Empty:
            return None
