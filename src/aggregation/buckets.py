"""
Time-bucketed record store.

Groups records by whole-second timestamp so a window roll-off is a matter of
dropping whole buckets. The store is the only place records live: once a
bucket is evicted its records are gone.
"""

import logging
from datetime import datetime
from typing import Dict, Iterator, List, Optional

from src.data.schema import Record

logger = logging.getLogger(__name__)


class BucketStore:
    """
    Mapping of bucket key (UTC second) -> records sharing that second.

    Not thread-safe: owned exclusively by the aggregation engine.
    """

    def __init__(self):
        self._buckets: Dict[datetime, List[Record]] = {}
        self._record_count = 0

    def add(self, record: Record) -> None:
        """Append a record to its bucket, creating the bucket if needed."""
        self._buckets.setdefault(record.bucket_key, []).append(record)
        self._record_count += 1

    def evict(self, now: datetime, window_seconds: int) -> int:
        """
        Drop every bucket older than the window.

        A bucket is evicted when its whole-second age exceeds window_seconds.
        Buckets stamped in the future (clock skew between producer and this
        host) are kept and age into the window normally.

        Args:
            now: Current UTC instant
            window_seconds: Active window size

        Returns:
            Number of records evicted
        """
        expired = [
            key for key in self._buckets
            if int((now - key).total_seconds()) > window_seconds
        ]

        evicted = 0
        for key in expired:
            evicted += len(self._buckets.pop(key))

        self._record_count -= evicted
        if expired:
            logger.debug(f"Evicted {len(expired)} buckets ({evicted} records)")
        return evicted

    def records(self, now: Optional[datetime] = None) -> Iterator[Record]:
        """
        Iterate over live records, bucket by bucket.

        When now is given, buckets stamped after it are skipped; they stay
        stored and are counted once the clock reaches them.
        """
        for key, bucket in self._buckets.items():
            if now is not None and key > now:
                continue
            yield from bucket

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    @property
    def record_count(self) -> int:
        return self._record_count

    def __len__(self) -> int:
        return self._record_count
