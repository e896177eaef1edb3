"""
Most-frequent error messages.
"""

import heapq
from typing import Mapping, Tuple

from .schema import TopError

TOP_ERRORS_LIMIT = 3


def top_errors(frequencies: Mapping[str, int], k: int = TOP_ERRORS_LIMIT) -> Tuple[TopError, ...]:
    """
    Select up to k messages with the highest counts.

    Ordered by count descending, ties broken by message text ascending so the
    result is reproducible regardless of mapping order. Returns fewer than k
    entries when fewer distinct messages exist.
    """
    if k <= 0:
        return ()
    best = heapq.nsmallest(
        k,
        ((message, count) for message, count in frequencies.items() if count > 0),
        key=lambda item: (-item[1], item[0]),
    )
    return tuple(TopError(message=message, count=count) for message, count in best)
