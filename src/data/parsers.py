"""
Record parsing for raw log lines.

Converts one whitespace-separated text line into a typed Record:

    "2025-02-07T10:30:45Z" ERROR api worker-3 Connection timeout to db

    field[0]   quoted timestamp (strict ISO-8601 UTC)
    field[1]   severity token
    field[2:4] reserved (logger name, thread id, ...), ignored
    field[4:]  message, joined with single spaces

Design:
- Lines with fewer than 5 fields are rejected (MalformedLine)
- A bad timestamp does not lose the entry; ingestion time is used instead
- Unknown severities become Severity.OTHER
"""

import logging
import re
from datetime import datetime, timezone
from typing import List, Optional, Tuple, Union

from src.core.exceptions import MalformedLine, MalformedTimestamp
from src.data.schema import Record, Rejection, Severity

logger = logging.getLogger(__name__)

MIN_FIELDS = 5

_TIMESTAMP_PATTERN = re.compile(
    r"^([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.([0-9]{1,6}))?Z$"
)

_QUOTES = ("\"", "'")


def parse_timestamp(token: str) -> datetime:
    """
    Parse a (possibly quoted) strict ISO-8601 UTC timestamp.

    Accepts ``YYYY-MM-DDTHH:MM:SSZ`` with optional fractional seconds,
    surrounded by at most one pair of matching quotes.

    Args:
        token: Raw timestamp field

    Returns:
        Timezone-aware UTC datetime

    Raises:
        MalformedTimestamp: If the token is not a strict UTC instant
    """
    value = token
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        value = value[1:-1]

    match = _TIMESTAMP_PATTERN.match(value)
    if not match:
        raise MalformedTimestamp(token)

    year, month, day, hour, minute, second, fraction = match.groups()
    microsecond = int(fraction.ljust(6, "0")) if fraction else 0
    try:
        return datetime(
            int(year), int(month), int(day),
            int(hour), int(minute), int(second), microsecond,
            tzinfo=timezone.utc,
        )
    except ValueError as e:
        # Out-of-range components such as month 13
        raise MalformedTimestamp(token) from e


def _build_record(fields: List[str], now: Optional[datetime]) -> Tuple[Record, bool]:
    """Build a Record from split fields; the flag reports a timestamp fallback."""
    fell_back = False
    try:
        timestamp = parse_timestamp(fields[0])
    except MalformedTimestamp as e:
        logger.debug(f"Falling back to ingestion time: {e}")
        timestamp = now or datetime.now(timezone.utc)
        fell_back = True

    record = Record(
        severity=Severity.from_token(fields[1]),
        message=" ".join(fields[MIN_FIELDS - 1:]),
        timestamp=timestamp,
    )
    return record, fell_back


def parse_line(line: str, now: Optional[datetime] = None) -> Record:
    """
    Parse one raw line into a Record.

    Args:
        line: Raw text line
        now: Ingestion instant used when the timestamp is unparseable
            (defaults to the current UTC time)

    Returns:
        Parsed Record

    Raises:
        MalformedLine: If fewer than 5 fields are present
    """
    fields = line.split()
    if len(fields) < MIN_FIELDS:
        raise MalformedLine(line, len(fields))

    record, _ = _build_record(fields, now)
    return record


class LineParser:
    """
    Stateful parser used by a single producer.

    Never raises on bad input: malformed lines come back as Rejection so the
    caller can forward them to the engine, and the counters here give a
    per-producer diagnostic view.
    """

    def __init__(self):
        self.parsed = 0
        self.rejected = 0
        self.timestamp_fallbacks = 0

    def parse(self, line: str, now: Optional[datetime] = None) -> Optional[Union[Record, Rejection]]:
        """
        Parse a raw line.

        Returns:
            Record, Rejection, or None for blank lines
        """
        fields = line.split()
        if not fields:
            return None

        if len(fields) < MIN_FIELDS:
            error = MalformedLine(line, len(fields))
            self.rejected += 1
            logger.debug(f"Skipping malformed line: {error}")
            return Rejection(reason=str(error), line=line.strip()[:200])

        record, fell_back = _build_record(fields, now)
        self.parsed += 1
        if fell_back:
            self.timestamp_fallbacks += 1
        return record
