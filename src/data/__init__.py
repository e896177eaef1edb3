"""
Data module: raw line sources, record parsing, and the record schema.

Pipeline:

    Raw lines (stdin / followed files)
        ↓
    Ingestion (src/data/ingestion.py)
        ↓
    Parsing (src/data/parsers.py) → Record | Rejection
        ↓
    Aggregation (src/aggregation/)
"""

from src.data.ingestion import (
    BaseLogSource,
    FollowFileSource,
    StdinSource,
    build_sources,
)
from src.data.parsers import (
    LineParser,
    parse_line,
    parse_timestamp,
)
from src.data.schema import (
    Record,
    Rejection,
    Severity,
)

__all__ = [
    # Schema
    "Record",
    "Rejection",
    "Severity",

    # Ingestion
    "BaseLogSource",
    "StdinSource",
    "FollowFileSource",
    "build_sources",

    # Parsing
    "LineParser",
    "parse_line",
    "parse_timestamp",
]
