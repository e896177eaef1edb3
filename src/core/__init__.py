"""
Core module: Configuration, logging, and exception handling.
"""

from .config import Config, SourceKind, config
from .exceptions import (
    ConfigurationError,
    EmptyWindowDivision,
    LogPulseError,
    MalformedLine,
    MalformedTimestamp,
    SourceUnavailable,
)
from .logging_config import setup_logging

__all__ = [
    "Config",
    "SourceKind",
    "config",
    "setup_logging",
    "LogPulseError",
    "MalformedLine",
    "MalformedTimestamp",
    "EmptyWindowDivision",
    "SourceUnavailable",
    "ConfigurationError",
]
