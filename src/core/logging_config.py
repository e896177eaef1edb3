"""
Logging configuration for production use.

Provides structured logging with file and console output.
Console output goes to stderr so it never interleaves with the report on stdout.
"""

import logging
import logging.handlers
import sys
from typing import Optional

from .config import Config, config as default_config


def setup_logging(
    logger_name: str = "",
    settings: Optional[Config] = None,
    file_name: str = "log_pulse.log",
) -> logging.Logger:
    """
    Configure and return a logger instance.

    Args:
        logger_name: Name of the logger; the default (root) captures every
            module logger in the application
        settings: Configuration to read level and log directory from
            (defaults to the module-level config)
        file_name: Log file name inside settings.logs_dir

    Returns:
        Configured logger instance
    """
    settings = settings or default_config
    logger = logging.getLogger(logger_name)

    # Don't add handlers if logger already configured
    if logger.handlers:
        return logger

    logger.setLevel(settings.log_level)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(settings.log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = settings.logs_dir / file_name
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
    )
    file_handler.setLevel(settings.log_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger
