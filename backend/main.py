"""
Process entry point for Log Pulse.

Tails a log stream (stdin or followed files), aggregates it and redraws a
live statistics report once per second until interrupted.

    python -m backend.main --log-file app.log --debug
    some-service | python -m backend.main
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from backend.render import TerminalDisplay
from src.aggregation import SnapshotPublisher, StreamPipeline
from src.core.config import Config, SourceKind
from src.core.exceptions import ConfigurationError
from src.core.logging_config import setup_logging
from src.data.ingestion import build_sources

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SOURCE_UNAVAILABLE = 1
EXIT_BAD_CONFIG = 2


def build_config(args: argparse.Namespace) -> Config:
    """Merge command-line flags over environment / .env settings."""
    overrides = {}
    if args.log_file:
        overrides["source"] = SourceKind.FILE
        overrides["log_files"] = args.log_file
    if args.debug:
        overrides["debug_mode"] = True
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    return Config(**overrides).check_source()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Live log stream statistics")
    parser.add_argument("--debug", action="store_true", help="show queue diagnostics")
    parser.add_argument(
        "--log-file",
        action="append",
        metavar="PATH",
        help="follow a log file instead of reading stdin (repeatable)",
    )
    parser.add_argument("--log-level", default=None, help="logging level for diagnostics")
    return parser.parse_args(argv)


def run(settings: Config) -> int:
    setup_logging(settings=settings)
    logger.info(
        f"Starting with source={settings.source.value} "
        f"files={[str(p) for p in settings.log_files]} debug={settings.debug_mode}"
    )

    publisher = SnapshotPublisher()
    pipeline = StreamPipeline(
        build_sources(settings),
        publisher=publisher,
        debug_mode=settings.debug_mode,
    )
    display = TerminalDisplay(publisher, debug_mode=settings.debug_mode)

    display.start()
    pipeline.start()
    try:
        while not pipeline.wait(timeout=0.5):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        pipeline.stop()
        pipeline.join(timeout=2.0)
        display.stop()

    if pipeline.fatal_error is not None:
        logger.error(f"Log source unavailable: {pipeline.fatal_error}")
        return EXIT_SOURCE_UNAVAILABLE
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    try:
        settings = build_config(args)
    except (ValidationError, ConfigurationError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_BAD_CONFIG
    return run(settings)


if __name__ == "__main__":
    sys.exit(main())
