"""
Raw line sources for the live-tail pipeline.

Supports standard input and followed (growing) files. Sources only yield raw
text lines; parsing happens in the producer that drains them.

Design:
- Iterator-based, one source per reader thread
- A followed file behaves like ``tail -f``: it is drained, then polled
- Truncation and rotation (inode change) reopen the file from the start
- Failure to open a source raises SourceUnavailable, which is fatal
"""

import logging
import os
import sys
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, List, Optional, TextIO, Union

from src.core.config import Config, SourceKind
from src.core.exceptions import SourceUnavailable

logger = logging.getLogger(__name__)


class BaseLogSource(ABC):
    """
    Abstract base class for line sources.

    Each source type (stdin, followed file) implements this interface.
    """

    name: str = "source"

    @abstractmethod
    def lines(self, stop_event: threading.Event) -> Iterator[str]:
        """
        Yield raw lines until the source is exhausted or stop_event is set.

        Raises:
            SourceUnavailable: If the source cannot be opened or read
        """
        pass


class StdinSource(BaseLogSource):
    """
    Reads lines from a text stream (standard input by default).

    Ends when the stream reaches EOF. A blocking read cannot observe
    stop_event until the next line arrives; reader threads are daemons so
    this never holds up process exit.
    """

    name = "stdin"

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def lines(self, stop_event: threading.Event) -> Iterator[str]:
        stream = self.stream if self.stream is not None else sys.stdin
        if stream is None:
            raise SourceUnavailable("standard input is not available")

        try:
            for line in stream:
                yield line.rstrip("\r\n")
                if stop_event.is_set():
                    return
        except (OSError, ValueError) as e:
            raise SourceUnavailable(f"Failed to read standard input: {e}") from e


class FollowFileSource(BaseLogSource):
    """
    Follows a growing log file.

    Example:
        source = FollowFileSource("app.log", poll_interval=0.25)
        for line in source.lines(stop_event):
            ...

    Notes:
        - A trailing partial line is held back until its newline arrives
        - from_beginning=False starts at the current end of the file
    """

    def __init__(
        self,
        filepath: Union[str, Path],
        poll_interval: float = 0.25,
        from_beginning: bool = True,
        encoding: str = "utf-8",
    ):
        self.filepath = Path(filepath)
        self.poll_interval = poll_interval
        self.from_beginning = from_beginning
        self.encoding = encoding
        self.name = str(self.filepath)

    def lines(self, stop_event: threading.Event) -> Iterator[str]:
        handle, inode = self._open()
        if not self.from_beginning:
            handle.seek(0, os.SEEK_END)

        pending = ""
        try:
            while not stop_event.is_set():
                chunk = handle.readline()
                if chunk:
                    pending += chunk
                    if pending.endswith("\n"):
                        yield pending.rstrip("\r\n")
                        pending = ""
                    continue

                if self._rotated_or_truncated(handle, inode):
                    logger.info(f"Log file rotated or truncated, reopening: {self.filepath}")
                    handle.close()
                    handle, inode = self._open()
                    pending = ""
                    continue

                stop_event.wait(self.poll_interval)
        finally:
            handle.close()

    def _open(self):
        try:
            handle = open(self.filepath, "r", encoding=self.encoding, errors="replace")
            inode = os.fstat(handle.fileno()).st_ino
        except OSError as e:
            raise SourceUnavailable(f"Cannot follow log file {self.filepath}: {e}") from e
        return handle, inode

    def _rotated_or_truncated(self, handle, inode: int) -> bool:
        try:
            stat = self.filepath.stat()
        except FileNotFoundError:
            # Rotated away and not yet recreated; keep the old handle
            return False
        if stat.st_ino != inode:
            return True
        return stat.st_size < handle.tell()


def build_sources(settings: Config) -> List[BaseLogSource]:
    """
    Build the line sources described by the configuration.

    Args:
        settings: Application configuration

    Returns:
        One source per reader thread
    """
    if settings.source == SourceKind.FILE:
        return [
            FollowFileSource(path, poll_interval=settings.poll_interval)
            for path in settings.log_files
        ]
    return [StdinSource()]
