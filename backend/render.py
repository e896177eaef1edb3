"""
Terminal display sink for statistics snapshots.

Formats one StatsSnapshot as a text report and redraws it in place. Works
with any number of top errors (0 to 3) and with an empty window.
"""

from __future__ import annotations

import logging
import sys
import threading
from datetime import datetime
from typing import List, Optional, TextIO

from src.aggregation import DEFAULT_WINDOW_SECONDS, SnapshotPublisher, StatsSnapshot

logger = logging.getLogger(__name__)

RULE = "━" * 56
CLEAR_SCREEN = "\033[2J\033[H"


def render_report(snapshot: StatsSnapshot, debug_mode: bool = False, now: Optional[datetime] = None) -> str:
    """Build the text report for a snapshot."""
    now = (now or datetime.now()).astimezone()
    stamp = f"{now.strftime('%Y-%m-%d %H:%M:%S')} {now.tzname() or ''}".rstrip()

    lines: List[str] = [
        f"Log Analysis Report (Last Updated: {stamp})",
        RULE,
        "Runtime Stats:",
        f"• Entries Processed: {snapshot.total_processed} (Lifetime: {snapshot.lifetime_processed})",
        f"• Current Rate: {snapshot.current_rate} entries/sec (Peak: {snapshot.peak_rate} entries/sec)",
        f"• Adaptive Window: {snapshot.window_seconds} sec "
        f"(Adjusted from {DEFAULT_WINDOW_SECONDS} sec, {snapshot.phase.value})",
        "",
        "Pattern Analysis:",
        f"• ERROR: {snapshot.error_percent:.2f}% ({snapshot.error_count} entries)",
        f"• INFO: {snapshot.info_percent:.2f}% ({snapshot.info_count} entries)",
        f"• DEBUG: {snapshot.debug_percent:.2f}% ({snapshot.debug_count} entries)",
    ]
    if snapshot.other_count:
        lines.append(f"• OTHER: {snapshot.other_count} entries")

    lines += [
        "",
        "Dynamic Insights:",
        f"• Error Rate: {snapshot.error_rate} errors/sec",
        "• Top Errors:",
    ]
    if snapshot.top_errors:
        for rank, entry in enumerate(snapshot.top_errors, start=1):
            lines.append(f"  {rank}. {entry.message} ({entry.count} occurrences)")
    else:
        lines.append("  (none in window)")

    if debug_mode:
        depth = "n/a" if snapshot.queue_depth is None else snapshot.queue_depth
        lines += [
            "",
            "Debug:",
            f"• Queue Size: {depth}",
            f"• Malformed Lines: {snapshot.malformed_lines}",
            f"• Next Window: {snapshot.next_window_seconds} sec",
        ]

    lines += [RULE, "Press Ctrl+C to exit"]
    return "\n".join(lines)


class TerminalDisplay:
    """
    Consumes snapshots from a publisher and redraws the report.

    Runs in its own thread; one redraw per snapshot.
    """

    def __init__(
        self,
        publisher: SnapshotPublisher,
        debug_mode: bool = False,
        stream: Optional[TextIO] = None,
        clear: bool = True,
    ):
        self.publisher = publisher
        self.debug_mode = debug_mode
        self.stream = stream or sys.stdout
        self.clear = clear
        self.rendered = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def show(self, snapshot: StatsSnapshot) -> None:
        report = render_report(snapshot, debug_mode=self.debug_mode)
        prefix = CLEAR_SCREEN if self.clear else ""
        self.stream.write(f"{prefix}{report}\n")
        self.stream.flush()
        self.rendered += 1

    def run(self) -> None:
        while not self._stop_event.is_set():
            snapshot = self.publisher.next_snapshot(timeout=0.2)
            if snapshot is not None:
                self.show(snapshot)

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run, name="display", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = 1.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
