"""
Integration tests for the live pipeline.

Tests end-to-end flow from raw lines through reader threads, the ingestion
queue and the aggregation thread to published snapshots. A short tick keeps
the tests fast.
"""

import io
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

import pytest

from src.aggregation import AggregationEngine, SnapshotPublisher, StatsSnapshot, StreamPipeline
from src.core.exceptions import SourceUnavailable
from src.data.ingestion import FollowFileSource, StdinSource

TICK = 0.1
FROZEN = datetime(2025, 2, 7, 10, 30, 0, tzinfo=timezone.utc)


def _collect_until(
    publisher: SnapshotPublisher,
    predicate: Callable[[StatsSnapshot], bool],
    timeout: float = 3.0,
) -> List[StatsSnapshot]:
    """Drain snapshots until one satisfies predicate or the timeout passes."""
    received: List[StatsSnapshot] = []
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        snapshot = publisher.next_snapshot(timeout=0.1)
        if snapshot is None:
            continue
        received.append(snapshot)
        if predicate(snapshot):
            break
    return received


def _frozen_engine() -> AggregationEngine:
    """Engine whose clock never moves, so nothing ages out mid-test."""
    return AggregationEngine(clock=lambda: FROZEN)


@pytest.mark.integration
class TestFullPipeline:
    """Test end-to-end pipeline from raw lines to snapshots."""

    def test_stdin_lines_to_snapshot(self, make_line):
        """Valid lines are counted and the malformed one is skipped."""
        lines = [make_line(FROZEN, "INFO", f"request {i}") for i in range(10)]
        lines.insert(3, "too short")
        stream = io.StringIO("\n".join(lines) + "\n")

        publisher = SnapshotPublisher()
        pipeline = StreamPipeline(
            [StdinSource(stream)],
            publisher=publisher,
            engine=_frozen_engine(),
            tick_seconds=TICK,
        )
        pipeline.start()
        try:
            received = _collect_until(
                publisher,
                lambda s: s.total_processed == 10 and s.malformed_lines == 1,
            )
        finally:
            pipeline.stop()
            pipeline.join(timeout=2.0)

        assert received, "no snapshots published"
        last = received[-1]
        assert last.total_processed == 10
        assert last.malformed_lines == 1
        assert last.info_count == 10
        assert pipeline.fatal_error is None

    def test_snapshots_in_tick_order(self):
        publisher = SnapshotPublisher()
        pipeline = StreamPipeline([StdinSource(io.StringIO(""))], publisher=publisher, tick_seconds=TICK)
        pipeline.start()
        try:
            received = _collect_until(publisher, lambda s: s.sequence >= 4)
        finally:
            pipeline.stop()
            pipeline.join(timeout=2.0)

        sequences = [s.sequence for s in received]
        assert sequences == list(range(1, len(sequences) + 1))
        assert len(sequences) >= 4

    def test_followed_file_and_errors(self, tmp_path, make_line):
        """Lines appended to a followed file reach the top-errors list."""
        path = tmp_path / "app.log"
        path.write_text(make_line(FROZEN, "ERROR", "Connection timeout") + "\n", encoding="utf-8")

        publisher = SnapshotPublisher()
        pipeline = StreamPipeline(
            [FollowFileSource(path, poll_interval=0.02)],
            publisher=publisher,
            engine=_frozen_engine(),
            tick_seconds=TICK,
        )
        pipeline.start()
        try:
            with open(path, "a", encoding="utf-8") as f:
                for _ in range(2):
                    f.write(make_line(FROZEN, "ERROR", "Connection timeout") + "\n")
                f.write(make_line(FROZEN, "ERROR", "Disk full") + "\n")

            received = _collect_until(publisher, lambda s: s.lifetime_processed == 4)
        finally:
            pipeline.stop()
            pipeline.join(timeout=2.0)

        last = received[-1]
        assert last.lifetime_processed == 4
        assert [(e.message, e.count) for e in last.top_errors][:1] == [("Connection timeout", 3)]

    def test_multiple_sources_interleave(self, tmp_path, make_line):
        first = tmp_path / "a.log"
        second = tmp_path / "b.log"
        first.write_text("\n".join(make_line(FROZEN, "INFO", f"a{i}") for i in range(5)) + "\n")
        second.write_text("\n".join(make_line(FROZEN, "DEBUG", f"b{i}") for i in range(7)) + "\n")

        publisher = SnapshotPublisher()
        pipeline = StreamPipeline(
            [FollowFileSource(first, poll_interval=0.02), FollowFileSource(second, poll_interval=0.02)],
            publisher=publisher,
            engine=_frozen_engine(),
            tick_seconds=TICK,
        )
        pipeline.start()
        try:
            received = _collect_until(publisher, lambda s: s.lifetime_processed == 12)
        finally:
            pipeline.stop()
            pipeline.join(timeout=2.0)

        last = received[-1]
        assert last.lifetime_processed == 12
        assert last.info_count + last.debug_count == last.total_processed

    def test_debug_mode_reports_queue_depth(self):
        publisher = SnapshotPublisher()
        pipeline = StreamPipeline(
            [StdinSource(io.StringIO(""))],
            publisher=publisher,
            debug_mode=True,
            tick_seconds=TICK,
        )
        pipeline.start()
        try:
            snapshot: Optional[StatsSnapshot] = publisher.next_snapshot(timeout=2.0)
        finally:
            pipeline.stop()
            pipeline.join(timeout=2.0)

        assert snapshot is not None
        assert snapshot.queue_depth == 0

    def test_missing_source_is_fatal(self, tmp_path):
        pipeline = StreamPipeline(
            [FollowFileSource(tmp_path / "missing.log")],
            tick_seconds=TICK,
        )
        pipeline.start()

        assert pipeline.wait(timeout=2.0)
        pipeline.join(timeout=2.0)

        assert isinstance(pipeline.fatal_error, SourceUnavailable)
        assert pipeline.stopped

    def test_shared_engine_is_used(self):
        engine = AggregationEngine()
        pipeline = StreamPipeline([StdinSource(io.StringIO(""))], engine=engine)

        assert pipeline.engine is engine
        with pytest.raises(ValueError):
            StreamPipeline([])
