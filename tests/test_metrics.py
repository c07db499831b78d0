"""Tests for the metrics module."""

import logging
import threading
import time

from followtail.metrics import MetricsListener, MetricsReporter, TailMetrics
from followtail.tailer import Tailer


class TestTailMetrics:
    def test_record_lines(self):
        m = TailMetrics()
        m.record_line("abcd")
        m.record_line("ab")
        snap = m.snapshot_and_reset()
        assert snap["lines"] == 2
        assert snap["chars"] == 6
        assert snap["avg_line_length"] == 3.0

    def test_record_events(self):
        m = TailMetrics()
        m.record_rotation()
        m.record_not_found()
        m.record_not_found()
        m.record_error()
        snap = m.snapshot_and_reset()
        assert snap["rotations"] == 1
        assert snap["not_found"] == 2
        assert snap["errors"] == 1

    def test_snapshot_resets(self):
        m = TailMetrics()
        m.record_line("x")
        m.record_rotation()
        m.snapshot_and_reset()
        snap = m.snapshot_and_reset()
        assert snap == {
            "lines": 0,
            "chars": 0,
            "avg_line_length": 0.0,
            "rotations": 0,
            "not_found": 0,
            "errors": 0,
        }


class TestMetricsListener:
    def test_counts_and_forwards(self, log_file, listener):
        metrics = TailMetrics()
        wrapped = MetricsListener(listener, metrics)
        tailer = Tailer(log_file, wrapped, delay=0.05)
        assert listener.initialised == 1

        log_file.write_text("one\ntwo\n")
        tailer.open()
        tailer.poll()
        log_file.write_text("")
        tailer.poll()

        assert listener.lines == ["one", "two"]
        assert listener.rotated == 1
        snap = wrapped.metrics.snapshot_and_reset()
        assert snap["lines"] == 2
        assert snap["rotations"] == 1

    def test_not_found_and_errors(self, listener):
        metrics = TailMetrics()
        wrapped = MetricsListener(listener, metrics)
        wrapped.on_file_not_found()
        wrapped.on_error(RuntimeError("x"))
        wrapped.on_stop()
        snap = metrics.snapshot_and_reset()
        assert snap["not_found"] == 1
        assert snap["errors"] == 1
        assert listener.not_found == 1
        assert len(listener.errors) == 1
        assert listener.stopped == 1


class TestMetricsReporter:
    def test_reporter_lifecycle(self, caplog):
        shutdown = threading.Event()
        m = TailMetrics()
        m.record_line("hello")
        reporter = MetricsReporter(m, interval=0.1, shutdown_event=shutdown)
        with caplog.at_level(logging.INFO, logger="followtail.metrics"):
            reporter.start()
            time.sleep(0.3)
            shutdown.set()
            reporter.stop()

        assert "[metrics]" in caplog.text
        assert "lines=1" in caplog.text

    def test_reporter_stops_cleanly(self):
        shutdown = threading.Event()
        reporter = MetricsReporter(TailMetrics(), interval=0.1, shutdown_event=shutdown)
        reporter.start()
        shutdown.set()
        reporter.stop()

    def test_report_returns_and_resets(self):
        m = TailMetrics()
        m.record_line("abc")
        m.record_rotation()
        reporter = MetricsReporter(m, interval=1.0, shutdown_event=threading.Event())
        snap = reporter.report()
        assert snap["lines"] == 1
        assert snap["rotations"] == 1
        assert m.snapshot_and_reset()["lines"] == 0

    def test_idle_interval_logged_at_debug(self, caplog):
        reporter = MetricsReporter(TailMetrics(), interval=1.0, shutdown_event=threading.Event())
        with caplog.at_level(logging.DEBUG, logger="followtail.metrics"):
            reporter.report()
        assert [r.levelno for r in caplog.records] == [logging.DEBUG]

    def test_stop_flushes_final_report(self, caplog):
        m = TailMetrics()
        reporter = MetricsReporter(m, interval=60.0, shutdown_event=threading.Event())
        m.record_not_found()
        with caplog.at_level(logging.INFO, logger="followtail.metrics"):
            reporter.stop()
        assert "not_found=1" in caplog.text
