"""Thread-safe tailer counters and periodic reporting."""

import logging
import threading

from followtail.listener import TailerListener

logger = logging.getLogger(__name__)


class TailMetrics:
    """Thread-safe counters for tailer events."""

    def __init__(self):
        self._lock = threading.Lock()
        self._lines = 0
        self._chars = 0
        self._rotations = 0
        self._not_found = 0
        self._errors = 0

    def record_line(self, line: str):
        with self._lock:
            self._lines += 1
            self._chars += len(line)

    def record_rotation(self):
        with self._lock:
            self._rotations += 1

    def record_not_found(self):
        with self._lock:
            self._not_found += 1

    def record_error(self):
        with self._lock:
            self._errors += 1

    def snapshot_and_reset(self) -> dict:
        """Atomically read all counters and reset them to zero."""
        with self._lock:
            snapshot = {
                "lines": self._lines,
                "chars": self._chars,
                "avg_line_length": self._chars / self._lines if self._lines else 0.0,
                "rotations": self._rotations,
                "not_found": self._not_found,
                "errors": self._errors,
            }

            self._lines = 0
            self._chars = 0
            self._rotations = 0
            self._not_found = 0
            self._errors = 0

            return snapshot


class MetricsListener(TailerListener):
    """Counts events into a TailMetrics and forwards them to another listener."""

    def __init__(self, delegate: TailerListener, metrics: TailMetrics):
        self._delegate = delegate
        self._metrics = metrics

    @property
    def metrics(self) -> TailMetrics:
        return self._metrics

    def on_init(self, tailer):
        self._delegate.on_init(tailer)

    def on_line(self, line: str):
        self._metrics.record_line(line)
        self._delegate.on_line(line)

    def on_file_not_found(self):
        self._metrics.record_not_found()
        self._delegate.on_file_not_found()

    def on_file_rotated(self):
        self._metrics.record_rotation()
        self._delegate.on_file_rotated()

    def on_error(self, error: Exception):
        self._metrics.record_error()
        self._delegate.on_error(error)

    def on_stop(self):
        self._delegate.on_stop()


class MetricsReporter:
    """Logs a summary of tailer activity every ``interval`` seconds.

    Intervals with no events are logged at debug level only. stop() logs
    whatever was counted since the last report.
    """

    def __init__(
        self,
        metrics: TailMetrics,
        interval: float,
        shutdown_event: threading.Event,
    ):
        self._metrics = metrics
        self._interval = interval
        self._shutdown = shutdown_event
        self._thread: threading.Thread | None = None

    def start(self):
        self._thread = threading.Thread(target=self._run, name="tail-metrics", daemon=True)
        self._thread.start()

    def stop(self):
        """Wait for the reporter thread to exit, then flush a final report."""
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None
        self.report()

    def report(self) -> dict:
        """Log and reset the counters. Returns the snapshot that was logged."""
        snapshot = self._metrics.snapshot_and_reset()
        idle = not any(
            snapshot[key] for key in ("lines", "rotations", "not_found", "errors")
        )
        logger.log(
            logging.DEBUG if idle else logging.INFO,
            "[metrics] lines=%d avg_len=%.1f rotations=%d not_found=%d errors=%d",
            snapshot["lines"],
            snapshot["avg_line_length"],
            snapshot["rotations"],
            snapshot["not_found"],
            snapshot["errors"],
        )
        return snapshot

    def _run(self):
        while not self._shutdown.wait(self._interval):
            self.report()
