#!/usr/bin/env python3
"""followtail — Entry Point."""

import logging
import signal
import sys
import threading

from followtail.config import load_config
from followtail.listener import TailerListener
from followtail.metrics import MetricsListener, MetricsReporter, TailMetrics
from followtail.tailer import Tailer

logger = logging.getLogger(__name__)


class PrintListener(TailerListener):
    """Writes each line to a stream and logs everything else."""

    def __init__(self, stream=None):
        self._stream = stream or sys.stdout
        self.error: Exception | None = None

    def on_line(self, line: str):
        print(line, file=self._stream, flush=True)

    def on_file_not_found(self):
        logger.warning("Waiting for file to appear...")

    def on_file_rotated(self):
        logger.info("File rotated, reading from the start")

    def on_error(self, error: Exception):
        self.error = error
        logger.error("Tailer error: %s", error)


def main(argv: list[str] | None = None) -> int:
    try:
        config = load_config(argv)
    except ValueError as e:
        print(f"followtail: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        stream=sys.stderr,
    )

    shutdown_event = threading.Event()
    metrics = TailMetrics()
    printer = PrintListener()
    listener = MetricsListener(printer, metrics)
    tailer = Tailer(
        config.path,
        listener,
        delay=config.delay,
        end=config.from_end,
        buffer_size=config.buffer_size,
    )

    def signal_handler(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    reporter = MetricsReporter(metrics, config.metrics_interval, shutdown_event)
    if config.metrics_interval > 0:
        reporter.start()

    thread = tailer.start()
    interrupted = False
    try:
        while not shutdown_event.is_set() and thread.is_alive():
            shutdown_event.wait(0.5)
    except KeyboardInterrupt:
        interrupted = True

    # The tailer only exits by itself after a fatal error.
    failed = not (interrupted or shutdown_event.is_set())

    shutdown_event.set()
    tailer.stop()
    tailer.join(timeout=config.delay + 5)
    # Logs whatever was counted since the last periodic report.
    reporter.stop()

    if failed:
        logger.error("Tailer stopped after a fatal error: %s", printer.error)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
