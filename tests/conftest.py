"""Shared pytest fixtures for the followtail test suite."""

import threading

import pytest

from followtail.listener import TailerListener


class RecordingListener(TailerListener):
    """Records every event a Tailer reports."""

    def __init__(self):
        self._lock = threading.Lock()
        self.lines: list[str] = []
        self.errors: list[Exception] = []
        self.initialised = 0
        self.not_found = 0
        self.rotated = 0
        self.stopped = 0
        self.tailer = None

    def on_init(self, tailer):
        self.initialised += 1
        self.tailer = tailer

    def on_line(self, line):
        with self._lock:
            self.lines.append(line)

    def on_file_not_found(self):
        self.not_found += 1

    def on_file_rotated(self):
        self.rotated += 1

    def on_error(self, error):
        self.errors.append(error)

    def on_stop(self):
        self.stopped += 1

    def get_lines(self) -> list[str]:
        with self._lock:
            return list(self.lines)


@pytest.fixture()
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture()
def log_file(tmp_path):
    """Path of an empty file to tail."""
    f = tmp_path / "test.log"
    f.write_bytes(b"")
    return f
