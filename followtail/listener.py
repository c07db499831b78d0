"""Listener interface notified by a Tailer, plus a callback-based adapter."""


class TailerListener:
    """Receives events from a Tailer.

    Every method is a no-op, so subclasses override only what they need.
    All methods except ``on_init`` are called on the tailer's poll thread.
    """

    def on_init(self, tailer):
        """Called once from the Tailer constructor, before polling begins."""

    def on_line(self, line: str):
        """Called for each complete line, without its terminator."""

    def on_file_not_found(self):
        """Called on every failed attempt to open the file."""

    def on_file_rotated(self):
        """Called once per detected rotation or truncation."""

    def on_error(self, error: Exception):
        """Called for a stuck read position or an error that ends the tailer."""

    def on_stop(self):
        """Called once, after the poll loop has exited."""


class CallbackListener(TailerListener):
    """Listener built from plain callables; any of them may be None."""

    def __init__(
        self,
        on_line=None,
        on_file_not_found=None,
        on_file_rotated=None,
        on_error=None,
        on_stop=None,
        on_init=None,
    ):
        self._on_line = on_line
        self._on_file_not_found = on_file_not_found
        self._on_file_rotated = on_file_rotated
        self._on_error = on_error
        self._on_stop = on_stop
        self._on_init = on_init

    def on_init(self, tailer):
        if self._on_init:
            self._on_init(tailer)

    def on_line(self, line: str):
        if self._on_line:
            self._on_line(line)

    def on_file_not_found(self):
        if self._on_file_not_found:
            self._on_file_not_found()

    def on_file_rotated(self):
        if self._on_file_rotated:
            self._on_file_rotated()

    def on_error(self, error: Exception):
        if self._on_error:
            self._on_error(error)

    def on_stop(self):
        if self._on_stop:
            self._on_stop()
