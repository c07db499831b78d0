"""Polling tailer — follows a growing file like ``tail -f``.

A Tailer owns one open handle and a byte cursor. Each poll cycle compares the
file length with the cursor:

- shorter: the file was rotated or truncated, reopen and start over at 0
- longer: read the new bytes and hand complete lines to the listener
- equal: nothing to do

Usage::

    tailer = Tailer("/var/log/app.log", MyListener(), delay=0.5)
    tailer.start()
    ...
    tailer.stop()
"""

import logging
import os
import threading

from followtail.extractor import LineExtractor, read_lines

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 1.0
DEFAULT_BUFFER_SIZE = 1024


class IllegalPositionError(RuntimeError):
    """The file grew but a read made no progress from the current cursor."""


class Tailer:
    """Follows changes in a file and reports each new line to a listener.

    Args:
        path: File to follow. It does not have to exist yet.
        listener: A TailerListener (or anything with the same methods).
        delay: Seconds to wait between polls.
        end: Start at the end of the file instead of the beginning.
        buffer_size: Size in bytes of the reusable read buffer.
    """

    def __init__(
        self,
        path,
        listener,
        delay: float = DEFAULT_DELAY,
        end: bool = False,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        if delay <= 0:
            raise ValueError(f"delay must be positive, got {delay!r}")
        if buffer_size <= 0:
            raise ValueError(f"buffer_size must be positive, got {buffer_size!r}")

        self._path = os.fspath(path)
        self._listener = listener
        self._delay = delay
        self._end = end
        self._buffer_size = buffer_size
        self._buffer = bytearray(buffer_size)
        self._extractor = LineExtractor(listener.on_line)

        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._started = False
        self._thread: threading.Thread | None = None

        self._file = None
        self._position = 0
        self._force_rotation = False

        listener.on_init(self)

    @property
    def path(self) -> str:
        return self._path

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def end(self) -> bool:
        return self._end

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    @property
    def position(self) -> int:
        """Byte offset up to which lines have been delivered."""
        return self._position

    @property
    def running(self) -> bool:
        return not self._stop_event.is_set()

    # -- control ---------------------------------------------------------

    def start(self, daemon: bool = True) -> threading.Thread:
        """Run the poll loop on a new thread and return that thread."""
        self._claim()
        name = f"tailer-{os.path.basename(self._path)}"
        self._thread = threading.Thread(target=self._run, name=name, daemon=daemon)
        self._thread.start()
        return self._thread

    def stop(self):
        """Ask the poll loop to finish its current cycle and exit.

        Does not wait; use join() for that.
        """
        self._stop_event.set()

    def join(self, timeout: float | None = None):
        """Wait for the thread created by start() to exit."""
        if self._thread:
            self._thread.join(timeout)

    def run(self):
        """Poll the file on the calling thread until stop() is called."""
        self._claim()
        self._run()

    # -- poll loop -------------------------------------------------------

    def open(self) -> bool:
        """Try to open the file once. Returns True on success.

        The cursor starts at 0, or at the current length when tailing from
        the end.
        """
        if not self._open_file():
            return False
        self._position = os.fstat(self._file.fileno()).st_size if self._end else 0
        self._file.seek(self._position)
        logger.debug("Opened %s at offset %d", self._path, self._position)
        return True

    def poll(self) -> bool:
        """Run one poll cycle. Returns True if the caller should sleep."""
        if self._file is None:
            return not self._reopen()

        length = self._length()

        if self._force_rotation or length < self._position:
            logger.info(
                "File rotated: %s (length=%d, position=%d)",
                self._path, length, self._position,
            )
            self._listener.on_file_rotated()
            self._force_rotation = False
            self._close_file()
            self._extractor.reset()
            return not self._reopen()

        if length > self._position:
            old_position = self._position
            position = read_lines(self._file, self._buffer, self._extractor)
            if position == old_position:
                logger.warning(
                    "No progress reading %s at offset %d (length=%d), forcing rotation",
                    self._path, old_position, length,
                )
                self._listener.on_error(
                    IllegalPositionError("Illegal position, try rotating...")
                )
                self._force_rotation = True
                return False
            self._position = position

        return True

    def _run(self):
        logger.info("Tailing %s (delay=%.3fs, end=%s)", self._path, self._delay, self._end)
        try:
            while self.running and self._file is None:
                if not self.open():
                    self._sleep()

            while self.running:
                if self.poll():
                    self._sleep()
        except Exception as e:
            logger.exception("Tailer for %s failed", self._path)
            try:
                self._listener.on_error(e)
            except Exception:
                logger.exception("Listener on_error failed for %s", self._path)
        finally:
            self._close_file()
            logger.info("Stopped tailing %s at offset %d", self._path, self._position)
            try:
                self._listener.on_stop()
            except Exception:
                logger.exception("Listener on_stop failed for %s", self._path)

    def _open_file(self) -> bool:
        try:
            self._file = open(self._path, "rb", buffering=0)
        except FileNotFoundError:
            logger.debug("File not found: %s", self._path)
            self._listener.on_file_not_found()
            return False
        return True

    def _reopen(self) -> bool:
        # After a rotation the new file is always read from the top.
        if not self._open_file():
            return False
        self._position = 0
        logger.debug("Reopened %s", self._path)
        return True

    def _claim(self):
        with self._lock:
            if self._started:
                raise RuntimeError("Tailer has already been started")
            self._started = True

    def _sleep(self):
        # A stop request wakes the wait early.
        self._stop_event.wait(self._delay)

    def _length(self) -> int:
        try:
            return os.path.getsize(self._path)
        except FileNotFoundError:
            return 0

    def _close_file(self):
        if self._file is None:
            return
        try:
            self._file.close()
        except OSError as e:
            logger.debug("Ignoring error closing %s: %s", self._path, e)
        self._file = None
