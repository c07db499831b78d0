"""Line extractor — splits raw byte chunks into lines across buffer boundaries."""

import logging
import re

logger = logging.getLogger(__name__)

# A run of CRs followed by ordinary content collapses to one literal CR.
_CR_RUN = re.compile(rb"\r+(?=[^\r])")


def _fold(segment: bytes) -> str:
    """Apply the CR policy to a segment that holds no LF.

    CRs still pending at the end of the segment are dropped, so both the
    CR of a CRLF pair and a CR that ends a fill never reach the line.
    Bytes map one-to-one onto code points (no multi-byte decoding).
    """
    return _CR_RUN.sub(b"\r", segment).rstrip(b"\r").decode("latin-1")


class LineExtractor:
    """Turns successive buffer fills into complete lines.

    Each completed line is passed to ``emit`` with its terminator stripped.
    Bytes after the last LF of a fill are kept as the remainder and prefixed
    to the first line of the next fill.
    """

    def __init__(self, emit):
        self._emit = emit
        self._remainder = ""

    @property
    def remainder(self) -> str:
        return self._remainder

    def reset(self):
        """Drop any partial line carried from earlier fills."""
        if self._remainder:
            logger.debug("Discarding %d chars of partial line", len(self._remainder))
        self._remainder = ""

    def feed(self, buffer, size: int):
        """Consume the first ``size`` bytes of ``buffer``."""
        if size <= 0:
            return

        *segments, tail = bytes(buffer[:size]).split(b"\n")
        for segment in segments:
            line = self._remainder + _fold(segment)
            self._remainder = ""
            self._emit(line)
        self._remainder += _fold(tail)


def read_lines(stream, buffer: bytearray, extractor: LineExtractor) -> int:
    """Read from ``stream`` into ``buffer`` until a short read.

    Every fill goes through ``extractor``. A fill that uses the whole buffer
    may not have reached the end of the data, so reading continues. Returns
    the stream offset after the last byte consumed.
    """
    view = memoryview(buffer)
    capacity = len(buffer)
    while True:
        count = stream.readinto(view) or 0
        extractor.feed(view, count)
        if count < capacity:
            return stream.tell()
