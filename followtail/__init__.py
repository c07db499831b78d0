"""Poll-based file follower: tail -f with rotation detection."""

from followtail.extractor import LineExtractor
from followtail.listener import CallbackListener, TailerListener
from followtail.tailer import IllegalPositionError, Tailer

__all__ = [
    "CallbackListener",
    "IllegalPositionError",
    "LineExtractor",
    "Tailer",
    "TailerListener",
]
