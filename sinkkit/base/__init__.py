"""Core sink primitives: the ``Sink`` itself, its error taxonomy and logging."""

from .errors import ErrorCode, SinkCancelledError, SinkTimeoutError, classify_exception
from .sink import Sink, SinkState

__all__ = [
    "Sink",
    "SinkState",
    "ErrorCode",
    "SinkCancelledError",
    "SinkTimeoutError",
    "classify_exception",
]
