"""Timeout error kind raised when a sink wait deadline elapses.

Kept isolated to satisfy one-class-per-file policy.
"""

from __future__ import annotations

from typing import Optional

from .error_code import ErrorCode


class SinkTimeoutError(TimeoutError):
    """Raised (as a settlement reason) when ``Sink.wait`` times out.

    Subclasses the builtin ``TimeoutError`` so generic timeout handlers keep
    working, while ``isinstance(exc, SinkTimeoutError)`` singles out sink
    deadlines from other timeouts.

    Attributes:
        message: Human-readable description of the elapsed deadline.
        timeout_ms: The deadline in milliseconds, when known.
    """

    code = ErrorCode.TIMEOUT

    def __init__(self, message: str, timeout_ms: Optional[float] = None) -> None:
        super().__init__(message)
        self.message = message
        self.timeout_ms = timeout_ms


__all__ = ["SinkTimeoutError"]
