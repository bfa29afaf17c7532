"""Cancellation error type.

Defines the public ``SinkCancelledError`` used when a sink is cancelled with a
reason that is not itself an exception. Kept isolated to satisfy
one-class-per-file policy.
"""

from __future__ import annotations

from typing import Any

from .error_code import ErrorCode


class SinkCancelledError(RuntimeError):
    """Raised when a sink settles with a non-exception cancellation reason.

    The original value passed to ``cancel`` is preserved on ``reason`` so
    callers can still branch on it.
    """

    code = ErrorCode.CANCELLED

    def __init__(self, reason: Any = None) -> None:
        super().__init__(str(reason) if reason is not None else "sink cancelled")
        self.reason = reason


__all__ = ["SinkCancelledError"]
