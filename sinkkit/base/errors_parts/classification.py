"""
Error classification helpers mapping exceptions to normalized ErrorCode values.

Implements type-based mapping for sink errors and common builtin failures,
with message-based heuristics as a fallback for opaque exceptions raised by
user stages and finalizers.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from .cancelled_error import SinkCancelledError
from .error_code import ErrorCode
from .timeout_error import SinkTimeoutError


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:  # pragma: no cover - simple mapping
    """Substring heuristic mapping for exceptions without a known type."""
    PATTERN_GROUPS = (
        (ErrorCode.TIMEOUT, ("timeout",)),
        (ErrorCode.TIMEOUT, ("timed out",)),
        (ErrorCode.CANCELLED, ("cancelled",)),
        (ErrorCode.CANCELLED, ("canceled",)),
        (ErrorCode.VALIDATION, ("invalid",)),
        (ErrorCode.VALIDATION, ("malformed",)),
    )
    for code, patterns in PATTERN_GROUPS:
        if any(p in msg for p in patterns):
            return code
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. Sink error types (their own ``code``).
        2. Timeout exceptions (sync/async).
        3. Task cancellation.
        4. Argument errors (``TypeError`` / ``ValueError``).
        5. Substring heuristics.
        6. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, (SinkTimeoutError, SinkCancelledError)):
        return exc.code
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, asyncio.CancelledError):
        return ErrorCode.CANCELLED
    if isinstance(exc, (TypeError, ValueError)):
        return ErrorCode.VALIDATION
    code = _heuristic_from_message(str(exc).lower())
    return code if code is not None else ErrorCode.UNKNOWN


__all__ = [
    "classify_exception",
]
