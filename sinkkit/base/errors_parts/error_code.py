"""
Normalized sink error codes (taxonomy).

Defines the `ErrorCode` enumeration attached to sink error types and to
structured log events. Values are lowercase snake_case and are considered a
stable public contract for logging and analytics.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
