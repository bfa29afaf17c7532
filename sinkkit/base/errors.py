"""Unified sink error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``sinkkit.base.errors_parts`` to maintain a stable import path while
enforcing the one-class-per-file governance rule.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.timeout_error import SinkTimeoutError
from .errors_parts.cancelled_error import SinkCancelledError
from .errors_parts.classification import classify_exception

__all__ = ["ErrorCode", "SinkTimeoutError", "SinkCancelledError", "classify_exception"]
