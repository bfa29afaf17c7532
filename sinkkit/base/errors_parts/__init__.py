"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `sinkkit.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .timeout_error import SinkTimeoutError
from .cancelled_error import SinkCancelledError
from .classification import classify_exception

__all__ = ["ErrorCode", "SinkTimeoutError", "SinkCancelledError", "classify_exception"]
