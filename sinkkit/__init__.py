"""sinkkit package

Cancelable, pipelined asynchronous task wrapper for asyncio.

Purpose:
    Give a long-running, side-effect-producing asynchronous operation (a
    subscription, a stream consumer, a timed operation) deterministic
    lifecycle and cleanup semantics: values are pushed through a chain of
    stages, a finalizer runs exactly once, and one future settles exactly
    once with success or the terminating failure.

Public API (re-exported):
    - Version: ``__version__``
    - Primitive: :class:`Sink`, :class:`SinkState`
    - Exceptions: :class:`SinkTimeoutError`, :class:`SinkCancelledError`,
      :class:`ErrorCode`, :func:`classify_exception`
    - Configuration: :class:`SinkSettings`, :func:`get_settings`
    - Logging: :func:`get_logger`, :func:`configure_logger`
"""

from .config import SinkSettings, get_settings
from .base.errors import (
    ErrorCode,
    SinkCancelledError,
    SinkTimeoutError,
    classify_exception,
)
from .base.logging import configure_logger, get_logger
from .base.sink import Sink, SinkState

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Primitive
    "Sink",
    "SinkState",
    # Exceptions
    "ErrorCode",
    "SinkCancelledError",
    "SinkTimeoutError",
    "classify_exception",
    # Configuration
    "SinkSettings",
    "get_settings",
    # Logging
    "get_logger",
    "configure_logger",
]
