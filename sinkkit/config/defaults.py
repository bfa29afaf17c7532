"""sinkkit.config.defaults
=======================

Central place for small, stable default values used across the sinkkit
package. These defaults can be overridden via environment variables, but
provide sensible fallbacks for local development and tests.

This module intentionally avoids importing from other sinkkit packages to
prevent circular dependencies. Only plain constants should live here.
"""

from __future__ import annotations

# ---- Sink behaviour ----

# Whether a failing pipe stage cancels the sink when the caller does not say.
SINK_DEFAULT_CANCEL_ON_ERROR = True

# ---- Logging ----

# Base logger level name for the shared ``sinkkit`` logger.
SINK_DEFAULT_LOG_LEVEL = "INFO"
# Emit JSON lines (True) or plain text (False).
SINK_DEFAULT_LOG_JSON = True

# ---- Environment variable names ----

ENV_CANCEL_ON_ERROR = "SINK_CANCEL_ON_ERROR"
ENV_LOG_LEVEL = "SINK_LOG_LEVEL"
ENV_LOG_JSON = "SINK_LOG_JSON"


__all__ = [
    "SINK_DEFAULT_CANCEL_ON_ERROR",
    "SINK_DEFAULT_LOG_LEVEL",
    "SINK_DEFAULT_LOG_JSON",
    "ENV_CANCEL_ON_ERROR",
    "ENV_LOG_LEVEL",
    "ENV_LOG_JSON",
]
