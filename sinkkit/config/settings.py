"""Validated runtime settings for sinks and their logging.

External dependencies
---------------------
- Pydantic v2 ``BaseModel`` for validation and `.model_dump()` convenience.

Failure modes & side effects
----------------------------
- Pure data container: no I/O side effects. Validation errors are raised by
  Pydantic when values are of incorrect types or an unknown level name is
  supplied directly; the environment loader in ``sinkkit.config`` falls back
  to defaults instead.
"""
from __future__ import annotations

from pydantic import BaseModel, field_validator

from .defaults import (
    SINK_DEFAULT_CANCEL_ON_ERROR,
    SINK_DEFAULT_LOG_JSON,
    SINK_DEFAULT_LOG_LEVEL,
)

LOG_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SinkSettings(BaseModel):
    """Process-wide sink settings.

    Attributes
    ----------
    cancel_on_error:
        Default for ``Sink(cancel_on_error=None)``: whether a failing pipe
        stage cancels the sink with that failure as the reason.
    log_level:
        Level name for the shared ``sinkkit`` logger.
    log_json:
        Whether the managed console handler emits JSON lines.
    """

    model_config = {"frozen": True}

    cancel_on_error: bool = SINK_DEFAULT_CANCEL_ON_ERROR
    log_level: str = SINK_DEFAULT_LOG_LEVEL
    log_json: bool = SINK_DEFAULT_LOG_JSON

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        name = value.strip().upper()
        if name == "WARN":
            name = "WARNING"
        if name not in LOG_LEVEL_NAMES:
            raise ValueError(f"unknown log level: {value!r}")
        return name


__all__ = ["SinkSettings", "LOG_LEVEL_NAMES"]
