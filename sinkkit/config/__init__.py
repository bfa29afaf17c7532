"""Unified configuration layer for sinks.

Goals
-----
* Centralize defaults (see ``defaults.py``).
* Merge sources in a predictable order:
    1. Built-in defaults
    2. Environment variables (``SINK_CANCEL_ON_ERROR``, ``SINK_LOG_LEVEL``,
       ``SINK_LOG_JSON``)
* Provide a single call site: ``get_settings()``.

Settings are cached per process and recomputed only when one of the
environment variables above changes, so tests can adjust them at runtime
with ``monkeypatch.setenv``.

Public API
----------
* get_settings() -> SinkSettings
* reset_settings_cache() -> None
"""
from __future__ import annotations

import os
from typing import Optional

from pydantic import ValidationError

from .defaults import (
    ENV_CANCEL_ON_ERROR,
    ENV_LOG_JSON,
    ENV_LOG_LEVEL,
    SINK_DEFAULT_CANCEL_ON_ERROR,
    SINK_DEFAULT_LOG_JSON,
    SINK_DEFAULT_LOG_LEVEL,
)
from .settings import SinkSettings

_CACHED: SinkSettings | None = None
# Last seen env values; a change triggers a refresh of the cache.
_ENV_GUARD: str | None = None

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_env_bool(name: str, default: bool) -> bool:
    """Parse an environment variable as a boolean flag.

    Returns the default if the variable is unset or not a recognised
    true/false spelling.
    """
    raw = os.getenv(name)
    if not raw:
        return default
    val = raw.strip().lower()
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    return default


def _env_guard() -> str:
    return "/".join(os.getenv(n, "") for n in (ENV_CANCEL_ON_ERROR, ENV_LOG_LEVEL, ENV_LOG_JSON))


def get_settings() -> SinkSettings:
    """Return process-cached `SinkSettings` instance."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - intentional, documented module cache
    cur_guard = _env_guard()
    if _CACHED is not None and _ENV_GUARD == cur_guard:
        return _CACHED

    level: Optional[str] = os.getenv(ENV_LOG_LEVEL) or SINK_DEFAULT_LOG_LEVEL
    try:
        settings = SinkSettings(
            cancel_on_error=_parse_env_bool(ENV_CANCEL_ON_ERROR, SINK_DEFAULT_CANCEL_ON_ERROR),
            log_level=level,
            log_json=_parse_env_bool(ENV_LOG_JSON, SINK_DEFAULT_LOG_JSON),
        )
    except ValidationError:
        settings = SinkSettings(
            cancel_on_error=_parse_env_bool(ENV_CANCEL_ON_ERROR, SINK_DEFAULT_CANCEL_ON_ERROR),
            log_json=_parse_env_bool(ENV_LOG_JSON, SINK_DEFAULT_LOG_JSON),
        )

    _CACHED = settings
    _ENV_GUARD = cur_guard
    return _CACHED


def reset_settings_cache() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603
    _CACHED = None
    _ENV_GUARD = None


__all__ = ["SinkSettings", "get_settings", "reset_settings_cache"]
