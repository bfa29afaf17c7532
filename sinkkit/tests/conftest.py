"""Pytest configuration for the sinkkit test suite.

Isolates each test from sink environment variables and the process-cached
settings, and restores the shared ``sinkkit`` logger after every test so
level or handler changes do not leak between tests.
"""

from __future__ import annotations

import io
import json
import logging
from typing import Callable, Iterator, List

import pytest

from sinkkit.base.log_support import JsonFormatter
from sinkkit.base.logging import BASE_LOGGER_NAME, get_logger
from sinkkit.config import reset_settings_cache

_SINK_ENV = ("SINK_CANCEL_ON_ERROR", "SINK_LOG_LEVEL", "SINK_LOG_JSON")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Clear sink env vars and the settings cache around each test."""

    for name in _SINK_ENV:
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture(autouse=True)
def restore_base_logger(isolated_settings) -> Iterator[None]:
    """Re-point the managed console handler at the current stderr and restore state after."""

    base = get_logger()
    handlers = list(base.handlers)
    level = base.level
    yield
    base.handlers[:] = handlers
    base.setLevel(level)
    for h in handlers:
        h.setLevel(level)


@pytest.fixture()
def sink_events() -> Iterator[Callable[[], List[dict]]]:
    """Capture every ``sinkkit`` log record as parsed JSON, down to DEBUG."""

    base = logging.getLogger(BASE_LOGGER_NAME)
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    handler.setLevel(logging.DEBUG)
    base.handlers[:] = [handler]
    base.setLevel(logging.DEBUG)

    def events() -> List[dict]:
        handler.flush()
        return [json.loads(line) for line in stream.getvalue().splitlines() if line]

    yield events
