"""Shared testing utilities for sink tests.

Exports:
    - Capture: setup callable that records the capabilities a sink hands it.
    - run(coro): drive a coroutine to completion on a fresh event loop.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")


class Capture:
    """Setup callable recording ``push``/``cancel`` and returning a finalizer.

    Tests call ``capture.push(value)`` after building the chain, since values
    pushed from inside setup reach an empty chain and are dropped.
    """

    def __init__(self, finalizer: Optional[Callable[[], Any]] = None) -> None:
        self.finalizer = finalizer
        self.calls = 0
        self.push: Any = None
        self.cancel: Any = None

    def __call__(self, push, cancel):
        self.calls += 1
        self.push = push
        self.cancel = cancel
        return self.finalizer


class CountingFinalizer:
    """Finalizer that counts invocations and optionally sleeps or raises."""

    def __init__(self, delay: float = 0.0, error: Optional[Exception] = None) -> None:
        self.delay = delay
        self.error = error
        self.calls = 0

    async def __call__(self) -> None:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error


def run(coro: Awaitable[T]) -> T:
    """Run ``coro`` with ``asyncio.run`` (tests stay synchronous functions)."""
    return asyncio.run(coro)  # type: ignore[arg-type]


__all__ = ["Capture", "CountingFinalizer", "run"]
