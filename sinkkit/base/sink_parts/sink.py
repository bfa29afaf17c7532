"""Cancelable, pipelined asynchronous task wrapper.

Exposes the ``Sink`` class: a producer pushes values into a chain of stages
built with ``pipe`` / ``once`` / ``catch``; a finalizer returned by the setup
callable runs exactly once on cancellation; and ``wait`` hands every caller
the same settlement future.

Failure Modes
-------------
- Setup raising: the settlement future is rejected with that exception.
- Stage failing: with ``cancel_on_error`` the sink is cancelled with the
  failure as reason, otherwise the failure is logged at DEBUG and dropped.
- Finalizer failing with a reason: logged, the reason still rejects the sink.
- Finalizer failing without a reason: the sink fulfills, but the future
  returned by that ``cancel()`` call fails with the finalizer error.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, Set, TypeVar, Union, cast

from ...config import get_settings
from ..errors import SinkCancelledError, SinkTimeoutError
from ..logging import LogContext, get_logger, normalized_log_event
from .state import SinkState

A = TypeVar("A")
B = TypeVar("B")

Finalizer = Callable[[], Optional[Awaitable[Any]]]
PipeHandler = Callable[[Any], Awaitable[Any]]
PushFn = Callable[[Any], None]
CancelFn = Callable[..., "asyncio.Future[None]"]
Setup = Callable[[PushFn, CancelFn], Optional[Finalizer]]

logger = get_logger("sinkkit.sink")

_SINK_IDS = itertools.count(1)


async def _resolve(result: Any) -> Any:
    """Await ``result`` when it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(result):
        return await result
    return result


def _as_exception(reason: Any) -> BaseException:
    """Return an exception suitable for ``Future.set_exception``."""
    if isinstance(reason, Exception):
        return reason
    err = SinkCancelledError(reason)
    if isinstance(reason, BaseException):
        err.__cause__ = reason
    return err


def _format_ms(timeout_ms: float) -> str:
    return str(int(timeout_ms)) if float(timeout_ms).is_integer() else str(timeout_ms)


class Sink(Generic[A]):
    """A cancelable asynchronous operation with a pipeline of stages.

    ``setup(push, cancel)`` runs synchronously inside the constructor. It may
    return a finalizer (sync or async callable) which runs exactly once when
    the sink is cancelled, whoever triggers it. The only way to settle a
    sink is :meth:`cancel`; timeouts, failing stages and ``once`` all route
    through it.

    The value type ``A`` only types the chain; produced values are never
    returned to the creator. ``pipe``, ``once`` and ``catch`` mutate the one
    owned handler slot and return ``self`` retyped, so cancellation state,
    finalizer and settlement future are shared across the chain.

    A sink is bound to one event loop: ``loop`` if given, else the running
    loop at construction. It is not thread-safe.
    """

    def __init__(
        self,
        setup: Setup,
        cancel_on_error: Optional[bool] = None,
        *,
        name: Optional[str] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        if not callable(setup):
            raise TypeError(f"setup must be callable, got {type(setup).__name__}")
        self._loop = loop or asyncio.get_running_loop()
        if cancel_on_error is None:
            cancel_on_error = get_settings().cancel_on_error
        self._cancel_on_error = bool(cancel_on_error)
        self.name = name
        self._ctx = LogContext(sink=name, sink_id=next(_SINK_IDS))

        self._state = SinkState.PENDING
        self._settlement: asyncio.Future[None] = self._loop.create_future()
        self._settlement.add_done_callback(self._on_settlement_done)
        self._finalizer: Optional[Finalizer] = None
        self._pipe_handler: Optional[PipeHandler] = None
        self._stages = 0
        self._coordination: Optional[asyncio.Task[None]] = None
        self._cancelling: Optional[asyncio.Future[None]] = None
        self._wait_timer: Optional[asyncio.TimerHandle] = None
        self._pipe_tasks: Set[asyncio.Task[Any]] = set()

        try:
            finalizer = setup(self._on_pipe, self.cancel)
        except Exception as exc:
            normalized_log_event(
                logger, "sink.setup", self._ctx,
                phase="setup", outcome="failed", error=exc, level=logging.WARNING,
            )
            self._settle(exc)
            return
        self._finalizer = finalizer if callable(finalizer) else None

    # Status ----------------------------------------------------------------
    @property
    def is_pending(self) -> bool:  # noqa: D401 - short form
        """Whether the sink has not settled yet."""
        return not self._state.settled

    @property
    def state(self) -> SinkState:  # noqa: D401 - short form
        """Current lifecycle state."""
        return self._state

    @property
    def cancel_on_error(self) -> bool:  # noqa: D401 - short form
        """Whether a failing stage cancels the sink."""
        return self._cancel_on_error

    # API -------------------------------------------------------------------
    def wait(self, timeout_ms: Optional[float] = None, error_on_timeout: bool = True) -> asyncio.Future[None]:
        """Return the settlement future, optionally (re)arming a deadline.

        A positive ``timeout_ms`` replaces any previous deadline; when it
        elapses before settlement the sink is cancelled with a
        :class:`SinkTimeoutError`, or gracefully if ``error_on_timeout`` is
        false. Every call returns the same future.

        The future is shared, so cancelling it (for example when a task
        awaiting it is cancelled, or via ``asyncio.wait_for``) cancels the
        sink for every waiter. Await ``asyncio.shield(sink.wait())`` when only
        the waiting side should be abandoned.
        """
        if self.is_pending and timeout_ms is not None and timeout_ms > 0:
            self._clear_wait_timer()
            self._wait_timer = self._loop.call_later(
                timeout_ms / 1000.0, self._on_wait_timeout, timeout_ms, error_on_timeout
            )
        return self._settlement

    def cancel(self, reason: Any = None) -> asyncio.Future[None]:
        """Cancel the sink, running the finalizer once, and settle it.

        Concurrent calls share the in-flight cancellation; calls after
        settlement return a completed future and do nothing. ``reason=None``
        fulfills the sink, anything else rejects it with that reason
        (non-exceptions are wrapped in :class:`SinkCancelledError`).

        The returned future shields the coordination: cancelling it abandons
        the wait but never interrupts the finalizer or settles the sink.
        """
        if self._coordination is not None:
            if self._cancelling is None or self._cancelling.cancelled():
                self._cancelling = asyncio.shield(self._coordination)
            return self._cancelling
        if not self.is_pending:
            done: asyncio.Future[None] = self._loop.create_future()
            done.set_result(None)
            return done

        # The finalizer may run long; the deadline no longer applies.
        self._clear_wait_timer()
        self._state = SinkState.CANCELLING
        normalized_log_event(
            logger, "sink.cancel", self._ctx,
            phase="cancel", outcome="requested",
            error=reason if isinstance(reason, BaseException) else None,
            reason=None if isinstance(reason, BaseException) else reason,
            level=logging.DEBUG,
        )
        self._coordination = self._loop.create_task(self._coordinate_cancel(reason))
        self._cancelling = asyncio.shield(self._coordination)
        return self._cancelling

    def pipe(self, action: Callable[[A], Union[Awaitable[B], B]]) -> "Sink[B]":
        """Append a stage that maps each value through ``action``."""
        prev = self._pipe_handler

        async def handler(value: Any) -> Any:
            if prev is not None:
                value = await prev(value)
            return await _resolve(action(value))

        return self._install(handler)

    def once(self, action: Callable[[A], Union[Awaitable[B], B]]) -> "Sink[B]":
        """Append a stage that consumes one value, then cancels gracefully."""
        prev = self._pipe_handler
        consumed = False

        async def handler(value: Any) -> None:
            nonlocal consumed
            if prev is not None:
                value = await prev(value)
            if consumed:
                return None
            await _resolve(action(value))
            consumed = True
            await self.cancel()
            return None

        return self._install(handler)

    def catch(self, action: Callable[[Exception], Union[Awaitable[B], B]]) -> "Sink[B]":
        """Append a stage that recovers from upstream failures via ``action``."""
        prev = self._pipe_handler

        async def handler(value: Any) -> Any:
            try:
                return await prev(value) if prev is not None else value
            except Exception as exc:
                return await _resolve(action(exc))

        return self._install(handler)

    # Internals -------------------------------------------------------------
    def _install(self, handler: PipeHandler) -> "Sink[Any]":
        if self.is_pending:
            self._pipe_handler = handler
            self._stages += 1
        return cast("Sink[Any]", self)

    def _on_pipe(self, value: A) -> None:
        handler = self._pipe_handler
        if handler is None or not self.is_pending:
            return
        task = self._loop.create_task(handler(value))
        self._pipe_tasks.add(task)
        task.add_done_callback(self._on_pipe_done)

    def _on_pipe_done(self, task: asyncio.Task[Any]) -> None:
        self._pipe_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        if self._cancel_on_error:
            self._cancel_detached(exc)
        else:
            normalized_log_event(
                logger, "sink.pipe", self._ctx,
                phase="pipe", outcome="discarded", error=exc, level=logging.DEBUG,
            )

    def _on_wait_timeout(self, timeout_ms: float, error_on_timeout: bool) -> None:
        self._wait_timer = None
        reason = (
            SinkTimeoutError(f"Timeout of {_format_ms(timeout_ms)}ms exceeded.", timeout_ms=timeout_ms)
            if error_on_timeout
            else None
        )
        normalized_log_event(
            logger, "sink.timeout", self._ctx,
            phase="wait", outcome="timeout", error=reason, timeout_ms=timeout_ms,
        )
        self._cancel_detached(reason)

    async def _coordinate_cancel(self, reason: Any) -> None:
        finalizer, self._finalizer = self._finalizer, None
        try:
            if finalizer is not None:
                await _resolve(finalizer())
        except Exception as exc:
            if reason is None:
                raise
            normalized_log_event(
                logger, "sink.finalizer", self._ctx,
                phase="finalize", outcome="failed", error=exc, level=logging.ERROR,
            )
        finally:
            self._settle(reason)
            self._release()

    def _cancel_detached(self, reason: Any) -> None:
        """Cancel from an internal path, retrieving and logging the outcome."""
        self.cancel(reason).add_done_callback(self._log_detached_outcome)

    def _log_detached_outcome(self, fut: asyncio.Future[None]) -> None:
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            normalized_log_event(
                logger, "sink.cancel.detached", self._ctx,
                phase="cancel", outcome="failed", error=exc, level=logging.WARNING,
            )

    def _settle(self, reason: Any) -> None:
        fut = self._settlement
        if not fut.done():
            if reason is None:
                fut.set_result(None)
            else:
                fut.set_exception(_as_exception(reason))
        if self._state.settled:
            return
        rejected = reason is not None or fut.cancelled()
        self._state = SinkState.REJECTED if rejected else SinkState.FULFILLED
        self._clear_wait_timer()
        normalized_log_event(
            logger, "sink.settle", self._ctx,
            phase="settle", outcome=self._state.value,
            error=reason if isinstance(reason, BaseException) else None,
            level=logging.DEBUG,
        )

    def _on_settlement_done(self, fut: asyncio.Future[None]) -> None:
        # A waiter cancelled the shared future (e.g. asyncio.wait_for); the
        # finalizer still has to run.
        if fut.cancelled() and self._state is SinkState.PENDING:
            self._cancel_detached(SinkCancelledError("settlement future was cancelled"))

    def _release(self) -> None:
        self._coordination = None
        self._cancelling = None
        self._finalizer = None
        self._pipe_handler = None

    def _clear_wait_timer(self) -> None:
        if self._wait_timer is not None:
            self._wait_timer.cancel()
            self._wait_timer = None

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"Sink(name={self.name!r}, state={self._state.value}, stages={self._stages})"


__all__ = ["Sink", "Finalizer", "Setup"]
