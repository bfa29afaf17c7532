"""Pipeline tests: ``push`` dispatch, ``pipe``, ``once`` and ``catch`` stages."""
from __future__ import annotations

import asyncio

import pytest

from sinkkit import Sink, SinkState
from sinkkit.tests.utils import Capture, CountingFinalizer, run


async def _drain() -> None:
    """Let queued pipe tasks run to completion."""
    await asyncio.sleep(0.01)


def test_pipe_preserves_identity():
    async def scenario():
        sink = Sink(Capture())
        assert sink.pipe(lambda v: v) is sink  # nosec B101 - pytest assert in tests
        assert sink.once(lambda v: v) is sink  # nosec B101 - pytest assert in tests
        assert sink.catch(lambda e: None) is sink  # nosec B101 - pytest assert in tests
        await sink.cancel()

    run(scenario())


def test_pipe_chains_sync_and_async_stages():
    async def scenario():
        cap = Capture()
        seen = []

        async def slow_double(v):
            await asyncio.sleep(0)
            return v * 2

        sink = Sink(cap).pipe(slow_double).pipe(lambda v: v + 1).pipe(seen.append)
        cap.push(1)
        cap.push(5)
        await _drain()
        assert sorted(seen) == [3, 11]  # nosec B101 - pytest assert in tests
        assert sink.is_pending  # nosec B101 - pushing does not settle
        await sink.cancel()

    run(scenario())


def test_push_without_chain_is_dropped():
    async def scenario():
        cap = Capture()
        sink = Sink(cap)
        cap.push("ignored")
        await _drain()
        assert sink.is_pending  # nosec B101 - pytest assert in tests
        await sink.cancel()

    run(scenario())


def test_push_from_setup_reaches_empty_chain():
    async def scenario():
        seen = []
        sink = Sink(lambda push, cancel: push(1)).pipe(seen.append)
        await _drain()
        assert seen == []  # nosec B101 - chain attached after setup
        await sink.cancel()

    run(scenario())


def test_stage_failure_cancels_with_that_error():
    async def scenario():
        cap = Capture(CountingFinalizer())
        boom = ValueError("x")

        def fail(v):
            raise boom

        sink = Sink(cap).pipe(fail)
        cap.push(1)
        with pytest.raises(ValueError) as info:
            await sink.wait(1000)
        assert info.value is boom  # nosec B101 - pytest assert in tests
        assert cap.finalizer.calls == 1  # nosec B101 - pytest assert in tests

    run(scenario())


def test_stage_failure_discarded_without_cancel_on_error(sink_events):
    async def scenario():
        cap = Capture()
        seen = []

        def check(v):
            if v < 0:
                raise ValueError("negative")
            return v

        sink = Sink(cap, cancel_on_error=False).pipe(check).pipe(seen.append)
        cap.push(-1)
        cap.push(2)
        await _drain()
        assert seen == [2]  # nosec B101 - pytest assert in tests
        assert sink.is_pending  # nosec B101 - pytest assert in tests
        await sink.cancel()
        await sink.wait()

    run(scenario())
    pipe_events = [e for e in sink_events() if e["event"] == "sink.pipe"]
    assert [e["outcome"] for e in pipe_events] == ["discarded"]  # nosec B101 - pytest assert in tests


def test_cancel_racing_a_push_settles_once():
    async def scenario():
        cap = Capture(CountingFinalizer())
        seen = []
        sink = Sink(cap).pipe(lambda v: v * 2).pipe(seen.append)
        cap.push(1)
        await sink.cancel()
        await _drain()
        assert sink.state is SinkState.FULFILLED  # nosec B101 - pytest assert in tests
        assert cap.finalizer.calls == 1  # nosec B101 - pytest assert in tests
        assert seen in ([], [2])  # nosec B101 - no ordering guarantee against cancel

    run(scenario())


def test_push_after_settlement_has_no_effect():
    async def scenario():
        cap = Capture()
        seen = []
        sink = Sink(cap).pipe(seen.append)
        await sink.cancel()
        cap.push(1)
        await _drain()
        assert seen == []  # nosec B101 - pytest assert in tests
        assert sink.pipe(seen.append) is sink  # nosec B101 - chaining after settlement is inert
        assert sink._pipe_handler is None  # nosec B101 - pytest assert in tests

    run(scenario())


def test_once_consumes_first_value_then_fulfills():
    async def scenario():
        cap = Capture(CountingFinalizer())
        seen = []
        sink = Sink(cap).once(seen.append)
        cap.push(1)
        cap.push(2)
        await sink.wait(1000)
        cap.push(3)
        await _drain()
        assert seen == [1]  # nosec B101 - pytest assert in tests
        assert sink.state is SinkState.FULFILLED  # nosec B101 - pytest assert in tests
        assert cap.finalizer.calls == 1  # nosec B101 - pytest assert in tests

    run(scenario())


def test_once_after_transform_receives_transformed_value():
    async def scenario():
        cap = Capture()
        seen = []
        sink = Sink(cap).pipe(lambda v: v.upper()).once(seen.append)
        cap.push("a")
        await sink.wait(1000)
        assert seen == ["A"]  # nosec B101 - pytest assert in tests

    run(scenario())


def test_catch_recovers_upstream_failure():
    async def scenario():
        cap = Capture()
        seen = []

        def fail(v):
            raise RuntimeError("upstream")

        sink = Sink(cap).pipe(fail).catch(lambda err: "recovered").pipe(seen.append)
        cap.push(1)
        await _drain()
        assert seen == ["recovered"]  # nosec B101 - pytest assert in tests
        assert sink.is_pending  # nosec B101 - absorbed error does not cancel
        await sink.cancel()

    run(scenario())


def test_catch_passes_values_through_and_receives_the_error():
    async def scenario():
        cap = Capture()
        seen = []
        errors = []

        def maybe_fail(v):
            if v == "bad":
                raise KeyError(v)
            return v

        async def recover(err):
            errors.append(err)
            return "fallback"

        sink = Sink(cap).pipe(maybe_fail).catch(recover).pipe(seen.append)
        cap.push("good")
        cap.push("bad")
        await _drain()
        assert sorted(seen) == ["fallback", "good"]  # nosec B101 - pytest assert in tests
        assert len(errors) == 1 and isinstance(errors[0], KeyError)  # nosec B101 - pytest assert in tests
        await sink.cancel()

    run(scenario())


def test_catch_action_failure_propagates_and_cancels():
    async def scenario():
        cap = Capture()

        def fail(v):
            raise RuntimeError("upstream")

        def rethrow(err):
            raise LookupError("not recoverable") from err

        sink = Sink(cap).pipe(fail).catch(rethrow)
        cap.push(1)
        with pytest.raises(LookupError, match="not recoverable"):
            await sink.wait(1000)

    run(scenario())
