# ============================================================================
# PerfMark - Performance Context Tests
#
# Purpose: Test PerfContext wrap/operation/timed and the mark/measure API
# ============================================================================

import asyncio

import pytest

from PerfMark.config import Config
from PerfMark.errors import PerfMarkError, UnknownMarkError
from PerfMark.instrumentation.measurements import Tag
from PerfMark.instrumentation.performance import PerfContext
from PerfMark.sinks.log_sink import LogSink


class Boom(Exception):
    pass


# -----------------------------------------------------------------------------
# mark / measure
# -----------------------------------------------------------------------------


def test_mark_then_measure(context, clock):
    context.mark("operation-start")
    clock.advance(40.0)
    m = context.measure("Operation Total Time #results", "operation-start")
    assert m.duration_ms == 40.0
    assert context.aggregator.last_result.net_ms == 40.0


def test_measure_unknown_mark(context):
    with pytest.raises(UnknownMarkError):
        context.measure("nope", "missing")
    assert context.aggregator.overhead_sum_ms == 0.0


def test_failed_measure_does_not_touch_overhead(context, clock):
    context.mark("s")
    clock.advance(1.0)
    context.measure("a #filter", "s")
    with pytest.raises(UnknownMarkError):
        context.measure("b #filter", "missing")
    assert context.aggregator.overhead_sum_ms == 1.0


# -----------------------------------------------------------------------------
# wrap (sync)
# -----------------------------------------------------------------------------


def test_wrap_returns_value_unchanged(context):
    payload = {"rows": [1, 2, 3]}
    assert context.wrap("Fetch data", lambda: payload) is payload


def test_wrap_records_measurement(context, clock, sink):
    context.enable()

    def work():
        clock.advance(3.0)
        return "ok"

    context.wrap("Transform keys", work)

    assert [(m.name, m.duration_ms) for m in sink.measurements] == [("Transform keys", 3.0)]


def test_wrap_overhead_and_terminal_flow(context, clock):
    """Mirrors a typical script: overall mark, a filtered step, then the result."""
    context.mark("operation-start")

    def step(ms):
        def _work():
            clock.advance(ms)
        return _work

    context.wrap("Fetch data from database", step(10.0))
    context.wrap("Compile schema #filter", step(4.0))
    context.wrap("Validate data", step(6.0))
    context.measure("Operation Total Time #results", "operation-start")

    result = context.aggregator.last_result
    assert result.terminal_ms == 20.0
    assert result.net_ms == 16.0
    assert len(context.registry) == 0


def test_wrap_failure_propagates_and_releases_mark(context, sink):
    def work():
        raise Boom("bad row")

    with pytest.raises(Boom, match="bad row"):
        context.wrap("Update database", work)

    assert len(context.registry) == 0
    assert [(m.name, m.tag) for m in sink.failures] == [("Update database", Tag.FAILED)]


def test_wrap_failure_without_failure_records(make_context, sink):
    context = make_context(record_failures=False)

    def work():
        raise Boom()

    with pytest.raises(Boom):
        context.wrap("Update database", work)

    assert len(context.registry) == 0
    assert sink.failures == []


def test_failed_terminal_does_not_finalize(context):
    context.mark("start")

    def work():
        raise Boom()

    with pytest.raises(Boom):
        context.wrap("Total #results", work)

    assert context.aggregator.last_result is None
    assert "start" in context.registry


# -----------------------------------------------------------------------------
# wrap (async)
# -----------------------------------------------------------------------------


def test_wrap_async_returns_awaited_value(context, clock, sink):
    context.enable()

    async def fetch():
        await asyncio.sleep(0)
        clock.advance(7.0)
        return [1, 2]

    async def main():
        return await context.wrap("Fetch data", fetch)

    assert asyncio.run(main()) == [1, 2]
    assert [(m.name, m.duration_ms) for m in sink.measurements] == [("Fetch data", 7.0)]


def test_wrap_async_interleaved_operations_do_not_collide(context, clock, sink):
    context.enable()
    release_first = None

    async def slow():
        await release_first.wait()
        return "slow"

    async def fast():
        clock.advance(2.0)
        return "fast"

    async def main():
        nonlocal release_first
        release_first = asyncio.Event()
        slow_task = asyncio.ensure_future(context.wrap("slow op", slow))
        await asyncio.sleep(0)
        assert len(context.registry) == 1
        fast_value = await context.wrap("fast op", fast)
        clock.advance(3.0)
        release_first.set()
        return fast_value, await slow_task

    assert asyncio.run(main()) == ("fast", "slow")
    assert [(m.name, m.duration_ms) for m in sink.measurements] == [("fast op", 2.0), ("slow op", 5.0)]


def test_wrap_async_failure_releases_mark(context, sink):
    async def work():
        await asyncio.sleep(0)
        raise Boom("rejected")

    async def main():
        await context.wrap("Update database", work)

    with pytest.raises(Boom, match="rejected"):
        asyncio.run(main())

    assert len(context.registry) == 0
    assert [m.name for m in sink.failures] == ["Update database"]


def test_wrap_async_after_batch_clear_raises_unknown_mark(context):
    """A terminal measurement during suspension clears the pending mark."""

    async def main():
        gate = asyncio.Event()

        async def slow():
            await gate.wait()
            return 1

        task = asyncio.ensure_future(context.wrap("slow", slow))
        await asyncio.sleep(0)
        context.wrap("Total #results", lambda: None)
        gate.set()
        await task

    with pytest.raises(UnknownMarkError):
        asyncio.run(main())


# -----------------------------------------------------------------------------
# operation() and timed()
# -----------------------------------------------------------------------------


def test_operation_context_manager(context, clock):
    with context.operation("Build report") as op:
        clock.advance(8.0)
    assert op.measurement.duration_ms == 8.0
    assert op.measurement.tag is Tag.INFORMATIONAL


def test_operation_context_manager_failure(context):
    with pytest.raises(Boom):
        with context.operation("Build report"):
            raise Boom()
    assert len(context.registry) == 0


def test_operation_exit_without_enter_raises(context):
    op = context.operation("Build report")
    with pytest.raises(PerfMarkError, match="without being entered"):
        op.__exit__(None, None, None)
    assert op.measurement is None


def test_async_operation_context_manager(context, clock):
    async def main():
        async with context.operation("Query #filter") as op:
            await asyncio.sleep(0)
            clock.advance(2.0)
        return op

    op = asyncio.run(main())
    assert op.measurement.tag is Tag.OVERHEAD
    assert context.aggregator.overhead_sum_ms == 2.0


def test_timed_decorator_sync_and_async(context, clock, sink):
    context.enable()

    @context.timed()
    def add(a, b):
        clock.advance(1.0)
        return a + b

    @context.timed("async multiply")
    async def mul(a, b):
        clock.advance(2.0)
        return a * b

    assert add(2, 3) == 5
    assert asyncio.run(mul(2, 3)) == 6
    assert add.__name__ == "add"
    names = [m.name for m in sink.measurements]
    assert names[0].endswith("add")
    assert names[1] == "async multiply"


# -----------------------------------------------------------------------------
# Buffered delivery and context isolation
# -----------------------------------------------------------------------------


def test_buffered_context_aggregates_on_flush(make_context, clock):
    context = make_context(delivery="buffered")
    context.mark("start")
    context.wrap("setup #filter", lambda: clock.advance(2.0))
    clock.advance(5.0)
    context.measure("total #results", "start")

    assert context.aggregator.last_result is None
    assert context.flush() == 2
    assert context.aggregator.last_result.net_ms == 5.0
    assert len(context.registry) == 0


def test_contexts_are_independent(clock):
    a = PerfContext.create(clock=clock, sinks=[])
    b = PerfContext.create(clock=clock, sinks=[])
    a.mark("shared-id")
    b.enable()

    assert "shared-id" not in b.registry
    assert a.enabled is False
    assert b.enabled is True


def test_default_sink_uses_reporting_config():
    config = Config()
    config.reporting.precision = 1
    config.reporting.result_label = "Net"
    context = PerfContext.create(config)

    sink = context.aggregator.sinks[0]
    assert isinstance(sink, LogSink)
    assert sink.precision == 1
    assert sink.result_label == "Net"
