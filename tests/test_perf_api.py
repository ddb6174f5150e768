# ============================================================================
# PerfMark - Module-level API Tests
#
# Purpose: Test the default-context helpers exported by the package
# ============================================================================

import asyncio

import pytest

import PerfMark
from PerfMark.instrumentation.performance import PerfContext


@pytest.fixture
def default_context(clock, sink):
    context = PerfContext.create(sinks=[sink], clock=clock)
    PerfMark.set_default_context(context)
    yield context
    PerfMark.set_default_context(None)


def test_default_context_is_created_lazily():
    PerfMark.set_default_context(None)
    try:
        first = PerfMark.get_default_context()
        assert PerfMark.get_default_context() is first
    finally:
        PerfMark.set_default_context(None)


def test_module_level_flow(default_context, clock, sink):
    PerfMark.enable()
    PerfMark.mark("operation-start")

    PerfMark.wrap("Compile schema #filter", lambda: clock.advance(5.0))
    PerfMark.wrap("Compile schema (cached)", lambda: clock.advance(1.0))
    value = PerfMark.wrap("Convert", lambda: "converted")
    clock.advance(4.0)
    PerfMark.measure("Operation Total Time #results", "operation-start")

    assert value == "converted"
    assert [r.net_ms for r in sink.results] == [5.0]
    assert [m.name for m in sink.measurements] == ["Compile schema (cached)", "Convert"]
    assert len(default_context.registry) == 0


def test_module_level_disable(default_context, sink):
    PerfMark.enable()
    PerfMark.disable()
    PerfMark.wrap("quiet", lambda: None)
    assert sink.measurements == []
    assert default_context.enabled is False


def test_module_level_async_wrap(default_context):
    async def work():
        return 42

    async def main():
        return await PerfMark.wrap("async work", work)

    assert asyncio.run(main()) == 42


def test_module_level_flush_noop_in_sync_mode(default_context):
    assert PerfMark.flush() == 0
