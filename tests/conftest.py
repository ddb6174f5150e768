# ============================================================================
# PerfMark - Test Configuration and Fixtures
#
# Purpose: Shared pytest fixtures for testing
# Inputs: None
# Outputs: Fixtures for use in tests
# Dependencies: pytest
# Usage: pytest tests/ (fixtures are automatically available)
#
# Changelog:
#   2026-03-02: Initial fake clock, recording sink and context fixtures
# ============================================================================

from typing import List

import pytest

from PerfMark.config import Config
from PerfMark.instrumentation.measurements import BatchResult, Measurement
from PerfMark.instrumentation.performance import PerfContext
from PerfMark.sinks.base import Sink


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class RecordingSink(Sink):
    """Sink that keeps everything it is given."""

    def __init__(self):
        self.results: List[BatchResult] = []
        self.measurements: List[Measurement] = []
        self.failures: List[Measurement] = []

    def write_result(self, result: BatchResult) -> None:
        self.results.append(result)

    def write_measurement(self, measurement: Measurement) -> None:
        self.measurements.append(measurement)

    def write_failure(self, measurement: Measurement) -> None:
        self.failures.append(measurement)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_context(clock, sink):
    """Build a PerfContext on the fake clock and recording sink; accepts config overrides."""

    def _make(**perf_overrides) -> PerfContext:
        config = Config()
        for key, value in perf_overrides.items():
            setattr(config.perf, key, value)
        return PerfContext.create(config, sinks=[sink], clock=clock)

    return _make


@pytest.fixture
def context(make_context):
    return make_context()
