# ============================================================================
# PerfMark - Log Sink
#
# Purpose: Report batch results and diagnostics through the logging module
# Inputs: BatchResult and Measurement objects
# Outputs: Log records on the PerfMark.sinks.log_sink logger
# Dependencies: base, logging_utils
# Usage: sink = LogSink(precision=3); PerfContext.create(sinks=[sink])
#
# Changelog:
#   2026-03-02: Initial LogSink
#   2026-03-06: Failed operations logged at WARNING
# ============================================================================

import logging
from typing import Optional

from PerfMark.instrumentation.measurements import BatchResult, Measurement
from PerfMark.logging_utils import get_logger
from PerfMark.sinks.base import Sink

logger = get_logger(__name__)


class LogSink(Sink):
    """
    Sink that writes one log line per result or diagnostic.

    Result lines read "<result_label> <net>" with the net formatted to
    `precision` decimals; diagnostic lines read "<name> <duration>".
    """

    def __init__(
        self,
        precision: int = 3,
        result_label: str = "Result Time (ms)",
        log: Optional[logging.Logger] = None,
    ):
        """
        Initialize log sink.

        Args:
            precision: Decimal places for durations
            result_label: Prefix of the per-batch result line
            log: Logger to write to (defaults to this module's logger)
        """
        self.precision = precision
        self.result_label = result_label
        self.log = log or logger

    def _fmt(self, ms: float) -> str:
        return f"{ms:.{self.precision}f}"

    def write_result(self, result: BatchResult) -> None:
        self.log.info(f"{self.result_label} {self._fmt(result.net_ms)}")

    def write_measurement(self, measurement: Measurement) -> None:
        self.log.info(f"{measurement.name} {self._fmt(measurement.duration_ms)}")

    def write_failure(self, measurement: Measurement) -> None:
        self.log.warning(f"{measurement.name} failed after {self._fmt(measurement.duration_ms)} ms")
