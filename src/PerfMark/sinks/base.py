# ============================================================================
# PerfMark - Base Sink Interface
#
# Purpose: Abstract base class for result and diagnostic sinks
# Inputs: BatchResult and Measurement objects
# Outputs: Reported lines (backend specific)
# Dependencies: abc, instrumentation.measurements
# Usage: class MySink(Sink): ...
#
# Changelog:
#   2026-03-02: Initial Sink interface
#   2026-03-06: write_failure() for failed operations
# ============================================================================

from abc import ABC, abstractmethod

from PerfMark.instrumentation.measurements import BatchResult, Measurement


class Sink(ABC):
    """
    Abstract base class for sinks that receive aggregator output.

    The aggregator calls write_result() once per finalized batch,
    write_measurement() for informational measurements while reporting is
    enabled, and write_failure() for operations that raised.
    """

    @abstractmethod
    def write_result(self, result: BatchResult) -> None:
        """
        Report the net duration of a finalized batch.

        Args:
            result: Finalized batch

        Raises:
            SinkError: If the sink cannot report
        """
        pass

    @abstractmethod
    def write_measurement(self, measurement: Measurement) -> None:
        """Report a raw informational measurement."""
        pass

    def write_failure(self, measurement: Measurement) -> None:
        """Report a measurement of an operation that raised. Ignored by default."""
        pass
