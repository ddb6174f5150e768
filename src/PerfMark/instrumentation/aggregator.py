# ============================================================================
# PerfMark - Observer Aggregator
#
# Purpose: Classify published measurements and compute the net batch result
# Inputs: Measurement batches from MeasurementRecorder
# Outputs: BatchResult per finalized batch, diagnostics to sinks
# Dependencies: threading, marks, measurements, sinks
# Usage: recorder.subscribe(aggregator.observe)
#
# Changelog:
#   2026-03-02: Initial aggregator (overhead sum, terminal finalization)
#   2026-03-06: Failed measurements forwarded to sinks, never aggregated
#   2026-03-09: AmbiguousResultError on a second terminal within one batch
#   2026-03-10: Result history and build_summary_dict()
# ============================================================================

import threading
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Sequence

from PerfMark.errors import AmbiguousResultError, SinkError
from PerfMark.instrumentation.marks import MarkRegistry
from PerfMark.instrumentation.measurements import BatchResult, Measurement, Tag
from PerfMark.logging_utils import get_logger
from PerfMark.sinks.base import Sink
from PerfMark.utils.time import get_utc_timestamp

logger = get_logger(__name__)


class ObserverAggregator:
    """
    Consumes measurements in arrival order.

    - OVERHEAD: added to the running overhead sum, never reported on its own.
    - TERMINAL: finalizes the batch (net = duration - overhead sum), reports
      the result, clears the mark registry and resets the overhead sum.
    - INFORMATIONAL: reported as a raw line only while `enabled` is True.
    - FAILED: reported as a failure line; never part of the aggregate.

    `enabled` gates informational reporting only; the computed result is the
    same either way.
    """

    def __init__(
        self,
        registry: MarkRegistry,
        sinks: Optional[List[Sink]] = None,
        enabled: bool = False,
        history_limit: Optional[int] = 100,
        lock: Optional[threading.RLock] = None,
    ):
        self.registry = registry
        self.sinks: List[Sink] = list(sinks or [])
        self.enabled = enabled
        self._lock = lock or threading.RLock()
        self._overhead_sum_ms = 0.0
        self._overhead_count = 0
        self._results: Deque[BatchResult] = deque(maxlen=history_limit)

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    @property
    def overhead_sum_ms(self) -> float:
        return self._overhead_sum_ms

    @property
    def results(self) -> List[BatchResult]:
        """Finalized batches, oldest first (bounded by history_limit)."""
        return list(self._results)

    @property
    def last_result(self) -> Optional[BatchResult]:
        return self._results[-1] if self._results else None

    def observe(self, batch: Sequence[Measurement]) -> Optional[BatchResult]:
        """
        Process a batch of measurements in order.

        The registry is cleared once, after the whole batch, if any terminal
        measurement finalized it. A second terminal in the same batch is
        skipped; the remaining measurements are still processed before the
        error is raised.

        Returns:
            The BatchResult finalized by this batch, or None

        Raises:
            AmbiguousResultError: If the batch held more than one terminal
            SinkError: If a sink failed while reporting
        """
        finalized: Optional[BatchResult] = None
        rejected: Optional[Measurement] = None
        sink_errors: List[Exception] = []

        with self._lock:
            try:
                for measurement in batch:
                    if measurement.tag is Tag.TERMINAL:
                        if finalized is not None:
                            rejected = rejected or measurement
                            logger.error(f"Rejected second result measurement '{measurement.name}'")
                            continue
                        finalized = self._finalize(measurement)
                        self._emit(sink_errors, lambda s, r=finalized: s.write_result(r))
                    elif measurement.tag is Tag.OVERHEAD:
                        self._overhead_sum_ms += measurement.duration_ms
                        self._overhead_count += 1
                    elif measurement.tag is Tag.FAILED:
                        self._emit(sink_errors, lambda s, m=measurement: s.write_failure(m))
                    elif self.enabled:
                        self._emit(sink_errors, lambda s, m=measurement: s.write_measurement(m))
            finally:
                if finalized is not None:
                    self.registry.clear()

        if rejected is not None:
            raise AmbiguousResultError(
                rejected.name,
                details=f"batch was already finalized by '{finalized.terminal_name}'" if finalized else None,
            )
        if sink_errors:
            raise SinkError("Sink failed while reporting", details=str(sink_errors[0])) from sink_errors[0]
        return finalized

    def build_summary_dict(self) -> Dict[str, Any]:
        """JSON-serializable view of the finalized batches."""
        results = self.results
        nets = [r.net_ms for r in results]
        out: Dict[str, Any] = {
            "batches": [r.to_dict() for r in results],
            "pending_overhead_ms": round(self._overhead_sum_ms, 2),
        }
        if nets:
            out["net_ms"] = {
                "count": len(nets),
                "min_ms": round(min(nets), 2),
                "max_ms": round(max(nets), 2),
                "avg_ms": round(sum(nets) / len(nets), 2),
            }
        return out

    def _finalize(self, terminal: Measurement) -> BatchResult:
        result = BatchResult(
            terminal_name=terminal.name,
            terminal_ms=terminal.duration_ms,
            overhead_ms=self._overhead_sum_ms,
            overhead_count=self._overhead_count,
            net_ms=terminal.duration_ms - self._overhead_sum_ms,
            completed_at_utc=get_utc_timestamp(),
        )
        self._results.append(result)
        self._overhead_sum_ms = 0.0
        self._overhead_count = 0
        logger.debug(f"Finalized batch '{terminal.name}': net={result.net_ms:.3f}ms")
        return result

    def _emit(self, errors: List[Exception], write: Callable[[Sink], None]) -> None:
        for sink in self.sinks:
            try:
                write(sink)
            except Exception as e:
                logger.exception(f"Sink {type(sink).__name__} failed")
                errors.append(e)
