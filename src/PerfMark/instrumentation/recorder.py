# ============================================================================
# PerfMark - Measurement Recorder
#
# Purpose: Turn a start mark into a Measurement and publish it to observers
# Inputs: Measurement name, start mark id
# Outputs: Measurement events delivered to subscribers
# Dependencies: threading, collections, marks, measurements
# Usage: recorder.subscribe(aggregator.observe); recorder.record("load", op_id)
#
# Changelog:
#   2026-03-02: Initial synchronous recorder
#   2026-03-10: Buffered delivery mode with flush()
# ============================================================================

import threading
from collections import deque
from typing import Callable, Deque, List, Literal, Optional, Sequence

from PerfMark.errors import UnknownMarkError
from PerfMark.instrumentation.marks import MarkRegistry
from PerfMark.instrumentation.measurements import Measurement, Tag, classify
from PerfMark.logging_utils import get_logger
from PerfMark.utils.time import now_ms

logger = get_logger(__name__)

Observer = Callable[[Sequence[Measurement]], None]
Delivery = Literal["sync", "buffered"]


class MeasurementRecorder:
    """
    Computes elapsed time since a mark and publishes the result.

    In "sync" delivery every subscriber has seen the measurement before
    record() returns. In "buffered" delivery measurements queue until flush(),
    which hands the whole queue to each subscriber as one batch.
    """

    def __init__(
        self,
        registry: MarkRegistry,
        delivery: Delivery = "sync",
        clock: Callable[[], float] = now_ms,
        lock: Optional[threading.RLock] = None,
    ):
        self.registry = registry
        self.delivery = delivery
        self._clock = clock
        self._lock = lock or threading.RLock()
        self._observers: List[Observer] = []
        self._pending: Deque[Measurement] = deque()

    def subscribe(self, observer: Observer) -> None:
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def record(self, name: str, start_id: str, tag: Optional[Tag] = None) -> Measurement:
        """
        Measure from the mark recorded under start_id to now.

        Args:
            name: Measurement name (may carry #filter / #results markers)
            start_id: Id of a mark in the registry
            tag: Explicit tag; classified from the name when omitted

        Returns:
            The published Measurement

        Raises:
            UnknownMarkError: If start_id is not in the registry
        """
        with self._lock:
            mark = self.registry.lookup(start_id)
            if mark is None:
                raise UnknownMarkError(start_id, details=f"measurement '{name}' was not recorded")
            measurement = Measurement(
                name=name,
                duration_ms=self._clock() - mark.timestamp_ms,
                tag=tag if tag is not None else classify(name),
            )
            if self.delivery == "buffered":
                self._pending.append(measurement)
            else:
                self._publish([measurement])
        return measurement

    def flush(self) -> int:
        """Deliver queued measurements. Returns how many were delivered."""
        with self._lock:
            if not self._pending:
                return 0
            batch = list(self._pending)
            self._pending.clear()
            self._publish(batch)
        logger.debug(f"Flushed {len(batch)} buffered measurements")
        return len(batch)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def _publish(self, batch: Sequence[Measurement]) -> None:
        for observer in list(self._observers):
            observer(batch)
