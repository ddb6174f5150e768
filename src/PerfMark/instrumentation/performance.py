# ============================================================================
# PerfMark - Performance Context
#
# Purpose: Time named operations (sync or awaitable) and feed the aggregator
# Inputs: Operation names and callables
# Outputs: The callable's own result; measurements to the aggregator
# Dependencies: inspect, threading, ids, marks, recorder, aggregator, sinks
# Usage: ctx = PerfContext.create(); ctx.wrap("Fetch rows", fetch)
#
# Changelog:
#   2026-03-02: Initial context (mark / measure / wrap)
#   2026-03-06: Failed work releases its mark and emits a FAILED measurement
#   2026-03-08: operation() for sync and async with-blocks, timed() decorator
#   2026-03-10: flush() for buffered delivery
# ============================================================================

import functools
import inspect
import threading
from typing import Any, Awaitable, Callable, List, Optional, Type, TypeVar

from PerfMark.config import Config
from PerfMark.errors import PerfMarkError
from PerfMark.instrumentation.aggregator import ObserverAggregator
from PerfMark.instrumentation.ids import IdGenerator
from PerfMark.instrumentation.marks import MarkRegistry
from PerfMark.instrumentation.measurements import Measurement, Tag
from PerfMark.instrumentation.recorder import MeasurementRecorder
from PerfMark.logging_utils import get_logger
from PerfMark.sinks.base import Sink
from PerfMark.sinks.log_sink import LogSink
from PerfMark.utils.time import now_ms

logger = get_logger(__name__)

T = TypeVar("T")


class TimedOperation:
    """
    One timed block, usable as `with` or `async with`.

    The mark is recorded on entry. On a clean exit the measurement is
    recorded and exposed as `.measurement`; on an exception the mark is
    released and the exception propagates.
    """

    def __init__(self, context: "PerfContext", name: str):
        self.context = context
        self.name = name
        self.id: Optional[str] = None
        self.measurement: Optional[Measurement] = None

    def __enter__(self) -> "TimedOperation":
        self.id = self.context._start()
        return self

    def __exit__(self, exc_type: Optional[Type[BaseException]], exc: Any, tb: Any) -> bool:
        if self.id is None:
            raise PerfMarkError(f"Operation '{self.name}' exited without being entered")
        if exc_type is None:
            self.measurement = self.context.recorder.record(self.name, self.id)
        else:
            self.measurement = self.context._fail(self.name, self.id)
        return False

    async def __aenter__(self) -> "TimedOperation":
        return self.__enter__()

    async def __aexit__(self, exc_type: Optional[Type[BaseException]], exc: Any, tb: Any) -> bool:
        return self.__exit__(exc_type, exc, tb)


class PerfContext:
    """
    Owns one mark registry, recorder and aggregator.

    Contexts are independent of each other; the module-level helpers in
    PerfMark.perf use a shared default context. Registry, recorder and
    aggregator share one re-entrant lock so calls from several threads are
    serialized.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        sinks: Optional[List[Sink]] = None,
        clock: Callable[[], float] = now_ms,
    ):
        """
        Args:
            config: Settings; defaults to Config()
            sinks: Result sinks; defaults to a LogSink built from config.reporting
            clock: Millisecond clock for marks and measurements
        """
        self.config = config or Config()
        if sinks is None:
            sinks = [LogSink(precision=self.config.reporting.precision, result_label=self.config.reporting.result_label)]

        self._lock = threading.RLock()
        self.ids = IdGenerator()
        self.registry = MarkRegistry(clock=clock, lock=self._lock)
        self.recorder = MeasurementRecorder(
            self.registry,
            delivery=self.config.perf.delivery,
            clock=clock,
            lock=self._lock,
        )
        self.aggregator = ObserverAggregator(
            self.registry,
            sinks=sinks,
            enabled=self.config.perf.enabled,
            history_limit=self.config.reporting.history_limit,
            lock=self._lock,
        )
        self.recorder.subscribe(self.aggregator.observe)

    @classmethod
    def create(cls, config: Optional[Config] = None, **kwargs: Any) -> "PerfContext":
        return cls(config=config, **kwargs)

    # -----------------------
    # Public API
    # -----------------------
    @property
    def enabled(self) -> bool:
        return self.aggregator.enabled

    def enable(self) -> None:
        """Report informational measurements."""
        self.aggregator.enable()

    def disable(self) -> None:
        """Stop reporting informational measurements. Results are unaffected."""
        self.aggregator.disable()

    def mark(self, mark_id: str) -> None:
        self.registry.record(mark_id)

    def measure(self, name: str, start_id: str) -> Measurement:
        """Measure from mark `start_id` to now and publish it (see MeasurementRecorder.record)."""
        return self.recorder.record(name, start_id)

    def flush(self) -> int:
        """Deliver buffered measurements; a no-op in sync delivery."""
        return self.recorder.flush()

    def wrap(self, name: str, work: Callable[[], Any]) -> Any:
        """
        Time a unit of work and return its result unchanged.

        If `work()` returns an awaitable (e.g. `work` is a coroutine
        function), an awaitable is returned that resolves to the same value
        and records the measurement when it settles.

        If `work` raises, its mark is released, a FAILED measurement is
        emitted when perf.record_failures is set, and the original exception
        propagates.

        Args:
            name: Measurement name (may carry #filter / #results markers)
            work: Zero-argument callable

        Returns:
            The value produced by `work`, or an awaitable of it

        Raises:
            UnknownMarkError: If the mark was cleared before the work finished
        """
        op_id = self._start()
        try:
            value = work()
        except BaseException:
            self._fail(name, op_id)
            raise
        if inspect.isawaitable(value):
            return self._settle(name, op_id, value)
        self.recorder.record(name, op_id)
        return value

    def operation(self, name: str) -> TimedOperation:
        """Time a with-block (sync or async)."""
        return TimedOperation(self, name)

    def timed(self, name: Optional[str] = None) -> Callable[[Callable[..., T]], Callable[..., T]]:
        """Decorator form of wrap(); defaults the name to the function's qualified name."""

        def decorator(func: Callable[..., T]) -> Callable[..., T]:
            op_name = name or func.__qualname__

            if inspect.iscoroutinefunction(func):

                @functools.wraps(func)
                async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                    return await self.wrap(op_name, lambda: func(*args, **kwargs))

                return async_wrapper  # type: ignore[return-value]

            @functools.wraps(func)
            def wrapper(*args: Any, **kwargs: Any) -> T:
                return self.wrap(op_name, lambda: func(*args, **kwargs))

            return wrapper

        return decorator

    # -----------------------
    # Internals
    # -----------------------
    def _start(self) -> str:
        op_id = self.ids.generate()
        self.registry.record(op_id)
        return op_id

    async def _settle(self, name: str, op_id: str, awaitable: Awaitable[T]) -> T:
        try:
            value = await awaitable
        except BaseException:
            self._fail(name, op_id)
            raise
        self.recorder.record(name, op_id)
        return value

    def _fail(self, name: str, op_id: str) -> Optional[Measurement]:
        """Release the mark of a failed operation; never raises over the caller's error."""
        measurement = None
        try:
            if self.config.perf.record_failures:
                measurement = self.recorder.record(name, op_id, tag=Tag.FAILED)
        except PerfMarkError as e:
            logger.warning(f"Could not record failure of '{name}': {e}")
        finally:
            self.registry.release(op_id)
        return measurement
