# ============================================================================
# PerfMark - Instrumentation Package
#
# Purpose: Marks, measurements, recording and aggregation
# Inputs: None
# Outputs: Public API exports
# Dependencies: None
# Usage: from PerfMark.instrumentation import PerfContext
#
# Changelog:
#   2026-03-02: Initial instrumentation package
#   2026-03-08: Exported TimedOperation
# ============================================================================

from PerfMark.instrumentation.aggregator import ObserverAggregator
from PerfMark.instrumentation.ids import IdGenerator
from PerfMark.instrumentation.marks import Mark, MarkRegistry
from PerfMark.instrumentation.measurements import BatchResult, Measurement, Tag, classify
from PerfMark.instrumentation.performance import PerfContext, TimedOperation
from PerfMark.instrumentation.recorder import MeasurementRecorder

__all__ = [
    "BatchResult",
    "IdGenerator",
    "Mark",
    "MarkRegistry",
    "Measurement",
    "MeasurementRecorder",
    "ObserverAggregator",
    "PerfContext",
    "Tag",
    "TimedOperation",
    "classify",
]
