# ============================================================================
# PerfMark - Sinks Package
#
# Purpose: Output backends for aggregated results and diagnostics
# Inputs: None
# Outputs: Public API exports
# Dependencies: None
# Usage: from PerfMark.sinks import Sink, LogSink
#
# Changelog:
#   2026-03-02: Initial sinks package
# ============================================================================

from PerfMark.sinks.base import Sink
from PerfMark.sinks.log_sink import LogSink

__all__ = [
    "Sink",
    "LogSink",
]
