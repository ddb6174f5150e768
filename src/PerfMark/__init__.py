# ============================================================================
# PerfMark - Package Initialization
#
# Purpose: Package-level exports and version information
# Inputs: None
# Outputs: Public API exports
# Dependencies: None
# Usage: from PerfMark import PerfContext, wrap
#
# Changelog:
#   2026-03-02: Initial package setup
# ============================================================================

__version__ = "0.2.0"
__license__ = "Apache-2.0"

from PerfMark.config import Config
from PerfMark.errors import (
    AmbiguousResultError,
    ConfigurationError,
    PerfMarkError,
    SinkError,
    UnknownMarkError,
)
from PerfMark.instrumentation import BatchResult, Measurement, PerfContext, Tag
from PerfMark.perf import (
    disable,
    enable,
    flush,
    get_default_context,
    mark,
    measure,
    set_default_context,
    wrap,
)
from PerfMark.sinks import LogSink, Sink

__all__ = [
    "__version__",
    "AmbiguousResultError",
    "BatchResult",
    "Config",
    "ConfigurationError",
    "LogSink",
    "Measurement",
    "PerfContext",
    "PerfMarkError",
    "Sink",
    "SinkError",
    "Tag",
    "UnknownMarkError",
    "disable",
    "enable",
    "flush",
    "get_default_context",
    "mark",
    "measure",
    "set_default_context",
    "wrap",
]
