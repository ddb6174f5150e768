# ============================================================================
# PerfMark - Default Context Helpers
#
# Purpose: Module-level enable/disable/mark/measure/wrap on a shared context
# Inputs: Operation names and callables
# Outputs: Same as the PerfContext methods
# Dependencies: config, instrumentation.performance
# Usage: from PerfMark import perf; perf.wrap("Fetch rows", fetch)
#
# Changelog:
#   2026-03-02: Initial default-context helpers
#   2026-03-10: flush() helper
# ============================================================================

import threading
from typing import Any, Callable, Optional

from PerfMark.config import Config
from PerfMark.instrumentation.measurements import Measurement
from PerfMark.instrumentation.performance import PerfContext

_default_context: Optional[PerfContext] = None
_default_lock = threading.Lock()


def get_default_context() -> PerfContext:
    """Return the shared context, creating it from the default config on first use."""
    global _default_context
    with _default_lock:
        if _default_context is None:
            _default_context = PerfContext.create(Config.from_default())
        return _default_context


def set_default_context(context: Optional[PerfContext]) -> None:
    """Replace the shared context. None makes the next call build a fresh one."""
    global _default_context
    with _default_lock:
        _default_context = context


def enable() -> None:
    get_default_context().enable()


def disable() -> None:
    get_default_context().disable()


def mark(mark_id: str) -> None:
    get_default_context().mark(mark_id)


def measure(name: str, start_id: str) -> Measurement:
    return get_default_context().measure(name, start_id)


def wrap(name: str, work: Callable[[], Any]) -> Any:
    return get_default_context().wrap(name, work)


def flush() -> int:
    return get_default_context().flush()
