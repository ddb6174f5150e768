# ============================================================================
# PerfMark - Time Utilities
#
# Purpose: Clocks used by marks and batch results
# Inputs: None
# Outputs: Timestamps
# Dependencies: datetime, time
# Usage: ts = now_ms(); stamp = get_utc_timestamp()
#
# Changelog:
#   2026-03-02: Initial time utilities
#   2026-03-04: now_ms() monotonic clock for marks
# ============================================================================

import time
from datetime import datetime, timezone


def now_ms() -> float:
    """Monotonic high-resolution clock in milliseconds (sub-millisecond precision)."""
    return time.perf_counter() * 1000


def get_utc_timestamp() -> str:
    """
    Get current UTC timestamp in ISO-8601 format.

    Returns:
        ISO-8601 formatted timestamp string (e.g., "2026-01-11T15:22:08Z")
    """
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
