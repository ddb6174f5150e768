# ============================================================================
# PerfMark - Utils Package
#
# Purpose: Shared utility functions
# Inputs: None
# Outputs: Public API exports
# Dependencies: None
# Usage: from PerfMark.utils import now_ms, get_utc_timestamp
#
# Changelog:
#   2026-03-02: Initial utils package
# ============================================================================

from PerfMark.utils.serialization import serialize_summary_to_json
from PerfMark.utils.time import get_utc_timestamp, now_ms

__all__ = ["serialize_summary_to_json", "get_utc_timestamp", "now_ms"]
