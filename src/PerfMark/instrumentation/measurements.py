# ============================================================================
# PerfMark - Measurements and Tags
#
# Purpose: Immutable measurement records and name-based classification
# Inputs: Measurement names and durations
# Outputs: Measurement, Tag, BatchResult
# Dependencies: dataclasses, enum
# Usage: Measurement.from_name("Compile schema #filter", 1.2)
#
# Changelog:
#   2026-03-02: Initial measurement model
#   2026-03-06: Tag.FAILED for operations that raised
#   2026-03-09: BatchResult for finalized batches
#   2026-03-14: Untagged measurements are classified from their name
# ============================================================================

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

# Name markers understood by existing callers. Matching is case-insensitive.
OVERHEAD_MARKER = "#filter"
TERMINAL_MARKER = "#results"


class Tag(Enum):
    OVERHEAD = "overhead"
    TERMINAL = "terminal"
    INFORMATIONAL = "informational"
    FAILED = "failed"


def classify(name: str) -> Tag:
    """Derive a tag from a measurement name. The overhead marker is checked first."""
    lowered = name.lower()
    if OVERHEAD_MARKER in lowered:
        return Tag.OVERHEAD
    if TERMINAL_MARKER in lowered:
        return Tag.TERMINAL
    return Tag.INFORMATIONAL


@dataclass(frozen=True)
class Measurement:
    """A named duration in milliseconds. Without an explicit tag, the name decides it."""
    name: str
    duration_ms: float
    tag: Optional[Tag] = None

    def __post_init__(self) -> None:
        if self.tag is None:
            object.__setattr__(self, "tag", classify(self.name))

    @classmethod
    def from_name(cls, name: str, duration_ms: float) -> "Measurement":
        return cls(name=name, duration_ms=duration_ms, tag=classify(name))


@dataclass(frozen=True)
class BatchResult:
    """Net duration of one finalized batch: terminal minus the sum of overheads."""
    terminal_name: str
    terminal_ms: float
    overhead_ms: float
    overhead_count: int
    net_ms: float
    completed_at_utc: str

    def to_dict(self, ndigits: int = 2) -> Dict[str, Any]:
        return {
            "name": self.terminal_name,
            "terminal_ms": round(self.terminal_ms, ndigits),
            "overhead_ms": round(self.overhead_ms, ndigits),
            "overhead_count": self.overhead_count,
            "net_ms": round(self.net_ms, ndigits),
            "completed_at_utc": self.completed_at_utc,
        }
