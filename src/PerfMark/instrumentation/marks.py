# ============================================================================
# PerfMark - Mark Registry
#
# Purpose: Record named start timestamps ("marks") for later measurement
# Inputs: Mark ids
# Outputs: Mark records
# Dependencies: dataclasses, threading, utils.time
# Usage: registry.record("op-1"); registry.lookup("op-1")
#
# Changelog:
#   2026-03-02: Initial registry
#   2026-03-06: release() so failed operations do not leave marks behind
# ============================================================================

import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from PerfMark.logging_utils import get_logger
from PerfMark.utils.time import now_ms

logger = get_logger(__name__)


@dataclass(frozen=True)
class Mark:
    """A timestamp (ms) recorded under a correlation id."""
    id: str
    timestamp_ms: float


class MarkRegistry:
    """
    Shared store of start marks.

    Recording an existing id overwrites it (last write wins). Lookups of
    missing ids return None rather than raising; the caller decides what a
    missing mark means.
    """

    def __init__(self, clock: Callable[[], float] = now_ms, lock: Optional[threading.RLock] = None):
        self._clock = clock
        self._lock = lock or threading.RLock()
        self._marks: Dict[str, Mark] = {}

    def record(self, mark_id: str) -> Mark:
        mark = Mark(id=mark_id, timestamp_ms=self._clock())
        with self._lock:
            self._marks[mark_id] = mark
        return mark

    def lookup(self, mark_id: str) -> Optional[Mark]:
        with self._lock:
            return self._marks.get(mark_id)

    def release(self, mark_id: str) -> bool:
        """Remove a single mark. Returns False if it was not present."""
        with self._lock:
            return self._marks.pop(mark_id, None) is not None

    def clear(self) -> None:
        """Remove every mark. Safe to call on an empty registry."""
        with self._lock:
            count = len(self._marks)
            self._marks.clear()
        if count:
            logger.debug(f"Cleared {count} marks")

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._marks)

    def __contains__(self, mark_id: object) -> bool:
        with self._lock:
            return mark_id in self._marks

    def __len__(self) -> int:
        with self._lock:
            return len(self._marks)
