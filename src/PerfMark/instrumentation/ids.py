# ============================================================================
# PerfMark - Correlation Ids
#
# Purpose: Collision-resistant ids that pair a start mark with its measurement
# Inputs: None
# Outputs: Unique id strings
# Dependencies: uuid, itertools
# Usage: ids = IdGenerator(); op_id = ids.generate()
#
# Changelog:
#   2026-03-02: Initial id generator (random base + counter)
# ============================================================================

import itertools
import uuid


class IdGenerator:
    """
    Random 128-bit base per instance plus an increasing counter suffix.

    next() on itertools.count is atomic under the GIL, so threads never block
    each other and never observe the same value. Two generators never collide
    because their bases differ.
    """

    def __init__(self):
        self._base = uuid.uuid4().hex
        self._counter = itertools.count()

    def generate(self) -> str:
        return f"{self._base}-{next(self._counter)}"
