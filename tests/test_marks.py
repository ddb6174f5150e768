# ============================================================================
# PerfMark - Id Generator and Mark Registry Tests
# ============================================================================

import threading

from PerfMark.instrumentation.ids import IdGenerator
from PerfMark.instrumentation.marks import Mark, MarkRegistry


# -----------------------------------------------------------------------------
# IdGenerator
# -----------------------------------------------------------------------------


def test_generate_many_ids_are_distinct():
    ids = IdGenerator()
    generated = [ids.generate() for _ in range(10_000)]
    assert len(set(generated)) == len(generated)


def test_generate_from_threads_is_distinct():
    """Ids stay distinct when many threads generate at once."""
    ids = IdGenerator()
    results = []
    lock = threading.Lock()

    def worker():
        local = [ids.generate() for _ in range(2_000)]
        with lock:
            results.extend(local)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 16_000
    assert len(set(results)) == 16_000


def test_separate_generators_do_not_collide():
    a, b = IdGenerator(), IdGenerator()
    first = {a.generate() for _ in range(100)}
    second = {b.generate() for _ in range(100)}
    assert first.isdisjoint(second)


# -----------------------------------------------------------------------------
# MarkRegistry
# -----------------------------------------------------------------------------


def test_record_and_lookup(clock):
    registry = MarkRegistry(clock=clock)
    mark = registry.record("op")
    assert mark == Mark(id="op", timestamp_ms=1000.0)
    assert registry.lookup("op") == mark
    assert "op" in registry
    assert len(registry) == 1


def test_record_overwrites_existing_id(clock):
    """Re-recording an id keeps the latest timestamp."""
    registry = MarkRegistry(clock=clock)
    registry.record("op")
    clock.advance(5.0)
    registry.record("op")
    assert registry.lookup("op").timestamp_ms == 1005.0
    assert len(registry) == 1


def test_lookup_missing_returns_none():
    registry = MarkRegistry()
    assert registry.lookup("never") is None


def test_release_single_mark():
    registry = MarkRegistry()
    registry.record("a")
    registry.record("b")
    assert registry.release("a") is True
    assert registry.release("a") is False
    assert registry.ids() == ["b"]


def test_clear_is_idempotent():
    registry = MarkRegistry()
    registry.record("a")
    registry.clear()
    registry.clear()
    assert len(registry) == 0
    assert registry.lookup("a") is None
