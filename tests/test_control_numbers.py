import json
import threading
from pathlib import Path

import pytest

from control_numbers import (
    MAX_CONTROL_NUMBER,
    ControlNumberAllocator,
    ControlNumberOverflowError,
    InMemoryControlNumberStore,
    JsonFileControlNumberStore,
)

pytestmark = pytest.mark.unit

def test_allocations_are_zero_padded_and_increasing(allocator: ControlNumberAllocator):
    assert allocator.allocate("interchange") == "000000001"
    assert allocator.allocate("interchange") == "000000002"
    assert allocator.allocate("interchange") == "000000003"

def test_counters_are_independent(allocator: ControlNumberAllocator):
    allocator.allocate("interchange")
    allocator.allocate("interchange")
    assert allocator.allocate("group") == "000000001"
    assert allocator.allocate("transaction") == "000000001"
    assert allocator.snapshot() == {"interchange": 3, "group": 2, "transaction": 2}

def test_unknown_kind_is_rejected(allocator: ControlNumberAllocator):
    with pytest.raises(ValueError):
        allocator.allocate("segment")

def test_set_counters_merges_partial_values(allocator: ControlNumberAllocator):
    allocator.set_counters({"interchange": 500})
    assert allocator.allocate("interchange") == "000000500"
    assert allocator.allocate("group") == "000000001"

@pytest.mark.parametrize("counters", [{"group": 0}, {"group": -3}, {"group": "7"}, {"bogus": 4}])
def test_set_counters_validates_before_merging(allocator: ControlNumberAllocator, counters):
    with pytest.raises(ValueError):
        allocator.set_counters(counters)
    assert allocator.snapshot() == {"interchange": 1, "group": 1, "transaction": 1}

def test_reset_returns_all_counters_to_one(allocator: ControlNumberAllocator):
    allocator.set_counters({"interchange": 42, "transaction": 9})
    allocator.reset()
    assert allocator.allocate("interchange") == "000000001"
    assert allocator.allocate("transaction") == "000000001"

def test_overflow_past_nine_digits(allocator: ControlNumberAllocator):
    allocator.set_counters({"transaction": MAX_CONTROL_NUMBER})
    assert allocator.allocate("transaction") == "999999999"
    with pytest.raises(ControlNumberOverflowError):
        allocator.allocate("transaction")

def test_concurrent_allocation_never_repeats():
    allocator = ControlNumberAllocator()
    results = []
    lock = threading.Lock()

    def worker():
        for _ in range(50):
            number = allocator.allocate("interchange")
            with lock:
                results.append(number)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 400
    assert len(set(results)) == 400
    assert allocator.snapshot()["interchange"] == 401

def test_in_memory_store_is_loaded():
    store = InMemoryControlNumberStore({"group": 77})
    allocator = ControlNumberAllocator(store)
    assert allocator.allocate("group") == "000000077"
    assert store.load()["group"] == 78

def test_json_store_persists_between_allocators(tmp_path: Path):
    path = tmp_path / "state" / "control_numbers.json"

    first = ControlNumberAllocator(JsonFileControlNumberStore(str(path)))
    assert first.allocate("interchange") == "000000001"
    assert first.allocate("interchange") == "000000002"
    assert json.loads(path.read_text())["interchange"] == 3

    resumed = ControlNumberAllocator(JsonFileControlNumberStore(str(path)))
    assert resumed.allocate("interchange") == "000000003"
    assert resumed.allocate("group") == "000000001"

def test_json_store_missing_file_starts_fresh(tmp_path: Path):
    store = JsonFileControlNumberStore(str(tmp_path / "missing.json"))
    assert store.load() == {}
    assert ControlNumberAllocator(store).allocate("transaction") == "000000001"
