import itertools
import random

import pytest

from pqbench.partitioner import MAX_WORKERS, AssignmentStrategy, Partitioner, partition


def _slot_of(parts):
    owner = {}
    for p in parts:
        for d in p.descriptors:
            owner.setdefault(d.host, set()).add(p.slot)
    return owner


@pytest.mark.parametrize("strategy", list(AssignmentStrategy))
@pytest.mark.parametrize("workers", [1, 2, 3, 7, MAX_WORKERS])
def test_host_affinity(make_descriptors, strategy, workers):
    rng = random.Random(workers)
    hosts = [f"host_{rng.randint(0, 12):06d}" for _ in range(200)]
    parts = partition(make_descriptors(*hosts), workers, strategy)

    assert all(len(slots) == 1 for slots in _slot_of(parts).values())


def test_every_descriptor_once_in_arrival_order(make_descriptors):
    descriptors = make_descriptors("a", "b", "a", "c", "b", "a", "d")
    parts = partition(descriptors, 2)

    flattened = list(itertools.chain.from_iterable(p.descriptors for p in parts))
    assert sorted(flattened, key=descriptors.index) == descriptors
    assert len(flattened) == len(descriptors)
    for p in parts:
        positions = [descriptors.index(d) for d in p.descriptors]
        assert positions == sorted(positions)


def test_round_robin_over_distinct_hosts(make_descriptors):
    parts = partition(make_descriptors("a", "a", "b", "c", "d", "b"), 3)

    assert [p.hosts for p in parts] == [["a", "d"], ["b"], ["c"]]
    assert [len(p) for p in parts] == [3, 2, 1]


def test_round_robin_wraps_regardless_of_load(make_descriptors):
    # "a" is heavy, yet "c" still lands on slot 0 after the cursor wraps
    hosts = ["a"] * 5 + ["b", "c"]
    parts = partition(make_descriptors(*hosts), 2)

    assert parts[0].hosts == ["a", "c"]
    assert parts[1].hosts == ["b"]


def test_least_loaded_picks_lightest_slot(make_descriptors):
    hosts = ["a"] * 5 + ["b", "c"]
    parts = partition(make_descriptors(*hosts), 2, AssignmentStrategy.LEAST_LOADED)

    assert parts[0].hosts == ["a"]
    assert parts[1].hosts == ["b", "c"]


def test_empty_slots_are_pruned(make_descriptors):
    parts = partition(make_descriptors("a", "b"), 10)

    assert len(parts) == 2
    assert [p.slot for p in parts] == [0, 1]


def test_two_hosts_one_worker(make_descriptors):
    parts = partition(make_descriptors("host_000008", "host_000001"), 1)

    assert len(parts) == 1
    assert len(parts[0]) == 2


def test_no_descriptors():
    assert partition([], 4) == []


@pytest.mark.parametrize("workers", [0, -1, MAX_WORKERS + 1])
def test_rejects_worker_count_out_of_range(workers):
    with pytest.raises(ValueError):
        Partitioner(workers)


def test_add_returns_stable_slot(make_descriptors):
    p = Partitioner(3)
    a1, b, a2 = make_descriptors("a", "b", "a")

    assert p.add(a1) == 0
    assert p.add(b) == 1
    assert p.add(a2) == 0
