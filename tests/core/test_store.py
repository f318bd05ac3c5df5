import pytest
from cachevis.core.geometry import make_geometry
from cachevis.core.store import CacheStore


@pytest.fixture
def store(geometry):
    return CacheStore(geometry)


def test_store_starts_invalid(store, geometry):
    snap = store.snapshot()
    assert len(snap) == geometry.num_sets
    assert all(len(s) == geometry.ways for s in snap)
    assert all(not line.valid and line.tag is None for s in snap for line in s)
    assert store.occupancy() == 0


def test_lookup_first_valid_match(store):
    store.fill(0, 2, tag=7, clock=1)
    assert store.lookup(0, 7) == 2
    assert store.lookup(0, 8) is None
    assert store.lookup(1, 7) is None


def test_victim_prefers_lowest_invalid_way(store):
    store.fill(0, 0, tag=1, clock=1)
    store.fill(0, 2, tag=2, clock=2)
    assert store.choose_victim(0) == 1


def test_victim_is_least_recently_used(store):
    for way, clock in enumerate([5, 2, 9, 7]):
        store.fill(0, way, tag=way, clock=clock)
    assert store.choose_victim(0) == 1


def test_victim_tie_breaks_on_lowest_way(store):
    for way in range(4):
        store.fill(0, way, tag=way, clock=3)
    assert store.choose_victim(0) == 0


def test_fill_reports_evicted_tag(store):
    assert store.fill(1, 0, tag=4, clock=1) is None
    assert store.fill(1, 0, tag=5, clock=2) == 4
    assert store.valid_count(1) == 1


def test_touch_updates_recency(store):
    store.fill(0, 0, tag=1, clock=1)
    store.touch(0, 0, 10)
    assert store.snapshot()[0][0].last_used == 10


def test_snapshot_is_a_copy(store):
    snap = store.snapshot()
    store.fill(0, 0, tag=1, clock=1)
    assert not snap[0][0].valid


def test_reset_clears_lines(store):
    store.fill(0, 0, tag=1, clock=1)
    store.reset()
    assert store.occupancy() == 0


def test_fully_associative_store_shape():
    store = CacheStore(make_geometry(512, 16, "fully"))
    assert len(store.sets) == 1
    assert len(store.sets[0]) == 32
