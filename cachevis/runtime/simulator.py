from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Tuple

from ..core.decoder import decode, format_address, normalize_address
from ..core.geometry import Geometry, make_geometry, DEFAULT_ADDRESS_BITS
from ..core.stats import Stats, update
from ..core.store import CacheStore, LineSnapshot
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AccessResult:
    """Outcome of a single cache access."""
    address: int
    hit: bool
    set_index: int
    way: int
    tag: int
    block_offset: int = 0
    clock: int = 0
    evicted_tag: int | None = None

    def to_dict(self) -> dict:
        return {
            "address": format_address(self.address),
            "hit": self.hit,
            "set": self.set_index,
            "way": self.way,
            "tag": self.tag,
            "offset": self.block_offset,
            "clock": self.clock,
            "evicted_tag": self.evicted_tag,
        }


@dataclass
class SimState:
    """Everything owned by one simulation session."""
    geometry: Geometry
    store: CacheStore
    stats: Stats = field(default_factory=Stats)
    history: List[AccessResult] = field(default_factory=list)
    clock: int = 0

    @property
    def last_result(self) -> AccessResult | None:
        """The most recent access, used to highlight the touched line."""
        return self.history[-1] if self.history else None

    def snapshot(self) -> Tuple[Tuple[LineSnapshot, ...], ...]:
        return self.store.snapshot()

    def recent(self, n: int | None = None) -> List[AccessResult]:
        """Returns the last n accesses (all of them when n is None)."""
        if n is None:
            return list(self.history)
        if n <= 0:
            return []
        return self.history[-n:]


@dataclass
class RunSummary:
    results: List[AccessResult]
    store: CacheStore
    stats: Stats


def configure(cache_size_bytes: int, block_size_bytes: int, associativity,
              address_bits: int = DEFAULT_ADDRESS_BITS) -> Geometry:
    """Validates a configuration and returns its Geometry (raises InvalidConfiguration)."""
    geometry = make_geometry(cache_size_bytes, block_size_bytes, associativity, address_bits)
    logger.debug("Configured cache: %s", geometry.describe())
    return geometry


def reset(geometry: Geometry) -> SimState:
    """Creates a fresh session: empty store, zeroed stats and clock, empty history."""
    return SimState(geometry=geometry, store=CacheStore(geometry))


def access(store: CacheStore, geometry: Geometry, address: int,
           clock: int) -> Tuple[AccessResult, CacheStore, int]:
    """
    Performs one access against the store using LRU replacement.

    The store is updated in place and returned together with the advanced
    clock. The clock moves forward exactly once per access, hit or miss, and
    the new value is the line's recency stamp.
    """
    address = normalize_address(address, geometry)
    tag, set_index, block_offset = decode(address, geometry)
    clock += 1

    way = store.lookup(set_index, tag)
    hit = way is not None
    evicted_tag = None
    if hit:
        store.touch(set_index, way, clock)
    else:
        way = store.choose_victim(set_index)
        evicted_tag = store.fill(set_index, way, tag, clock)

    result = AccessResult(
        address=address,
        hit=hit,
        set_index=set_index,
        way=way,
        tag=tag,
        block_offset=block_offset,
        clock=clock,
        evicted_tag=evicted_tag,
    )
    return result, store, clock


def step(state: SimState, address: int) -> AccessResult:
    """Runs one access and records it in the session's stats and history."""
    result, state.store, state.clock = access(state.store, state.geometry, address, state.clock)
    state.stats = update(state.stats, result.hit)
    state.history.append(result)
    logger.debug("%s %s set=%d way=%d tag=%#x", format_address(result.address),
                 "HIT " if result.hit else "MISS", result.set_index, result.way, result.tag)
    return result


def run_all(state: SimState, addresses: Iterable[int]) -> Iterator[AccessResult]:
    """Lazily steps through addresses; the caller decides the pace."""
    for address in addresses:
        yield step(state, address)


class Replay:
    """
    A restartable run of an address sequence.
    Every iteration starts from a freshly reset session, so iterating twice
    yields identical results. The session of the latest iteration is kept in
    `state` for introspection.
    """
    def __init__(self, geometry: Geometry, addresses: Iterable[int]):
        self.geometry = geometry
        self.addresses = list(addresses)
        self.state = reset(geometry)

    def __iter__(self) -> Iterator[AccessResult]:
        self.state = reset(self.geometry)
        return run_all(self.state, self.addresses)

    def __len__(self) -> int:
        return len(self.addresses)


def replay(geometry: Geometry, addresses: Iterable[int]) -> RunSummary:
    """Runs a whole sequence on a fresh session in a single pass."""
    state = reset(geometry)
    results = list(run_all(state, addresses))
    logger.info("Replayed %d accesses on %s: %d hits, %d misses",
                state.stats.accesses, geometry.describe(), state.stats.hits, state.stats.misses)
    return RunSummary(results=results, store=state.store, stats=state.stats)
