from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple
from .geometry import Geometry


@dataclass
class CacheLine:
    """Represents a single way in a cache set."""
    valid: bool = False
    tag: int | None = None
    last_used: int = 0


@dataclass(frozen=True)
class LineSnapshot:
    """Read-only copy of a CacheLine for rendering."""
    valid: bool
    tag: int | None
    last_used: int


class CacheStore:
    """
    The array of sets and ways of a cache.
    This class only knows about lines and recency; decoding and the logical
    clock are owned by the simulator.
    """
    def __init__(self, geometry: Geometry):
        self.geometry = geometry
        self.sets: List[List[CacheLine]] = []
        self.reset()

    def reset(self):
        """Reallocates every set with invalid lines."""
        self.sets = [[CacheLine() for _ in range(self.geometry.ways)]
                     for _ in range(self.geometry.num_sets)]

    def lookup(self, set_index: int, tag: int) -> int | None:
        """Returns the first way holding a valid line with this tag, or None."""
        for way, line in enumerate(self.sets[set_index]):
            if line.valid and line.tag == tag:
                return way
        return None

    def choose_victim(self, set_index: int) -> int:
        """Gets the way to replace: the first invalid way, else the least recently used.

        Equal timestamps resolve to the lowest way index.
        """
        cache_set = self.sets[set_index]
        for way, line in enumerate(cache_set):
            if not line.valid:
                return way

        victim = 0
        for way in range(1, len(cache_set)):
            if cache_set[way].last_used < cache_set[victim].last_used:
                victim = way
        return victim

    def touch(self, set_index: int, way: int, clock: int):
        self.sets[set_index][way].last_used = clock

    def fill(self, set_index: int, way: int, tag: int, clock: int) -> int | None:
        """Installs a tag in a way. Returns the tag of the valid line it replaced, if any."""
        line = self.sets[set_index][way]
        evicted = line.tag if line.valid else None
        line.valid = True
        line.tag = tag
        line.last_used = clock
        return evicted

    def valid_count(self, set_index: int) -> int:
        return sum(1 for line in self.sets[set_index] if line.valid)

    def occupancy(self) -> int:
        """Number of valid lines in the whole cache."""
        return sum(self.valid_count(i) for i in range(len(self.sets)))

    def snapshot(self) -> Tuple[Tuple[LineSnapshot, ...], ...]:
        """Returns an immutable copy of every set for display."""
        return tuple(
            tuple(LineSnapshot(line.valid, line.tag, line.last_used) for line in cache_set)
            for cache_set in self.sets
        )
