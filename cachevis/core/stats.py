from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class Stats:
    """Running hit/miss counters for one run."""
    hits: int = 0
    misses: int = 0

    @property
    def accesses(self) -> int:
        return self.hits + self.misses

    def as_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "accesses": self.accesses,
            "hit_rate": hit_rate(self),
            "miss_rate": miss_rate(self),
        }


def update(stats: Stats, hit: bool) -> Stats:
    """Returns a new Stats with exactly one of hits/misses incremented."""
    if hit:
        return Stats(hits=stats.hits + 1, misses=stats.misses)
    return Stats(hits=stats.hits, misses=stats.misses + 1)


def hit_rate(stats: Stats) -> float:
    if stats.accesses == 0:
        return 0.0
    return stats.hits / stats.accesses


def miss_rate(stats: Stats) -> float:
    if stats.accesses == 0:
        return 0.0
    return stats.misses / stats.accesses
