from __future__ import annotations
from enum import Enum
from typing import List
import numpy as np
from ..core.geometry import Geometry
from ..errors import InvalidConfiguration

# Size of the simulated address space the generators draw from
MAX_ADDR = 1024
WORD_SIZE = 4
SEQUENTIAL_LENGTH = 128
DEFAULT_LENGTH = 100
STRIDE_MULTIPLIER = 8
REPEAT_POOL_SIZE = 8


class AccessPattern(str, Enum):
    SEQUENTIAL = "sequential"
    RANDOM = "random"
    STRIDED = "strided"
    REPEATED = "repeated"


PATTERN_DESCRIPTIONS = {
    AccessPattern.SEQUENTIAL: "Like reading through an array (spatial locality)",
    AccessPattern.RANDOM: "Unpredictable memory accesses",
    AccessPattern.STRIDED: "Regular jumps (like reading every 8th element)",
    AccessPattern.REPEATED: "Same few memory locations (temporal locality)",
}


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Returns a numpy Generator; unseeded (non-reproducible) when seed is None."""
    return np.random.default_rng(seed)


def _sequential(length: int, word_size: int) -> List[int]:
    return [i * word_size for i in range(length)]


def _random(length: int, max_addr: int, rng: np.random.Generator) -> List[int]:
    return [int(a) for a in rng.integers(0, max_addr, size=length)]


def _strided(length: int, stride: int, max_addr: int) -> List[int]:
    return [(i * stride) % max_addr for i in range(length)]


def _repeated(length: int, pool_size: int, max_addr: int, rng: np.random.Generator) -> List[int]:
    pool = _random(pool_size, max_addr, rng)
    return [pool[i % pool_size] for i in range(length)]


def generate(pattern, geometry: Geometry, length: int | None = None, *,
             rng: np.random.Generator | None = None, seed: int | None = None,
             max_addr: int = MAX_ADDR, word_size: int = WORD_SIZE,
             stride_multiplier: int = STRIDE_MULTIPLIER,
             pool_size: int = REPEAT_POOL_SIZE) -> List[int]:
    """
    Produces the address sequence for a named access pattern.

    Random and repeated patterns draw from `rng` when given, otherwise from a
    generator built from `seed`. Leaving both unset gives a fresh unseeded
    sequence on every call. When `length` is None the sequential pattern
    produces SEQUENTIAL_LENGTH addresses and the others DEFAULT_LENGTH.
    """
    try:
        pattern = AccessPattern(pattern)
    except ValueError:
        raise InvalidConfiguration(f"Unknown access pattern: {pattern!r}") from None

    if length is None:
        length = SEQUENTIAL_LENGTH if pattern is AccessPattern.SEQUENTIAL else DEFAULT_LENGTH
    if length < 0:
        raise InvalidConfiguration(f"Sequence length must be non-negative, got {length}")
    if max_addr <= 0:
        raise InvalidConfiguration(f"max_addr must be positive, got {max_addr}")

    if pattern is AccessPattern.SEQUENTIAL:
        return _sequential(length, word_size)
    if pattern is AccessPattern.STRIDED:
        return _strided(length, geometry.block_size_bytes * stride_multiplier, max_addr)

    if rng is None:
        rng = make_rng(seed)
    if pattern is AccessPattern.RANDOM:
        return _random(length, max_addr, rng)
    if pool_size <= 0:
        raise InvalidConfiguration(f"Repeat pool size must be positive, got {pool_size}")
    return _repeated(length, pool_size, max_addr, rng)
