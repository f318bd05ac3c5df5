from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Tuple, Union
from ..errors import InvalidConfiguration

DEFAULT_ADDRESS_BITS = 32

# Presets offered by the visualizer front end
CACHE_SIZE_CHOICES = (128, 256, 512)
BLOCK_SIZE_CHOICES = (16, 32, 64)


@dataclass(frozen=True)
class NumericWays:
    """A fixed number of ways per set (1 = direct mapped)."""
    n: int

    def __str__(self) -> str:
        return str(self.n)


@dataclass(frozen=True)
class FullyAssociative:
    """A single set holding every block of the cache."""

    def __str__(self) -> str:
        return "fully"


Associativity = Union[NumericWays, FullyAssociative]

ASSOCIATIVITY_OPTIONS: List[Tuple[Associativity, str]] = [
    (NumericWays(1), "Direct Mapped (1-way)"),
    (NumericWays(2), "2-way"),
    (NumericWays(4), "4-way"),
    (NumericWays(8), "8-way"),
    (FullyAssociative(), "Fully Associative"),
]


def is_power_of_two(n: int) -> bool:
    return isinstance(n, int) and n > 0 and (n & (n - 1)) == 0


def parse_associativity(value) -> Associativity:
    """Converts a user-facing associativity value into the Associativity sum type.

    Accepts an int, a digit string, the string "fully" (any case) or an
    already-built NumericWays/FullyAssociative.
    """
    if isinstance(value, (NumericWays, FullyAssociative)):
        return value
    if isinstance(value, bool):
        raise InvalidConfiguration(f"Invalid associativity: {value!r}")
    if isinstance(value, int):
        return NumericWays(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "fully":
            return FullyAssociative()
        if text.isdigit():
            return NumericWays(int(text))
    raise InvalidConfiguration(f"Invalid associativity: {value!r}")


@dataclass(frozen=True)
class Geometry:
    """Addressing parameters derived from a cache configuration. Immutable."""
    cache_size_bytes: int
    block_size_bytes: int
    associativity: Associativity
    address_bits: int = DEFAULT_ADDRESS_BITS

    # Derived properties
    num_blocks: int = field(init=False)
    num_sets: int = field(init=False)
    ways: int = field(init=False)
    offset_bits: int = field(init=False)
    index_bits: int = field(init=False)
    tag_bits: int = field(init=False)

    def __post_init__(self):
        if not is_power_of_two(self.cache_size_bytes):
            raise InvalidConfiguration(
                f"Cache size must be a positive power of two, got {self.cache_size_bytes}.")
        if not is_power_of_two(self.block_size_bytes):
            raise InvalidConfiguration(
                f"Block size must be a positive power of two, got {self.block_size_bytes}.")
        if self.cache_size_bytes < self.block_size_bytes:
            raise InvalidConfiguration("Cache size must be at least one block.")
        if not isinstance(self.address_bits, int) or self.address_bits <= 0:
            raise InvalidConfiguration(f"Address width must be positive, got {self.address_bits}.")

        num_blocks = self.cache_size_bytes // self.block_size_bytes

        # Fully associative has to be resolved before the tag width is known
        if isinstance(self.associativity, FullyAssociative):
            num_sets, ways = 1, num_blocks
        elif isinstance(self.associativity, NumericWays):
            ways = self.associativity.n
            if not isinstance(ways, int) or isinstance(ways, bool) or ways <= 0:
                raise InvalidConfiguration(f"Associativity must be a positive integer, got {ways!r}.")
            if num_blocks % ways != 0:
                raise InvalidConfiguration(
                    f"Associativity {ways} does not divide the number of blocks ({num_blocks}).")
            num_sets = num_blocks // ways
        else:
            raise InvalidConfiguration(f"Unknown associativity: {self.associativity!r}")

        offset_bits = self.block_size_bytes.bit_length() - 1
        index_bits = num_sets.bit_length() - 1
        if offset_bits + index_bits > self.address_bits:
            raise InvalidConfiguration(
                f"{self.address_bits}-bit addresses cannot hold {offset_bits} offset "
                f"and {index_bits} index bits.")

        object.__setattr__(self, "num_blocks", num_blocks)
        object.__setattr__(self, "num_sets", num_sets)
        object.__setattr__(self, "ways", ways)
        object.__setattr__(self, "offset_bits", offset_bits)
        object.__setattr__(self, "index_bits", index_bits)
        object.__setattr__(self, "tag_bits", self.address_bits - offset_bits - index_bits)

    @property
    def is_fully_associative(self) -> bool:
        return isinstance(self.associativity, FullyAssociative)

    @property
    def is_direct_mapped(self) -> bool:
        return self.ways == 1

    @property
    def address_mask(self) -> int:
        return (1 << self.address_bits) - 1

    def describe(self) -> str:
        """Short human readable summary, e.g. '256B, 32B blocks, 4-way (2 sets)'."""
        if self.is_fully_associative:
            kind = "fully associative"
        elif self.is_direct_mapped:
            kind = "direct mapped"
        else:
            kind = f"{self.ways}-way"
        return (f"{self.cache_size_bytes}B, {self.block_size_bytes}B blocks, {kind} "
                f"({self.num_sets} sets x {self.ways} ways)")

    def to_dict(self) -> dict:
        return {
            "cache_size_bytes": self.cache_size_bytes,
            "block_size_bytes": self.block_size_bytes,
            "associativity": str(self.associativity),
            "address_bits": self.address_bits,
            "num_blocks": self.num_blocks,
            "num_sets": self.num_sets,
            "ways": self.ways,
            "offset_bits": self.offset_bits,
            "index_bits": self.index_bits,
            "tag_bits": self.tag_bits,
        }


def make_geometry(cache_size_bytes: int, block_size_bytes: int, associativity,
                  address_bits: int = DEFAULT_ADDRESS_BITS) -> Geometry:
    """Builds a Geometry, raising InvalidConfiguration if the parameters are inconsistent."""
    return Geometry(
        cache_size_bytes=cache_size_bytes,
        block_size_bytes=block_size_bytes,
        associativity=parse_associativity(associativity),
        address_bits=address_bits,
    )


def valid_associativities(cache_size_bytes: int, block_size_bytes: int) -> List[Tuple[Associativity, str]]:
    """Returns the entries of ASSOCIATIVITY_OPTIONS that form a valid geometry."""
    options = []
    for assoc, label in ASSOCIATIVITY_OPTIONS:
        try:
            make_geometry(cache_size_bytes, block_size_bytes, assoc)
        except InvalidConfiguration:
            continue
        options.append((assoc, label))
    return options
