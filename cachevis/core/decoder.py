from __future__ import annotations
import operator
from typing import NamedTuple
from ..errors import AddressOutOfRange
from .geometry import Geometry


class DecodedAddress(NamedTuple):
    tag: int
    set_index: int
    block_offset: int


def normalize_address(address: int, geometry: Geometry) -> int:
    """Maps an address onto the geometry's address register.

    Addresses wider than geometry.address_bits are truncated by masking, the
    same wrap-around the shifts and masks of the decoder produce. Negative
    addresses are rejected.
    """
    if isinstance(address, bool):
        raise AddressOutOfRange(f"Address must be an integer, got {address!r}")
    try:
        # Accepts numpy integers as well as int
        address = operator.index(address)
    except TypeError:
        raise AddressOutOfRange(f"Address must be an integer, got {address!r}") from None
    if address < 0:
        raise AddressOutOfRange(f"Address must be unsigned, got {address}")
    return address & geometry.address_mask


def decode(address: int, geometry: Geometry) -> DecodedAddress:
    """Decomposes an address into (tag, set_index, block_offset)."""
    address = normalize_address(address, geometry)
    offset_bits = geometry.offset_bits
    block_offset = address & ((1 << offset_bits) - 1)

    if geometry.is_fully_associative:
        # Every bit above the offset belongs to the tag
        return DecodedAddress(address >> offset_bits, 0, block_offset)

    set_index = (address >> offset_bits) & ((1 << geometry.index_bits) - 1)
    tag = address >> (offset_bits + geometry.index_bits)
    return DecodedAddress(tag, set_index, block_offset)


def encode(tag: int, set_index: int, block_offset: int, geometry: Geometry) -> int:
    """Reconstructs an address from its fields. Inverse of decode."""
    return ((tag << (geometry.offset_bits + geometry.index_bits))
            | (set_index << geometry.offset_bits)
            | block_offset)


def block_address(address: int, geometry: Geometry) -> int:
    """Returns the address of the first byte of the block containing address."""
    return normalize_address(address, geometry) & ~((1 << geometry.offset_bits) - 1)


def format_address(address: int, width: int = 8) -> str:
    """Formats an address as zero-padded hex, e.g. 0x00000100."""
    return f"0x{address:0{width}x}"


def describe_address(address: int, geometry: Geometry) -> str:
    """Renders the tag | index | offset bit fields of an address."""
    tag, set_index, block_offset = decode(address, geometry)
    parts = [f"tag={tag:#x}"]
    if not geometry.is_fully_associative:
        parts.append(f"index={set_index}")
    parts.append(f"offset={block_offset}")

    bits = format(normalize_address(address, geometry), f"0{geometry.address_bits}b")
    tag_end = geometry.tag_bits
    index_end = tag_end + geometry.index_bits
    fields = [bits[:tag_end]]
    if geometry.index_bits:
        fields.append(bits[tag_end:index_end])
    if geometry.offset_bits:
        fields.append(bits[index_end:])
    return f"{format_address(address)} [{'|'.join(fields)}] " + " ".join(parts)
