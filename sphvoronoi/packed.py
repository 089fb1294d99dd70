"""Packing of vertex references and edge keys into 64-bit integers."""

from __future__ import annotations

__all__ = [
    "DEFERRED",
    "INVALID_INDEX",
    "pack_ref",
    "unpack_ref",
    "pack_edge",
    "unpack_edge",
]

_U8_MAX = 0xFF
_U32_MASK = 0xFFFF_FFFF

#: Placeholder for a cell slot whose vertex is owned by another bin.
DEFERRED = 0xFFFF_FFFF_FFFF_FFFF
#: Placeholder for a vertex index not yet known.
INVALID_INDEX = _U32_MASK


def _check_u32(name: str, value: int) -> None:
    if not 0 <= value <= _U32_MASK:
        raise ValueError(f"{name} {value} does not fit in 32 bits")


def pack_ref(bin_id: int, local: int) -> int:
    """Pack a bin id and a bin-local vertex index into one integer."""
    if not 0 <= bin_id <= _U8_MAX:
        raise ValueError(f"bin id {bin_id} does not fit in 8 bits")
    _check_u32("local index", local)
    return (bin_id << 32) | local


def unpack_ref(packed: int) -> tuple[int, int]:
    """Split a packed reference into ``(bin_id, local)``."""
    return (packed >> 32) & _U8_MAX, packed & _U32_MASK


def pack_edge(a: int, b: int) -> int:
    """Order-independent key for the edge between generators ``a`` and ``b``."""
    _check_u32("generator", a)
    _check_u32("generator", b)
    lo, hi = (a, b) if a <= b else (b, a)
    return lo | (hi << 32)


def unpack_edge(key: int) -> tuple[int, int]:
    """Split an edge key into its ``(smaller, larger)`` generator indices."""
    return key & _U32_MASK, (key >> 32) & _U32_MASK