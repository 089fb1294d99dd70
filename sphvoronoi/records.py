"""Plain records exchanged between the cell-building and assembly stages.

Bin and local generator identifiers are plain integers; edge keys are packed
integers as produced by :func:`sphvoronoi.packed.pack_edge`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

__all__ = [
    "U16_MAX",
    "U32_MAX",
    "VertexKey",
    "VoronoiCell",
    "EdgeCheck",
    "EdgeCheckOverflow",
    "EdgeToLater",
    "EdgeOverflowLocal",
    "DeferredSlot",
    "SupportOverflow",
]

U16_MAX = 0xFFFF
U32_MAX = 0xFFFF_FFFF

#: Sorted triple of generator indices identifying a Voronoi vertex.
VertexKey = tuple[int, int, int]


def _pair(name: str, values: Sequence[int]) -> tuple[int, int]:
    pair = tuple(values)
    if len(pair) != 2:
        raise ValueError(f"{name} must hold exactly two values, got {len(pair)}")
    return pair  # type: ignore[return-value]


def _triple(name: str, values: Sequence[int]) -> VertexKey:
    triple = tuple(values)
    if len(triple) != 3:
        raise ValueError(f"{name} must hold exactly three values, got {len(triple)}")
    return triple  # type: ignore[return-value]


@dataclass(frozen=True)
class VoronoiCell:
    """A cell's run of vertex indices inside a shared index buffer."""

    vertex_start: int
    vertex_count: int

    def __post_init__(self) -> None:
        if not 0 <= self.vertex_start <= U32_MAX:
            raise ValueError(f"vertex_start {self.vertex_start} exceeds u32 capacity")
        if not 0 <= self.vertex_count <= U16_MAX:
            raise ValueError(f"vertex_count {self.vertex_count} exceeds u16 capacity")

    @property
    def vertex_end(self) -> int:
        return self.vertex_start + self.vertex_count

    def indices(self, cell_indices: Sequence[int]) -> list[int]:
        """The vertex indices of this cell taken from ``cell_indices``."""
        if self.vertex_end > len(cell_indices):
            raise IndexError(
                f"cell range {self.vertex_start}..{self.vertex_end} "
                f"exceeds index buffer of length {len(cell_indices)}"
            )
        return list(cell_indices[self.vertex_start:self.vertex_end])


@dataclass(frozen=True)
class EdgeCheck:
    """One side of a shared edge, queued for the later cell of the pair.

    For edge ``(A, B)`` each endpoint's vertex key is ``(A, B, T)``; ``thirds``
    holds ``T`` for both endpoints and ``indices`` their local vertex indices.
    """

    key: int
    thirds: tuple[int, int]
    indices: tuple[int, int]

    def __post_init__(self) -> None:
        object.__setattr__(self, "thirds", _pair("thirds", self.thirds))
        object.__setattr__(self, "indices", _pair("indices", self.indices))


@dataclass(frozen=True)
class EdgeCheckOverflow:
    """An edge check whose two cells live in different bins."""

    key: int
    side: int
    source_bin: int
    thirds: tuple[int, int]
    indices: tuple[int, int]
    slots: tuple[int, int]

    def __post_init__(self) -> None:
        if self.side not in (0, 1):
            raise ValueError(f"side must be 0 or 1, got {self.side}")
        object.__setattr__(self, "thirds", _pair("thirds", self.thirds))
        object.__setattr__(self, "indices", _pair("indices", self.indices))
        object.__setattr__(self, "slots", _pair("slots", self.slots))


@dataclass(frozen=True)
class EdgeToLater:
    """An edge to a neighbour processed later in the same bin."""

    key: int
    local_b: int
    locals: tuple[int, int]

    def __post_init__(self) -> None:
        object.__setattr__(self, "locals", _pair("locals", self.locals))


@dataclass(frozen=True)
class EdgeOverflowLocal:
    """An edge to a neighbour in another bin, before slot resolution."""

    key: int
    locals: tuple[int, int]
    side: int

    def __post_init__(self) -> None:
        if self.side not in (0, 1):
            raise ValueError(f"side must be 0 or 1, got {self.side}")
        object.__setattr__(self, "locals", _pair("locals", self.locals))


@dataclass(frozen=True)
class DeferredSlot:
    """A cell index slot waiting for a vertex owned by another bin."""

    key: VertexKey
    pos: tuple[float, float, float]
    source_bin: int
    source_slot: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", _triple("key", self.key))
        object.__setattr__(
            self, "pos", tuple(float(c) for c in _triple("pos", self.pos))
        )


@dataclass(frozen=True)
class SupportOverflow:
    """A vertex, identified by its support set, owned by another bin."""

    source_bin: int
    target_bin: int
    source_slot: int
    support: tuple[int, ...]
    pos: tuple[float, float, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "support", tuple(self.support))
        object.__setattr__(
            self, "pos", tuple(float(c) for c in _triple("pos", self.pos))
        )