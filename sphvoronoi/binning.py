"""Spatial binning of generators into shards over a cube-map grid."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

__all__ = ["CubeGrid", "BinLayout", "BinAssignment", "choose_bin_layout", "assign_bins"]

_MAX_BINS = 256
_U8_MASK = 0xFF


class CubeGrid(Protocol):
    """What binning needs from a cube-map grid of points."""

    @property
    def res(self) -> int: ...

    def cell_points(self, cell: int) -> Sequence[int]: ...

    def cell_to_face_ij(self, cell: int) -> tuple[int, int, int]: ...


@dataclass(frozen=True)
class BinLayout:
    """Bins per face side, grid cells per bin side, and total bin count."""

    bin_res: int
    bin_stride: int
    num_bins: int


@dataclass
class BinAssignment:
    """Which bin owns each generator and its rank inside that bin.

    ``gen_map[g]`` packs ``(bin << local_shift) | local`` for generator ``g``.
    """

    generator_bin: list[int]
    global_to_local: list[int]
    gen_map: list[int]
    local_shift: int
    local_mask: int
    bin_generators: list[list[int]]
    num_bins: int

    def unpack(self, packed: int) -> tuple[int, int]:
        """Split a ``gen_map`` entry into ``(bin, local)``."""
        return (packed >> self.local_shift) & _U8_MASK, packed & self.local_mask


def choose_bin_layout(grid_res: int, threads: int = 1) -> BinLayout:
    """Pick a bin layout giving roughly two bins per worker thread."""
    threads = max(threads, 1)
    target_bins = min(max(threads * 2, 6), 96)
    target_per_face = max(target_bins / 6.0, 1.0)
    bin_res = math.ceil(math.sqrt(target_per_face))
    bin_res = min(max(bin_res, 1), max(grid_res, 1))

    bin_stride = max((grid_res + bin_res - 1) // bin_res, 1)
    bin_res = (grid_res + bin_stride - 1) // bin_stride
    return BinLayout(bin_res=bin_res, bin_stride=bin_stride, num_bins=6 * bin_res * bin_res)


def assign_bins(points: Sequence[object], grid: CubeGrid, threads: int = 1) -> BinAssignment:
    """Assign every generator to a bin, in the grid's cell-major order.

    Raises ``ValueError`` if the grid does not list each point exactly once.
    """
    n = len(points)
    res = grid.res
    layout = choose_bin_layout(res, threads)
    num_bins = layout.num_bins
    if num_bins > _MAX_BINS:
        raise ValueError(f"{num_bins} bins do not fit in 8-bit bin ids")

    bin_bits = 1 if num_bins <= 1 else (num_bins - 1).bit_length()
    local_shift = 32 - bin_bits
    local_mask = (1 << local_shift) - 1

    def bin_for_cell(cell: int) -> int:
        face, iu, iv = grid.cell_to_face_ij(cell)
        bu = min(iu // layout.bin_stride, layout.bin_res - 1)
        bv = min(iv // layout.bin_stride, layout.bin_res - 1)
        return face * layout.bin_res * layout.bin_res + bv * layout.bin_res + bu

    bin_generators: list[list[int]] = [[] for _ in range(num_bins)]
    generator_bin: list[int | None] = [None] * n
    global_to_local: list[int] = [0] * n
    gen_map: list[int] = [0] * n

    for cell in range(6 * res * res):
        b = bin_for_cell(cell)
        members = bin_generators[b]
        for g in grid.cell_points(cell):
            if not 0 <= g < n:
                raise ValueError(f"grid returned out-of-range point index {g}")
            if generator_bin[g] is not None:
                raise ValueError(f"grid lists point {g} more than once")
            local = len(members)
            if local > local_mask:
                raise ValueError(f"local id {local} exceeds {local_shift} bits")
            members.append(g)
            generator_bin[g] = b
            global_to_local[g] = local
            gen_map[g] = (b << local_shift) | local

    missing = [g for g, b in enumerate(generator_bin) if b is None]
    if missing:
        raise ValueError(f"grid did not cover {len(missing)} of {n} points")

    return BinAssignment(
        generator_bin=[b for b in generator_bin if b is not None],
        global_to_local=global_to_local,
        gen_map=gen_map,
        local_shift=local_shift,
        local_mask=local_mask,
        bin_generators=bin_generators,
        num_bins=num_bins,
    )