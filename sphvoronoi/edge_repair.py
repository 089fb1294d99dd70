"""Repair of shared edges whose two sides disagree after cell construction."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sphvoronoi.packed import unpack_edge
from sphvoronoi.records import VertexKey, VoronoiCell

__all__ = [
    "DEGENERATE_LEN_EPS",
    "UnionFind",
    "shared_neighbor",
    "edge_segments_for_neighbor",
    "repair_bad_edges",
]

#: Edges shorter than this are treated as collapsed to a point.
DEGENERATE_LEN_EPS = 1e-6
_DEGENERATE_LEN_EPS_SQ = DEGENERATE_LEN_EPS * DEGENERATE_LEN_EPS
_RANK_MAX = 0xFF

Vec3 = tuple[float, float, float]


class UnionFind:
    """Disjoint sets over ``0..n`` with union by rank and path compression."""

    def __init__(self, n: int) -> None:
        self._parent = list(range(n))
        self._rank = [0] * n

    def __len__(self) -> int:
        return len(self._parent)

    def find(self, x: int) -> int:
        """Representative of the set containing ``x``."""
        parent = self._parent
        root = x
        while parent[root] != root:
            root = parent[root]
        while parent[x] != root:
            parent[x], x = root, parent[x]
        return root

    def union(self, a: int, b: int) -> bool:
        """Join the sets of ``a`` and ``b``; False if they were already one."""
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        rank = self._rank
        if rank[ra] < rank[rb]:
            self._parent[ra] = rb
        elif rank[ra] > rank[rb]:
            self._parent[rb] = ra
        else:
            self._parent[rb] = ra
            rank[ra] = min(rank[ra] + 1, _RANK_MAX)
        return True


def _dist_sq(a: Sequence[float], b: Sequence[float]) -> float:
    return (a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2


def shared_neighbor(cell_idx: int, a: VertexKey, b: VertexKey) -> int | None:
    """The generator other than ``cell_idx`` that both vertex keys contain."""
    if cell_idx not in a or cell_idx not in b:
        return None
    return next((c for c in a if c != cell_idx and c in b), None)


def edge_segments_for_neighbor(
    cell_idx: int,
    neighbor: int,
    cells: Sequence[VoronoiCell],
    cell_indices: Sequence[int],
    vertex_keys: Sequence[VertexKey],
) -> list[tuple[int, int]]:
    """Consecutive vertex pairs of a cell whose edge borders ``neighbor``."""
    if cell_idx >= len(cells):
        return []
    ring = cells[cell_idx].indices(cell_indices)
    if len(ring) < 2:
        return []
    return [
        (vi, vj)
        for vi, vj in zip(ring, ring[1:] + ring[:1])
        if shared_neighbor(cell_idx, vertex_keys[vi], vertex_keys[vj]) == neighbor
    ]


def _collapse_one_sided(
    seg_a: list[tuple[int, int]],
    seg_b: list[tuple[int, int]],
    a: int,
    b: int,
    uf: UnionFind,
    vertices: Sequence[Vec3],
    cells: Sequence[VoronoiCell],
    cell_indices: Sequence[int],
) -> int:
    """Collapse a near-zero edge that only one cell of the pair emitted."""
    if len(seg_a) == 1 and not seg_b:
        other_cell, (v0, v1) = b, seg_a[0]
    elif len(seg_b) == 1 and not seg_a:
        other_cell, (v0, v1) = a, seg_b[0]
    else:
        return 0

    nv = len(vertices)
    if v0 >= nv or v1 >= nv:
        return 0
    if _dist_sq(vertices[v0], vertices[v1]) > _DEGENERATE_LEN_EPS_SQ:
        return 0

    merged = int(uf.union(v0, v1))
    if other_cell >= len(cells):
        return merged

    # Snap onto an exactly coincident vertex of the neighbouring cell, if any.
    candidates = [vj for vj in cells[other_cell].indices(cell_indices) if vj < nv]
    if not candidates:
        return merged
    for vi in (v0, v1):
        best = min(candidates, key=lambda vj: _dist_sq(vertices[vi], vertices[vj]))
        if _dist_sq(vertices[vi], vertices[best]) <= _DEGENERATE_LEN_EPS_SQ and uf.union(
            vi, best
        ):
            merged += 1
    return merged


def _merge_segments(
    seg_a: tuple[int, int],
    seg_b: tuple[int, int],
    uf: UnionFind,
    vertices: Sequence[Vec3],
) -> int:
    """Union the endpoints of two segments that describe the same edge."""
    a0, a1 = seg_a
    b0, b1 = seg_b
    share_a0 = a0 in (b0, b1)
    share_a1 = a1 in (b0, b1)
    if share_a0 and share_a1:
        return 0
    if share_a0 or share_a1:
        if a0 == b0:
            keep = (a1, b1)
        elif a0 == b1:
            keep = (a1, b0)
        elif a1 == b0:
            keep = (a0, b1)
        else:
            keep = (a0, b0)
        return int(uf.union(*keep))

    straight = _dist_sq(vertices[a0], vertices[b0]) + _dist_sq(vertices[a1], vertices[b1])
    crossed = _dist_sq(vertices[a0], vertices[b1]) + _dist_sq(vertices[a1], vertices[b0])
    pairs = ((a0, b0), (a1, b1)) if straight <= crossed else ((a0, b1), (a1, b0))
    return sum(uf.union(x, y) for x, y in pairs)


def repair_bad_edges(
    edge_keys: Iterable[int],
    vertices: Sequence[Vec3],
    cells: Sequence[VoronoiCell],
    cell_indices: Sequence[int],
    vertex_keys: Sequence[VertexKey],
) -> tuple[list[VoronoiCell], list[int]] | None:
    """Merge mismatched endpoints of the given edges and rebuild the cells.

    Returns the new cells and index buffer, or ``None`` when nothing merged.
    """
    uf = UnionFind(len(vertices))
    merged = 0

    for key in edge_keys:
        a, b = unpack_edge(key)
        seg_a = edge_segments_for_neighbor(a, b, cells, cell_indices, vertex_keys)
        seg_b = edge_segments_for_neighbor(b, a, cells, cell_indices, vertex_keys)
        if len(seg_a) != 1 or len(seg_b) != 1:
            merged += _collapse_one_sided(
                seg_a, seg_b, a, b, uf, vertices, cells, cell_indices
            )
            continue
        merged += _merge_segments(seg_a[0], seg_b[0], uf, vertices)

    if merged == 0:
        return None

    new_cells: list[VoronoiCell] = []
    new_indices: list[int] = []
    for cell in cells:
        reps = list(dict.fromkeys(uf.find(vi) for vi in cell.indices(cell_indices)))
        new_cells.append(VoronoiCell(len(new_indices), len(reps)))
        new_indices.extend(reps)
    return new_cells, new_indices