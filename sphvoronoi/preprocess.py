"""Merging of near-coincident generators before Voronoi construction."""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from itertools import combinations, product

__all__ = ["Vec3", "MergeResult", "merge_close_points"]

Vec3 = tuple[float, float, float]

_NEIGHBOR_OFFSETS = tuple(product((-1, 0, 1), repeat=3))


@dataclass
class MergeResult:
    """Outcome of merging coincident generators.

    ``effective_points`` holds one representative per group of merged points,
    ``original_to_effective`` maps every input index to its representative's
    index in ``effective_points``, and ``num_merged`` counts removed points.
    """

    effective_points: list[Vec3] = field(default_factory=list)
    original_to_effective: list[int] = field(default_factory=list)
    num_merged: int = 0


class _MinUnion:
    """Disjoint sets whose representative is always the smallest index."""

    def __init__(self, n: int) -> None:
        self._parent = list(range(n))

    def find(self, x: int) -> int:
        parent = self._parent
        root = x
        while parent[root] != root:
            root = parent[root]
        while parent[x] != root:
            parent[x], x = root, parent[x]
        return root

    def union(self, a: int, b: int) -> bool:
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        lo, hi = (ra, rb) if ra <= rb else (rb, ra)
        self._parent[hi] = lo
        return True


def _as_vec3(point: Sequence[float]) -> Vec3:
    coords = tuple(float(c) for c in point)
    if len(coords) != 3:
        raise ValueError(f"expected a 3-component point, got {len(coords)} components")
    return coords  # type: ignore[return-value]


def _dist_sq(a: Vec3, b: Vec3) -> float:
    return (a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2


def merge_close_points(points: Iterable[Sequence[float]], threshold: float) -> MergeResult:
    """Merge every group of points connected by distances below ``threshold``.

    Each group is represented by its lowest-indexed member, so no two
    effective points lie closer than ``threshold`` to each other.
    """
    pts = [_as_vec3(p) for p in points]
    n = len(pts)
    if n == 0:
        return MergeResult()
    if not threshold > 0.0:
        return MergeResult(list(pts), list(range(n)), 0)

    threshold_sq = threshold * threshold
    buckets: dict[tuple[int, int, int], list[int]] = defaultdict(list)
    for idx, p in enumerate(pts):
        key = tuple(math.floor(c / threshold) for c in p)
        buckets[key].append(idx)  # type: ignore[index]

    dsu = _MinUnion(n)
    for cell, members in buckets.items():
        for dx, dy, dz in _NEIGHBOR_OFFSETS:
            other_cell = (cell[0] + dx, cell[1] + dy, cell[2] + dz)
            if other_cell < cell:
                continue
            others = buckets.get(other_cell)
            if not others:
                continue
            pairs = combinations(members, 2) if other_cell == cell else product(members, others)
            for a, b in pairs:
                if _dist_sq(pts[a], pts[b]) < threshold_sq:
                    dsu.union(a, b)

    rep_to_effective: dict[int, int] = {}
    effective_points: list[Vec3] = []
    original_to_effective: list[int] = []
    for i in range(n):
        rep = dsu.find(i)
        if rep not in rep_to_effective:
            rep_to_effective[rep] = len(effective_points)
            effective_points.append(pts[rep])
        original_to_effective.append(rep_to_effective[rep])

    return MergeResult(effective_points, original_to_effective, n - len(effective_points))