"""Per-bin state kept while cells are built and their vertices deduplicated."""

from __future__ import annotations

from collections.abc import Sequence

from sphvoronoi.records import (
    DeferredSlot,
    EdgeCheck,
    EdgeCheckOverflow,
    SupportOverflow,
    VertexKey,
)

__all__ = ["ShardDedup", "ShardOutput", "ShardState"]

Vec3 = tuple[float, float, float]


class ShardDedup:
    """Data needed only during deduplication, dropped before final assembly."""

    def __init__(self, num_local_generators: int) -> None:
        self.support_map: dict[tuple[int, ...], int] = {}
        self.support_overflow: list[SupportOverflow] = []
        self.edge_checks: list[list[EdgeCheck]] = [[] for _ in range(num_local_generators)]

    def push_edge_check(self, local: int, check: EdgeCheck) -> None:
        """Queue ``check`` for the generator with bin-local id ``local``."""
        self.edge_checks[local].append(check)

    def take_edge_checks(self, local: int) -> list[EdgeCheck]:
        """Remove and return all checks queued for ``local``."""
        checks = self.edge_checks[local]
        self.edge_checks[local] = []
        return checks


class ShardOutput:
    """Output of one bin consumed by the final assembly.

    ``cell_indices`` holds packed vertex references (see
    :func:`sphvoronoi.packed.pack_ref`) and ``bad_edges`` packed edge keys.
    """

    def __init__(self, num_local_generators: int) -> None:
        self.vertices: list[Vec3] = []
        self.vertex_keys: list[VertexKey] = []
        self.bad_edges: list[int] = []
        self.edge_check_overflow: list[EdgeCheckOverflow] = []
        self.deferred: list[DeferredSlot] = []
        self.cell_indices: list[int] = []
        self.cell_starts: list[int] = [0] * num_local_generators
        self.cell_counts: list[int] = [0] * num_local_generators


class ShardState:
    """Everything one bin owns during cell construction."""

    def __init__(self, num_local_generators: int) -> None:
        self.dedup = ShardDedup(num_local_generators)
        self.output = ShardOutput(num_local_generators)

    def dedup_support_owned(self, support: Sequence[int], pos: Sequence[float]) -> int:
        """Index of the vertex with this support set, adding it if unseen."""
        key = tuple(support)
        idx = self.dedup.support_map.get(key)
        if idx is not None:
            return idx
        idx = len(self.output.vertices)
        self.output.vertices.append(tuple(float(c) for c in pos))  # type: ignore[arg-type]
        self.dedup.support_map[key] = idx
        return idx