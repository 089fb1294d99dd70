"""Cross-checking of shared edges between neighbouring cells.

Every Voronoi edge is emitted by the two cells that share it. The cell
processed first queues an :class:`~sphvoronoi.records.EdgeCheck` for the
later one, and the later one compares its own endpoints against it. This
reuses vertex indices and records edges whose two sides disagree. Edges
between cells of different bins are matched after all bins are built.
"""

from __future__ import annotations

from collections.abc import Iterable, MutableSequence, Sequence
from itertools import groupby

from sphvoronoi.binning import BinAssignment
from sphvoronoi.packed import DEFERRED, INVALID_INDEX, pack_edge, pack_ref, unpack_edge
from sphvoronoi.records import (
    U32_MAX,
    EdgeCheck,
    EdgeCheckOverflow,
    EdgeOverflowLocal,
    EdgeToLater,
    VertexKey,
)
from sphvoronoi.shard import ShardState

__all__ = [
    "NO_NEIGHBOR",
    "third_for_edge_endpoint",
    "collect_and_resolve_cell_edges",
    "resolve_edge_check_overflow",
]

#: Marker in ``edge_neighbors`` for an edge without a neighbouring generator.
NO_NEIGHBOR = U32_MAX

CellVertex = tuple[VertexKey, Sequence[float]]


def third_for_edge_endpoint(key: VertexKey, a: int, b: int) -> int:
    """The generator of vertex ``key`` other than the edge endpoints ``a`` and ``b``."""
    if a not in key or b not in key:
        raise ValueError(f"vertex key {key!r} does not contain edge endpoints ({a}, {b})")
    return key[0] ^ key[1] ^ key[2] ^ a ^ b


def _thirds(
    cell_vertices: Sequence[CellVertex], locals_: tuple[int, int], edge_key: int
) -> tuple[int, int]:
    a, b = unpack_edge(edge_key)
    return (
        third_for_edge_endpoint(cell_vertices[locals_[0]][0], a, b),
        third_for_edge_endpoint(cell_vertices[locals_[1]][0], a, b),
    )


def collect_and_resolve_cell_edges(
    cell_idx: int,
    local: int,
    cell_vertices: Sequence[CellVertex],
    edge_neighbors: Sequence[int],
    assignment: BinAssignment,
    shard: ShardState,
    vertex_indices: MutableSequence[int],
) -> tuple[list[EdgeToLater], list[EdgeOverflowLocal]]:
    """Walk a cell's edges once, resolving edges to earlier cells in the same bin.

    Edge ``i`` runs from vertex ``i`` to vertex ``i + 1`` and borders
    ``edge_neighbors[i]``. Checks queued for this cell are consumed; matching
    endpoints fill ``vertex_indices`` in place, and edges whose sides disagree
    or were never checked are appended to ``shard.output.bad_edges``.

    Returns the edges to later cells of this bin and the edges that cross
    into another bin.
    """
    n = len(cell_vertices)
    if len(edge_neighbors) != n:
        raise ValueError(
            f"edge neighbour data out of sync: {len(edge_neighbors)} entries for {n} vertices"
        )
    if len(vertex_indices) != n:
        raise ValueError(
            f"vertex index data out of sync: {len(vertex_indices)} entries for {n} vertices"
        )

    bin_a, local_a = assignment.unpack(assignment.gen_map[cell_idx])
    if local_a != local:
        raise ValueError(f"local index mismatch for cell {cell_idx}: {local_a} != {local}")

    incoming = shard.dedup.take_edge_checks(local)
    matched: set[int] = set()
    edges_to_later: list[EdgeToLater] = []
    edges_overflow: list[EdgeOverflowLocal] = []
    bad_edges = shard.output.bad_edges

    for i, neighbor in enumerate(edge_neighbors):
        if neighbor == NO_NEIGHBOR or neighbor == cell_idx:
            continue
        j = (i + 1) % n
        locals_ = (i, j) if cell_vertices[i][0] <= cell_vertices[j][0] else (j, i)
        edge_key = pack_edge(cell_idx, neighbor)
        bin_b, local_b = assignment.unpack(assignment.gen_map[neighbor])

        if bin_a != bin_b:
            side = 0 if cell_idx <= neighbor else 1
            edges_overflow.append(EdgeOverflowLocal(key=edge_key, locals=locals_, side=side))
            continue
        if local < local_b:
            edges_to_later.append(EdgeToLater(key=edge_key, local_b=local_b, locals=locals_))
            continue

        found = next(
            ((idx, check) for idx, check in enumerate(incoming) if check.key == edge_key),
            None,
        )
        if found is None:
            bad_edges.append(edge_key)
            continue

        idx, check = found
        matched.add(idx)
        my_thirds = _thirds(cell_vertices, locals_, edge_key)
        if check.thirds == my_thirds:
            for slot, index in zip(locals_, check.indices):
                vertex_indices[slot] = index
            continue

        # Partial match: reuse any shared endpoint, whatever its slot.
        for check_third, index in zip(check.thirds, check.indices):
            for slot, my_third in zip(locals_, my_thirds):
                if check_third == my_third:
                    vertex_indices[slot] = index
        bad_edges.append(edge_key)

    bad_edges.extend(check.key for idx, check in enumerate(incoming) if idx not in matched)
    return edges_to_later, edges_overflow


def _patch(shard: ShardState, slot: int, owner_bin: int, index: int) -> None:
    shard.output.cell_indices[slot] = pack_ref(owner_bin, index)


def _match_pair(shards: Sequence[ShardState], a: EdgeCheckOverflow, b: EdgeCheckOverflow) -> bool:
    """Exchange vertex references between two sides; True if they disagree."""
    if a.source_bin == b.source_bin:
        raise ValueError(f"both sides of edge {a.key} come from bin {a.source_bin}")
    a_shard, b_shard = shards[a.source_bin], shards[b.source_bin]

    if a.thirds == b.thirds:
        pairs = [(0, 0), (1, 1)]
    else:
        pairs = [
            (ak, bk)
            for ak in range(2)
            for bk in range(2)
            if a.thirds[ak] == b.thirds[bk]
        ]
    for ak, bk in pairs:
        if a.indices[ak] != INVALID_INDEX:
            _patch(b_shard, b.slots[bk], a.source_bin, a.indices[ak])
        if b.indices[bk] != INVALID_INDEX:
            _patch(a_shard, a.slots[ak], b.source_bin, b.indices[bk])
    return a.thirds != b.thirds


def resolve_edge_check_overflow(
    shards: Sequence[ShardState], overflow: Iterable[EdgeCheckOverflow]
) -> list[int]:
    """Pair up cross-bin edge checks and patch the deferred slots they resolve.

    Returns the keys of edges whose sides are missing or disagree.
    """
    entries = sorted(overflow, key=lambda e: (e.key, e.side))
    bad_edges: list[int] = []
    for key, group in groupby(entries, key=lambda e: e.key):
        items = list(group)
        while items:
            if len(items) == 1:
                bad_edges.append(key)
                break
            a, b = items[0], items[1]
            del items[:2]
            if a.side == b.side:
                bad_edges.append(key)
            elif _match_pair(shards, a, b):
                bad_edges.append(key)
    return bad_edges


# Re-exported for callers that test for unresolved slots.
_ = DEFERRED