"""Final assembly of per-bin cell data into one global Voronoi diagram.

Each bin (shard) builds the cells of its own generators and owns the
vertices whose lowest generator it holds. References to vertices owned by
another bin are left as placeholders during construction. They are resolved
here before the per-bin buffers are concatenated and the cells are emitted
in generator order.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sphvoronoi.binning import BinAssignment
from sphvoronoi.edge_checks import resolve_edge_check_overflow
from sphvoronoi.packed import DEFERRED, pack_ref, unpack_ref
from sphvoronoi.records import (
    U32_MAX,
    DeferredSlot,
    EdgeCheckOverflow,
    SupportOverflow,
    VertexKey,
    VoronoiCell,
)
from sphvoronoi.shard import ShardState

__all__ = ["ShardedCellsData", "AssembledCells", "assemble_sharded_live_dedup"]

Vec3 = tuple[float, float, float]


@dataclass
class ShardedCellsData:
    """Per-bin construction output together with the generator-to-bin map."""

    assignment: BinAssignment
    shards: list[ShardState]


@dataclass
class AssembledCells:
    """Global vertex buffer, cells in generator order and edges needing repair.

    ``bad_edges`` holds packed edge keys whose two sides disagreed.
    """

    vertices: list[Vec3] = field(default_factory=list)
    vertex_keys: list[VertexKey] = field(default_factory=list)
    bad_edges: list[int] = field(default_factory=list)
    cells: list[VoronoiCell] = field(default_factory=list)
    cell_indices: list[int] = field(default_factory=list)


def _flush_support_overflow(data: ShardedCellsData) -> None:
    by_target: list[list[SupportOverflow]] = [[] for _ in range(data.assignment.num_bins)]
    for shard in data.shards:
        for entry in shard.dedup.support_overflow:
            by_target[entry.target_bin].append(entry)
        shard.dedup.support_overflow.clear()

    for target_bin, entries in enumerate(by_target):
        target_shard = data.shards[target_bin]
        for entry in entries:
            if entry.source_bin == target_bin:
                raise ValueError(f"support overflow from bin {target_bin} targets its own bin")
            idx = target_shard.dedup_support_owned(entry.support, entry.pos)
            source_output = data.shards[entry.source_bin].output
            source_output.cell_indices[entry.source_slot] = pack_ref(target_bin, idx)


def _resolve_deferred(data: ShardedCellsData, deferred: list[DeferredSlot]) -> None:
    """Give still-unresolved slots a vertex appended to the owning bin."""
    fallback: dict[VertexKey, tuple[int, int]] = {}
    generator_bin = data.assignment.generator_bin
    for entry in deferred:
        source_indices = data.shards[entry.source_bin].output.cell_indices
        if source_indices[entry.source_slot] != DEFERRED:
            continue
        owner_bin = generator_bin[entry.key[0]]
        known = fallback.get(entry.key)
        if known is not None:
            _, idx = known
        else:
            owner_output = data.shards[owner_bin].output
            idx = len(owner_output.vertices)
            owner_output.vertices.append(entry.pos)
            owner_output.vertex_keys.append(entry.key)
            fallback[entry.key] = (owner_bin, idx)
        source_indices[entry.source_slot] = pack_ref(owner_bin, idx)


def assemble_sharded_live_dedup(data: ShardedCellsData) -> AssembledCells:
    """Resolve cross-bin references and merge all shards into one diagram.

    The shards are consumed: their overflow, deferred and bad-edge lists are
    emptied and their index buffers patched in place.
    """
    num_bins = data.assignment.num_bins
    if len(data.shards) != num_bins:
        raise ValueError(f"expected {num_bins} shards, got {len(data.shards)}")

    _flush_support_overflow(data)

    bad_edges: list[int] = []
    overflow: list[EdgeCheckOverflow] = []
    deferred: list[DeferredSlot] = []
    for shard in data.shards:
        out = shard.output
        bad_edges.extend(out.bad_edges)
        overflow.extend(out.edge_check_overflow)
        deferred.extend(out.deferred)
        out.bad_edges.clear()
        out.edge_check_overflow.clear()
        out.deferred.clear()

    bad_edges.extend(resolve_edge_check_overflow(data.shards, overflow))
    _resolve_deferred(data, deferred)

    for bin_id, shard in enumerate(data.shards):
        if DEFERRED in shard.output.cell_indices:
            raise ValueError(f"unresolved deferred indices remain in bin {bin_id}")

    vertex_offsets: list[int] = []
    vertices: list[Vec3] = []
    vertex_keys: list[VertexKey] = []
    for bin_id, shard in enumerate(data.shards):
        out = shard.output
        if len(out.vertices) != len(out.vertex_keys):
            raise ValueError(f"vertex keys out of sync with vertex positions in bin {bin_id}")
        if len(vertices) > U32_MAX:
            raise ValueError("total vertex count exceeds u32 capacity")
        vertex_offsets.append(len(vertices))
        vertices.extend(out.vertices)
        vertex_keys.extend(out.vertex_keys)

    cells: list[VoronoiCell] = []
    cell_indices: list[int] = []
    for bin_id, local in zip(data.assignment.generator_bin, data.assignment.global_to_local):
        out = data.shards[bin_id].output
        start = out.cell_starts[local]
        count = out.cell_counts[local]
        cell_start = len(cell_indices)
        if cell_start + count > U32_MAX:
            raise ValueError("cell index buffer exceeds u32 capacity")
        for packed in out.cell_indices[start:start + count]:
            vbin, vlocal = unpack_ref(packed)
            if vbin >= num_bins or vlocal >= len(data.shards[vbin].output.vertices):
                raise ValueError(f"packed vertex reference {packed:#x} out of range")
            cell_indices.append(vertex_offsets[vbin] + vlocal)
        cells.append(VoronoiCell(cell_start, count))

    return AssembledCells(
        vertices=vertices,
        vertex_keys=vertex_keys,
        bad_edges=bad_edges,
        cells=cells,
        cell_indices=cell_indices,
    )