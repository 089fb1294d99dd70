# sphvoronoi

Building blocks for spherical Voronoi diagrams on the unit sphere. It is pure
Python and has no third-party dependencies.

The package covers the stages that come before and after per-cell
construction. These are merging of generators, bookkeeping for vertex
deduplication across spatial bins, final assembly, and repair of edges whose
two sides disagree.

## What is in the package

- `sphvoronoi.constants`
  - `coincident_distance()` and `coincident_distance_sq()` give the distance
    below which two generators count as coincident.
  - `merge_threshold_for_density(num_points)` returns the larger of that
    distance and 1% of the mean spacing `sqrt(4*pi/n)`. For zero points it
    returns `inf`. A negative count raises `ValueError`.
- `sphvoronoi.termination`
  - `TerminationConfig(check_start=8, check_step=1, max_k_cap=None)`.
    `should_check(neighbors_processed)` says whether an early-termination check
    is due.
  - The module also holds the neighbour-count schedule constants
    (`KNN_RESUME_K`, `KNN_RESTART_KS`, `KNN_RESTART_MAX`,
    `KNN_GRID_TARGET_DENSITY`).
- `sphvoronoi.preprocess`
  - `merge_close_points(points, threshold)` merges every group of points that
    are linked by distances below `threshold`. The lowest index in a group
    represents it.
  - It returns a `MergeResult` with `effective_points`,
    `original_to_effective` and `num_merged`.
  - If `threshold` is not positive, the points come back unchanged.
- `sphvoronoi.records`
  - `VoronoiCell(vertex_start, vertex_count)` describes one cell. Use
    `indices(cell_indices)` to get its vertex indices.
  - The module also defines the records that pass between stages:
    `EdgeCheck`, `EdgeCheckOverflow`, `EdgeToLater`, `EdgeOverflowLocal`,
    `DeferredSlot` and `SupportOverflow`.
- `sphvoronoi.packed`
  - `pack_ref(bin_id, local)` and `unpack_ref(packed)` handle (bin, vertex)
    references.
  - `pack_edge(a, b)` and `unpack_edge(key)` handle edge keys. A key does not
    depend on the order of its two generators.
  - The module defines the placeholders `DEFERRED` and `INVALID_INDEX`.
- `sphvoronoi.binning`
  - `choose_bin_layout(grid_res, threads=1)` chooses a `BinLayout`.
  - `assign_bins(points, grid, threads=1)` gives every generator a bin and a
    rank within that bin, in the grid's cell-major order, and returns a
    `BinAssignment`.
  - `grid` may be any object that satisfies the `CubeGrid` protocol: `res`,
    `cell_points(cell)` and `cell_to_face_ij(cell)`.
- `sphvoronoi.shard`
  - `ShardState`, `ShardDedup` and `ShardOutput` hold the state of one bin.
  - This includes the per-generator edge-check queues and
    `dedup_support_owned(support, pos)`.
- `sphvoronoi.edge_checks`
  - `collect_and_resolve_cell_edges(...)` walks the edges of one cell. It
    resolves edges to earlier cells in the same bin and returns the edges that
    go to later cells and the edges that cross into another bin.
  - `resolve_edge_check_overflow(shards, overflow)` pairs up the cross-bin
    checks. It returns the keys of edges that are missing a side or whose
    sides disagree.
  - `third_for_edge_endpoint(key, a, b)` returns the third generator of a
    vertex key.
- `sphvoronoi.assemble`
  - `assemble_sharded_live_dedup(ShardedCellsData(assignment, shards))`
    resolves the references between bins and concatenates the vertices of all
    bins.
  - It returns an `AssembledCells` with `vertices`, `vertex_keys`,
    `bad_edges`, `cells` (in generator order) and `cell_indices`.
- `sphvoronoi.edge_repair`
  - `repair_bad_edges(edge_keys, vertices, cells, cell_indices, vertex_keys)`
    welds mismatched or near-zero-length edge endpoints with a `UnionFind`.
  - It then rebuilds the cells and index buffer. If nothing had to be merged
    it returns `None`.

## What it does not do

The package does not compute a Voronoi diagram from points end to end. It has
no cube-map grid or nearest-neighbour search. Callers supply a grid through
the `CubeGrid` protocol. It also has no cell builder that clips a cell against
its neighbours' great circles. Cell vertices, edge neighbours and the shard
contents that `assemble_sharded_live_dedup` consumes must come from the
caller. It has no command-line interface.

## Install

```
pip install .
```

To install with the test dependencies and run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from sphvoronoi.constants import merge_threshold_for_density
from sphvoronoi.preprocess import merge_close_points

points = [(1.0, 0.0, 0.0), (1.0, 1e-9, 0.0), (0.0, 1.0, 0.0)]
result = merge_close_points(points, merge_threshold_for_density(len(points)))
print(result.num_merged)             # 1
print(result.original_to_effective)  # [0, 0, 1]
```

Edge keys are symmetric in their two generators:

```python
from sphvoronoi.packed import pack_edge, unpack_edge

assert pack_edge(7, 3) == pack_edge(3, 7)
assert unpack_edge(pack_edge(7, 3)) == (3, 7)
```