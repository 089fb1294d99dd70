import pytest

from sphvoronoi.edge_repair import (
    UnionFind,
    edge_segments_for_neighbor,
    repair_bad_edges,
    shared_neighbor,
)
from sphvoronoi.packed import pack_edge
from sphvoronoi.records import VoronoiCell

KEYS = [
    (0, 1, 2),
    (0, 1, 3),
    (0, 2, 3),
    (0, 1, 2),
    (0, 1, 3),
    (1, 2, 3),
]
VERTICES = [
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, 0.0, 1.0),
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (-1.0, 0.0, 0.0),
]
CELLS = [VoronoiCell(0, 3), VoronoiCell(3, 3)]


def _cell(cells, indices, i):
    return cells[i].indices(indices)


def test_union_find_joins_sets():
    uf = UnionFind(4)
    assert uf.union(0, 1) is True
    assert uf.union(1, 0) is False
    assert uf.find(0) == uf.find(1)
    assert uf.find(2) != uf.find(0)


def test_union_find_transitive():
    uf = UnionFind(5)
    uf.union(0, 1)
    uf.union(2, 3)
    uf.union(1, 3)
    assert len({uf.find(i) for i in range(4)}) == 1
    assert uf.find(4) == 4


def test_union_find_out_of_range():
    uf = UnionFind(2)
    with pytest.raises(IndexError):
        uf.find(5)


def test_shared_neighbor_found():
    assert shared_neighbor(0, (0, 1, 2), (0, 1, 3)) == 1
    assert shared_neighbor(0, (0, 1, 3), (0, 2, 3)) == 3


def test_shared_neighbor_missing_cell():
    assert shared_neighbor(4, (0, 1, 2), (0, 1, 3)) is None


def test_edge_segments_for_neighbor():
    indices = [0, 1, 2, 4, 3, 5]
    assert edge_segments_for_neighbor(0, 1, CELLS, indices, KEYS) == [(0, 1)]
    assert edge_segments_for_neighbor(1, 0, CELLS, indices, KEYS) == [(4, 3)]


def test_edge_segments_unknown_cell_is_empty():
    indices = [0, 1, 2, 4, 3, 5]
    assert edge_segments_for_neighbor(7, 0, CELLS, indices, KEYS) == []


def test_repair_merges_duplicate_endpoints():
    indices = [0, 1, 2, 4, 3, 5]
    result = repair_bad_edges([pack_edge(0, 1)], VERTICES, CELLS, indices, KEYS)
    assert result is not None
    cells, new_indices = result
    assert len(cells) == len(CELLS)
    cell0 = set(_cell(cells, new_indices, 0))
    cell1 = set(_cell(cells, new_indices, 1))
    assert cell0 & cell1 == {0, 1}


def test_repair_merges_single_shared_endpoint():
    indices = [0, 1, 2, 1, 3, 5]
    result = repair_bad_edges([pack_edge(0, 1)], VERTICES, CELLS, indices, KEYS)
    assert result is not None
    cells, new_indices = result
    assert set(_cell(cells, new_indices, 0)) <= {0, 1, 2}
    assert set(_cell(cells, new_indices, 0)) & set(_cell(cells, new_indices, 1)) == {0, 1}


def test_repair_consistent_edge_returns_none():
    indices = [0, 1, 2, 1, 0, 5]
    assert repair_bad_edges([pack_edge(0, 1)], VERTICES, CELLS, indices, KEYS) is None


def test_repair_without_edges_returns_none():
    indices = [0, 1, 2, 4, 3, 5]
    assert repair_bad_edges([], VERTICES, CELLS, indices, KEYS) is None


def _one_sided_setup(v1):
    vertices = [
        (1.0, 0.0, 0.0),
        v1,
        (0.0, 1.0, 0.0),
        (1.0, 0.0, 0.0),
        (0.0, 0.0, 1.0),
        (0.0, -1.0, 0.0),
    ]
    keys = [(0, 1, 2), (0, 1, 3), (0, 2, 3), (1, 2, 3), (1, 3, 4), (1, 2, 4)]
    indices = [0, 1, 2, 3, 4, 5]
    return vertices, keys, indices


def test_repair_collapses_one_sided_degenerate_edge():
    vertices, keys, indices = _one_sided_setup((1.0, 1e-8, 0.0))
    result = repair_bad_edges([pack_edge(0, 1)], vertices, CELLS, indices, keys)
    assert result is not None
    cells, new_indices = result
    cell0 = _cell(cells, new_indices, 0)
    cell1 = _cell(cells, new_indices, 1)
    assert len(cell0) == 2
    assert cell0[0] == cell1[0]
    assert len(cell1) == 3


def test_repair_ignores_long_one_sided_edge():
    vertices, keys, indices = _one_sided_setup((0.9, 0.1, 0.0))
    assert repair_bad_edges([pack_edge(0, 1)], vertices, CELLS, indices, keys) is None