import pytest

from sphvoronoi.binning import assign_bins, choose_bin_layout


class FakeGrid:
    def __init__(self, res, cells):
        self.res = res
        self._cells = cells

    def cell_points(self, cell):
        return self._cells.get(cell, [])

    def cell_to_face_ij(self, cell):
        per_face = self.res * self.res
        face, rem = divmod(cell, per_face)
        iv, iu = divmod(rem, self.res)
        return face, iu, iv


def _grid_with_points(res, n):
    num_cells = 6 * res * res
    cells = {}
    for g in range(n):
        cells.setdefault((g * 7) % num_cells, []).append(g)
    return FakeGrid(res, cells)


def test_single_thread_layout_has_one_bin_per_face():
    layout = choose_bin_layout(8, 1)
    assert layout.bin_res == 1
    assert layout.num_bins == 6


@pytest.mark.parametrize("grid_res", [1, 2, 3, 4, 7, 8, 16, 33])
@pytest.mark.parametrize("threads", [1, 4, 8, 48, 200])
def test_layout_invariants(grid_res, threads):
    layout = choose_bin_layout(grid_res, threads)
    assert layout.num_bins == 6 * layout.bin_res**2
    assert layout.bin_res * layout.bin_stride >= grid_res
    assert 1 <= layout.bin_res <= grid_res
    assert layout.num_bins <= 96


def test_layout_grows_with_threads():
    assert choose_bin_layout(16, 48).num_bins > choose_bin_layout(16, 1).num_bins


def test_assignment_is_consistent():
    n = 100
    assignment = assign_bins(list(range(n)), _grid_with_points(4, n), threads=8)
    assert sum(len(gens) for gens in assignment.bin_generators) == n
    for g in range(n):
        b, local = assignment.unpack(assignment.gen_map[g])
        assert b == assignment.generator_bin[g]
        assert local == assignment.global_to_local[g]
        assert assignment.bin_generators[b][local] == g


def test_assignment_follows_cell_order():
    grid = FakeGrid(2, {0: [3, 1], 1: [0], 2: [2]})
    assignment = assign_bins([None] * 4, grid)
    assert assignment.num_bins == 6
    assert assignment.bin_generators[0] == [3, 1, 0, 2]
    assert assignment.global_to_local[0] == 2


def test_mask_and_shift_cover_32_bits():
    assignment = assign_bins(list(range(10)), _grid_with_points(4, 10), threads=48)
    assert (assignment.num_bins - 1) << assignment.local_shift < 1 << 32
    assert assignment.local_mask == (1 << assignment.local_shift) - 1


def test_uncovered_point_is_rejected():
    grid = FakeGrid(2, {0: [0, 1]})
    with pytest.raises(ValueError):
        assign_bins([None] * 3, grid)


def test_out_of_range_point_is_rejected():
    grid = FakeGrid(2, {0: [0, 5]})
    with pytest.raises(ValueError):
        assign_bins([None] * 2, grid)


def test_duplicate_point_is_rejected():
    grid = FakeGrid(2, {0: [0, 1], 3: [1]})
    with pytest.raises(ValueError):
        assign_bins([None] * 2, grid)