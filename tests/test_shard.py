import pytest

from sphvoronoi.records import EdgeCheck
from sphvoronoi.shard import ShardState


def _check(key):
    return EdgeCheck(key=key, thirds=(2, 3), indices=(0, 1))


def test_new_shard_sizes_follow_generator_count():
    shard = ShardState(3)
    assert shard.output.cell_starts == [0, 0, 0]
    assert shard.output.cell_counts == [0, 0, 0]
    assert len(shard.dedup.edge_checks) == 3


def test_push_and_take_edge_checks():
    shard = ShardState(2)
    first, second = _check(10), _check(11)
    shard.dedup.push_edge_check(1, first)
    shard.dedup.push_edge_check(1, second)
    assert shard.dedup.take_edge_checks(1) == [first, second]
    assert shard.dedup.take_edge_checks(1) == []
    assert shard.dedup.take_edge_checks(0) == []


def test_edge_checks_are_kept_per_local():
    shard = ShardState(2)
    check = _check(5)
    shard.dedup.push_edge_check(0, check)
    assert shard.dedup.take_edge_checks(1) == []
    assert shard.dedup.take_edge_checks(0) == [check]


def test_edge_check_out_of_range_local():
    shard = ShardState(1)
    with pytest.raises(IndexError):
        shard.dedup.push_edge_check(4, _check(1))


def test_dedup_support_reuses_index():
    shard = ShardState(1)
    first = shard.dedup_support_owned([1, 2, 3, 4], (1.0, 0.0, 0.0))
    again = shard.dedup_support_owned((1, 2, 3, 4), (0.5, 0.5, 0.0))
    assert first == again == 0
    assert shard.output.vertices == [(1.0, 0.0, 0.0)]


def test_dedup_support_distinct_sets_get_new_indices():
    shard = ShardState(1)
    a = shard.dedup_support_owned([1, 2, 3, 4], (1.0, 0.0, 0.0))
    b = shard.dedup_support_owned([1, 2, 3, 5], (0.0, 1.0, 0.0))
    assert (a, b) == (0, 1)
    assert shard.output.vertices[b] == (0.0, 1.0, 0.0)