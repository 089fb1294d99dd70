import math

import pytest

from sphvoronoi import constants


def test_distance_sq_is_128_eps_squared():
    eps = constants.FLOAT32_EPSILON
    assert constants.coincident_distance_sq() == pytest.approx(128.0 * eps * eps)


def test_distance_sq_is_twice_dot_tolerance():
    assert constants.coincident_distance_sq() == pytest.approx(
        2.0 * constants.COINCIDENT_DOT_TOL
    )


def test_distance_is_sqrt_of_distance_sq():
    d = constants.coincident_distance()
    assert d * d == pytest.approx(constants.coincident_distance_sq())


def test_threshold_at_one_million_points():
    assert constants.merge_threshold_for_density(1_000_000) == pytest.approx(
        3.5e-5, rel=0.02
    )


def test_threshold_at_four_million_points():
    assert constants.merge_threshold_for_density(4_000_000) == pytest.approx(
        1.8e-5, rel=0.03
    )


def test_threshold_floors_at_coincident_distance():
    huge = 10**18
    assert constants.merge_threshold_for_density(huge) == constants.coincident_distance()


@pytest.mark.parametrize("n", [1, 10, 1000, 10**6, 10**9])
def test_threshold_never_below_coincident_distance(n):
    assert constants.merge_threshold_for_density(n) >= constants.coincident_distance()


def test_threshold_non_increasing_with_density():
    values = [constants.merge_threshold_for_density(n) for n in (1, 10, 100, 10**4, 10**8)]
    assert values == sorted(values, reverse=True)


def test_zero_points_gives_infinite_threshold():
    assert constants.merge_threshold_for_density(0) == math.inf


def test_negative_points_rejected():
    with pytest.raises(ValueError):
        constants.merge_threshold_for_density(-1)