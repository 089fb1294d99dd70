"""Numerical thresholds shared by Voronoi construction and preprocessing."""

from __future__ import annotations

import math

__all__ = [
    "FLOAT32_EPSILON",
    "COINCIDENT_DOT_TOL",
    "coincident_distance_sq",
    "coincident_distance",
    "merge_threshold_for_density",
]

#: Machine epsilon of IEEE-754 single precision.
FLOAT32_EPSILON = 2.0**-23

#: Generators whose dot product differs from 1 by this amount are coincident.
#:
#: For unit vectors ``1 - dot ~ distance**2 / 2``; the tolerance comes from
#: single-precision rounding of normalised inputs with a safety multiplier.
COINCIDENT_DOT_TOL = 64.0 * FLOAT32_EPSILON * FLOAT32_EPSILON

_DENSITY_FRACTION = 0.01


def coincident_distance_sq() -> float:
    """Squared Euclidean distance below which generators are coincident."""
    return 2.0 * COINCIDENT_DOT_TOL


def coincident_distance() -> float:
    """Euclidean distance below which generators are coincident."""
    return math.sqrt(coincident_distance_sq())


def merge_threshold_for_density(num_points: int) -> float:
    """Density-adaptive merge distance for ``num_points`` generators.

    The result is the larger of the coincidence distance and one percent of
    the mean spacing ``sqrt(4*pi/n)`` of ``n`` points on the unit sphere.
    """
    if num_points < 0:
        raise ValueError(f"num_points must be non-negative, got {num_points}")
    if num_points == 0:
        return math.inf
    mean_spacing = math.sqrt(4.0 * math.pi / num_points)
    return max(coincident_distance(), mean_spacing * _DENSITY_FRACTION)