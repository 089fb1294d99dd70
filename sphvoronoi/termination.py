"""Neighbour-count schedule and early-termination cadence for cell building."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "KNN_RESUME_K",
    "KNN_RESTART_MAX",
    "KNN_RESTART_KS",
    "KNN_GRID_TARGET_DENSITY",
    "TerminationConfig",
]

KNN_RESUME_K = 18
KNN_RESTART_MAX = 48
KNN_RESTART_KS = (24, KNN_RESTART_MAX)

#: Target points per cell of the cube-map neighbour grid.
KNN_GRID_TARGET_DENSITY = 16.0

_DEFAULT_CHECK_START = 8
_DEFAULT_CHECK_STEP = 1


@dataclass(frozen=True)
class TerminationConfig:
    """When to attempt early termination while clipping a cell.

    ``max_k_cap`` bounds how many neighbours may be requested once the fixed
    schedule is exhausted; ``None`` means unbounded.
    """

    check_start: int = _DEFAULT_CHECK_START
    check_step: int = _DEFAULT_CHECK_STEP
    max_k_cap: int | None = None

    def should_check(self, neighbors_processed: int) -> bool:
        """Whether a termination check is due after this many neighbours."""
        return (
            self.check_step > 0
            and neighbors_processed >= self.check_start
            and (neighbors_processed - self.check_start) % self.check_step == 0
        )