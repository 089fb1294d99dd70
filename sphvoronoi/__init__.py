"""Building blocks for spherical Voronoi diagrams on the unit sphere.

Generator merging, sharded vertex-deduplication bookkeeping, final assembly
and edge repair; per-cell clipping and neighbour search are not included.
"""

__version__ = "0.1.0"

__all__ = [
    "assemble",
    "binning",
    "constants",
    "edge_checks",
    "edge_repair",
    "packed",
    "preprocess",
    "records",
    "shard",
    "termination",
]