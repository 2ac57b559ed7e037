"""Pairwise evolutionary distance estimation.

Provides the Jukes-Cantor estimator, the DistanceMatrix container and the
all-pairs builder that connects them.
"""

from phylojoin.core.distance.builder import compute_distance_matrix
from phylojoin.core.distance.jukes_cantor import (
    SiteComparison,
    compare_sites,
    jc_correction,
    jukes_cantor_distance,
)
from phylojoin.core.distance.matrix import DistanceMatrix

__all__ = [
    "DistanceMatrix",
    "SiteComparison",
    "compare_sites",
    "compute_distance_matrix",
    "jc_correction",
    "jukes_cantor_distance",
]
