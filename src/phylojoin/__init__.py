"""
Phylojoin: distance-based phylogenetic tree reconstruction.

Estimates Jukes-Cantor corrected distances between aligned nucleotide
sequences and builds Neighbor-Joining or UPGMA trees from them, written
out in Newick format.
"""

__version__ = "0.1.0"
__author__ = "Phylojoin Team"

from phylojoin.core.distance import DistanceMatrix, compute_distance_matrix, jukes_cantor_distance
from phylojoin.core.phylogeny import TreeMethod, build_tree, infer_tree

__all__ = [
    "DistanceMatrix",
    "TreeMethod",
    "build_tree",
    "compute_distance_matrix",
    "infer_tree",
    "jukes_cantor_distance",
    "__version__",
]
