"""Phylogeny module for agglomerative tree building.

Provides the shared agglomerative driver, the Neighbor-Joining and UPGMA
strategies, the node-arena Tree with Newick serialization, and the
high-level build functions used by the CLI.
"""

from phylojoin.core.phylogeny.agglomerative import (
    AgglomerativeStrategy,
    ClusteringResult,
    MergeStep,
    agglomerate,
)
from phylojoin.core.phylogeny.neighbor_joining import NeighborJoiningStrategy, neighbor_joining
from phylojoin.core.phylogeny.tree import Tree, TreeNode
from phylojoin.core.phylogeny.tree_builder import (
    TreeMethod,
    build_tree,
    distance_matrix_to_newick,
    infer_tree,
)
from phylojoin.core.phylogeny.upgma import UPGMAStrategy, upgma

__all__ = [
    "AgglomerativeStrategy",
    "ClusteringResult",
    "MergeStep",
    "NeighborJoiningStrategy",
    "Tree",
    "TreeMethod",
    "TreeNode",
    "UPGMAStrategy",
    "agglomerate",
    "build_tree",
    "distance_matrix_to_newick",
    "infer_tree",
    "neighbor_joining",
    "upgma",
]
