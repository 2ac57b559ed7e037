"""
UPGMA: average-linkage clustering with a molecular clock.

Repeatedly joins the closest pair of clusters at height D[i][j] / 2 and
replaces them with their size-weighted average distance:

    D[u][k] = (D[i][k] * |i| + D[j][k] * |j|) / (|i| + |j|)

Branch lengths are the height difference between parent and child. On
ultrametric input every leaf ends up equidistant from the root. On other
input a child can sit above its parent, giving a small negative branch
that is kept as is.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from phylojoin.core.phylogeny.agglomerative import (
    AgglomerativeStrategy,
    ClusteringResult,
    PairSelection,
    agglomerate,
    first_minimum_pair,
)
from phylojoin.core.phylogeny.cluster_matrix import ClusterMatrix
from phylojoin.core.phylogeny.tree import Tree


class UPGMAStrategy(AgglomerativeStrategy):
    """Minimum-distance selection with size-weighted average updates."""

    name = "upgma"
    stop_at = 1

    def select_pair(self, matrix: ClusterMatrix, tree: Tree) -> PairSelection:
        return first_minimum_pair(matrix.active_submatrix(), matrix.active)

    def node_height(self, matrix: ClusterMatrix, tree: Tree, i: int, j: int) -> float:
        return matrix.distance(i, j) / 2.0

    def branch_lengths(
        self, matrix: ClusterMatrix, tree: Tree, i: int, j: int
    ) -> tuple[float, float]:
        height = self.node_height(matrix, tree, i, j)
        return height - tree.node(i).height, height - tree.node(j).height

    def merged_distances(
        self, matrix: ClusterMatrix, tree: Tree, i: int, j: int, others: list[int]
    ) -> np.ndarray:
        size_i = tree.node(i).size
        size_j = tree.node(j).size
        weighted = matrix.row(i, others) * size_i + matrix.row(j, others) * size_j
        return weighted / (size_i + size_j)


def upgma(names: Sequence[str], distances: np.ndarray) -> ClusteringResult:
    """
    Build a rooted UPGMA tree.

    Args:
        names: Taxon names, one per matrix row.
        distances: (n, n) finite symmetric distance matrix.

    Returns:
        ClusteringResult with exactly n - 1 merges.
    """
    return agglomerate(names, distances, UPGMAStrategy())
