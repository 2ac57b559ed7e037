"""
Neighbor-Joining (Saitou & Nei 1987).

At each step the pair minimizing

    Q(i, j) = (m - 2) * D[i][j] - R[i] - R[j]

is joined, where m is the number of active clusters and R[i] is the sum
of distances from i to all active clusters. R is recomputed from the
current active set every iteration. When two clusters remain they are
joined directly with half their distance on each edge.

NJ does not assume a molecular clock; branch lengths may come out
negative on noisy input and are reported as computed.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from phylojoin.core.phylogeny.agglomerative import (
    AgglomerativeStrategy,
    ClusteringResult,
    MergeStep,
    PairSelection,
    agglomerate,
    first_minimum_pair,
    merge_pair,
)
from phylojoin.core.phylogeny.cluster_matrix import ClusterMatrix
from phylojoin.core.phylogeny.tree import Tree


def q_matrix(distances: np.ndarray) -> np.ndarray:
    """
    Neighbor-Joining Q-matrix for a block of active distances.

    Args:
        distances: (m, m) distances among the active clusters.

    Returns:
        (m, m) array of Q values. The diagonal is meaningless.
    """
    m = distances.shape[0]
    divergence = distances.sum(axis=1)
    return (m - 2) * distances - divergence[:, None] - divergence[None, :]


class NeighborJoiningStrategy(AgglomerativeStrategy):
    """Q-criterion selection with additive distance updates."""

    name = "nj"
    stop_at = 2

    def select_pair(self, matrix: ClusterMatrix, tree: Tree) -> PairSelection:
        return first_minimum_pair(q_matrix(matrix.active_submatrix()), matrix.active)

    def branch_lengths(
        self, matrix: ClusterMatrix, tree: Tree, i: int, j: int
    ) -> tuple[float, float]:
        d_ij = matrix.distance(i, j)
        m = matrix.n_active
        if m == 2:
            return d_ij / 2.0, d_ij / 2.0
        delta = (matrix.divergence(i) - matrix.divergence(j)) / (m - 2)
        return 0.5 * d_ij + 0.5 * delta, 0.5 * d_ij - 0.5 * delta

    def merged_distances(
        self, matrix: ClusterMatrix, tree: Tree, i: int, j: int, others: list[int]
    ) -> np.ndarray:
        d_ij = matrix.distance(i, j)
        return (matrix.row(i, others) + matrix.row(j, others) - d_ij) / 2.0

    def finish(self, matrix: ClusterMatrix, tree: Tree) -> MergeStep | None:
        """Join the last two clusters without consulting Q."""
        if matrix.n_active != 2:
            return None
        a, b = matrix.active
        selection = PairSelection(i=a, j=b, criterion=matrix.distance(a, b))
        return merge_pair(matrix, tree, self, selection, final=True)


def neighbor_joining(names: Sequence[str], distances: np.ndarray) -> ClusteringResult:
    """
    Build an unrooted NJ tree, reported with its final join as root.

    Args:
        names: Taxon names, one per matrix row.
        distances: (n, n) finite symmetric distance matrix.

    Returns:
        ClusteringResult with n - 2 Q-based merges plus one final join.
    """
    return agglomerate(names, distances, NeighborJoiningStrategy())
