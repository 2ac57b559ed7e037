"""Build phylogenetic trees from distance matrices or aligned sequences.

This module converts a DistanceMatrix into a Neighbor-Joining or UPGMA
tree in Newick format. Unknown distances are replaced by a large finite
sentinel before clustering, and all input-shape checks run before the
first merge.
"""

from __future__ import annotations

import logging
from enum import Enum

from phylojoin.core.constants import MIN_TAXA
from phylojoin.core.distance.builder import compute_distance_matrix
from phylojoin.core.distance.matrix import DistanceMatrix
from phylojoin.core.exceptions import MatrixTooLargeError, TooFewTaxaError
from phylojoin.core.phylogeny.agglomerative import (
    AgglomerativeStrategy,
    ClusteringResult,
    agglomerate,
)
from phylojoin.core.phylogeny.neighbor_joining import NeighborJoiningStrategy
from phylojoin.core.phylogeny.upgma import UPGMAStrategy
from phylojoin.models.alignment import Alignment
from phylojoin.models.config import ClusteringConfig, PhylojoinConfig

logger = logging.getLogger(__name__)


class TreeMethod(str, Enum):
    """Phylogenetic tree building method."""

    NJ = "nj"
    UPGMA = "upgma"


def strategy_for(method: TreeMethod) -> AgglomerativeStrategy:
    """Instantiate the clustering strategy for a method."""
    if method == TreeMethod.NJ:
        return NeighborJoiningStrategy()
    if method == TreeMethod.UPGMA:
        return UPGMAStrategy()
    msg = f"Unknown method: {method}"
    raise ValueError(msg)


def build_tree(
    matrix: DistanceMatrix,
    method: TreeMethod | str = TreeMethod.NJ,
    config: ClusteringConfig | None = None,
) -> ClusteringResult:
    """
    Build a tree from a pairwise distance matrix.

    Args:
        matrix: Distance matrix; NaN entries are unknown distances.
        method: Clustering method (NJ or UPGMA).
        config: Clustering configuration (uses defaults if None).

    Returns:
        ClusteringResult holding the tree and merge history.

    Raises:
        TooFewTaxaError: If the matrix has fewer than two taxa.
        MatrixTooLargeError: If the matrix exceeds config.max_taxa.
    """
    config = config or ClusteringConfig()
    method = TreeMethod(method)

    n_taxa = len(matrix)
    if n_taxa < MIN_TAXA:
        raise TooFewTaxaError(n_taxa, MIN_TAXA)
    if n_taxa > config.max_taxa:
        raise MatrixTooLargeError(n_taxa, config.max_taxa)

    if not matrix.is_symmetric():
        logger.warning("Distance matrix is not symmetric; using values as given")

    undefined = matrix.undefined_count
    if undefined > 0:
        logger.warning(
            f"{undefined} taxon pairs lack a distance; using sentinel distance "
            f"({config.unknown_distance:g})"
        )

    distances = matrix.filled(config.unknown_distance)
    return agglomerate(list(matrix.names), distances, strategy_for(method))


def distance_matrix_to_newick(
    matrix: DistanceMatrix,
    method: TreeMethod | str = TreeMethod.NJ,
    config: ClusteringConfig | None = None,
) -> str:
    """
    Convert a distance matrix to a Newick tree string.

    Returns:
        Newick string terminated by ';' (no trailing newline).
    """
    config = config or ClusteringConfig()
    result = build_tree(matrix, method, config)
    return result.newick(decimals=config.branch_length_decimals)


def infer_tree(
    alignment: Alignment,
    method: TreeMethod | str | None = None,
    config: PhylojoinConfig | None = None,
) -> tuple[DistanceMatrix, ClusteringResult]:
    """
    Estimate Jukes-Cantor distances for an alignment and cluster them.

    Args:
        alignment: Aligned sequences.
        method: Clustering method; defaults to config.clustering.method.
        config: Full configuration (uses defaults if None).

    Returns:
        Tuple of (distance matrix, clustering result).
    """
    config = config or PhylojoinConfig()
    method = TreeMethod(method or config.clustering.method)

    n_taxa = len(alignment)
    if n_taxa < MIN_TAXA:
        raise TooFewTaxaError(n_taxa, MIN_TAXA)

    matrix = compute_distance_matrix(
        alignment,
        num_workers=config.distance.num_workers,
        max_taxa=config.clustering.max_taxa,
    )
    return matrix, build_tree(matrix, method, config.clustering)
