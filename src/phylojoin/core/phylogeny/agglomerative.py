"""
Shared driver for agglomerative tree construction.

Neighbor-Joining and UPGMA follow the same loop: pick the best pair among
active clusters, join their nodes, write one new matrix row for the merged
cluster and retire the two merged rows. They differ only in how the pair
is chosen, how branch lengths are set, and how the new row is computed.
Those three decisions live in an AgglomerativeStrategy; the loop itself is
implemented once in `agglomerate()`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import ClassVar, NamedTuple

import numpy as np

from phylojoin.core.constants import MIN_TAXA, NEWICK_DECIMALS
from phylojoin.core.exceptions import DistanceMatrixNotSquareError, TooFewTaxaError
from phylojoin.core.phylogeny.cluster_matrix import ClusterMatrix
from phylojoin.core.phylogeny.tree import Tree

logger = logging.getLogger(__name__)


class PairSelection(NamedTuple):
    """Pair chosen in one iteration and the criterion value it scored."""

    i: int
    j: int
    criterion: float


@dataclass(frozen=True)
class MergeStep:
    """Record of one join performed while building the tree.

    Attributes:
        left: Matrix/tree index of the first merged entity.
        right: Matrix/tree index of the second merged entity.
        node: Index of the newly created internal node.
        criterion: Value of the selection criterion for this pair
            (raw distance for UPGMA, Q for NJ, distance for the final join).
        branch_left: Edge length from the new node to `left`.
        branch_right: Edge length from the new node to `right`.
        final: True for the unconditional two-way join that ends NJ.
    """

    left: int
    right: int
    node: int
    criterion: float
    branch_left: float
    branch_right: float
    final: bool = False


@dataclass
class ClusteringResult:
    """Tree produced by a clustering run together with its merge history."""

    method: str
    tree: Tree
    merges: list[MergeStep] = field(default_factory=list)

    @property
    def n_merges(self) -> int:
        return len(self.merges)

    @property
    def criterion_merges(self) -> list[MergeStep]:
        """Merges chosen by the selection criterion (excludes the final join)."""
        return [step for step in self.merges if not step.final]

    def newick(self, decimals: int = NEWICK_DECIMALS) -> str:
        return self.tree.to_newick(decimals=decimals)


def first_minimum_pair(values: np.ndarray, active: Sequence[int]) -> PairSelection:
    """
    Locate the smallest entry strictly above the diagonal.

    Ties go to the first pair in row-major order over the active set, i.e.
    the smallest row position, then the smallest column position.

    Args:
        values: (m, m) criterion matrix aligned with `active`.
        active: Matrix indices corresponding to the rows of `values`.

    Returns:
        PairSelection with matrix indices i < j.
    """
    rows, cols = np.triu_indices(len(active), k=1)
    upper = values[rows, cols]
    # argmin returns the first occurrence, and triu_indices is row-major
    best = int(np.argmin(upper))
    return PairSelection(
        i=active[int(rows[best])],
        j=active[int(cols[best])],
        criterion=float(upper[best]),
    )


class AgglomerativeStrategy(ABC):
    """
    Strategy interface plugged into `agglomerate()`.

    Subclasses set `name` and `stop_at`: the loop runs while more than
    `stop_at` entities are active, then `finish()` completes the tree.
    """

    name: ClassVar[str]
    stop_at: ClassVar[int]

    @abstractmethod
    def select_pair(self, matrix: ClusterMatrix, tree: Tree) -> PairSelection:
        """Choose the next pair of active entities to merge."""

    @abstractmethod
    def branch_lengths(
        self, matrix: ClusterMatrix, tree: Tree, i: int, j: int
    ) -> tuple[float, float]:
        """Edge lengths from the new node to i and to j."""

    @abstractmethod
    def merged_distances(
        self, matrix: ClusterMatrix, tree: Tree, i: int, j: int, others: list[int]
    ) -> np.ndarray:
        """Distances from the merged cluster to each index in `others`."""

    def node_height(self, matrix: ClusterMatrix, tree: Tree, i: int, j: int) -> float:
        """Height recorded on the new node. Not tracked by default."""
        return 0.0

    def finish(self, matrix: ClusterMatrix, tree: Tree) -> MergeStep | None:
        """Complete the tree once the loop stops. Nothing to do by default."""
        return None


def merge_pair(
    matrix: ClusterMatrix,
    tree: Tree,
    strategy: AgglomerativeStrategy,
    selection: PairSelection,
    *,
    final: bool = False,
) -> MergeStep:
    """
    Perform one join on both the tree and the matrix.

    Branch lengths, node height and the merged row are all computed from the
    matrix state before the merge.
    """
    i, j = selection.i, selection.j
    branch_i, branch_j = strategy.branch_lengths(matrix, tree, i, j)
    height = strategy.node_height(matrix, tree, i, j)
    others = matrix.others(i, j)
    new_row = strategy.merged_distances(matrix, tree, i, j, others)

    node = tree.join(i, j, branch_i, branch_j, height=height)
    row = matrix.merge(i, j, new_row)
    if node != row:
        msg = f"Tree node {node} and matrix row {row} are out of step"
        raise RuntimeError(msg)

    step = MergeStep(
        left=i,
        right=j,
        node=node,
        criterion=selection.criterion,
        branch_left=branch_i,
        branch_right=branch_j,
        final=final,
    )
    logger.debug(
        f"{strategy.name}: joined {i} and {j} into {node} "
        f"(criterion={selection.criterion:.6g}, branches={branch_i:.6g}/{branch_j:.6g})"
    )
    return step


def agglomerate(
    names: Sequence[str],
    distances: np.ndarray,
    strategy: AgglomerativeStrategy,
) -> ClusteringResult:
    """
    Build a binary tree by repeated pairwise merging.

    All shape checks happen before any merge.

    Args:
        names: Taxon names, one per matrix row.
        distances: (n, n) finite, symmetric leaf distance matrix.
        strategy: Pair selection, branch length and update rules.

    Returns:
        ClusteringResult with the finished tree and the ordered merges.

    Raises:
        TooFewTaxaError: If fewer than two taxa are given.
        DistanceMatrixNotSquareError: If the matrix shape does not match names.
        ValueError: If the matrix contains non-finite values.
    """
    n = len(names)
    if n < MIN_TAXA:
        raise TooFewTaxaError(n, MIN_TAXA)
    distances = np.asarray(distances, dtype=np.float64)
    if distances.ndim != 2 or distances.shape != (n, n):
        cols = distances.shape[1] if distances.ndim == 2 else 0
        raise DistanceMatrixNotSquareError(rows=distances.shape[0], cols=cols)

    matrix = ClusterMatrix(distances)
    tree = Tree()
    for name in names:
        tree.add_leaf(name)

    result = ClusteringResult(method=strategy.name, tree=tree)
    while matrix.n_active > strategy.stop_at:
        selection = strategy.select_pair(matrix, tree)
        result.merges.append(merge_pair(matrix, tree, strategy, selection))

    final = strategy.finish(matrix, tree)
    if final is not None:
        result.merges.append(final)

    logger.info(f"{strategy.name}: built tree over {n} taxa in {result.n_merges} merges")
    return result
