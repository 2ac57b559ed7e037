"""
Growing distance matrix for agglomerative clustering.

Each merge retires two rows and appends one new row for the merged
cluster. Rows carry an explicit state tag instead of being overwritten
with marker values, and every read goes through the ordered active set, so
stale cells of retired rows can never reach a selection or update step.
"""

from __future__ import annotations

from enum import Enum

import numpy as np


class RowState(str, Enum):
    """Lifecycle of a matrix row."""

    ACTIVE = "active"
    RETIRED = "retired"


class ClusterMatrix:
    """
    Distance matrix over leaves and merged clusters.

    Storage for all 2n - 1 rows of a full binary merge history is allocated
    up front. Row i always describes node i of the tree under construction.

    The active set is kept in increasing index order: leaves in input order,
    then merged clusters in creation order. Pair scans follow this order,
    which makes tie-breaking deterministic.
    """

    __slots__ = ("_active", "_capacity", "_d", "_n_rows", "_states")

    def __init__(self, distances: np.ndarray) -> None:
        """
        Initialize from a square matrix of leaf distances.

        The diagonal is forced to 0.0.

        Args:
            distances: (n, n) array of finite leaf-to-leaf distances.

        Raises:
            ValueError: If the array is not square or holds non-finite values.
        """
        distances = np.asarray(distances, dtype=np.float64)
        if distances.ndim != 2 or distances.shape[0] != distances.shape[1]:
            msg = f"Distance matrix must be square, got shape {distances.shape}"
            raise ValueError(msg)
        if not np.all(np.isfinite(distances)):
            msg = (
                "Distance matrix contains non-finite values; substitute unknown "
                "distances with a finite sentinel before clustering"
            )
            raise ValueError(msg)

        n = distances.shape[0]
        self._capacity = max(2 * n - 1, n)
        self._d = np.zeros((self._capacity, self._capacity), dtype=np.float64)
        self._d[:n, :n] = distances
        np.fill_diagonal(self._d, 0.0)

        self._n_rows = n
        self._states: list[RowState] = [RowState.ACTIVE] * n
        self._active: list[int] = list(range(n))

    @property
    def active(self) -> tuple[int, ...]:
        """Indices eligible for merging, in increasing order."""
        return tuple(self._active)

    @property
    def n_active(self) -> int:
        return len(self._active)

    @property
    def n_rows(self) -> int:
        """Rows allocated so far (leaves plus merged clusters)."""
        return self._n_rows

    def state(self, index: int) -> RowState:
        return self._states[index]

    def distance(self, i: int, j: int) -> float:
        """Distance between two active rows."""
        self._require_active(i)
        self._require_active(j)
        return float(self._d[i, j])

    def active_submatrix(self) -> np.ndarray:
        """Copy of the distances among active rows, in active-set order."""
        idx = np.asarray(self._active)
        return self._d[np.ix_(idx, idx)]

    def row(self, index: int, columns: list[int]) -> np.ndarray:
        """Distances from one active row to the given active columns."""
        self._require_active(index)
        return self._d[index, columns]

    def divergence(self, index: int) -> float:
        """Total distance from an active row to every active row."""
        self._require_active(index)
        return float(self._d[index, self._active].sum())

    def others(self, i: int, j: int) -> list[int]:
        """Active indices other than i and j, in active-set order."""
        return [k for k in self._active if k != i and k != j]

    def merge(self, i: int, j: int, new_distances: np.ndarray) -> int:
        """
        Replace rows i and j by one new row.

        Args:
            i: First merged row.
            j: Second merged row.
            new_distances: Distances from the merged cluster to each index in
                `others(i, j)`, in that order.

        Returns:
            Index of the new row.

        Raises:
            ValueError: If i or j is not active, i == j, the distance vector
                has the wrong length, or capacity is exhausted.
        """
        if i == j:
            msg = f"Cannot merge row {i} with itself"
            raise ValueError(msg)
        self._require_active(i)
        self._require_active(j)

        others = self.others(i, j)
        new_distances = np.asarray(new_distances, dtype=np.float64)
        if new_distances.shape != (len(others),):
            msg = (
                f"Expected {len(others)} distances for the merged row, "
                f"got shape {new_distances.shape}"
            )
            raise ValueError(msg)
        if self._n_rows >= self._capacity:
            msg = "Cluster matrix capacity exhausted"
            raise ValueError(msg)

        u = self._n_rows
        self._n_rows += 1
        self._d[u, others] = new_distances
        self._d[others, u] = new_distances
        self._d[u, u] = 0.0

        self._states[i] = RowState.RETIRED
        self._states[j] = RowState.RETIRED
        self._states.append(RowState.ACTIVE)
        self._active = [*others, u]
        return u

    def _require_active(self, index: int) -> None:
        if not 0 <= index < self._n_rows or self._states[index] is not RowState.ACTIVE:
            msg = f"Row {index} is not active"
            raise ValueError(msg)
