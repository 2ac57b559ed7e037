"""
Pairwise evolutionary distance matrix backed by a NumPy array.

This module provides the DistanceMatrix class that sits between the
distance estimator and the clustering engine. Undefined distances
(saturated pairs or pairs without comparable sites) are stored as NaN and
must be substituted explicitly before clustering.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import numpy as np
import polars as pl

from phylojoin.core.exceptions import DistanceMatrixNotSquareError

logger = logging.getLogger(__name__)


class DistanceMatrix:
    """
    Symmetric pairwise distance matrix with taxon-name indexing.

    Values are float64. NaN marks an undefined distance. Taxon order is the
    input order and is preserved in every output.

    Example:
        >>> dm = DistanceMatrix(["A", "B"], np.array([[0.0, 0.3], [0.3, 0.0]]))
        >>> dm.get("A", "B")
        0.3
    """

    __slots__ = ("_names", "_name_to_idx", "_values")

    def __init__(self, names: Sequence[str], values: np.ndarray) -> None:
        """
        Initialize distance matrix.

        Args:
            names: Taxon names, one per row.
            values: Square array of distances; NaN for undefined pairs.

        Raises:
            DistanceMatrixNotSquareError: If the array is not n x n for n names.
        """
        array = np.array(values, dtype=np.float64)
        n = len(names)
        if array.ndim != 2 or array.shape != (n, n):
            rows = array.shape[0] if array.ndim >= 1 else 0
            cols = array.shape[1] if array.ndim == 2 else 0
            raise DistanceMatrixNotSquareError(rows=max(rows, n), cols=cols)

        self._names: tuple[str, ...] = tuple(names)
        self._values = array
        self._values.setflags(write=False)

        self._name_to_idx: dict[str, int] = {}
        for idx, name in enumerate(self._names):
            if name in self._name_to_idx:
                logger.warning(f"Duplicate taxon name '{name}' in distance matrix")
                continue
            self._name_to_idx[name] = idx

    @classmethod
    def from_file(cls, path: Path, unknown_token: str = "N/A") -> DistanceMatrix:
        """
        Load a distance matrix from a text, CSV or TSV file.

        Args:
            path: Path to the matrix file.
            unknown_token: Token denoting an unknown distance.

        Returns:
            DistanceMatrix instance
        """
        from phylojoin.core.parsers import DistanceMatrixParser

        return DistanceMatrixParser(path, unknown_token=unknown_token).parse()

    @property
    def names(self) -> tuple[str, ...]:
        """Taxon names in row order."""
        return self._names

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the underlying array (NaN = undefined)."""
        return self._values

    def __len__(self) -> int:
        """Number of taxa in the matrix."""
        return len(self._names)

    def index_of(self, name: str) -> int:
        """Row index of a taxon name."""
        try:
            return self._name_to_idx[name]
        except KeyError:
            msg = f"Taxon not in distance matrix: {name}"
            raise KeyError(msg) from None

    def get(self, name1: str, name2: str) -> float | None:
        """
        Distance between two taxa.

        Returns:
            The distance, or None if it is undefined.
        """
        value = self._values[self.index_of(name1), self.index_of(name2)]
        if np.isnan(value):
            return None
        return float(value)

    @property
    def defined_mask(self) -> np.ndarray:
        """Boolean array, True where the distance is defined."""
        return ~np.isnan(self._values)

    def undefined_pairs(self) -> list[tuple[str, str]]:
        """Unordered taxon pairs (i < j) whose distance is undefined."""
        rows, cols = np.nonzero(np.triu(np.isnan(self._values), k=1))
        return [(self._names[i], self._names[j]) for i, j in zip(rows, cols, strict=True)]

    @property
    def undefined_count(self) -> int:
        """Number of unordered pairs with an undefined distance."""
        return int(np.triu(np.isnan(self._values), k=1).sum())

    def is_symmetric(self, atol: float = 1e-9) -> bool:
        """Whether D[i][j] == D[j][i] for all pairs (NaN equal to NaN)."""
        return bool(np.allclose(self._values, self._values.T, atol=atol, equal_nan=True))

    def filled(self, sentinel: float) -> np.ndarray:
        """
        Copy of the distances with undefined entries replaced by a sentinel.

        Args:
            sentinel: Finite value used for undefined distances.

        Returns:
            Writable float64 array with no NaN values.
        """
        return np.where(np.isnan(self._values), sentinel, self._values)

    def to_dataframe(self) -> pl.DataFrame:
        """
        Convert to a Polars DataFrame with a 'taxon' column followed by
        one column per taxon. Undefined distances become nulls.
        """
        data: dict[str, list] = {"taxon": list(self._names)}
        for idx, name in enumerate(self._names):
            column = self._values[:, idx]
            data[name] = [None if np.isnan(v) else float(v) for v in column]
        return pl.DataFrame(data)

    def __repr__(self) -> str:
        return f"DistanceMatrix(n_taxa={len(self)}, undefined_pairs={self.undefined_count})"
