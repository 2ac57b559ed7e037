"""
All-pairs Jukes-Cantor distance computation.

Builds the n x n distance matrix for an alignment. Each row i compares
sequence i against every sequence j > i in one vectorized pass; rows are
independent, so they can be distributed over a multiprocessing pool. The
estimator is a pure function of its inputs, which makes parallel output
identical to sequential output.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
from functools import partial

import numpy as np

from phylojoin.core.distance.jukes_cantor import canonical_mask, encode_sequence, jc_correction
from phylojoin.core.distance.matrix import DistanceMatrix
from phylojoin.core.exceptions import MatrixTooLargeError
from phylojoin.models.alignment import Alignment

logger = logging.getLogger(__name__)


def _encode_alignment(alignment: Alignment) -> tuple[np.ndarray, np.ndarray]:
    """Encode all sequences as an (n, L) byte array plus canonical-base mask."""
    n = len(alignment)
    length = alignment.length
    encoded = np.zeros((n, length), dtype=np.uint8)
    for idx, record in enumerate(alignment.sequences):
        encoded[idx] = encode_sequence(record.sequence)
    return encoded, canonical_mask(encoded)


def _row_distances(
    row: int,
    encoded: np.ndarray,
    valid: np.ndarray,
) -> tuple[int, list[float | None]]:
    """
    Distances from sequence `row` to every later sequence.

    Args:
        row: Index of the reference sequence.
        encoded: (n, L) encoded alignment.
        valid: (n, L) canonical-base mask.

    Returns:
        Tuple of (row, distances to rows row+1 .. n-1).
    """
    both = valid[row] & valid[row + 1 :]
    totals = both.sum(axis=1)
    differences = (both & (encoded[row] != encoded[row + 1 :])).sum(axis=1)
    return row, [
        jc_correction(int(d), int(t)) for d, t in zip(differences, totals, strict=True)
    ]


def compute_distance_matrix(
    alignment: Alignment,
    num_workers: int = 1,
    max_taxa: int | None = None,
) -> DistanceMatrix:
    """
    Compute the Jukes-Cantor distance matrix for an alignment.

    The diagonal is set to exactly 0.0 without running the estimator.
    Undefined distances are stored as NaN.

    Args:
        alignment: Equal-length aligned sequences.
        num_workers: Worker processes; 1 computes in the calling process.
        max_taxa: Optional upper bound on the number of sequences.

    Returns:
        Symmetric DistanceMatrix in alignment order.

    Raises:
        MatrixTooLargeError: If the alignment has more than max_taxa sequences.
    """
    n = len(alignment)
    if max_taxa is not None and n > max_taxa:
        raise MatrixTooLargeError(n, max_taxa)

    values = np.zeros((n, n), dtype=np.float64)
    if n < 2:
        return DistanceMatrix(alignment.names, values)

    encoded, valid = _encode_alignment(alignment)
    worker = partial(_row_distances, encoded=encoded, valid=valid)
    rows = range(n - 1)

    if num_workers > 1:
        logger.info(f"Computing {n * (n - 1) // 2} pairwise distances on {num_workers} workers")
        with mp.Pool(processes=num_workers) as pool:
            results = pool.map(worker, rows)
    else:
        results = [worker(row) for row in rows]

    for row, distances in results:
        for offset, distance in enumerate(distances):
            col = row + 1 + offset
            value = np.nan if distance is None else distance
            values[row, col] = value
            values[col, row] = value

    matrix = DistanceMatrix(alignment.names, values)
    if matrix.undefined_count:
        logger.warning(
            f"{matrix.undefined_count} sequence pairs have no defined Jukes-Cantor distance "
            "(no comparable sites or p >= 0.75)"
        )
    return matrix
