"""
Jukes-Cantor (JC69) evolutionary distance between aligned sequences.

The observed proportion of differing sites underestimates the number of
substitutions that actually occurred, because later mutations can hide
earlier ones. JC69 corrects for this under the assumption of equal base
frequencies and equal substitution rates:

    d = -3/4 * ln(1 - 4/3 * p)

Only sites where both sequences carry a canonical base (A, C, G, T) are
compared. Gaps, IUPAC ambiguity codes and any other symbol are skipped.
"""

from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np

from phylojoin.core.constants import CANONICAL_BASES, JC_COEFFICIENT, JC_SATURATION_P
from phylojoin.core.exceptions import SequenceLengthMismatchError

# Byte -> is canonical base lookup, applied after upper-casing
_CANONICAL_LOOKUP = np.zeros(256, dtype=bool)
_CANONICAL_LOOKUP[[ord(b) for b in CANONICAL_BASES]] = True


class SiteComparison(NamedTuple):
    """Counts from a site-by-site comparison of two aligned sequences."""

    differences: int
    total: int

    @property
    def proportion(self) -> float | None:
        """Raw p-distance, or None when no site was comparable."""
        if self.total == 0:
            return None
        return self.differences / self.total


def encode_sequence(sequence: str) -> np.ndarray:
    """
    Encode a sequence as upper-cased ASCII bytes.

    Non-ASCII characters are replaced with '?', which is never canonical.

    Args:
        sequence: Aligned nucleotide sequence.

    Returns:
        1-D uint8 array of the same length as the sequence.
    """
    data = sequence.encode("ascii", errors="replace").upper()
    return np.frombuffer(data, dtype=np.uint8)


def canonical_mask(encoded: np.ndarray) -> np.ndarray:
    """Boolean mask of positions holding A, C, G or T."""
    return _CANONICAL_LOOKUP[encoded]


def compare_sites(
    seq1: str,
    seq2: str,
    names: tuple[str, str] = ("seq1", "seq2"),
) -> SiteComparison:
    """
    Count comparable sites and mismatches between two aligned sequences.

    Args:
        seq1: First aligned sequence.
        seq2: Second aligned sequence.
        names: Labels used in the error message on length mismatch.

    Returns:
        SiteComparison with the mismatch count and the number of sites
        where both sequences hold a canonical base.

    Raises:
        SequenceLengthMismatchError: If the sequences differ in length.
    """
    if len(seq1) != len(seq2):
        raise SequenceLengthMismatchError(names[0], len(seq1), names[1], len(seq2))

    enc1 = encode_sequence(seq1)
    enc2 = encode_sequence(seq2)
    both = canonical_mask(enc1) & canonical_mask(enc2)
    total = int(both.sum())
    differences = int((both & (enc1 != enc2)).sum())
    return SiteComparison(differences=differences, total=total)


def jc_correction(differences: int, total: int) -> float | None:
    """
    Apply the Jukes-Cantor correction to raw mismatch counts.

    Args:
        differences: Number of mismatching comparable sites.
        total: Number of comparable sites.

    Returns:
        Corrected distance, or None when it is undefined: no comparable
        sites, or p >= 0.75 (saturation, infinite expected distance).
    """
    if total == 0:
        return None
    if differences == 0:
        return 0.0

    p = differences / total
    if p >= JC_SATURATION_P:
        return None
    return -JC_COEFFICIENT * math.log(1.0 - (4.0 / 3.0) * p)


def jukes_cantor_distance(seq1: str, seq2: str) -> float | None:
    """
    Jukes-Cantor corrected distance between two aligned sequences.

    Comparison is case-insensitive. The function is pure and may be called
    concurrently for any number of sequence pairs.

    Example:
        >>> round(jukes_cantor_distance("ACGTACGTAC", "ACGTACGTTT"), 4)
        0.2326
        >>> jukes_cantor_distance("----", "NNNN") is None
        True

    Args:
        seq1: First aligned sequence.
        seq2: Second aligned sequence of the same length.

    Returns:
        Corrected distance, or None if undefined.

    Raises:
        SequenceLengthMismatchError: If the sequences differ in length.
    """
    comparison = compare_sites(seq1, seq2)
    return jc_correction(comparison.differences, comparison.total)
