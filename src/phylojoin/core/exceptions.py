"""
Custom exceptions with actionable guidance.

Provides specific error types for common failure scenarios,
each with helpful suggestions for resolution.
"""

from __future__ import annotations

from pathlib import Path


class PhylojoinError(Exception):
    """Base exception for phylojoin errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class InputShapeError(PhylojoinError):
    """Base class for inputs whose shape rules out any tree construction."""



class DistanceMatrixNotSquareError(InputShapeError):
    """Raised when a distance matrix is not square."""

    def __init__(self, rows: int, cols: int):
        super().__init__(
            message=f"Distance matrix is not square: {rows} rows x {cols} columns",
            suggestion=(
                "Each line must hold a taxon name followed by exactly one "
                "distance per taxon in the file. Regenerate the matrix with "
                "'phylojoin distance compute'."
            ),
        )
        self.rows = rows
        self.cols = cols


class DistanceMatrixRowLengthError(InputShapeError):
    """Raised when one row of a distance matrix has the wrong number of fields."""

    def __init__(self, taxon: str, expected: int, actual: int, line_num: int):
        super().__init__(
            message=(
                f"Distance matrix row for '{taxon}' at line {line_num} has "
                f"{actual} values, expected {expected}"
            ),
            suggestion=(
                "Check for missing or extra columns in this row. Unknown "
                "distances must be written as N/A rather than left blank."
            ),
        )
        self.taxon = taxon
        self.expected = expected
        self.actual = actual
        self.line_num = line_num


class TooFewTaxaError(InputShapeError):
    """Raised when fewer taxa are supplied than a tree needs."""

    def __init__(self, count: int, minimum: int = 2):
        super().__init__(
            message=f"Too few taxa for tree building (need >= {minimum}, got {count})",
            suggestion="Provide at least two sequences or matrix rows.",
        )
        self.count = count
        self.minimum = minimum


class SequenceLengthMismatchError(InputShapeError):
    """Raised when two sequences that must be compared differ in length."""

    def __init__(self, name1: str, len1: int, name2: str, len2: int):
        super().__init__(
            message=(
                f"Sequences are not aligned: '{name1}' has length {len1}, "
                f"'{name2}' has length {len2}"
            ),
            suggestion=(
                "All sequences must come from the same multiple sequence "
                "alignment. Align them first (e.g. with MAFFT or MUSCLE)."
            ),
        )
        self.name1 = name1
        self.len1 = len1
        self.name2 = name2
        self.len2 = len2


class MatrixTooLargeError(InputShapeError):
    """Raised when the number of taxa exceeds the configured bound."""

    def __init__(self, n_taxa: int, max_taxa: int):
        super().__init__(
            message=f"Distance matrix has {n_taxa} taxa, above the limit of {max_taxa}",
            suggestion=(
                "Reduce the dataset or raise clustering.max_taxa in the "
                "configuration file (or pass --max-taxa)."
            ),
        )
        self.n_taxa = n_taxa
        self.max_taxa = max_taxa


class MalformedInputError(PhylojoinError):
    """Base class for files that cannot be parsed."""



class MalformedDistanceMatrixError(MalformedInputError):
    """Raised when a distance matrix file contains a non-numeric field or cannot be decoded."""

    def __init__(
        self,
        path: str | Path,
        line_num: int,
        token: str,
        reason: str | None = None,
    ):
        reason = reason or f"invalid distance value '{token}'"
        super().__init__(
            message=f"Malformed distance matrix '{path}' at line {line_num}: {reason}",
            suggestion=(
                "Distances must be numbers. Use N/A (case-insensitive) for "
                "pairs without a measurable distance."
            ),
        )
        self.path = str(path)
        self.line_num = line_num
        self.token = token
        self.reason = reason



class MalformedAlignmentError(MalformedInputError):
    """Raised when a sequence collection file has an invalid layout."""

    def __init__(self, path: str | Path, line_num: int, reason: str):
        super().__init__(
            message=f"Malformed alignment file '{path}' at line {line_num}: {reason}",
            suggestion=(
                "Expected a header line '<count> <length>' followed by one "
                "'<name> <sequence>' line per taxon, or a FASTA file."
            ),
        )
        self.path = str(path)
        self.line_num = line_num
        self.reason = reason


class ConfigurationError(PhylojoinError):
    """Raised when configuration is invalid."""

