"""
Parsers for sequence collections and distance matrices.

Two sequence formats are accepted: a PHYLIP-like layout ('<count> <length>'
header followed by '<name> <sequence>' lines) and FASTA. Distance matrices
are read from whitespace-separated text ('<name> <d1> ... <dn>' per line,
N/A for unknown values) or from CSV/TSV/Parquet with a header row via Polars.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from pathlib import Path
from typing import ClassVar

import numpy as np
import polars as pl

from phylojoin.core.constants import UNDEFINED_DISTANCE_TOKEN
from phylojoin.core.distance.matrix import DistanceMatrix
from phylojoin.core.exceptions import (
    DistanceMatrixNotSquareError,
    DistanceMatrixRowLengthError,
    InputShapeError,
    MalformedAlignmentError,
    MalformedDistanceMatrixError,
    MalformedInputError,
)
from phylojoin.core.io_utils import read_dataframe
from phylojoin.models.alignment import AlignedSequence, Alignment

logger = logging.getLogger(__name__)


def _require_file(path: Path, label: str) -> None:
    if not path.exists():
        msg = f"{label} file not found: {path}"
        raise FileNotFoundError(msg)
    if not path.is_file():
        msg = f"{label} path is not a file: {path}"
        raise FileNotFoundError(msg)


def _read_lines(path: Path, error: Callable[[int, str], MalformedInputError]) -> list[str]:
    """Read a UTF-8 text file as lines, reporting undecodable bytes by line number."""
    data = path.read_bytes()
    try:
        return data.decode("utf-8").splitlines()
    except UnicodeDecodeError as e:
        line_num = data.count(b"\n", 0, e.start) + 1
        raise error(line_num, f"not valid UTF-8 text ({e.reason})") from None


# =============================================================================
# Sequence Collections
# =============================================================================


class AlignmentParser:
    """
    Parser for aligned nucleotide sequence collections.

    Expected formats:
    - PHYLIP-like: first line '<n> <m>', then n lines '<name> <sequence>'
      where every sequence has exactly m characters. Whitespace inside a
      sequence (blocks of ten) is ignored.
    - FASTA: selected by extension or by a leading '>'.
    """

    FASTA_SUFFIXES: ClassVar[tuple[str, ...]] = (".fa", ".fasta", ".fna", ".fas", ".aln")

    def __init__(self, path: Path) -> None:
        """
        Initialize alignment parser.

        Args:
            path: Path to the sequence file.
        """
        self.path = path
        _require_file(self.path, "Alignment")

    def _is_fasta(self, lines: list[str]) -> bool:
        if self.path.suffix.lower() in self.FASTA_SUFFIXES:
            return True
        first = next((line for line in lines if line.strip()), "")
        return first.lstrip().startswith(">")

    def parse(self) -> Alignment:
        """
        Parse the file into an Alignment.

        Returns:
            Alignment in file order.

        Raises:
            MalformedAlignmentError: If the layout is invalid or the file is not text.
            SequenceLengthMismatchError: If FASTA records differ in length.
        """
        lines = _read_lines(
            self.path, lambda line_num, reason: MalformedAlignmentError(self.path, line_num, reason)
        )
        if self._is_fasta(lines):
            pairs = self._parse_fasta(lines)
        else:
            pairs = self._parse_phylip(lines)

        try:
            alignment = Alignment(
                sequences=[AlignedSequence(name=name, sequence=seq) for name, seq in pairs]
            )
        except ValueError as e:
            raise MalformedAlignmentError(self.path, 0, str(e)) from e

        logger.info(
            f"Loaded {len(alignment)} sequences of length {alignment.length} from {self.path}"
        )
        return alignment

    def _parse_phylip(self, lines: list[str]) -> list[tuple[str, str]]:
        numbered = [(num, line) for num, line in enumerate(lines, start=1) if line.strip()]
        if not numbered:
            raise MalformedAlignmentError(self.path, 1, "file is empty")

        header_num, header = numbered[0]
        tokens = header.split()
        if len(tokens) < 2:
            raise MalformedAlignmentError(
                self.path, header_num, "header must be '<count> <length>'"
            )
        try:
            n_sequences, length = int(tokens[0]), int(tokens[1])
        except ValueError:
            raise MalformedAlignmentError(
                self.path, header_num, f"non-integer header values: {header.strip()!r}"
            ) from None
        if n_sequences < 0 or length < 0:
            raise MalformedAlignmentError(self.path, header_num, "negative header values")

        records = numbered[1:]
        if len(records) < n_sequences:
            raise MalformedAlignmentError(
                self.path,
                numbered[-1][0],
                f"header declares {n_sequences} sequences, found {len(records)}",
            )
        if len(records) > n_sequences:
            logger.warning(
                f"Ignoring {len(records) - n_sequences} lines after the declared "
                f"{n_sequences} sequences in {self.path}"
            )

        pairs: list[tuple[str, str]] = []
        for line_num, line in records[:n_sequences]:
            tokens = line.split()
            if len(tokens) < 2:
                raise MalformedAlignmentError(
                    self.path, line_num, "expected '<name> <sequence>'"
                )
            name, sequence = tokens[0], "".join(tokens[1:])
            if len(sequence) != length:
                raise MalformedAlignmentError(
                    self.path,
                    line_num,
                    f"sequence '{name}' has length {len(sequence)}, header declares {length}",
                )
            pairs.append((name, sequence))
        return pairs

    def _parse_fasta(self, lines: list[str]) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []
        name: str | None = None
        chunks: list[str] = []
        for line_num, line in enumerate(lines, start=1):
            line = line.strip()
            if not line:
                continue
            if line.startswith(">"):
                if name is not None:
                    pairs.append((name, "".join(chunks)))
                header = line[1:].split()
                if not header:
                    raise MalformedAlignmentError(self.path, line_num, "empty FASTA header")
                name, chunks = header[0], []
            elif name is None:
                raise MalformedAlignmentError(
                    self.path, line_num, "sequence data before first FASTA header"
                )
            else:
                chunks.append(line)
        if name is not None:
            pairs.append((name, "".join(chunks)))
        return pairs


# =============================================================================
# Distance Matrices
# =============================================================================


class DistanceMatrixParser:
    """
    Parser for pairwise distance matrices.

    Expected formats:
    - Text (default): one line per taxon, whitespace-separated, the taxon
      name followed by n distances. The unknown token (N/A by default,
      case-insensitive) marks an unmeasurable distance.
    - CSV/TSV (.csv, .tsv, optionally gzipped) or Parquet: header row of
      taxon names, first column holds row names. Empty cells, nulls or the
      unknown token mark unknown distances.

    Unknown distances are returned as NaN.
    """

    TABULAR_SUFFIXES: ClassVar[tuple[str, ...]] = (
        ".csv", ".tsv", ".csv.gz", ".tsv.gz", ".parquet",
    )

    def __init__(self, path: Path, unknown_token: str = UNDEFINED_DISTANCE_TOKEN) -> None:
        """
        Initialize distance matrix parser.

        Args:
            path: Path to the matrix file.
            unknown_token: Token denoting an unknown distance.
        """
        self.path = path
        self.unknown_token = unknown_token
        _require_file(self.path, "Distance matrix")

    def parse(self) -> DistanceMatrix:
        """
        Parse and validate the matrix.

        Returns:
            DistanceMatrix in file order.

        Raises:
            MalformedDistanceMatrixError: If a value is not numeric or the file
                cannot be decoded.
            DistanceMatrixNotSquareError: If rows and columns disagree in count.
            DistanceMatrixRowLengthError: If a single row has the wrong length.
        """
        if str(self.path).lower().endswith(self.TABULAR_SUFFIXES):
            matrix = self._parse_tabular()
        else:
            matrix = self._parse_text()

        logger.info(
            f"Loaded {len(matrix)}x{len(matrix)} distance matrix from {self.path} "
            f"({matrix.undefined_count} unknown pairs)"
        )
        return matrix

    def _parse_value(self, token: str, line_num: int) -> float:
        if token.upper() == self.unknown_token.upper():
            return math.nan
        try:
            value = float(token)
        except ValueError:
            raise MalformedDistanceMatrixError(self.path, line_num, token) from None
        if math.isnan(value) or math.isinf(value):
            raise MalformedDistanceMatrixError(self.path, line_num, token)
        return value

    def _parse_text(self) -> DistanceMatrix:
        names: list[str] = []
        rows: list[list[float]] = []
        line_nums: list[int] = []
        lines = _read_lines(
            self.path,
            lambda line_num, reason: MalformedDistanceMatrixError(self.path, line_num, "", reason),
        )
        for line_num, line in enumerate(lines, start=1):
            tokens = line.split()
            if not tokens:
                continue
            names.append(tokens[0])
            rows.append([self._parse_value(token, line_num) for token in tokens[1:]])
            line_nums.append(line_num)

        self._validate_shape(names, rows, line_nums)
        return DistanceMatrix(names, np.array(rows, dtype=np.float64).reshape(len(names), len(names)))

    def _validate_shape(
        self,
        names: list[str],
        rows: list[list[float]],
        line_nums: list[int],
    ) -> None:
        """
        Validate that every row holds one value per taxon.

        A matrix whose rows agree with each other but not with the row count
        is reported as not square; a single deviating row is reported with
        its line number.
        """
        n = len(names)
        if n == 0:
            raise InputShapeError(
                f"Distance matrix is empty: {self.path}",
                suggestion="The file must contain one line per taxon.",
            )
        lengths = {len(row) for row in rows}
        if len(lengths) == 1 and n not in lengths:
            raise DistanceMatrixNotSquareError(rows=n, cols=lengths.pop())
        for name, row, line_num in zip(names, rows, line_nums, strict=True):
            if len(row) != n:
                raise DistanceMatrixRowLengthError(name, n, len(row), line_num)

    def _parse_tabular(self) -> DistanceMatrix:
        try:
            df = read_dataframe(self.path, infer_schema=False)
        except pl.exceptions.PolarsError as e:
            reason = str(e).splitlines()[0] if str(e) else type(e).__name__
            raise MalformedDistanceMatrixError(self.path, 1, "", reason) from None
        if df.is_empty():
            raise InputShapeError(
                f"Distance matrix is empty: {self.path}",
                suggestion="The file must contain one row per taxon.",
            )

        name_col = df.columns[0]
        value_columns = df.columns[1:]
        names = [str(name) for name in df[name_col].to_list()]
        if len(names) != len(value_columns):
            raise DistanceMatrixNotSquareError(rows=len(names), cols=len(value_columns))
        if set(names) != set(value_columns):
            missing = sorted(set(value_columns) ^ set(names))[:5]
            raise InputShapeError(
                f"Distance matrix row and column taxa don't match: {missing}",
                suggestion="Row names and header names must list the same taxa.",
            )

        values = np.empty((len(names), len(names)), dtype=np.float64)
        for col_idx, column in enumerate(names):
            for row_idx, cell in enumerate(df[column].to_list()):
                # Header occupies line 1
                values[row_idx, col_idx] = self._parse_cell(cell, row_idx + 2)
        return DistanceMatrix(names, values)

    def _parse_cell(self, cell: object, line_num: int) -> float:
        """Convert a tabular cell; text cells come from CSV/TSV, numbers from Parquet."""
        if cell is None:
            return math.nan
        if isinstance(cell, str):
            return math.nan if not cell.strip() else self._parse_value(cell.strip(), line_num)
        value = float(cell)
        if math.isinf(value):
            raise MalformedDistanceMatrixError(self.path, line_num, str(cell))
        return value
