"""
I/O utilities for distance matrices, trees and DataFrames.

Provides consistent handling of output formats (plain text/CSV/Parquet)
across the codebase.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import numpy as np
import polars as pl

from phylojoin.core.constants import (
    MATRIX_DECIMALS,
    MATRIX_FIELD_WIDTH,
    MATRIX_NAME_WIDTH,
    UNDEFINED_DISTANCE_TOKEN,
)
from phylojoin.core.distance.matrix import DistanceMatrix

OutputFormat = Literal["csv", "parquet"]
MatrixFormat = Literal["text", "csv", "parquet"]


def write_dataframe(
    df: pl.DataFrame,
    path: Path,
    output_format: OutputFormat = "csv",
) -> None:
    """
    Write DataFrame to file in specified format.

    For Parquet output, uses zstd compression.

    Args:
        df: Polars DataFrame to write.
        path: Output file path.
        output_format: Output format - 'csv' or 'parquet'.
    """
    if output_format == "parquet":
        df.write_parquet(path, compression="zstd")
    else:
        df.write_csv(path, null_value=UNDEFINED_DISTANCE_TOKEN)


def read_dataframe(path: Path, infer_schema: bool = True) -> pl.DataFrame:
    """
    Read DataFrame from file, auto-detecting format from extension.

    Supports: .csv, .tsv, .parquet, .csv.gz, .tsv.gz

    Args:
        path: Input file path.
        infer_schema: Infer column types for CSV/TSV. When False every
            column is read as text. Parquet files keep their stored schema.

    Returns:
        Polars DataFrame.

    Raises:
        ValueError: If file extension is not recognized.
    """
    suffix = path.suffix.lower()
    name = path.name.lower()

    if suffix == ".parquet":
        return pl.read_parquet(path)
    if suffix == ".csv" or name.endswith(".csv.gz"):
        return pl.read_csv(
            path, null_values=[UNDEFINED_DISTANCE_TOKEN], infer_schema=infer_schema
        )
    if suffix == ".tsv" or name.endswith(".tsv.gz"):
        return pl.read_csv(
            path,
            separator="\t",
            null_values=[UNDEFINED_DISTANCE_TOKEN],
            infer_schema=infer_schema,
        )
    msg = f"Unrecognized file format: {path}"
    raise ValueError(msg)


def format_distance_matrix(
    matrix: DistanceMatrix,
    decimals: int = MATRIX_DECIMALS,
    undefined_token: str = UNDEFINED_DISTANCE_TOKEN,
) -> str:
    """
    Render a distance matrix as aligned plain text.

    Each row holds the right-aligned taxon name followed by one field per
    taxon, fixed to `decimals` places. Undefined distances are written as
    the undefined token. The text is readable by DistanceMatrixParser.

    Example:
        >>> dm = DistanceMatrix(["A", "B"], np.array([[0.0, np.nan], [np.nan, 0.0]]))
        >>> print(format_distance_matrix(dm), end="")
                 A   0.0000      N/A
                 B      N/A   0.0000

    Returns:
        Text with one line per taxon, each ending in a newline.
    """
    lines = []
    for name, row in zip(matrix.names, matrix.values, strict=True):
        fields = (
            undefined_token if np.isnan(value) else f"{value:.{decimals}f}"
            for value in row
        )
        body = " ".join(f"{field:>{MATRIX_FIELD_WIDTH}}" for field in fields)
        lines.append(f"{name:>{MATRIX_NAME_WIDTH}} {body}")
    return "".join(line + "\n" for line in lines)


def detect_matrix_format(path: Path) -> MatrixFormat:
    """Infer the matrix output format from a file name."""
    name = path.name.lower()
    if name.endswith(".parquet"):
        return "parquet"
    if name.endswith((".csv", ".csv.gz")):
        return "csv"
    return "text"


def write_distance_matrix(
    matrix: DistanceMatrix,
    path: Path,
    output_format: MatrixFormat | None = None,
    decimals: int = MATRIX_DECIMALS,
    undefined_token: str = UNDEFINED_DISTANCE_TOKEN,
) -> None:
    """
    Write a distance matrix as plain text, CSV or Parquet.

    Args:
        matrix: Matrix to write.
        path: Output file path; parent directories are created.
        output_format: Output format; inferred from the extension if None.
        decimals: Decimal places for plain-text output.
        undefined_token: Token for undefined distances in text output.
    """
    output_format = output_format or detect_matrix_format(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if output_format == "text":
        path.write_text(format_distance_matrix(matrix, decimals, undefined_token))
    else:
        write_dataframe(matrix.to_dataframe(), path, output_format)


def write_newick(newick: str, path: Path) -> None:
    """Write a Newick string followed by a single line break."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(newick.rstrip("\n") + "\n")
