"""
Shared pytest fixtures for phylojoin tests.

Provides reusable distance matrices with known trees, small alignments,
and temporary input files for unit and integration testing.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from phylojoin.core.distance.matrix import DistanceMatrix
from phylojoin.models.alignment import Alignment
from tests.factories import TreeDataFactory


# =============================================================================
# Distance Matrix Fixtures
# =============================================================================


@pytest.fixture
def additive_names() -> list[str]:
    """Taxa of the additive four-taxon tree ((A:2,B:3):6,(C:4,D:5))."""
    return ["A", "B", "C", "D"]


@pytest.fixture
def additive_distances() -> np.ndarray:
    """
    Path-length distances on ((A:2,B:3):6,(C:4,D:5)).

    Integer values keep every NJ intermediate exact in float64.
    """
    return np.array(
        [
            [0.0, 5.0, 12.0, 13.0],
            [5.0, 0.0, 13.0, 14.0],
            [12.0, 13.0, 0.0, 9.0],
            [13.0, 14.0, 9.0, 0.0],
        ]
    )


@pytest.fixture
def additive_matrix(additive_names: list[str], additive_distances: np.ndarray) -> DistanceMatrix:
    return DistanceMatrix(additive_names, additive_distances)


@pytest.fixture
def ultrametric_distances() -> np.ndarray:
    """
    Distances on a clock-like tree: (A,B) at height 1, (C,D) at height 2,
    root at height 4.
    """
    return np.array(
        [
            [0.0, 2.0, 8.0, 8.0],
            [2.0, 0.0, 8.0, 8.0],
            [8.0, 8.0, 0.0, 4.0],
            [8.0, 8.0, 4.0, 0.0],
        ]
    )


@pytest.fixture
def ultrametric_matrix(additive_names: list[str], ultrametric_distances: np.ndarray) -> DistanceMatrix:
    return DistanceMatrix(additive_names, ultrametric_distances)


@pytest.fixture
def matrix_with_unknown() -> DistanceMatrix:
    """Three taxa where the A-C distance is unknown."""
    return DistanceMatrix(
        ["A", "B", "C"],
        np.array(
            [
                [0.0, 0.1, np.nan],
                [0.1, 0.0, 0.3],
                [np.nan, 0.3, 0.0],
            ]
        ),
    )


# =============================================================================
# Alignment Fixtures
# =============================================================================


@pytest.fixture
def small_alignment() -> Alignment:
    """Four short aligned sequences with a gap and an ambiguous base."""
    return Alignment.from_pairs(
        [
            ("Org1", "ACGTACGTAC"),
            ("Org2", "ACGTACGTTT"),
            ("Org3", "ACGAACG-TT"),
            ("Org4", "TCGAACNTTT"),
        ]
    )


@pytest.fixture
def simulated_alignment() -> Alignment:
    """Eight sequences evolved along a random tree, fixed seed."""
    return TreeDataFactory(seed=42).evolved_alignment(n_sequences=8, length=400)


# =============================================================================
# File Fixtures
# =============================================================================


@pytest.fixture
def alignment_file(tmp_path: Path, small_alignment: Alignment) -> Path:
    """Small alignment written with a '<n> <m>' header."""
    path = tmp_path / "alignment.phy"
    path.write_text(small_alignment.to_phylip())
    return path


@pytest.fixture
def fasta_file(tmp_path: Path) -> Path:
    """Small alignment in FASTA, with a wrapped sequence."""
    path = tmp_path / "alignment.fasta"
    path.write_text(
        ">Org1 first sequence\n"
        "ACGTA\n"
        "CGTAC\n"
        ">Org2\n"
        "ACGTACGTTT\n"
        ">Org3\n"
        "acgaacg-tt\n"
    )
    return path


@pytest.fixture
def matrix_file(tmp_path: Path) -> Path:
    """Plain-text additive matrix with one unknown pair written in lower case."""
    path = tmp_path / "matrix.txt"
    path.write_text(
        "A 0 5 12 13\n"
        "B 5 0 13 14\n"
        "C 12 13 0 n/a\n"
        "D 13 14 N/A 0\n"
    )
    return path


@pytest.fixture
def additive_matrix_file(tmp_path: Path) -> Path:
    path = tmp_path / "additive.txt"
    path.write_text(
        "A 0 5 12 13\n"
        "B 5 0 13 14\n"
        "C 12 13 0 9\n"
        "D 13 14 9 0\n"
    )
    return path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """YAML configuration selecting UPGMA."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "distance:\n"
        "  num_workers: 1\n"
        "  decimals: 3\n"
        "clustering:\n"
        "  method: upgma\n"
        "  max_taxa: 100\n"
    )
    return path
