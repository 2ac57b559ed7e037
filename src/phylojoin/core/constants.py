"""
Constants used throughout the phylojoin package.

Centralizes alphabet definitions, sentinel values, and output formatting
constants to improve maintainability and consistency.
"""

from __future__ import annotations

# =============================================================================
# Nucleotide Alphabet
# =============================================================================

# Canonical bases that carry evolutionary signal. Anything else (gaps,
# IUPAC ambiguity codes, unknown symbols) is skipped during comparison.
CANONICAL_BASES = frozenset("ACGT")

# =============================================================================
# Jukes-Cantor Model
# =============================================================================

# Proportion of differing sites at which the JC69 correction diverges
JC_SATURATION_P = 0.75

# Coefficient b in d = -b * ln(1 - p / b)
JC_COEFFICIENT = 0.75

# =============================================================================
# Distance Matrix Text Format
# =============================================================================

# Token written for, and accepted as, an unknown pairwise distance
UNDEFINED_DISTANCE_TOKEN = "N/A"

# Finite stand-in for unknown distances during clustering. Large enough to
# never be selected under realistic inputs while keeping arithmetic finite.
UNKNOWN_DISTANCE_SENTINEL = 1e6

# Column widths and precision for the plain-text matrix output
MATRIX_NAME_WIDTH = 10
MATRIX_FIELD_WIDTH = 8
MATRIX_DECIMALS = 4

# =============================================================================
# Tree Construction
# =============================================================================

# Branch length precision in Newick output
NEWICK_DECIMALS = 6

# Smallest input that yields a tree
MIN_TAXA = 2

# Default upper bound on the number of taxa accepted for clustering
DEFAULT_MAX_TAXA = 5000

# =============================================================================
# Sequence Simulation
# =============================================================================

SIMULATION_BASES = ("A", "T", "C", "G")
SIMULATION_GAP = "-"
SIMULATION_AMBIGUOUS = "N"
SIMULATION_NAME_PREFIX = "Org"
