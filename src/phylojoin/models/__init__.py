"""
Pydantic data models for phylojoin.

Provides type-safe models for aligned sequences and configuration.
"""

from phylojoin.models.alignment import AlignedSequence, Alignment
from phylojoin.models.config import ClusteringConfig, DistanceConfig, PhylojoinConfig

__all__ = [
    "AlignedSequence",
    "Alignment",
    "ClusteringConfig",
    "DistanceConfig",
    "PhylojoinConfig",
]
