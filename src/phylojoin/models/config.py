"""
Pydantic configuration models for phylojoin.

These models define configuration for pairwise distance estimation and
agglomerative tree construction. Configuration can be loaded from YAML
files or built from CLI arguments.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from phylojoin.core.constants import (
    DEFAULT_MAX_TAXA,
    MATRIX_DECIMALS,
    MIN_TAXA,
    NEWICK_DECIMALS,
    UNDEFINED_DISTANCE_TOKEN,
    UNKNOWN_DISTANCE_SENTINEL,
)
from phylojoin.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class DistanceConfig(BaseModel):
    """
    Configuration for pairwise evolutionary distance estimation.

    Attributes:
        model: Substitution model used for the multiple-hit correction.
        num_workers: Worker processes for the all-pairs computation.
            1 runs sequentially; results are identical either way.
        decimals: Precision of distances in the plain-text matrix output.
        undefined_token: Token written for pairs with no defined distance.
    """

    model: Literal["jukes-cantor"] = Field(
        default="jukes-cantor",
        description="Substitution model for distance correction",
    )
    num_workers: int = Field(
        default=1,
        ge=1,
        description="Number of worker processes for pairwise estimation",
    )
    decimals: int = Field(
        default=MATRIX_DECIMALS,
        ge=0,
        le=12,
        description="Decimal places in plain-text matrix output",
    )
    undefined_token: str = Field(
        default=UNDEFINED_DISTANCE_TOKEN,
        min_length=1,
        description="Token for undefined (saturated or no-overlap) distances",
    )

    model_config = {"frozen": True, "extra": "forbid"}


class ClusteringConfig(BaseModel):
    """
    Configuration for agglomerative tree construction.

    Attributes:
        method: 'nj' for Neighbor-Joining, 'upgma' for average linkage.
        unknown_distance: Finite value substituted for N/A distances.
        max_taxa: Inputs with more taxa are rejected before clustering.
        branch_length_decimals: Precision of Newick branch lengths.
    """

    method: Literal["nj", "upgma"] = Field(
        default="nj",
        description="Clustering algorithm",
    )
    unknown_distance: float = Field(
        default=UNKNOWN_DISTANCE_SENTINEL,
        gt=0,
        description=(
            "Large finite distance used in place of unknown (N/A) values so "
            "that they take part in arithmetic but are never chosen as closest."
        ),
    )
    max_taxa: int = Field(
        default=DEFAULT_MAX_TAXA,
        ge=MIN_TAXA,
        description="Maximum number of taxa accepted for clustering",
    )
    branch_length_decimals: int = Field(
        default=NEWICK_DECIMALS,
        ge=0,
        le=12,
        description="Decimal places for Newick branch lengths",
    )

    model_config = {"frozen": True, "extra": "forbid"}


class PhylojoinConfig(BaseModel):
    """Top-level configuration grouping the distance and clustering sections."""

    distance: DistanceConfig = Field(default_factory=DistanceConfig)
    clustering: ClusteringConfig = Field(default_factory=ClusteringConfig)

    model_config = {"frozen": True}

    @classmethod
    def from_yaml(cls, path: Path) -> PhylojoinConfig:
        """
        Load configuration from a YAML file.

        Missing sections fall back to defaults. Unknown keys inside a section
        are rejected so that typos do not pass silently.

        Args:
            path: Path to YAML configuration file.

        Returns:
            PhylojoinConfig populated from YAML values merged with defaults.

        Raises:
            FileNotFoundError: If the YAML file does not exist.
            ConfigurationError: If the YAML is not a mapping or holds invalid values.
        """
        import yaml

        if not path.exists():
            msg = f"Configuration file not found: {path}"
            raise FileNotFoundError(msg)

        raw = yaml.safe_load(path.read_text()) or {}
        if not isinstance(raw, dict):
            raise ConfigurationError(
                f"YAML config must be a mapping, got {type(raw).__name__}",
                suggestion="Use top-level 'distance:' and 'clustering:' sections.",
            )

        unknown = set(raw) - {"distance", "clustering"}
        if unknown:
            logger.warning(f"Ignoring unknown config sections: {sorted(unknown)}")

        try:
            return cls(
                distance=DistanceConfig(**_section(raw, "distance")),
                clustering=ClusteringConfig(**_section(raw, "clustering")),
            )
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration in {path}: {e.error_count()} error(s)\n{e}",
            ) from e

    def to_yaml(self, path: Path) -> None:
        """Write configuration to a YAML file."""
        path.write_text(self.to_yaml_str())

    def to_yaml_str(self) -> str:
        """Serialize configuration to a YAML string."""
        import yaml

        return yaml.dump(self.model_dump(), default_flow_style=False, sort_keys=False)

    def with_overrides(
        self,
        *,
        method: str | None = None,
        num_workers: int | None = None,
        max_taxa: int | None = None,
    ) -> PhylojoinConfig:
        """Return a copy with CLI-supplied values taking precedence."""
        distance = self.distance
        clustering = self.clustering
        if num_workers is not None:
            distance = distance.model_copy(update={"num_workers": num_workers})
        clustering_updates: dict[str, Any] = {}
        if method is not None:
            clustering_updates["method"] = method
        if max_taxa is not None:
            clustering_updates["max_taxa"] = max_taxa
        if clustering_updates:
            # Re-validate so overrides obey the same bounds as YAML values
            clustering = ClusteringConfig(**{**clustering.model_dump(), **clustering_updates})
        return PhylojoinConfig(distance=distance, clustering=clustering)


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    """Fetch a config section, treating an empty YAML section as defaults."""
    section = raw.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"Config section '{key}' must be a mapping, got {type(section).__name__}",
        )
    return section
