"""
Data models for aligned nucleotide sequences.

Provides validated containers for the sequence collections handed to the
distance estimator, whether read from disk or simulated.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, Field, field_validator, model_validator

from phylojoin.core.exceptions import SequenceLengthMismatchError


class AlignedSequence(BaseModel):
    """Single named sequence from a multiple sequence alignment.

    Attributes:
        name: Taxon label (non-empty, no whitespace)
        sequence: Aligned residues; gaps and ambiguity codes are allowed
    """

    name: str = Field(min_length=1, description="Taxon label")
    sequence: str = Field(description="Aligned nucleotide sequence")

    model_config = {"frozen": True}

    @field_validator("name")
    @classmethod
    def name_has_no_whitespace(cls, value: str) -> str:
        """Taxon labels are whitespace-delimited tokens in every file format."""
        if any(ch.isspace() for ch in value):
            msg = f"Taxon name must not contain whitespace: {value!r}"
            raise ValueError(msg)
        return value

    def __len__(self) -> int:
        return len(self.sequence)


class Alignment(BaseModel):
    """Collection of equal-length aligned sequences.

    Sequence length equality is checked on construction so that the
    estimator never sees a ragged input.
    """

    sequences: list[AlignedSequence] = Field(default_factory=list)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_equal_lengths(self) -> Self:
        """All sequences must share the length of the first one."""
        if not self.sequences:
            return self
        first = self.sequences[0]
        for other in self.sequences[1:]:
            if len(other) != len(first):
                raise SequenceLengthMismatchError(
                    first.name, len(first), other.name, len(other)
                )
        return self

    @classmethod
    def from_pairs(cls, pairs: list[tuple[str, str]]) -> Alignment:
        """Build an alignment from (name, sequence) tuples."""
        return cls(
            sequences=[AlignedSequence(name=name, sequence=seq) for name, seq in pairs]
        )

    @property
    def names(self) -> list[str]:
        """Taxon names in input order."""
        return [s.name for s in self.sequences]

    @property
    def length(self) -> int:
        """Common sequence length (0 for an empty alignment)."""
        return len(self.sequences[0]) if self.sequences else 0

    def __len__(self) -> int:
        return len(self.sequences)

    def to_phylip(self) -> str:
        """Render in the '<count> <length>' header + '<name> <sequence>' layout."""
        width = max((len(s.name) for s in self.sequences), default=0)
        lines = [f"{len(self)} {self.length}"]
        lines.extend(f"{s.name:<{width}} {s.sequence}" for s in self.sequences)
        return "\n".join(lines) + "\n"
