"""Testing utilities for phylojoin."""

from tests.utils.assertions import CLIAssertions, NewickAssertions

__all__ = [
    "CLIAssertions",
    "NewickAssertions",
]
