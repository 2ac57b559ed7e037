"""
Main CLI entry point for phylojoin.

Provides subcommands for each stage of the pipeline:
- simulate: Generate random aligned sequences
- distance: Estimate a Jukes-Cantor distance matrix from sequences
- tree: Build NJ or UPGMA trees from a matrix or from sequences
"""

from __future__ import annotations

import typer
from rich import print as rprint
from rich.console import Console

from phylojoin import __version__

app = typer.Typer(
    name="phylojoin",
    help="Distance-based phylogenetic tree reconstruction (Jukes-Cantor, NJ, UPGMA)",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        rprint(f"phylojoin version {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Phylojoin: distance-based phylogenetic tree reconstruction.

    Corrects pairwise sequence differences for multiple substitutions under
    the Jukes-Cantor model and clusters the resulting distances into a
    Neighbor-Joining or UPGMA tree.
    """


# Import subcommands
from phylojoin.cli import distance, simulate, tree

# Register subcommands
app.add_typer(simulate.app, name="simulate")
app.add_typer(distance.app, name="distance")
app.add_typer(tree.app, name="tree")


if __name__ == "__main__":
    app()
