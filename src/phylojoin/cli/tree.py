"""
Tree command for building phylogenetic trees.

Provides subcommands:
- build: Build a tree from a precomputed distance matrix
- infer: Estimate distances from aligned sequences and build a tree
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from phylojoin.cli.utils import QuietConsole, fail, load_config, spinner_progress
from phylojoin.core.exceptions import PhylojoinError
from phylojoin.core.phylogeny.agglomerative import ClusteringResult
from phylojoin.core.phylogeny.tree_builder import TreeMethod

app = typer.Typer(
    name="tree",
    help="Build phylogenetic trees from distance matrices or sequences",
    no_args_is_help=True,
)

console = Console()


def _merge_table(result: ClusteringResult) -> Table:
    """Tabulate the merge history of a clustering run."""
    table = Table(title=f"{result.method.upper()} merges")
    table.add_column("Step", justify="right")
    table.add_column("Joined")
    table.add_column("Node", justify="right")
    table.add_column("Criterion", justify="right")
    table.add_column("Branch lengths", justify="right")
    for step_num, step in enumerate(result.merges, start=1):
        label = f"{step.left} + {step.right}" + (" (final)" if step.final else "")
        table.add_row(
            str(step_num),
            label,
            str(step.node),
            f"{step.criterion:.6f}",
            f"{step.branch_left:.6f} / {step.branch_right:.6f}",
        )
    return table


def _emit_tree(
    result: ClusteringResult,
    decimals: int,
    output: Path | None,
    out: QuietConsole,
    verbose: bool,
) -> None:
    from phylojoin.core.io_utils import write_newick

    newick = result.newick(decimals=decimals)
    if verbose:
        out.print(_merge_table(result))

    if output is None:
        typer.echo(newick)
        return

    write_newick(newick, output)
    out.print("\n[bold green]Tree built successfully![/bold green]")
    out.print(f"[bold]Output:[/bold] {output}")
    out.print()


@app.command(name="build")
def build(
    matrix_path: Path = typer.Option(
        ...,
        "--matrix",
        "-d",
        help="Distance matrix file (text '<name> <d1> ... <dn>' lines, or CSV/TSV)",
        dir_okay=False,
    ),
    method: TreeMethod | None = typer.Option(
        None,
        "--method",
        "-m",
        help="Tree building method: nj or upgma (default: from config, else nj)",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output Newick tree file (default: print to stdout)",
    ),
    max_taxa: int | None = typer.Option(
        None,
        "--max-taxa",
        help="Reject matrices with more taxa than this",
        min=2,
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file",
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show the merge history",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress output",
    ),
) -> None:
    """
    Build a phylogenetic tree from a distance matrix.

    N/A entries are treated as a very large distance so they are joined last.

    - nj: Neighbor-joining (no molecular clock, branch lengths may be negative)

    - upgma: Average linkage (rooted, ultrametric on clock-like data)

    Examples:

        # NJ tree from a Jukes-Cantor matrix
        phylojoin tree build --matrix matrix.txt --method nj --output tree.nwk

        # UPGMA tree printed to stdout
        phylojoin tree build --matrix matrix.txt --method upgma
    """
    from phylojoin.core.parsers import DistanceMatrixParser
    from phylojoin.core.phylogeny.tree_builder import build_tree

    out = QuietConsole(console, quiet=quiet or (output is None and not verbose))
    config = load_config(config_path, console).with_overrides(
        method=method.value if method else None, max_taxa=max_taxa
    )
    method = TreeMethod(config.clustering.method)

    out.print("\n[bold blue]Phylojoin Tree Builder[/bold blue]\n")
    out.print(f"[bold]Method:[/bold] {method.value}")
    out.print(f"[bold]Distance matrix:[/bold] {matrix_path}")

    try:
        matrix = DistanceMatrixParser(
            matrix_path, unknown_token=config.distance.undefined_token
        ).parse()
    except (OSError, PhylojoinError) as e:
        raise fail(console, str(e)) from None

    out.print(f"[bold]Taxa:[/bold] {len(matrix)}")
    if matrix.undefined_count:
        out.print(
            f"[yellow]Warning: {matrix.undefined_count} unknown distances replaced "
            f"by {config.clustering.unknown_distance:g}[/yellow]"
        )

    try:
        with spinner_progress(
            f"Building {method.value.upper()} tree from {len(matrix)} taxa...",
            console,
            quiet or output is None,
        ):
            result = build_tree(matrix, method, config.clustering)
    except PhylojoinError as e:
        raise fail(console, str(e)) from None

    _emit_tree(result, config.clustering.branch_length_decimals, output, out, verbose)


@app.command(name="infer")
def infer(
    alignment: Path = typer.Option(
        ...,
        "--alignment",
        "-a",
        help="Aligned sequences ('<n> <m>' header + '<name> <seq>' lines, or FASTA)",
        dir_okay=False,
    ),
    method: TreeMethod | None = typer.Option(
        None,
        "--method",
        "-m",
        help="Tree building method: nj or upgma (default: from config, else nj)",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output Newick tree file (default: print to stdout)",
    ),
    matrix_output: Path | None = typer.Option(
        None,
        "--matrix-output",
        help="Also write the Jukes-Cantor distance matrix here",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        help="Worker processes for pairwise estimation",
        min=1,
    ),
    max_taxa: int | None = typer.Option(
        None,
        "--max-taxa",
        help="Reject alignments with more sequences than this",
        min=2,
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file",
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show the merge history",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress output",
    ),
) -> None:
    """
    Build a tree directly from aligned sequences.

    Computes Jukes-Cantor distances, then clusters them with NJ or UPGMA.

    Examples:

        phylojoin tree infer --alignment seqs.phy --method nj --output tree.nwk

        phylojoin tree infer -a seqs.fasta -m upgma --matrix-output matrix.txt
    """
    from phylojoin.core.io_utils import write_distance_matrix
    from phylojoin.core.parsers import AlignmentParser
    from phylojoin.core.phylogeny.tree_builder import infer_tree

    out = QuietConsole(console, quiet=quiet or (output is None and not verbose))
    config = load_config(config_path, console).with_overrides(
        method=method.value if method else None,
        num_workers=workers,
        max_taxa=max_taxa,
    )
    method = TreeMethod(config.clustering.method)

    out.print("\n[bold blue]Phylojoin Tree Inference[/bold blue]\n")
    out.print(f"[bold]Method:[/bold] {method.value}")
    out.print(f"[bold]Alignment:[/bold] {alignment}")

    try:
        aln = AlignmentParser(alignment).parse()
    except (OSError, PhylojoinError) as e:
        raise fail(console, str(e)) from None

    out.print(f"[bold]Sequences:[/bold] {len(aln)} x {aln.length} sites")

    try:
        with spinner_progress(
            f"Estimating distances and building {method.value.upper()} tree...",
            console,
            quiet or output is None,
        ):
            matrix, result = infer_tree(aln, method, config)
    except PhylojoinError as e:
        raise fail(console, str(e)) from None

    if matrix.undefined_count:
        out.print(
            f"[yellow]Warning: {matrix.undefined_count} pairs have no defined distance; "
            f"clustered as {config.clustering.unknown_distance:g}[/yellow]"
        )
    if matrix_output is not None:
        write_distance_matrix(
            matrix,
            matrix_output,
            decimals=config.distance.decimals,
            undefined_token=config.distance.undefined_token,
        )
        out.print(f"[bold]Distance matrix:[/bold] {matrix_output}")

    _emit_tree(result, config.clustering.branch_length_decimals, output, out, verbose)
