"""
Distance command for estimating evolutionary distance matrices.

Provides subcommands:
- compute: Jukes-Cantor distance matrix from aligned sequences
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from phylojoin.cli.utils import QuietConsole, fail, load_config, spinner_progress
from phylojoin.core.exceptions import PhylojoinError

app = typer.Typer(
    name="distance",
    help="Estimate pairwise evolutionary distances from aligned sequences",
    no_args_is_help=True,
)

console = Console()


@app.command(name="compute")
def compute(
    alignment: Path = typer.Option(
        ...,
        "--alignment",
        "-a",
        help="Aligned sequences ('<n> <m>' header + '<name> <seq>' lines, or FASTA)",
        dir_okay=False,
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output matrix file (default: print to stdout)",
    ),
    output_format: str | None = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format: text, csv or parquet (default: from file extension)",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        help="Worker processes for pairwise estimation",
        min=1,
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file",
        dir_okay=False,
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress output",
    ),
) -> None:
    """
    Compute a Jukes-Cantor distance matrix.

    Only sites where both sequences hold A, C, G or T are compared. Pairs
    with no comparable sites, or with 75% or more differing sites, have no
    defined distance and are written as N/A.

    Examples:

        # Plain-text matrix for the tree command
        phylojoin distance compute -a seqs.phy -o matrix.txt

        # CSV export using 4 worker processes
        phylojoin distance compute -a seqs.fasta -o matrix.csv -w 4
    """
    from phylojoin.core.distance.builder import compute_distance_matrix
    from phylojoin.core.io_utils import format_distance_matrix, write_distance_matrix
    from phylojoin.core.parsers import AlignmentParser

    # Matrix text goes to stdout when no output file is given
    out = QuietConsole(console, quiet=quiet or output is None)
    config = load_config(config_path, console).with_overrides(num_workers=workers)

    if output_format is not None and output_format not in ("text", "csv", "parquet"):
        raise fail(console, f"Unknown format '{output_format}' (use text, csv or parquet)")
    if output is None and output_format not in (None, "text"):
        raise fail(console, f"--format {output_format} requires --output")

    out.print("\n[bold blue]Phylojoin Distance Estimation[/bold blue]\n")
    out.print(f"[bold]Alignment:[/bold] {alignment}")

    try:
        aln = AlignmentParser(alignment).parse()
    except (OSError, PhylojoinError) as e:
        raise fail(console, str(e)) from None

    out.print(f"[bold]Sequences:[/bold] {len(aln)} x {aln.length} sites")

    try:
        with spinner_progress(
            f"Computing {len(aln) * (len(aln) - 1) // 2} pairwise distances...",
            console,
            quiet or output is None,
        ):
            matrix = compute_distance_matrix(
                aln,
                num_workers=config.distance.num_workers,
                max_taxa=config.clustering.max_taxa,
            )
    except PhylojoinError as e:
        raise fail(console, str(e)) from None

    if matrix.undefined_count:
        out.print(
            f"[yellow]Warning: {matrix.undefined_count} pairs have no defined distance "
            f"(written as {config.distance.undefined_token})[/yellow]"
        )

    if output is None:
        typer.echo(
            format_distance_matrix(
                matrix, config.distance.decimals, config.distance.undefined_token
            ),
            nl=False,
        )
        return

    write_distance_matrix(
        matrix,
        output,
        output_format=output_format,
        decimals=config.distance.decimals,
        undefined_token=config.distance.undefined_token,
    )
    out.print("\n[bold green]Distance matrix written![/bold green]")
    out.print(f"[bold]Output:[/bold] {output}")
    out.print(f"\n[dim]Use with: phylojoin tree build --matrix {output} --output tree.nwk[/dim]")
    out.print()
