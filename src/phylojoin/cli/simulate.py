"""
Simulate command for generating synthetic aligned sequences.

Provides subcommands:
- sequences: Random sequences with optional gaps and ambiguous bases
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from phylojoin.cli.utils import QuietConsole, fail

app = typer.Typer(
    name="simulate",
    help="Generate synthetic aligned sequences",
    no_args_is_help=True,
)

console = Console()


@app.command(name="sequences")
def sequences(
    count: int = typer.Option(
        ...,
        "--count",
        "-n",
        help="Number of sequences",
    ),
    length: int = typer.Option(
        ...,
        "--length",
        "-m",
        help="Length of every sequence",
    ),
    gap_prob: float = typer.Option(
        0.0,
        "--gap-prob",
        help="Per-site probability of a gap (0-1)",
    ),
    ambiguous_prob: float = typer.Option(
        0.0,
        "--ambiguous-prob",
        help="Per-site probability of an ambiguous base N (0-1)",
    ),
    seed: int | None = typer.Option(
        None,
        "--seed",
        "-s",
        help="Random seed for reproducible output",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output sequence file (default: print to stdout)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress output",
    ),
) -> None:
    """
    Generate random aligned sequences named Org1..OrgN.

    Output uses the '<n> <m>' header followed by one '<name> <sequence>'
    line per taxon, ready for 'phylojoin distance compute'.

    Examples:

        phylojoin simulate sequences -n 10 -m 500 -o seqs.phy

        phylojoin simulate sequences -n 5 -m 100 --gap-prob 0.05 --ambiguous-prob 0.02 --seed 7
    """
    from phylojoin.core.simulation import simulate_alignment

    out = QuietConsole(console, quiet=quiet or output is None)

    try:
        alignment = simulate_alignment(
            count, length, gap_prob=gap_prob, ambiguous_prob=ambiguous_prob, seed=seed
        )
    except ValueError as e:
        raise fail(console, str(e)) from None

    text = alignment.to_phylip()
    if output is None:
        typer.echo(text, nl=False)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text)
    out.print(f"[bold green]Wrote {count} sequences of length {length}[/bold green]")
    out.print(f"[bold]Output:[/bold] {output}")
