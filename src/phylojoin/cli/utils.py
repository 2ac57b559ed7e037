"""
Shared CLI utilities for phylojoin commands.

Provides common functionality used across CLI modules.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from phylojoin.core.exceptions import PhylojoinError
from phylojoin.models.config import PhylojoinConfig


@contextmanager
def spinner_progress(
    description: str,
    console: Console | None = None,
    quiet: bool = False,
) -> Generator[Progress, None, None]:
    """Context manager for spinner-style progress display.

    The spinner is suppressed when quiet mode is enabled.

    Args:
        description: Task description to display.
        console: Rich Console instance. If None and not quiet, creates one.
        quiet: If True, suppress the progress display entirely.

    Yields:
        Progress instance (even when quiet, for API consistency).
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console if not quiet else None,
        disable=quiet,
    ) as progress:
        progress.add_task(description=description, total=None)
        yield progress


class QuietConsole:
    """Console wrapper that suppresses output in quiet mode.

    Wraps a Rich Console instance and conditionally suppresses print output
    when quiet mode is enabled. All other console methods are delegated to
    the wrapped instance.
    """

    def __init__(self, console: Console, quiet: bool = False):
        self._console = console
        self._quiet = quiet

    @property
    def console(self) -> Console:
        """The wrapped Console, for output that must appear even when quiet."""
        return self._console

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console unless quiet mode is enabled."""
        if not self._quiet:
            self._console.print(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._console, name)


def load_config(config_path: Path | None, console: Console) -> PhylojoinConfig:
    """Load YAML configuration, or defaults when no path is given.

    Exits with code 1 and a readable message if the file is invalid.
    """
    if config_path is None:
        return PhylojoinConfig()
    try:
        return PhylojoinConfig.from_yaml(config_path)
    except (FileNotFoundError, PhylojoinError) as e:
        console.print(f"[red]Error loading configuration: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None


def fail(console: Console, message: str) -> typer.Exit:
    """Print an error in red and return the Exit to raise."""
    console.print(f"[red]Error: {escape(message)}[/red]")
    return typer.Exit(code=1)
