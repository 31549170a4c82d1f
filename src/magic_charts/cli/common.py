"""Shared helpers for CLI commands: console, data source options, formats."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from magic_charts.config import get_settings
from magic_charts.data.samples import SampleCatalog
from magic_charts.data.session import ExplorationSession

console = Console()

VALID_FORMATS = ("table", "json")

FileOption = Annotated[
    Path | None, typer.Option("--file", help="CSV file to explore", dir_okay=False)
]
SampleOption = Annotated[str | None, typer.Option("--sample", "-s", help="Built-in sample dataset id")]
ColumnsOption = Annotated[list[str] | None, typer.Option("--column", "-c", help="Column to select (repeatable)")]
FormatOption = Annotated[str, typer.Option("--format", "-f", help="Output format: table or json")]


def check_format(fmt: str) -> None:
    if fmt not in VALID_FORMATS:
        console.print(f"[red]Invalid format '{fmt}'. Choose from: {', '.join(VALID_FORMATS)}[/red]")
        raise typer.Exit(1)


def open_session(file: Path | None, sample: str | None) -> ExplorationSession:
    """Build a session with exactly one of --file / --sample loaded."""
    if (file is None) == (sample is None):
        console.print("[red]Pass exactly one of --file or --sample[/red]")
        raise typer.Exit(1)

    settings = get_settings()
    session = ExplorationSession(
        catalog=SampleCatalog(sample_dirs=settings.sample_dirs),
        palette=settings.palette,
    )
    if file is not None:
        session.load_file(file)
    else:
        session.load_sample(sample)
    return session
