"""magic-charts render / gallery: Build chart bundles."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.table import Table

from magic_charts.cli.common import ColumnsOption, FileOption, SampleOption, console, open_session
from magic_charts.config import get_settings
from magic_charts.exceptions import MagicChartsError


def render(
    family: Annotated[str, typer.Option("--family", help="Chart family, e.g. Bar")],
    variant: Annotated[str, typer.Option("--variant", help="Variant key, e.g. stacked")],
    columns: ColumnsOption = None,
    file: FileOption = None,
    sample: SampleOption = None,
) -> None:
    """Print the chart bundle (labels, datasets, options) as JSON."""
    try:
        session = open_session(file, sample)
        session.select(columns or [])
        bundle = session.render(family, variant)
        console.print_json(bundle.model_dump_json(indent=2))

    except MagicChartsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def gallery(
    file: FileOption = None,
    sample: SampleOption = None,
    limit: Annotated[int | None, typer.Option("--limit", help="Maximum charts to show")] = None,
) -> None:
    """Show the default chart for each family the dataset supports."""
    try:
        session = open_session(file, sample)
        bundles = session.gallery(limit=limit or get_settings().magic_charts_gallery_limit)

        if not bundles:
            console.print("[yellow]No chart fits this dataset[/yellow]")
            return

        table = Table(title=f"Gallery: {session.require_dataset().name}")
        table.add_column("Family", style="cyan")
        table.add_column("Variant")
        table.add_column("Columns", style="dim")
        table.add_column("Title")

        for b in bundles:
            table.add_row(b.family, b.variant, ", ".join(b.columns), b.title)

        console.print(table)

    except MagicChartsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
