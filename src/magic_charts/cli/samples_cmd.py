"""magic-charts samples: List the sample dataset catalog."""

from __future__ import annotations

import json

import typer
from rich.table import Table

from magic_charts.cli.common import FormatOption, check_format, console
from magic_charts.config import get_settings
from magic_charts.data.samples import SampleCatalog
from magic_charts.exceptions import MagicChartsError


def samples(fmt: FormatOption = "table") -> None:
    """List built-in and user-supplied sample datasets."""
    try:
        check_format(fmt)
        catalog = SampleCatalog(sample_dirs=get_settings().sample_dirs)
        entries = catalog.list()

        if fmt == "json":
            console.print_json(json.dumps(
                [s.model_dump(include={"id", "name", "description", "category"}) for s in entries],
                indent=2,
            ))
            return

        table = Table(title="Sample Datasets")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Category", style="dim")
        table.add_column("Description")

        for s in entries:
            table.add_row(s.id, s.name, s.category, s.description[:60])

        console.print(table)
        console.print(f"\n  Total: {len(entries)} samples")

    except MagicChartsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
