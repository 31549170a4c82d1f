"""magic-charts insights: Descriptive statistics for a dataset."""

from __future__ import annotations

import json

import typer
from rich.table import Table

from magic_charts.cli.common import FileOption, FormatOption, SampleOption, check_format, console, open_session
from magic_charts.exceptions import MagicChartsError

IMPORTANCE_STYLES = {"high": "bold red", "medium": "yellow", "low": "dim"}


def insights(
    file: FileOption = None,
    sample: SampleOption = None,
    fmt: FormatOption = "table",
) -> None:
    """List statistics, outliers, correlations, comparisons and trends."""
    try:
        check_format(fmt)
        session = open_session(file, sample)
        found = session.insights()

        if fmt == "json":
            console.print_json(json.dumps([i.model_dump(mode="json") for i in found], indent=2))
            return

        table = Table(title=f"Insights: {session.require_dataset().name}")
        table.add_column("Type", style="dim")
        table.add_column("Title", style="cyan")
        table.add_column("Value")
        table.add_column("Importance")

        for i in found:
            style = IMPORTANCE_STYLES.get(i.importance.value, "")
            table.add_row(i.type.value, i.title, i.value or "", f"[{style}]{i.importance.value}[/{style}]")

        console.print(table)
        console.print(f"\n  Total: {len(found)} insights")

    except MagicChartsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
