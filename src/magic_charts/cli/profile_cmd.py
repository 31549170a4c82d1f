"""magic-charts profile: Show how each column of a dataset is classified."""

from __future__ import annotations

import json

import typer
from rich.table import Table

from magic_charts.analysis.field_analyzer import analyze_fields
from magic_charts.cli.common import FileOption, FormatOption, SampleOption, check_format, console, open_session
from magic_charts.exceptions import MagicChartsError


def profile(
    file: FileOption = None,
    sample: SampleOption = None,
    fmt: FormatOption = "table",
) -> None:
    """Show ingestion type, semantic type and cardinality per column."""
    try:
        check_format(fmt)
        session = open_session(file, sample)
        dataset = session.require_dataset()
        descriptors = analyze_fields(dataset.rows, dataset.column_names)
        types = dataset.column_types

        if fmt == "json":
            console.print_json(json.dumps(
                [
                    {"column_type": types[d.name].value, **d.model_dump(mode="json")}
                    for d in descriptors
                ],
                indent=2,
            ))
            return

        table = Table(title=f"{dataset.name} ({dataset.record_count} rows)")
        table.add_column("Column", style="cyan")
        table.add_column("Type", style="dim")
        table.add_column("Semantic")
        table.add_column("Cardinality", justify="right")
        table.add_column("Tier", style="dim")
        table.add_column("Nulls", style="yellow")
        table.add_column("Sample")

        for d in descriptors:
            table.add_row(
                d.name,
                types[d.name].value,
                d.semantic_type.value,
                str(d.cardinality),
                d.cardinality_tier.value,
                "Yes" if d.has_nulls else "",
                ", ".join(str(v) for v in d.unique_values_sample[:3]),
            )

        console.print(table)

    except MagicChartsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
