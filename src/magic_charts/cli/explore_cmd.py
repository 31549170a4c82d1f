"""magic-charts suggest / variants / autoselect: Chart choices for a column selection."""

from __future__ import annotations

import json
from typing import Annotated

import typer
from rich.table import Table

from magic_charts.cli.common import (
    ColumnsOption,
    FileOption,
    FormatOption,
    SampleOption,
    check_format,
    console,
    open_session,
)
from magic_charts.charts.variants import ALL_FAMILIES, FAMILY_REQUIREMENTS
from magic_charts.exceptions import MagicChartsError

FamilyOption = Annotated[str, typer.Option("--family", help="Chart family (Bar, Line, Pie, Scatter, Histogram) or All")]


def suggest(
    columns: ColumnsOption = None,
    file: FileOption = None,
    sample: SampleOption = None,
    fmt: FormatOption = "table",
) -> None:
    """Rank chart types for the selected columns."""
    try:
        check_format(fmt)
        session = open_session(file, sample)
        session.select(columns or [])
        result = session.suggestions()
        valid = {s.type: session.validate(s.type) for s in result.suggestions}

        if fmt == "json":
            console.print_json(json.dumps({
                "reason": result.reason,
                "suggestions": [
                    {"type": s.type, "priority": s.priority, "reason": s.reason, "valid": valid[s.type]}
                    for s in result.suggestions
                ],
            }, indent=2))
            return

        if result.reason:
            console.print(f"[yellow]{result.reason}[/yellow]")
            return

        table = Table(title=f"Suggestions for {', '.join(session.selection)}")
        table.add_column("Chart", style="cyan")
        table.add_column("Priority", justify="right")
        table.add_column("Valid", style="green")
        table.add_column("Reason")

        for s in result.suggestions:
            table.add_row(s.type, str(s.priority), "Yes" if valid[s.type] else "", s.reason)

        console.print(table)

    except MagicChartsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def variants(
    columns: ColumnsOption = None,
    file: FileOption = None,
    sample: SampleOption = None,
    family: FamilyOption = ALL_FAMILIES,
) -> None:
    """List the chart variants that can draw exactly the selected columns."""
    try:
        session = open_session(file, sample)
        session.select(columns or [])
        matches = session.compatible_variants(family)

        if matches:
            table = Table(title=f"Compatible variants for {', '.join(session.selection)}")
            table.add_column("Family", style="cyan")
            table.add_column("Variant")
            table.add_column("Label", style="dim")
            for fam, variant in matches:
                table.add_row(fam, variant.key, variant.label)
            console.print(table)
        else:
            console.print(f"[yellow]{FAMILY_REQUIREMENTS.get(family, FAMILY_REQUIREMENTS[ALL_FAMILIES])}[/yellow]")

        addable = session.addable_columns()
        if addable:
            console.print(f"\n  Addable columns: {', '.join(addable)}")

    except MagicChartsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def autoselect(
    file: FileOption = None,
    sample: SampleOption = None,
    family: FamilyOption = ALL_FAMILIES,
) -> None:
    """Find the first column combination a chart family can draw."""
    try:
        session = open_session(file, sample)
        chosen = session.auto_select(family)
        if chosen is None:
            console.print(f"[yellow]No column combination fits {family}[/yellow]")
            return
        console.print(f"[green]{family}:[/green] {', '.join(chosen)}")

    except MagicChartsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
