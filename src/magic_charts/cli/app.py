"""Main CLI application for magic-charts."""

from __future__ import annotations

import logging

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from magic_charts import __version__
from magic_charts.config import get_settings
from magic_charts.exceptions import ConfigurationError

app = typer.Typer(
    name="magic-charts",
    help="Profile tabular data and recommend the charts that fit a column selection.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"magic-charts {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich on stderr, once per invocation."""
    try:
        settings = get_settings()
        level = logging.DEBUG if verbose else settings.log_level
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
    except ValidationError as e:
        details = "; ".join(err["msg"] for err in e.errors())
        typer.echo(f"Error: Invalid settings: {details}", err=True)
        raise typer.Exit(1) from e
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version.", callback=version_callback, is_eager=True
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log debug details to stderr."),
) -> None:
    """magic-charts: chart recommendations for CSV data."""
    configure_logging(verbose)


# Import and register commands
from magic_charts.cli.explore_cmd import autoselect, suggest, variants  # noqa: E402
from magic_charts.cli.insights_cmd import insights  # noqa: E402
from magic_charts.cli.profile_cmd import profile  # noqa: E402
from magic_charts.cli.render_cmd import gallery, render  # noqa: E402
from magic_charts.cli.samples_cmd import samples  # noqa: E402

app.command("samples")(samples)
app.command("profile")(profile)
app.command("suggest")(suggest)
app.command("variants")(variants)
app.command("autoselect")(autoselect)
app.command("render")(render)
app.command("gallery")(gallery)
app.command("insights")(insights)


def main() -> None:
    """Entry point for the CLI."""
    app()
