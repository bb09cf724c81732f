"""Flakehunter CLI entry point."""

import typer

from flakehunter import __version__
from flakehunter.cli.report_cmd import report as report_cmd
from flakehunter.cli.run_cmd import run

app = typer.Typer(
    name="flakehunter",
    help="Detect flaky tests by re-running changed test files",
    no_args_is_help=True,
)

# Register subcommands
app.command(name="report")(report_cmd)
app.command()(run)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"flakehunter {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Detect flaky tests by re-running changed test files."""
