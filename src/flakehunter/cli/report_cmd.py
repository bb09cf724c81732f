"""flakehunter report -- display a stored run report.

Shows the latest report in the configured output directory by default,
or a specific report file when a path is given.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from flakehunter.cli.output import output_json, render_summary
from flakehunter.models.config import find_project_root, load_project_config
from flakehunter.models.trial import RunReport
from flakehunter.storage.json_store import PersistenceError, ReportStore


def _render_file_table(report: RunReport, console: Console) -> None:
    """Per-file breakdown of every changed file in the report."""
    console.print()
    console.print(
        f"[bold]Generated:[/bold] {report.generated_at.isoformat()}  "
        f"[bold]Base:[/bold] {escape(report.base_branch)}  "
        f"[bold]Iterations:[/bold] {report.iterations}"
    )

    table = Table(box=box.ROUNDED)
    table.add_column("Spec file")
    table.add_column("Result")
    table.add_column("Failures", justify="right")
    table.add_column("Rate", justify="right")
    table.add_column("Durations")

    for file_report in report.files:
        if file_report.is_flaky:
            result = "[bold yellow]flaky[/bold yellow]"
        elif file_report.is_broken:
            result = "[bold red]broken[/bold red]"
        else:
            result = "[green]stable[/green]"
        durations = " ".join(f"{t.duration:.2f}s" for t in file_report.trials)
        table.add_row(
            escape(file_report.spec_file),
            result,
            f"{file_report.failure_count}/{file_report.iterations}",
            f"{file_report.failure_rate}%",
            durations,
        )

    console.print(table)


def report(
    path: Optional[str] = typer.Argument(None, help="Report file to display (default: latest)"),
    output_dir: Optional[str] = typer.Option(
        None, "-o", "--output-dir", help="Directory holding saved reports"
    ),
    format_json: bool = typer.Option(False, "--json", help="Output the report as pure JSON"),
) -> None:
    """Display a stored flakiness report."""
    console = Console()

    project_root = find_project_root()
    try:
        config = load_project_config(project_root)
    except (ValidationError, yaml.YAMLError) as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    store = ReportStore(project_root / (output_dir or config.output_dir))

    try:
        if path is not None:
            try:
                run_report = store.load(Path(path))
            except FileNotFoundError:
                console.print(f"Report '{escape(path)}' not found.")
                raise typer.Exit(code=1)
        else:
            run_report = store.load_latest()
            if run_report is None:
                console.print("[dim]No reports found. Run 'flakehunter run' first.[/dim]")
                raise typer.Exit(code=0)
    except PersistenceError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    if format_json:
        output_json(run_report)
        return

    _render_file_table(run_report, console)
    render_summary(run_report, console)
