"""Rich terminal output for flakiness detection.

Live progress lines (changed files, per-trial status, per-file verdict)
and the ranked end-of-run summary, plus pure JSON output for CI.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from flakehunter.evaluation.aggregation import rank_flaky_files, rank_locations

if TYPE_CHECKING:
    from flakehunter.models.trial import FileReport, RunReport, TrialResult


# Trial status styling: status value -> (symbol, Rich markup style)
_TRIAL_STYLES: dict[str, tuple[str, str]] = {
    "passed": ("✓", "green"),
    "failed": ("✗", "red"),
    "crashed": ("✗", "bold red"),
    "infra_error": ("!", "bold bright_red"),
}


def render_changed_files(files: list[str], console: Console) -> None:
    console.print(f"Found {len(files)} changed spec files:")
    for path in files:
        console.print(f"  - {escape(path)}")


def render_no_changes(console: Console) -> None:
    console.print("No spec files changed.")


def render_file_start(spec_file: str, iterations: int, console: Console) -> None:
    console.print()
    console.print(f"Running [bold]{escape(spec_file)}[/bold] {iterations} times...")


def render_trial(
    trial: TrialResult,
    total: int,
    console: Console,
    *,
    verbose: bool = False,
) -> None:
    """Print one trial's status line as soon as it finishes.

    With verbose, a failing trial's captured output is echoed
    indented beneath the status line.
    """
    symbol, style = _TRIAL_STYLES.get(trial.status.value, ("?", "yellow"))
    line = (
        f"  Run {trial.run_index}/{total}: [{style}]{symbol}[/{style}] "
        f"({trial.duration:.2f}s)"
    )
    if trial.error_message:
        line += f" [dim]{escape(trial.error_message)}[/dim]"
    console.print(line)

    if verbose and not trial.success:
        console.print("    Error output:")
        for stream in (trial.raw_stderr, trial.raw_stdout):
            for text in stream.splitlines():
                console.print(f"      {escape(text)}", highlight=False)


def render_file_verdict(report: FileReport, console: Console) -> None:
    """Print the flaky / broken / stable verdict for one file."""
    name = escape(report.spec_file)
    if report.is_flaky:
        console.print(
            f"[bold yellow]⚠  FLAKY TEST DETECTED:[/bold yellow] {name} "
            f"failed {report.failure_count}/{report.iterations} runs"
        )
    elif report.is_broken:
        console.print(
            f"[bold red]✗ Consistently failing:[/bold red] {name} "
            f"failed all {report.iterations} runs (broken, not flaky)"
        )
    else:
        console.print(f"[bold green]✓ All runs passed for:[/bold green] {name}")
        return

    if report.locations:
        console.print("   Failure locations:")
        for location, count in rank_locations(report.locations):
            console.print(f"     - {escape(location)} (failed {count} times)")


def render_summary(report: RunReport, console: Console) -> None:
    """Render the ranked end-of-run summary.

    Lists the changed-file and flaky-file counts, then each flaky file
    by descending failure rate with its ranked failure locations.
    """
    flaky = rank_flaky_files(report.files)

    console.print()
    console.print("[bold]Summary:[/bold]")
    console.print(
        f"{len(flaky)} flaky tests detected out of "
        f"{report.changed_file_count} changed spec files."
    )

    if not flaky:
        return

    table = Table(box=box.SIMPLE, title="Flaky tests", title_justify="left")
    table.add_column("#", justify="right")
    table.add_column("Spec file")
    table.add_column("Failure rate", justify="right")
    table.add_column("Failures", justify="right")

    for i, file_report in enumerate(flaky, 1):
        table.add_row(
            str(i),
            escape(file_report.spec_file),
            f"{file_report.failure_rate}%",
            f"{file_report.failure_count}/{file_report.iterations}",
        )
    console.print(table)

    for file_report in flaky:
        if not file_report.locations:
            continue
        console.print(
            f"[bold]{escape(file_report.spec_file)}[/bold] "
            f"({file_report.failure_rate}% failure rate)"
        )
        console.print("    Failure locations:")
        for location, count in rank_locations(file_report.locations):
            console.print(f"      - {escape(location)} (failed {count} times)")


def output_json(report: RunReport) -> None:
    """Write the run report as pure JSON to stdout."""
    sys.stdout.write(report.model_dump_json(indent=2))
    sys.stdout.write("\n")
