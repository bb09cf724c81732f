"""flakehunter run -- re-run changed test files and report flaky ones.

Loads configuration, resolves the changed test files against the base
branch, runs each file N times with live per-trial output, persists the
run report, and prints the ranked summary.
"""

from __future__ import annotations

from typing import Optional

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from flakehunter.cli.output import (
    output_json,
    render_changed_files,
    render_file_start,
    render_file_verdict,
    render_no_changes,
    render_summary,
    render_trial,
)
from flakehunter.execution.detector import FlakeDetector
from flakehunter.models.config import find_project_root, load_project_config
from flakehunter.storage.json_store import PersistenceError, ReportStore
from flakehunter.vcs.changeset import VersionControlError

console = Console(stderr=True)

EXIT_VCS_ERROR = 1
EXIT_PERSISTENCE_ERROR = 2


def run(
    iterations: Optional[int] = typer.Option(
        None, "-i", "--iterations", help="Number of times to run each spec (default: 5)"
    ),
    base_branch: Optional[str] = typer.Option(
        None, "-b", "--base-branch", help="Base branch to compare against (default: main)"
    ),
    spec_pattern: Optional[str] = typer.Option(
        None, "-p", "--pattern", help="Pattern to match spec files (default: _spec.rb)"
    ),
    output_dir: Optional[str] = typer.Option(
        None, "-o", "--output-dir", help="Directory to save results (default: flaky_test_results)"
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Show detailed error output for failed runs"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds before a single trial is killed"
    ),
    format_json: bool = typer.Option(
        False, "--json", help="Output the run report as pure JSON to stdout"
    ),
) -> None:
    """Run changed spec files repeatedly and report flaky tests."""
    project_root = find_project_root()
    try:
        config = load_project_config(project_root).with_overrides(
            iterations=iterations,
            base_branch=base_branch,
            spec_pattern=spec_pattern,
            output_dir=output_dir,
            verbose=verbose or None,
            trial_timeout=timeout,
        )
    except (ValidationError, yaml.YAMLError) as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    detector = FlakeDetector(config)
    output_console = Console()

    # 1. Resolve change set; failure here aborts before any trial runs
    try:
        changed = detector.find_changed_files()
    except VersionControlError as exc:
        console.print(f"[bold red]Version control error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=EXIT_VCS_ERROR)

    if not changed:
        render_no_changes(console)
        return

    render_changed_files(changed, console)

    # 2. Run trials file by file with live progress
    report = detector.run(
        changed,
        on_file_start=lambda path: render_file_start(path, config.iterations, console),
        on_trial=lambda trial, total: render_trial(
            trial, total, console, verbose=config.verbose,
        ),
        on_file_done=lambda file_report: render_file_verdict(file_report, console),
    )

    # 3. Persist; on failure still show the computed results
    store = ReportStore(project_root / config.output_dir)
    persistence_error: PersistenceError | None = None
    try:
        saved_path = store.save(report)
    except PersistenceError as exc:
        persistence_error = exc
    else:
        console.print(f"\nResults saved to {escape(str(saved_path))}")

    # 4. Summary
    if format_json:
        output_json(report)
    else:
        render_summary(report, output_console)

    if persistence_error is not None:
        console.print(
            f"[bold red]Could not save results:[/bold red] {escape(str(persistence_error))}"
        )
        raise typer.Exit(code=EXIT_PERSISTENCE_ERROR)
