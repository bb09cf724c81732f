"""FlakeDetector: the end-to-end detection pipeline.

ChangeSetResolver -> TrialRunner (per file) -> aggregate_file -> RunReport.
Files are processed one at a time; each file's trials finish before the
next file starts. Persistence and display stay with the caller.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from flakehunter.evaluation.aggregation import aggregate_file
from flakehunter.evaluation.extraction import build_patterns
from flakehunter.execution.process import CommandRunner, run_command
from flakehunter.execution.trial_runner import TrialCallback, TrialRunner
from flakehunter.models.config import FlakeConfig
from flakehunter.models.trial import FileReport, RunReport
from flakehunter.vcs.changeset import ChangeSetResolver


class FlakeDetector:
    """Wires resolver, runner, and aggregator for one invocation.

    Args:
        config: Frozen run configuration.
        root: Repository directory (default: cwd).
        command_runner: Shared black-box runner for the diff tool and tests.
    """

    def __init__(
        self,
        config: FlakeConfig,
        root: Path | None = None,
        command_runner: CommandRunner = run_command,
    ) -> None:
        self.config = config
        self.resolver = ChangeSetResolver(
            base_branch=config.base_branch,
            spec_pattern=config.spec_pattern,
            vcs_command=config.vcs_command,
            root=root,
            command_runner=command_runner,
        )
        self.trial_runner = TrialRunner(config, command_runner=command_runner)
        self._patterns = build_patterns(config.spec_pattern)

    def find_changed_files(self) -> list[str]:
        """Raises VersionControlError if the diff fails."""
        return self.resolver.resolve()

    def check_file(
        self,
        spec_file: str,
        on_trial: TrialCallback | None = None,
    ) -> FileReport:
        trials = self.trial_runner.run_all(spec_file, on_trial=on_trial)
        return aggregate_file(spec_file, trials, self._patterns)

    def run(
        self,
        spec_files: list[str],
        on_file_start: Callable[[str], None] | None = None,
        on_trial: TrialCallback | None = None,
        on_file_done: Callable[[FileReport], None] | None = None,
    ) -> RunReport:
        """Run all trials for every file and collect the run report.

        Args:
            spec_files: Changed test files, in resolver order.
            on_file_start: Called with the path before its first trial.
            on_trial: Called after each trial with (result, total).
            on_file_done: Called with each finalized FileReport.

        Returns:
            RunReport with one FileReport per input file, in input order.
        """
        reports: list[FileReport] = []
        for spec_file in spec_files:
            if on_file_start is not None:
                on_file_start(spec_file)
            report = self.check_file(spec_file, on_trial=on_trial)
            reports.append(report)
            if on_file_done is not None:
                on_file_done(report)

        return RunReport(
            generated_at=datetime.now(timezone.utc),
            base_branch=self.config.base_branch,
            spec_pattern=self.config.spec_pattern,
            iterations=self.config.iterations,
            files=reports,
        )
