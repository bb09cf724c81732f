"""TrialRunner: repeated sequential execution of one test file.

Runs the configured test runner against a single file N times, one
trial after another, capturing status, duration, exit code and raw
output per trial. A failing or crashing trial never stops the
sequence: all N trials always run.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime, timezone

from flakehunter.execution.process import (
    CommandRunner,
    TrialExecutionAnomaly,
    run_command,
)
from flakehunter.models.config import FlakeConfig
from flakehunter.models.trial import TrialResult, TrialStatus

TrialCallback = Callable[[TrialResult, int], None]


class TrialRunner:
    """Executes N sequential trials of one test file.

    Args:
        config: Run configuration (iterations, runner command, timeout).
        command_runner: Callable with the run_command signature.
    """

    def __init__(
        self,
        config: FlakeConfig,
        command_runner: CommandRunner = run_command,
    ) -> None:
        self._config = config
        self._command_runner = command_runner

    @property
    def iterations(self) -> int:
        return self._config.iterations

    def build_command(self, spec_file: str) -> list[str]:
        return [*self._config.runner_command, spec_file, *self._config.runner_args]

    def run_all(
        self,
        spec_file: str,
        on_trial: TrialCallback | None = None,
    ) -> list[TrialResult]:
        """Run every trial for spec_file and return them in execution order.

        Args:
            spec_file: Path of the test file to run.
            on_trial: Optional callback(result, total) invoked right after
                each trial completes.

        Returns:
            Exactly `iterations` TrialResults with run_index 1..N.
        """
        results: list[TrialResult] = []
        for run_index in range(1, self.iterations + 1):
            result = self._execute_single_trial(spec_file, run_index)
            results.append(result)
            if on_trial is not None:
                on_trial(result, self.iterations)
        return results

    def _execute_single_trial(self, spec_file: str, run_index: int) -> TrialResult:
        """Run one trial; runner anomalies become infra_error results."""
        start_time = time.perf_counter()
        try:
            output = self._command_runner(
                self.build_command(spec_file),
                timeout=self._config.trial_timeout,
            )
        except TrialExecutionAnomaly as exc:
            return TrialResult(
                run_index=run_index,
                status=TrialStatus.infra_error,
                success=False,
                duration=time.perf_counter() - start_time,
                exit_code=None,
                timestamp=datetime.now(timezone.utc),
                error_message=str(exc),
            )

        if output.succeeded:
            status = TrialStatus.passed
        elif output.exit_code is None:
            status = TrialStatus.crashed
        else:
            status = TrialStatus.failed

        return TrialResult(
            run_index=run_index,
            status=status,
            success=output.succeeded,
            duration=max(output.duration, 0.0),
            exit_code=output.exit_code,
            timestamp=datetime.now(timezone.utc),
            error_message=(
                f"terminated by signal {-output.returncode}"
                if status == TrialStatus.crashed
                else None
            ),
            raw_stdout=output.stdout,
            raw_stderr=output.stderr,
        )
