"""ChangeSetResolver: find test files changed relative to a base branch.

Asks the version-control tool for paths changed since the base ref that
match the test-file pattern, then keeps only paths that still exist in
the working tree. The diff tool's ordering is preserved.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from flakehunter.execution.process import (
    CommandRunner,
    TrialExecutionAnomaly,
    run_command,
)


class VersionControlError(Exception):
    """The diff invocation failed; carries the tool's error text."""


class ChangeSetResolver:
    """Resolve the changed test-file set for one run.

    Args:
        base_branch: Ref to diff against (branch, tag, or commit).
        spec_pattern: Test-file suffix, e.g. "_spec.rb".
        vcs_command: Program prefix for the diff tool, e.g. ["git"].
        root: Directory paths are resolved against (default: cwd).
        command_runner: Callable with the run_command signature.
    """

    def __init__(
        self,
        base_branch: str,
        spec_pattern: str,
        vcs_command: Sequence[str] = ("git",),
        root: Path | None = None,
        command_runner: CommandRunner = run_command,
    ) -> None:
        self._base_branch = base_branch
        self._spec_pattern = spec_pattern
        self._vcs_command = list(vcs_command)
        self._root = root or Path.cwd()
        self._command_runner = command_runner

    @property
    def glob_pattern(self) -> str:
        return f"**/*{self._spec_pattern}"

    def build_command(self) -> list[str]:
        return [
            *self._vcs_command,
            "diff",
            "--name-only",
            self._base_branch,
            "--",
            self.glob_pattern,
        ]

    def resolve(self) -> list[str]:
        """Return existing changed test files in diff order, without duplicates.

        Raises:
            VersionControlError: If the diff tool fails or cannot be started.
        """
        try:
            output = self._command_runner(self.build_command(), cwd=self._root)
        except TrialExecutionAnomaly as exc:
            raise VersionControlError(str(exc)) from exc

        if not output.succeeded:
            message = output.stderr.strip() or f"exit status {output.returncode}"
            raise VersionControlError(f"Error getting changed files: {message}")

        seen: set[str] = set()
        paths: list[str] = []
        for line in output.stdout.splitlines():
            path = line.strip()
            if not path or path in seen:
                continue
            seen.add(path)
            # Deleted in the working tree: nothing to run
            if (self._root / path).exists():
                paths.append(path)
        return paths
