"""Subprocess wrapper used for both the diff tool and the test runner.

Runs one command to completion, capturing stdout, stderr, exit code
and wall-clock duration. Failures to start or finish the process are
raised as TrialExecutionAnomaly so callers can tell them apart from a
command that ran and exited non-zero.
"""

from __future__ import annotations

import subprocess
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path


class TrialExecutionAnomaly(Exception):
    """The command could not be started or did not finish normally."""


@dataclass(frozen=True)
class CommandOutput:
    """Captured result of one finished command.

    Attributes:
        stdout: Decoded standard output.
        stderr: Decoded standard error.
        returncode: Raw return code (negative when killed by a signal).
        duration: Elapsed wall-clock seconds.
    """

    stdout: str
    stderr: str
    returncode: int
    duration: float

    @property
    def exit_code(self) -> int | None:
        """Process exit status, or None if the process died from a signal."""
        if self.returncode < 0:
            return None
        return self.returncode

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


CommandRunner = Callable[..., CommandOutput]


def run_command(
    cmd: Sequence[str],
    *,
    timeout: float | None = None,
    cwd: Path | None = None,
) -> CommandOutput:
    """Run cmd without a shell and wait for it to exit.

    Args:
        cmd: Program and arguments.
        timeout: Seconds before the process is killed, or None to wait forever.
        cwd: Working directory for the child process.

    Returns:
        CommandOutput with captured streams and timing.

    Raises:
        TrialExecutionAnomaly: If the program cannot be started or times out.
    """
    start_time = time.perf_counter()
    try:
        completed = subprocess.run(
            list(cmd),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
            timeout=timeout,
            cwd=cwd,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise TrialExecutionAnomaly(
            f"'{' '.join(cmd)}' timed out after {timeout}s"
        ) from exc
    except OSError as exc:
        raise TrialExecutionAnomaly(f"could not start '{cmd[0]}': {exc}") from exc

    return CommandOutput(
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        returncode=completed.returncode,
        duration=time.perf_counter() - start_time,
    )
