"""Flakehunter execution - subprocess capture and repeated trials.

FlakeDetector lives in flakehunter.execution.detector and is not
re-exported here, since it depends on flakehunter.vcs which in turn
imports this package.
"""

from flakehunter.execution.process import (
    CommandOutput,
    TrialExecutionAnomaly,
    run_command,
)
from flakehunter.execution.trial_runner import TrialRunner

__all__ = [
    "CommandOutput",
    "TrialExecutionAnomaly",
    "TrialRunner",
    "run_command",
]
