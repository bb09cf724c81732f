"""Flakehunter data models - configuration, trials, and reports."""

from flakehunter.models.config import FlakeConfig, find_project_root, load_project_config
from flakehunter.models.trial import (
    FailureLocation,
    FileReport,
    RunReport,
    TrialResult,
    TrialStatus,
)

__all__ = [
    "FailureLocation",
    "FileReport",
    "FlakeConfig",
    "RunReport",
    "TrialResult",
    "TrialStatus",
    "find_project_root",
    "load_project_config",
]
