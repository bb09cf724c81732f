"""Trial and report data models for repeated test-file execution.

These models encode the repeated-trial contract: individual trial
outcomes, per-file flakiness classification with failure-location
frequencies, and the run-level document that gets persisted.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class TrialStatus(str, Enum):
    """Outcome of one execution of one test file."""

    passed = "passed"
    failed = "failed"
    crashed = "crashed"
    infra_error = "infra_error"


class TrialResult(BaseModel):
    """Result of a single trial of one test file.

    Raw stdout/stderr are kept in memory for location extraction but
    excluded from serialization so persisted reports stay small.
    """

    model_config = {"extra": "forbid", "frozen": True}

    run_index: int = Field(ge=1)
    status: TrialStatus
    success: bool
    duration: float = Field(ge=0.0)
    exit_code: int | None = None
    timestamp: datetime
    error_message: str | None = None
    raw_stdout: str = Field(default="", exclude=True, repr=False)
    raw_stderr: str = Field(default="", exclude=True, repr=False)

    @property
    def combined_output(self) -> str:
        return f"{self.raw_stdout}\n{self.raw_stderr}"


class FailureLocation(BaseModel):
    """A (path, line) pair where a failure was reported.

    The path is canonicalized on construction: a leading "./" is
    stripped so the same location reported two ways counts once.
    """

    model_config = {"frozen": True}

    path: str
    line: int = Field(ge=0)

    @classmethod
    def from_match(cls, path: str, line: str | int) -> FailureLocation:
        while path.startswith("./"):
            path = path[2:]
        return cls(path=path, line=int(line))

    @property
    def key(self) -> str:
        return f"{self.path}:{self.line}"

    def __str__(self) -> str:
        return self.key


class FileReport(BaseModel):
    """Finalized flakiness result for one changed test file.

    locations maps "path:line" keys to the number of failing trials
    that reported them, ordered by descending count.
    """

    model_config = {"extra": "forbid", "frozen": True}

    spec_file: str
    trials: list[TrialResult]
    failure_count: int
    failure_rate: float
    is_flaky: bool
    locations: dict[str, int] = Field(default_factory=dict)

    @property
    def iterations(self) -> int:
        return len(self.trials)

    @property
    def is_broken(self) -> bool:
        """True when every trial failed (consistently broken, not flaky)."""
        return self.iterations > 0 and self.failure_count == self.iterations


class RunReport(BaseModel):
    """Everything one invocation produced, in processing order."""

    model_config = {"extra": "forbid", "frozen": True}

    generated_at: datetime
    base_branch: str
    spec_pattern: str
    iterations: int
    files: list[FileReport] = Field(default_factory=list)

    @property
    def changed_file_count(self) -> int:
        return len(self.files)

    @property
    def flaky_count(self) -> int:
        return sum(1 for f in self.files if f.is_flaky)
