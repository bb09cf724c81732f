"""Project configuration model for flakehunter.

Captures flakehunter.yaml fields with defaults matching the usual
RSpec setup. The config is frozen: it is built once at startup and
handed to each component explicitly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

CONFIG_FILENAME = "flakehunter.yaml"


class FlakeConfig(BaseModel):
    """Settings for one flakiness-detection run."""

    model_config = {"extra": "forbid", "frozen": True}

    iterations: int = Field(default=5, ge=1)
    spec_pattern: str = Field(default="_spec.rb", min_length=1)
    base_branch: str = Field(default="main", min_length=1)
    output_dir: str = "flaky_test_results"
    verbose: bool = False
    runner_command: list[str] = Field(
        default_factory=lambda: ["bundle", "exec", "rspec"], min_length=1,
    )
    runner_args: list[str] = Field(
        default_factory=lambda: ["--format", "documentation"],
    )
    vcs_command: list[str] = Field(default_factory=lambda: ["git"], min_length=1)
    trial_timeout: float | None = Field(default=None, gt=0)

    def with_overrides(self, **overrides: Any) -> FlakeConfig:
        """Return a validated copy with non-None overrides applied."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return FlakeConfig.model_validate(data)


def find_project_root(start: Path | None = None) -> Path:
    """Walk up from start (default: cwd) looking for flakehunter.yaml.

    Returns the directory containing the file, or cwd if none is found.
    """
    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    while current != current.parent:
        if (current / CONFIG_FILENAME).exists():
            return current
        current = current.parent
    return Path.cwd()


def load_project_config(project_root: Path | None = None) -> FlakeConfig:
    """Load FlakeConfig from flakehunter.yaml. Returns defaults if not found.

    Args:
        project_root: Directory holding flakehunter.yaml. If None,
            uses find_project_root() to locate it.

    Returns:
        Validated FlakeConfig instance.
    """
    if project_root is None:
        project_root = find_project_root()
    config_path = project_root / CONFIG_FILENAME
    if not config_path.exists():
        return FlakeConfig()
    import yaml

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if raw is None:
        return FlakeConfig()
    return FlakeConfig.model_validate(raw)
