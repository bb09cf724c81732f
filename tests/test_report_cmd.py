"""Tests for flakehunter.cli.report_cmd -- displaying saved reports."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
from typer.testing import CliRunner

from flakehunter.cli.main import app
from flakehunter.models.trial import FileReport, RunReport, TrialResult, TrialStatus
from flakehunter.storage.json_store import ReportStore

runner = CliRunner()

_NOW = datetime(2026, 10, 19, 8, 0, 0, tzinfo=timezone.utc)


def _file_report(spec_file: str, outcomes: list[bool], locations: dict[str, int] | None = None) -> FileReport:
    trials = [
        TrialResult(
            run_index=i,
            status=TrialStatus.passed if ok else TrialStatus.failed,
            success=ok,
            duration=0.5,
            exit_code=0 if ok else 1,
            timestamp=_NOW,
        )
        for i, ok in enumerate(outcomes, 1)
    ]
    failures = outcomes.count(False)
    return FileReport(
        spec_file=spec_file,
        trials=trials,
        failure_count=failures,
        failure_rate=round(failures / len(outcomes) * 100, 2),
        is_flaky=0 < failures < len(outcomes),
        locations=locations or {},
    )


def _save(output_dir: Path, generated_at: datetime = _NOW) -> Path:
    report = RunReport(
        generated_at=generated_at,
        base_branch="main",
        spec_pattern="_spec.rb",
        iterations=4,
        files=[
            _file_report("flaky_spec.rb", [True, False, True, True], {"flaky_spec.rb:3": 1}),
            _file_report("broken_spec.rb", [False] * 4),
            _file_report("stable_spec.rb", [True] * 4),
        ],
    )
    return ReportStore(output_dir).save(report)


@pytest.fixture()
def project(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestReportCommand:
    """CLI behaviour of `flakehunter report`."""

    def test_no_reports(self, project: Path):
        result = runner.invoke(app, ["report"])
        assert result.exit_code == 0
        assert "No reports found" in result.output

    def test_latest_report(self, project: Path):
        _save(project / "flaky_test_results")
        result = runner.invoke(app, ["report"])
        assert result.exit_code == 0, result.output
        assert "flaky_spec.rb" in result.output
        assert "broken" in result.output
        assert "stable" in result.output
        assert "1 flaky tests detected out of 3 changed spec files." in result.output
        assert "flaky_spec.rb:3 (failed 1 times)" in result.output

    def test_explicit_path(self, project: Path):
        path = _save(project / "elsewhere")
        result = runner.invoke(app, ["report", str(path)])
        assert result.exit_code == 0, result.output
        assert "1 flaky tests detected" in result.output

    def test_missing_path(self, project: Path):
        result = runner.invoke(app, ["report", "nope.json"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_output_dir_option(self, project: Path):
        _save(project / "custom")
        result = runner.invoke(app, ["report", "-o", "custom", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [f["spec_file"] for f in data["files"]] == [
            "flaky_spec.rb", "broken_spec.rb", "stable_spec.rb",
        ]

    def test_invalid_report_file(self, project: Path):
        bad = project / "bad.json"
        bad.write_text('{"files": "nope"}')
        result = runner.invoke(app, ["report", "bad.json"])
        assert result.exit_code == 1
        assert "not a valid flakehunter report" in result.output

    def test_invalid_config_file_is_config_error(self, project: Path):
        (project / "flakehunter.yaml").write_text("iterations: 0\n")
        result = runner.invoke(app, ["report"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_malformed_config_file_is_config_error(self, project: Path):
        (project / "flakehunter.yaml").write_text("output_dir: [oops\n")
        result = runner.invoke(app, ["report"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output
