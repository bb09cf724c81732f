"""Tests for the JSON storage layer (ReportStore)."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from flakehunter.models.trial import FileReport, RunReport, TrialResult, TrialStatus
from flakehunter.storage.json_store import PersistenceError, ReportStore


def _make_report(
    generated_at: datetime | None = None,
    spec_file: str = "spec/a_spec.rb",
) -> RunReport:
    """Build a RunReport with one flaky file whose trials carry raw output."""
    stamp = generated_at or datetime(2026, 10, 19, 9, 30, 5, tzinfo=timezone.utc)
    trials = [
        TrialResult(
            run_index=1,
            status=TrialStatus.passed,
            success=True,
            duration=0.8,
            exit_code=0,
            timestamp=stamp,
            raw_stdout="2 examples, 0 failures",
        ),
        TrialResult(
            run_index=2,
            status=TrialStatus.failed,
            success=False,
            duration=0.9,
            exit_code=1,
            timestamp=stamp,
            raw_stdout="rspec ./spec/a_spec.rb:10",
            raw_stderr="some warning",
        ),
    ]
    return RunReport(
        generated_at=stamp,
        base_branch="main",
        spec_pattern="_spec.rb",
        iterations=2,
        files=[
            FileReport(
                spec_file=spec_file,
                trials=trials,
                failure_count=1,
                failure_rate=50.0,
                is_flaky=True,
                locations={"spec/a_spec.rb:10": 1},
            ),
        ],
    )


class TestReportStoreEnsureDir:
    """Tests for output directory creation."""

    def test_creates_nested_directory(self, tmp_path: Path) -> None:
        store = ReportStore(tmp_path / "out" / "nested")
        store.ensure_dir()
        assert (tmp_path / "out" / "nested").is_dir()

    def test_idempotent(self, tmp_path: Path) -> None:
        store = ReportStore(tmp_path / "out")
        store.ensure_dir()
        store.ensure_dir()
        assert (tmp_path / "out").is_dir()

    def test_blocked_by_file_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "out"
        blocker.write_text("not a directory")
        with pytest.raises(PersistenceError):
            ReportStore(blocker / "sub").ensure_dir()


class TestReportStoreSave:
    """Tests for saving reports."""

    def test_timestamp_named_file(self, tmp_path: Path) -> None:
        store = ReportStore(tmp_path / "results")
        path = store.save(_make_report())
        assert path.name == "flaky_test_results_20261019_093005.json"
        assert path.exists()
        assert not path.with_name(f"{path.name}.tmp").exists()

    def test_same_second_saves_do_not_overwrite(self, tmp_path: Path) -> None:
        store = ReportStore(tmp_path)
        first = store.save(_make_report())
        second = store.save(_make_report(spec_file="spec/b_spec.rb"))

        assert first != second
        assert second.name == "flaky_test_results_20261019_093005_1.json"
        assert store.list_reports() == [first, second]
        assert store.load(first).files[0].spec_file == "spec/a_spec.rb"
        assert store.load_latest().files[0].spec_file == "spec/b_spec.rb"

    def test_raw_output_not_persisted(self, tmp_path: Path) -> None:
        store = ReportStore(tmp_path)
        path = store.save(_make_report())
        content = path.read_text(encoding="utf-8")
        assert "raw_stdout" not in content
        assert "some warning" not in content
        data = json.loads(content)
        trial = data["files"][0]["trials"][1]
        assert trial == {
            "run_index": 2,
            "status": "failed",
            "success": False,
            "duration": 0.9,
            "exit_code": 1,
            "timestamp": "2026-10-19T09:30:05Z",
            "error_message": None,
        }
        assert data["files"][0]["locations"] == {"spec/a_spec.rb:10": 1}

    def test_updates_latest(self, tmp_path: Path) -> None:
        store = ReportStore(tmp_path)
        store.save(_make_report())
        later = datetime(2026, 10, 19, 10, 0, 0, tzinfo=timezone.utc)
        store.save(_make_report(generated_at=later, spec_file="spec/b_spec.rb"))
        latest = store.load_latest()
        assert latest is not None
        assert latest.files[0].spec_file == "spec/b_spec.rb"


class TestReportStoreLoad:
    """Tests for loading reports."""

    def test_round_trip(self, tmp_path: Path) -> None:
        store = ReportStore(tmp_path)
        original = _make_report()
        loaded = store.load(store.save(original))
        assert loaded.files[0].locations == original.files[0].locations
        assert loaded.files[0].trials[0].raw_stdout == ""

    def test_load_latest_empty_dir(self, tmp_path: Path) -> None:
        assert ReportStore(tmp_path / "missing").load_latest() is None

    def test_load_latest_without_pointer_uses_newest_file(self, tmp_path: Path) -> None:
        store = ReportStore(tmp_path)
        store.save(_make_report())
        (tmp_path / "latest").unlink()
        assert store.load_latest() is not None

    def test_invalid_document_raises(self, tmp_path: Path) -> None:
        bad = tmp_path / "flaky_test_results_20260101_000000.json"
        bad.write_text('{"nope": true}')
        with pytest.raises(PersistenceError):
            ReportStore(tmp_path).load(bad)

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            ReportStore(tmp_path).load(tmp_path / "absent.json")

    def test_list_reports_sorted(self, tmp_path: Path) -> None:
        store = ReportStore(tmp_path)
        store.save(_make_report(generated_at=datetime(2026, 1, 2, tzinfo=timezone.utc)))
        store.save(_make_report(generated_at=datetime(2026, 1, 1, tzinfo=timezone.utc)))
        names = [p.name for p in store.list_reports()]
        assert names == [
            "flaky_test_results_20260101_000000.json",
            "flaky_test_results_20260102_000000.json",
        ]
