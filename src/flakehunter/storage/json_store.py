"""JSON file storage for flakehunter run reports.

Stores each RunReport as a timestamp-named JSON file in the configured
output directory and keeps a 'latest' pointer to the newest one. Raw
runner output is never written. Uses atomic writes to prevent
partial files.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import ValidationError

from flakehunter.models.trial import RunReport

REPORT_PREFIX = "flaky_test_results_"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


class PersistenceError(Exception):
    """A report could not be written to or read from the output directory."""


class ReportStore:
    """Persist and load RunReport documents.

    File layout:
        <output_dir>/
            flaky_test_results_{YYYYmmdd_HHMMSS}.json
            flaky_test_results_{YYYYmmdd_HHMMSS}_1.json   (same-second save)
            latest -> flaky_test_results_{...}.json
    """

    def __init__(self, output_dir: Path | str) -> None:
        self.output_dir = Path(output_dir)

    def ensure_dir(self) -> None:
        """Create the output directory (and parents) if missing."""
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(
                f"Cannot create output directory {self.output_dir}: {exc}"
            ) from exc

    def report_path(self, report: RunReport) -> Path:
        """Timestamp-named path for report, suffixed _1, _2, ... if taken.

        Suffixed names still sort after the unsuffixed one for the same second.
        """
        stamp = report.generated_at.strftime(TIMESTAMP_FORMAT)
        path = self.output_dir / f"{REPORT_PREFIX}{stamp}.json"
        suffix = 0
        while path.exists():
            suffix += 1
            path = self.output_dir / f"{REPORT_PREFIX}{stamp}_{suffix}.json"
        return path

    def save(self, report: RunReport) -> Path:
        """Write report as JSON and point 'latest' at it.

        Args:
            report: The finalized run report.

        Returns:
            Path of the written file.

        Raises:
            PersistenceError: If the directory or file cannot be written.
        """
        self.ensure_dir()

        path = self.report_path(report)
        tmp_path = path.with_name(f"{path.name}.tmp")
        content = report.model_dump_json(indent=2)

        try:
            # Atomic write: write to .tmp then rename
            tmp_path.write_text(content, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Cannot write report {path}: {exc}") from exc

        self.update_latest_symlink(path.name)
        return path

    def update_latest_symlink(self, filename: str) -> None:
        """Create or update a 'latest' symlink pointing to filename.

        Falls back to writing a .latest text file if symlinks fail (Windows).
        """
        link_path = self.output_dir / "latest"
        try:
            tmp_link = self.output_dir / f".latest_tmp_{filename}"
            if tmp_link.exists() or tmp_link.is_symlink():
                tmp_link.unlink()
            os.symlink(filename, tmp_link)
            os.replace(tmp_link, link_path)
        except OSError:
            fallback_path = self.output_dir / ".latest"
            try:
                fallback_path.write_text(filename, encoding="utf-8")
            except OSError as exc:
                raise PersistenceError(
                    f"Cannot update latest pointer in {self.output_dir}: {exc}"
                ) from exc

    def list_reports(self) -> list[Path]:
        """Report files sorted oldest first (timestamp names sort chronologically)."""
        if not self.output_dir.is_dir():
            return []
        return sorted(self.output_dir.glob(f"{REPORT_PREFIX}*.json"))

    def load(self, path: Path | str) -> RunReport:
        """Load a RunReport from a JSON file.

        Raises:
            FileNotFoundError: If path does not exist.
            PersistenceError: If the file is not a valid report.
        """
        content = Path(path).read_text(encoding="utf-8")
        try:
            return RunReport.model_validate_json(content)
        except ValidationError as exc:
            raise PersistenceError(f"{path} is not a valid flakehunter report") from exc

    def load_latest(self) -> RunReport | None:
        """Load the newest report via 'latest', falling back to the newest file."""
        link_path = self.output_dir / "latest"
        fallback_path = self.output_dir / ".latest"

        filename: str | None = None
        if link_path.is_symlink():
            filename = os.readlink(link_path)
        elif fallback_path.exists():
            filename = fallback_path.read_text(encoding="utf-8").strip()

        if filename is not None:
            try:
                return self.load(self.output_dir / filename)
            except FileNotFoundError:
                pass

        reports = self.list_reports()
        if not reports:
            return None
        return self.load(reports[-1])
