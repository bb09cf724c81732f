"""Per-file flakiness aggregation and cross-file ranking.

Turns one file's ordered trial results into a finalized FileReport
(failure count, failure rate, flaky classification, failure-location
frequencies) and ranks reports for display. All functions are pure.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from flakehunter.evaluation.extraction import (
    DEFAULT_PATTERNS,
    LocationPattern,
    extract_locations,
)
from flakehunter.models.trial import FailureLocation, FileReport, TrialResult


def compute_failure_rate(failure_count: int, total: int) -> float:
    """Percentage of failing trials, rounded to 2 decimal places."""
    if total <= 0:
        return 0.0
    return round(failure_count / total * 100, 2)


def classify_flaky(failure_count: int, total: int) -> bool:
    """A file is flaky only if it both failed and passed at least once."""
    return 0 < failure_count < total


def count_failure_locations(
    trials: Sequence[TrialResult],
    patterns: Sequence[LocationPattern] = DEFAULT_PATTERNS,
) -> Counter[FailureLocation]:
    """Count locations across every failing trial.

    Each failing trial contributes at most once per location. Passing
    trials are ignored. Counter preserves first-insertion order, which
    is the tie-break order for ranking.
    """
    counts: Counter[FailureLocation] = Counter()
    for trial in trials:
        if trial.success:
            continue
        for location in extract_locations(trial.combined_output, patterns):
            counts[location] += 1
    return counts


def rank_locations(locations: dict[str, int]) -> list[tuple[str, int]]:
    """Order location counts by descending count; ties keep input order."""
    return sorted(locations.items(), key=lambda item: -item[1])


def aggregate_file(
    spec_file: str,
    trials: Sequence[TrialResult],
    patterns: Sequence[LocationPattern] = DEFAULT_PATTERNS,
) -> FileReport:
    """Build the finalized FileReport for one test file.

    Args:
        spec_file: Path of the test file as reported by the resolver.
        trials: The file's complete ordered trial sequence.
        patterns: Location patterns used on failing trials' output.

    Returns:
        FileReport with derived counts, rate, flaky flag, and locations.
    """
    total = len(trials)
    failure_count = sum(1 for t in trials if not t.success)
    counts = count_failure_locations(trials, patterns)
    locations = dict(
        rank_locations({location.key: count for location, count in counts.items()})
    )

    return FileReport(
        spec_file=spec_file,
        trials=list(trials),
        failure_count=failure_count,
        failure_rate=compute_failure_rate(failure_count, total),
        is_flaky=classify_flaky(failure_count, total),
        locations=locations,
    )


def rank_flaky_files(reports: Sequence[FileReport]) -> list[FileReport]:
    """Return only flaky reports, highest failure rate first; ties keep input order."""
    flaky = [r for r in reports if r.is_flaky]
    return sorted(flaky, key=lambda r: -r.failure_rate)
