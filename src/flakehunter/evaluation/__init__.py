"""Evaluation package for failure-location extraction and flakiness aggregation."""

from __future__ import annotations

from flakehunter.evaluation.aggregation import (
    aggregate_file,
    classify_flaky,
    compute_failure_rate,
    rank_flaky_files,
    rank_locations,
)
from flakehunter.evaluation.extraction import (
    DEFAULT_PATTERNS,
    LocationPattern,
    build_patterns,
    extract_locations,
)

__all__ = [
    "DEFAULT_PATTERNS",
    "LocationPattern",
    "aggregate_file",
    "build_patterns",
    "classify_flaky",
    "compute_failure_rate",
    "extract_locations",
    "rank_flaky_files",
    "rank_locations",
]
