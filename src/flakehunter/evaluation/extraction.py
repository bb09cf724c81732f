"""Failure-location extraction from free-form test-runner output.

Applies an ordered list of independent regex patterns to the combined
stdout+stderr of one trial and pools their "path:line" matches. Every
pattern is applied; results are deduplicated in first-seen order.
Extraction is best-effort: text that matches nothing yields an empty
list, never an exception.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from fnmatch import fnmatchcase

from flakehunter.models.trial import FailureLocation


@dataclass(frozen=True)
class LocationPattern:
    """A named regex whose two groups capture a path and a line number.

    path_glob, when set, is an fnmatch pattern the captured path must
    match for the location to be kept.
    """

    name: str
    regex: re.Pattern[str]
    path_group: int = 1
    line_group: int = 2
    path_glob: str | None = None

    def find(self, text: str) -> list[FailureLocation]:
        found: list[FailureLocation] = []
        for match in self.regex.finditer(text):
            path = match.group(self.path_group)
            line = match.group(self.line_group)
            if not path or not line:
                continue
            location = FailureLocation.from_match(path.strip(), line)
            if self.path_glob is not None and not fnmatchcase(location.path, self.path_glob):
                continue
            found.append(location)
        return found


# Line numbers longer than this are not line numbers.
_LINE = r"(\d{1,9})(?!\d)"


def build_patterns(spec_pattern: str = "_spec.rb") -> tuple[LocationPattern, ...]:
    """Build the prioritized pattern list for a test-file suffix.

    Order:
    1. Test-file path followed by ":<line>" (the runner's failure annotation)
    2. Backtrace comment "# <path>:<line>:"
    3. "Failure/Error: <path>:<line>"

    Path tokens are matched possessively from a token start, so long
    runs of non-space output are scanned once.
    """
    return (
        LocationPattern(
            name="spec_file",
            regex=re.compile(r"(?<![^\s:])(?:\./)?([^:\s]++):" + _LINE),
            path_glob=f"*{spec_pattern}",
        ),
        LocationPattern(
            name="backtrace",
            regex=re.compile(r"# ([^:\s]++):" + _LINE + ":"),
        ),
        LocationPattern(
            name="failure_error",
            regex=re.compile(r"Failure/Error: (.+?):" + _LINE),
        ),
    )


DEFAULT_PATTERNS: tuple[LocationPattern, ...] = build_patterns()


def extract_locations(
    text: str,
    patterns: Sequence[LocationPattern] = DEFAULT_PATTERNS,
) -> list[FailureLocation]:
    """Return unique failure locations found in text, in extraction order.

    Args:
        text: Combined stdout and stderr of one trial.
        patterns: Patterns to apply, in priority order.

    Returns:
        Locations ordered by pattern priority, then position in text.
    """
    if not text:
        return []

    seen: set[str] = set()
    locations: list[FailureLocation] = []
    for pattern in patterns:
        for location in pattern.find(text):
            if location.key in seen:
                continue
            seen.add(location.key)
            locations.append(location)
    return locations
