"""flakehunter - detect flaky tests by re-running changed test files."""

__version__ = "0.1.0"
