"""GitHub Action that runs CodeSee map and insight steps behind a fork-aware gate."""

__version__ = "2.0.0"
