"""Watchers that keep published coverage in sync with the result set."""

from scov.watchers.coverage import CoverageWatcher

__all__ = ["CoverageWatcher"]
