"""Exceptions raised by scov."""

from __future__ import annotations


class ScovError(Exception):
    """Base class for all scov errors."""


class KeyParseError(ScovError, ValueError):
    """Raised when a condition or branch-arm key has no fields at all."""


class CoverageLoadError(ScovError):
    """Raised when a result-set file cannot be read or has the wrong shape."""
