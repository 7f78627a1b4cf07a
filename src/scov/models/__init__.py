"""Data models for scov."""

from scov.models.coverage import (
    BranchReport,
    CoverageStatistics,
    CoverageSummary,
    LineCoverage,
    LineCoverageStatus,
    RawCoverage,
    ResultSet,
    RunResult,
)
from scov.models.source_file import Branch, SourceFile
from scov.models.store import CoverageSnapshot, CoverageStore

__all__ = [
    "Branch",
    "BranchReport",
    "CoverageSnapshot",
    "CoverageStatistics",
    "CoverageStore",
    "CoverageSummary",
    "LineCoverage",
    "LineCoverageStatus",
    "RawCoverage",
    "ResultSet",
    "RunResult",
    "SourceFile",
]
