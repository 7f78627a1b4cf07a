"""Classification of raw coverage into per-line and per-branch status."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from scov.models.coverage import (
    BranchReport,
    CoverageStatistics,
    CoverageSummary,
    LineCoverage,
    LineCoverageStatus,
    RawCoverage,
)
from scov.parsing.keys import ArmKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Branch:
    """One classified branch arm."""

    start_line: int
    end_line: int
    hit_count: int
    inline: bool
    """True when the arm starts on its condition's line (ternaries, modifiers)."""

    type: str
    report_line: int
    """Line the branch annotation belongs to."""

    status: LineCoverageStatus

    @classmethod
    def classify(cls, arm: ArmKey, hit_count: int, condition_line: int) -> Branch:
        """Classify *arm* of a condition that starts on *condition_line*.

        Block-style arms start on the line after the keyword that opens
        them, so their annotation is attached one line up.
        """
        inline = arm.start_line == condition_line
        return cls(
            start_line=arm.start_line,
            end_line=arm.end_line,
            hit_count=hit_count,
            inline=inline,
            type=arm.type,
            report_line=arm.start_line if inline else arm.start_line - 1,
            status=(
                LineCoverageStatus.COVERED if hit_count > 0 else LineCoverageStatus.UNCOVERED
            ),
        )

    def to_report(self) -> BranchReport:
        return BranchReport(type=self.type, hit_count=self.hit_count)


def classify_branches(coverage: RawCoverage) -> tuple[Branch, ...]:
    """Classify every arm of every condition, in source order."""
    return tuple(
        Branch.classify(arm, hits, condition.line)
        for condition, arms in coverage.branches
        for arm, hits in arms
    )


def index_branches(branches: tuple[Branch, ...]) -> dict[int, list[BranchReport]]:
    """Group branch reports by their report line."""
    by_line: dict[int, list[BranchReport]] = {}
    for branch in branches:
        by_line.setdefault(branch.report_line, []).append(branch.to_report())
    return by_line


def classify_line(hit_count: int | None, branches: tuple[BranchReport, ...]) -> LineCoverageStatus:
    """Return the status of a line given its hit count and branches.

    A missed branch marks the line uncovered even if the line itself ran.
    """
    if any(branch.hit_count <= 0 for branch in branches):
        return LineCoverageStatus.UNCOVERED
    if hit_count is None:
        return LineCoverageStatus.NEVER
    if hit_count > 0:
        return LineCoverageStatus.COVERED
    return LineCoverageStatus.UNCOVERED


def classify_lines(
    coverage: RawCoverage, by_line: dict[int, list[BranchReport]]
) -> tuple[LineCoverage, ...]:
    lines: list[LineCoverage] = []
    for index, hit_count in enumerate(coverage.lines):
        line_number = index + 1
        branches = tuple(by_line.get(line_number, ()))
        lines.append(
            LineCoverage(
                line_number=line_number,
                hit_count=hit_count,
                status=classify_line(hit_count, branches),
                branches=branches,
            )
        )
    return tuple(lines)


@dataclass(frozen=True)
class SourceFile:
    """Classified coverage model for a single source file."""

    file_name: str
    lines: tuple[LineCoverage, ...] = ()
    branches: tuple[Branch, ...] = ()
    statistics: CoverageStatistics = field(default_factory=CoverageStatistics)

    @classmethod
    def from_coverage(cls, file_name: str, coverage: RawCoverage) -> SourceFile:
        """Build the classified model for *file_name* from its raw coverage."""
        branches = classify_branches(coverage)
        lines = classify_lines(coverage, index_branches(branches))
        source_file = cls(
            file_name=file_name,
            lines=lines,
            branches=branches,
            statistics=CoverageStatistics.from_lines(lines),
        )
        logger.debug(
            "Classified %s: %d lines, %d branches, %.2f%%",
            file_name,
            len(lines),
            len(branches),
            source_file.statistics.percentage,
        )
        return source_file

    def line(self, line_number: int) -> LineCoverage | None:
        """Return the classified line for a 1-based *line_number*."""
        if 1 <= line_number <= len(self.lines):
            return self.lines[line_number - 1]
        return None

    @property
    def uncovered_branches(self) -> list[Branch]:
        return [b for b in self.branches if b.status is LineCoverageStatus.UNCOVERED]

    @property
    def covered_line_numbers(self) -> list[int]:
        return [ln.line_number for ln in self.lines if ln.status is LineCoverageStatus.COVERED]

    @property
    def uncovered_line_numbers(self) -> list[int]:
        return [ln.line_number for ln in self.lines if ln.status is LineCoverageStatus.UNCOVERED]

    def summary(
        self, *, good_threshold: float = 90.0, warn_threshold: float = 80.0
    ) -> CoverageSummary:
        """Return the status summary for this file."""
        return CoverageSummary.from_statistics(
            self.statistics,
            good_threshold=good_threshold,
            warn_threshold=warn_threshold,
        )
