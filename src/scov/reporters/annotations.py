"""Per-line annotation text handed to renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from scov.models.coverage import LineCoverageStatus

if TYPE_CHECKING:
    from scov.config import CoverageConfig
    from scov.models.coverage import LineCoverage
    from scov.models.source_file import SourceFile


@dataclass(frozen=True)
class Annotation:
    """Hover text and optional trailing text for one line or branch."""

    line_number: int
    hover: str = ""
    after: str = ""


def _pluralize_hits(count: int) -> str:
    return "hit" if count == 1 else "hits"


def annotate_line(line: LineCoverage, *, show_counts: bool = False) -> list[Annotation]:
    """Return the annotations for *line* followed by one per branch.

    Lines without a hit count get a single empty annotation.  Branch counts
    are only shown inline for taken branches.
    """
    if line.hit_count is None:
        return [Annotation(line_number=line.line_number)]

    hits = f"{line.hit_count} {_pluralize_hits(line.hit_count)}"
    annotations = [
        Annotation(
            line_number=line.line_number,
            hover=hits,
            after=hits if show_counts else "",
        )
    ]
    for branch in line.branches:
        annotations.append(
            Annotation(
                line_number=line.line_number,
                hover=f"{branch.hit_count} {branch.type}",
                after=(
                    f"{branch.type}: {branch.hit_count}"
                    if branch.hit_count > 0 and show_counts
                    else ""
                ),
            )
        )
    return annotations


@dataclass
class LineGroups:
    """Lines of one file split the way renderers style them."""

    covered: list[LineCoverage] = field(default_factory=list)
    uncovered: list[LineCoverage] = field(default_factory=list)
    uncovered_branches: list[LineCoverage] = field(default_factory=list)
    """Uncovered lines that carry branch data."""


def group_lines(source_file: SourceFile, config: CoverageConfig) -> LineGroups:
    """Split the lines of *source_file* into display groups.

    Groups that ``config.options`` hides are left empty.
    """
    groups = LineGroups()
    for line in source_file.lines:
        if line.status is LineCoverageStatus.COVERED:
            if config.shows_covered:
                groups.covered.append(line)
        elif line.status is LineCoverageStatus.UNCOVERED and config.shows_uncovered:
            if line.branches:
                groups.uncovered_branches.append(line)
            else:
                groups.uncovered.append(line)
    return groups
