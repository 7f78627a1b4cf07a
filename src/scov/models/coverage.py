"""Coverage data models.

Raw records mirror what SimpleCov writes per file; classified records are
what :class:`scov.models.source_file.SourceFile` derives from them.  All of
them are immutable once built.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from scov.parsing.keys import ArmKey, ConditionKey

ArmHits = tuple[tuple[ArmKey, int], ...]
BranchData = tuple[tuple[ConditionKey, ArmHits], ...]


class LineCoverageStatus(Enum):
    COVERED = "covered"
    UNCOVERED = "uncovered"
    NEVER = "never"
    SKIPPED = "skipped"


# simplecov_json_formatter writes this for lines excluded with :nocov:
IGNORED_LINE = "ignored"


def _check_hits(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an integer hit count (got: {value!r})")
    return value


def _line_hits(value: Any, line_number: int) -> int | None:
    if value is None or value == IGNORED_LINE:
        return None
    return _check_hits(value, f"line {line_number}")


@dataclass(frozen=True)
class RawCoverage:
    """Coverage for one file as collected by a single run (or merged runs)."""

    lines: tuple[int | None, ...] = ()
    """Hit count per line (index = line number - 1); ``None`` = not relevant."""

    branches: BranchData = ()
    """Arm hit counts grouped by their condition, in source order."""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | list[Any]) -> RawCoverage:
        """Build a record from its JSON form.

        A bare list is the pre-0.18 SimpleCov shape and is read as line
        coverage without branches.

        Raises:
            TypeError: If lines or hit counts have the wrong type.
            KeyParseError: If a branch key has no fields.
        """
        if isinstance(data, list):
            data = {"lines": data}
        if not isinstance(data, Mapping):
            raise TypeError(f"File coverage must be an object (got: {type(data).__name__})")

        raw_lines = data.get("lines")
        if raw_lines is None:
            raw_lines = []
        if not isinstance(raw_lines, list):
            raise TypeError("'lines' must be an array")
        lines = tuple(
            _line_hits(hits, index + 1) for index, hits in enumerate(raw_lines)
        )

        raw_branches = data.get("branches")
        if raw_branches is None:
            raw_branches = {}
        if not isinstance(raw_branches, Mapping):
            raise TypeError("'branches' must be an object")

        branches: list[tuple[ConditionKey, ArmHits]] = []
        for condition_text, arms in raw_branches.items():
            if not isinstance(arms, Mapping):
                raise TypeError(f"Branches of {condition_text} must be an object")
            branches.append(
                (
                    ConditionKey.parse(condition_text),
                    tuple(
                        (ArmKey.parse(arm_text), _check_hits(hits, arm_text))
                        for arm_text, hits in arms.items()
                    ),
                )
            )

        return cls(lines=lines, branches=tuple(branches))

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form, keyed by the original key text."""
        return {
            "lines": list(self.lines),
            "branches": {
                condition.raw: {arm.raw: hits for arm, hits in arms}
                for condition, arms in self.branches
            },
        }


@dataclass(frozen=True)
class RunResult:
    """One entry of a result set: the coverage gathered by one command."""

    name: str
    coverage: Mapping[str, RawCoverage | None]
    """Per-file coverage; ``None`` when the run recorded nothing for a file."""

    timestamp: float = 0.0


@dataclass(frozen=True)
class ResultSet:
    """All runs of a result-set file, in file order."""

    runs: tuple[RunResult, ...] = ()

    def __iter__(self) -> Iterator[RunResult]:
        return iter(self.runs)

    def __len__(self) -> int:
        return len(self.runs)


@dataclass(frozen=True)
class BranchReport:
    """What a renderer needs to annotate one branch on its report line."""

    type: str
    hit_count: int


@dataclass(frozen=True)
class LineCoverage:
    """Classified coverage for a single source line."""

    line_number: int
    hit_count: int | None
    status: LineCoverageStatus
    branches: tuple[BranchReport, ...] = ()

    @property
    def is_relevant(self) -> bool:
        """Return True if the line counts towards coverage statistics."""
        return self.status in {LineCoverageStatus.COVERED, LineCoverageStatus.UNCOVERED}


@dataclass(frozen=True)
class CoverageStatistics:
    """Aggregate line statistics for one file."""

    total_lines: int = 0
    """Relevant lines (covered + uncovered)."""

    covered_lines: int = 0
    uncovered_lines: int = 0

    strength: float = 0.0
    """Average hit count over relevant lines."""

    percentage: float = 100.0

    @classmethod
    def from_lines(cls, lines: Iterable[LineCoverage]) -> CoverageStatistics:
        covered = 0
        uncovered = 0
        total_strength = 0
        for line in lines:
            if line.status is LineCoverageStatus.COVERED:
                covered += 1
            elif line.status is LineCoverageStatus.UNCOVERED:
                uncovered += 1
            else:
                continue
            total_strength += line.hit_count or 0

        total = covered + uncovered
        strength = total_strength / total if total > 0 else 0.0
        if uncovered == 0:
            percentage = 100.0
        else:
            percentage = covered * 100 / total

        return cls(
            total_lines=total,
            covered_lines=covered,
            uncovered_lines=uncovered,
            strength=strength,
            percentage=percentage,
        )


_GOOD_PERCENTAGE = 90.0
_WARN_PERCENTAGE = 80.0


@dataclass(frozen=True)
class CoverageSummary:
    """Status line for one file: counts, rounded percentage and an icon level."""

    total_lines: int
    covered_lines: int
    uncovered_lines: int
    percentage: float
    level: str = "x"
    """``check`` above the good threshold, ``alert`` above the warn threshold, else ``x``."""

    @classmethod
    def from_statistics(
        cls,
        stats: CoverageStatistics,
        *,
        good_threshold: float = _GOOD_PERCENTAGE,
        warn_threshold: float = _WARN_PERCENTAGE,
    ) -> CoverageSummary:
        if stats.percentage > good_threshold:
            level = "check"
        elif stats.percentage > warn_threshold:
            level = "alert"
        else:
            level = "x"
        return cls(
            total_lines=stats.total_lines,
            covered_lines=stats.covered_lines,
            uncovered_lines=stats.uncovered_lines,
            percentage=stats.percentage,
            level=level,
        )

    @property
    def text(self) -> str:
        return f"{self.percentage:.0f}%"

    @property
    def tooltip(self) -> str:
        return (
            f"{self.total_lines} relevant lines. "
            f"{self.covered_lines} covered, {self.uncovered_lines} missed."
        )
