"""Merge coverage from several runs into one record per file."""

from __future__ import annotations

import logging
from itertools import zip_longest
from typing import TYPE_CHECKING

from scov.models.coverage import ArmHits, BranchData, RawCoverage

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from scov.models.coverage import ResultSet
    from scov.parsing.keys import ArmKey, ConditionKey

logger = logging.getLogger(__name__)


def combine(a: RawCoverage | None, b: RawCoverage | None) -> RawCoverage:
    """Combine the coverage two runs recorded for the same file.

    A missing side contributes nothing and the other side is returned as
    is; two missing sides give an empty record.
    """
    if a is None or b is None:
        if a is not None:
            return a
        return b if b is not None else RawCoverage()

    return RawCoverage(
        lines=merge_lines(a.lines, b.lines),
        branches=merge_branches(a.branches, b.branches),
    )


def merge_lines(
    a: Sequence[int | None], b: Sequence[int | None]
) -> tuple[int | None, ...]:
    """Sum line hit counts position by position.

    The shorter side is padded with ``None``.  A position stays ``None``
    unless some run reports a positive count there:

    * ``None + None  -> None``
    * ``None + 0     -> None``
    * ``int  + int   -> int``
    """
    lines: list[int | None] = []
    for line_a, line_b in zip_longest(a, b):
        total = (line_a or 0) + (line_b or 0)
        if total <= 0 and (line_a is None or line_b is None):
            lines.append(None)
        else:
            lines.append(total)
    return tuple(lines)


def _merge_arms(a: ArmHits, b: ArmHits) -> ArmHits:
    """Union two arm sets, summing hits of arms present in both."""
    merged: dict[ArmKey, int] = dict(a)
    for arm, hits in b:
        merged[arm] = merged.get(arm, 0) + hits
    return tuple(merged.items())


def merge_branches(a: BranchData, b: BranchData) -> BranchData:
    """Union two branch sets keyed by condition.

    Conditions keep first-seen order; conditions present in both sides get
    their arms merged with :func:`_merge_arms`.
    """
    merged: dict[ConditionKey, ArmHits] = dict(a)
    for condition, arms in b:
        if condition not in merged:
            merged[condition] = arms
        else:
            merged[condition] = _merge_arms(merged[condition], arms)
    return tuple(merged.items())


def merge_file_coverage(
    runs: Iterable[Mapping[str, RawCoverage | None]],
) -> dict[str, RawCoverage]:
    """Fold per-file coverage from several runs, in iteration order.

    Every entry goes through :func:`combine`, so a file a run has no data
    for (``None``) contributes nothing.  A file that no run has data for
    ends up as an empty record.
    """
    merged: dict[str, RawCoverage] = {}
    for coverage in runs:
        for file_name, file_coverage in coverage.items():
            merged[file_name] = combine(merged.get(file_name), file_coverage)
    return merged


def merge(result_set: ResultSet) -> dict[str, RawCoverage]:
    """Merge every run of *result_set* into one coverage record per file.

    Run timestamps are carried by the result set but play no part in the
    merge.
    """
    merged = merge_file_coverage(run.coverage for run in result_set)
    logger.debug("Merged %d run(s) into %d file(s)", len(result_set), len(merged))
    return merged
