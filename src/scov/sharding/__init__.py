"""Merging of coverage collected by separate runs or CI shards."""

from scov.sharding.merger import (
    combine,
    merge,
    merge_branches,
    merge_file_coverage,
    merge_lines,
)

__all__ = [
    "combine",
    "merge",
    "merge_branches",
    "merge_file_coverage",
    "merge_lines",
]
