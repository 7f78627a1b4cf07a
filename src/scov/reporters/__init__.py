"""Reporters that present classified coverage."""

from scov.reporters.annotations import Annotation, LineGroups, annotate_line, group_lines
from scov.reporters.terminal import CLIReporter, overall_statistics, reporter

__all__ = [
    "Annotation",
    "CLIReporter",
    "LineGroups",
    "annotate_line",
    "group_lines",
    "overall_statistics",
    "reporter",
]
