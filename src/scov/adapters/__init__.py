"""Adapters for coverage result formats."""

from scov.adapters.simplecov import (
    RESULTSET_FILENAMES,
    SimpleCovAdapter,
    build_source_files,
    coverage_to_dict,
    find_resultset,
    load_resultset,
    parse_resultset,
    resultset_to_dict,
)

__all__ = [
    "RESULTSET_FILENAMES",
    "SimpleCovAdapter",
    "build_source_files",
    "coverage_to_dict",
    "find_resultset",
    "load_resultset",
    "parse_resultset",
    "resultset_to_dict",
]
