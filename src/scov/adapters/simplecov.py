"""SimpleCov result-set adapter.

SimpleCov writes one JSON document per project, keyed by the name of the
command that produced each run::

    {
      "RSpec": {
        "coverage": {
          "/app/models/user.rb": {
            "lines": [1, 1, null, 0, ...],
            "branches": {
              "[:if, 0, 4, 4, 8, 7]": {
                "[:then, 1, 5, 6, 5, 20]": 0,
                "[:else, 2, 7, 6, 7, 18]": 3
              }
            }
          }
        },
        "timestamp": 1700000000
      },
      "Minitest": {...}
    }

``coverage/.resultset.json`` is the per-run file SimpleCov maintains;
``coverage/coverage.json`` is the merged report some formatters write.
Both share the shape above.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from scov.errors import CoverageLoadError
from scov.models.coverage import RawCoverage, ResultSet, RunResult
from scov.models.source_file import SourceFile
from scov.sharding.merger import merge

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

# Probed in order inside the coverage directory
RESULTSET_FILENAMES = ("coverage.json", ".resultset.json")


# ── Parsing ──────────────────────────────────────────────────────


def _parse_run(name: str, data: Any) -> RunResult:
    if not isinstance(data, dict):
        raise CoverageLoadError(f"Run {name!r} must be an object")

    coverage_raw = data.get("coverage")
    if not isinstance(coverage_raw, dict):
        raise CoverageLoadError(f"Run {name!r} has no 'coverage' object")

    coverage: dict[str, RawCoverage | None] = {}
    for file_name, file_data in coverage_raw.items():
        # null means the run has nothing for this file
        if file_data is None:
            coverage[file_name] = None
            continue
        try:
            coverage[file_name] = RawCoverage.from_dict(file_data)
        except (TypeError, ValueError) as exc:
            raise CoverageLoadError(
                f"Invalid coverage for {file_name} in run {name!r}: {exc}"
            ) from exc

    timestamp = data.get("timestamp", 0)
    if isinstance(timestamp, bool) or not isinstance(timestamp, int | float):
        raise CoverageLoadError(f"Run {name!r} has a non-numeric timestamp: {timestamp!r}")

    return RunResult(name=name, coverage=coverage, timestamp=float(timestamp))


def parse_resultset(data: Any) -> ResultSet:
    """Convert a decoded result-set document into typed runs.

    Raises:
        CoverageLoadError: If the document does not have the result-set shape.
    """
    if not isinstance(data, dict):
        raise CoverageLoadError(
            f"Result set must be a JSON object (got: {type(data).__name__})"
        )
    return ResultSet(runs=tuple(_parse_run(name, run) for name, run in data.items()))


def load_resultset(path: Path) -> ResultSet:
    """Read and parse the result-set file at *path*.

    Raises:
        CoverageLoadError: If the file cannot be read, is not JSON or has
            the wrong shape.
    """
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        raise CoverageLoadError(f"Failed to read result set {path}: {exc}") from exc

    result_set = parse_resultset(data)
    logger.info("Loaded %d run(s) from %s", len(result_set), path)
    return result_set


def find_resultset(coverage_dir: Path) -> Path | None:
    """Return the first result-set file that exists in *coverage_dir*."""
    candidates = [coverage_dir / name for name in RESULTSET_FILENAMES]
    for candidate in candidates:
        if candidate.is_file():
            logger.debug("Found result set at %s", candidate)
            return candidate
    logger.info("No coverage file found in %s", ", ".join(str(c) for c in candidates))
    return None


def build_source_files(coverage: dict[str, RawCoverage]) -> dict[str, SourceFile]:
    """Classify every file of a merged coverage mapping."""
    return {
        file_name: SourceFile.from_coverage(file_name, file_coverage)
        for file_name, file_coverage in coverage.items()
    }


# ── Serialization ────────────────────────────────────────────────


def coverage_to_dict(coverage: Mapping[str, RawCoverage | None]) -> dict[str, Any]:
    """Serialize per-file raw coverage to its JSON form."""
    return {
        file_name: None if raw is None else raw.to_dict() for file_name, raw in coverage.items()
    }


def resultset_to_dict(result_set: ResultSet) -> dict[str, Any]:
    """Serialize a result set back to the document shape it was read from."""
    return {
        run.name: {"coverage": coverage_to_dict(run.coverage), "timestamp": run.timestamp}
        for run in result_set
    }


# ── Adapter ──────────────────────────────────────────────────────


class SimpleCovAdapter:
    """Locates, merges and classifies a project's SimpleCov result set."""

    def __init__(self, coverage_dir: Path) -> None:
        self._coverage_dir = coverage_dir

    @property
    def name(self) -> str:
        return "simplecov"

    @property
    def coverage_dir(self) -> Path:
        return self._coverage_dir

    def detect(self) -> bool:
        """Return True if a result-set file exists."""
        return find_resultset(self._coverage_dir) is not None

    def find(self) -> Path | None:
        return find_resultset(self._coverage_dir)

    def merged_coverage(self, path: Path) -> dict[str, RawCoverage]:
        """Load *path* and merge its runs into one record per file."""
        return merge(load_resultset(path))

    def load(self, path: Path) -> dict[str, SourceFile]:
        """Load *path* and return the classified model of every file.

        Raises:
            CoverageLoadError: If the result set cannot be loaded.
        """
        source_files = build_source_files(self.merged_coverage(path))
        logger.info("Classified %d file(s) from %s", len(source_files), path)
        return source_files
