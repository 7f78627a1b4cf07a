"""Tests for the SimpleCov result-set adapter (adapters/simplecov.py)."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from scov.adapters.simplecov import (
    SimpleCovAdapter,
    build_source_files,
    coverage_to_dict,
    find_resultset,
    load_resultset,
    parse_resultset,
    resultset_to_dict,
)
from scov.errors import CoverageLoadError
from scov.models.coverage import LineCoverageStatus, ResultSet
from scov.sharding.merger import merge

if TYPE_CHECKING:
    from pathlib import Path

# ── Helpers ──────────────────────────────────────────────────────


def _write_json(root: Path, rel: str, data: Any) -> Path:
    """Write JSON data to a file under *root*."""
    f = root / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return f


# ── Sample result set ────────────────────────────────────────────

_USER_RB = "/project/app/models/user.rb"
_ORDER_RB = "/project/app/models/order.rb"

_SAMPLE_RESULTSET = {
    "RSpec": {
        "coverage": {
            _USER_RB: {
                "lines": [1, 1, 0, None, 2, None],
                "branches": {
                    "[:if, 0, 2, 4, 6, 7]": {
                        "[:then, 1, 3, 6, 3, 20]": 0,
                        "[:else, 2, 5, 6, 5, 18]": 2,
                    }
                },
            },
            _ORDER_RB: {"lines": [1, None, 0], "branches": {}},
        },
        "timestamp": 1700000000,
    },
    "Minitest": {
        "coverage": {
            _USER_RB: {
                "lines": [1, 1, 3, None, 0, None],
                "branches": {
                    "[:if, 0, 2, 4, 6, 7]": {
                        "[:then, 1, 3, 6, 3, 20]": 3,
                        "[:else, 2, 5, 6, 5, 18]": 0,
                    }
                },
            },
        },
        "timestamp": 1700000100,
    },
}


class TestParseResultset:
    def test_parses_runs_in_order(self) -> None:
        result_set = parse_resultset(_SAMPLE_RESULTSET)
        assert [run.name for run in result_set] == ["RSpec", "Minitest"]
        assert result_set.runs[0].timestamp == 1700000000.0
        assert set(result_set.runs[0].coverage) == {_USER_RB, _ORDER_RB}

    def test_typed_branch_keys(self) -> None:
        user = parse_resultset(_SAMPLE_RESULTSET).runs[0].coverage[_USER_RB]
        condition, arms = user.branches[0]
        assert condition.type == "if"
        assert condition.line == 2
        assert [(arm.type, arm.start_line, hits) for arm, hits in arms] == [
            ("then", 3, 0),
            ("else", 5, 2),
        ]

    def test_legacy_line_array(self) -> None:
        data = {"RSpec": {"coverage": {"a.rb": [1, None, 0]}, "timestamp": 1}}
        raw = parse_resultset(data).runs[0].coverage["a.rb"]
        assert raw.lines == (1, None, 0)
        assert raw.branches == ()

    def test_missing_timestamp_defaults_to_zero(self) -> None:
        data = {"RSpec": {"coverage": {}}}
        assert parse_resultset(data).runs[0].timestamp == 0.0

    def test_ignored_lines_are_not_relevant(self) -> None:
        data = {"RSpec": {"coverage": {"a.rb": {"lines": [1, "ignored", 0]}}, "timestamp": 1}}
        assert parse_resultset(data).runs[0].coverage["a.rb"].lines == (1, None, 0)

    def test_missing_branches_key(self) -> None:
        data = {"RSpec": {"coverage": {"a.rb": {"lines": [1]}}, "timestamp": 1}}
        assert parse_resultset(data).runs[0].coverage["a.rb"].branches == ()

    def test_null_file_coverage_is_kept_as_none(self) -> None:
        data = {"RSpec": {"coverage": {"a.rb": None}, "timestamp": 1}}
        assert parse_resultset(data).runs[0].coverage == {"a.rb": None}

    @pytest.mark.parametrize(
        "data",
        [
            [],
            "coverage",
            {"RSpec": []},
            {"RSpec": {"timestamp": 1}},
            {"RSpec": {"coverage": [], "timestamp": 1}},
            {"RSpec": {"coverage": {"a.rb": {"lines": "1,2"}}, "timestamp": 1}},
            {"RSpec": {"coverage": {"a.rb": {"lines": [1, "x"]}}, "timestamp": 1}},
            {"RSpec": {"coverage": {"a.rb": {"lines": [], "branches": []}}, "timestamp": 1}},
            {"RSpec": {"coverage": {"a.rb": {"branches": {"[:if, 0, 1]": 3}}}}},
            {"RSpec": {"coverage": {"a.rb": {"branches": {"[:]": {}}}}}},
            {"RSpec": {"coverage": {}, "timestamp": "yesterday"}},
        ],
    )
    def test_invalid_shapes_raise(self, data: Any) -> None:
        with pytest.raises(CoverageLoadError):
            parse_resultset(data)


class TestLoadResultset:
    def test_loads_file(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path, "coverage/.resultset.json", _SAMPLE_RESULTSET)
        assert len(load_resultset(path)) == 2

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        path = tmp_path / ".resultset.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CoverageLoadError, match="Failed to read"):
            load_resultset(path)

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(CoverageLoadError):
            load_resultset(tmp_path / "missing.json")


class TestFindResultset:
    def test_prefers_merged_report(self, tmp_path: Path) -> None:
        _write_json(tmp_path, "coverage/.resultset.json", {})
        merged = _write_json(tmp_path, "coverage/coverage.json", {})
        assert find_resultset(tmp_path / "coverage") == merged

    def test_falls_back_to_resultset(self, tmp_path: Path) -> None:
        resultset = _write_json(tmp_path, "coverage/.resultset.json", {})
        assert find_resultset(tmp_path / "coverage") == resultset

    def test_none_when_missing(self, tmp_path: Path) -> None:
        assert find_resultset(tmp_path / "coverage") is None


class TestSimpleCovAdapter:
    def test_detect(self, tmp_path: Path) -> None:
        adapter = SimpleCovAdapter(tmp_path / "coverage")
        assert adapter.name == "simplecov"
        assert not adapter.detect()
        _write_json(tmp_path, "coverage/.resultset.json", _SAMPLE_RESULTSET)
        assert adapter.detect()

    def test_load_merges_and_classifies(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path, "coverage/.resultset.json", _SAMPLE_RESULTSET)
        files = SimpleCovAdapter(tmp_path / "coverage").load(path)

        user = files[_USER_RB]
        assert [line.hit_count for line in user.lines] == [2, 2, 3, None, 2, None]
        assert all(line.status is not LineCoverageStatus.UNCOVERED for line in user.lines)
        assert user.statistics.percentage == 100.0
        assert user.statistics.total_lines == 4

        order = files[_ORDER_RB]
        assert order.statistics.covered_lines == 1
        assert order.statistics.uncovered_lines == 1

    def test_merged_coverage(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path, "coverage/.resultset.json", _SAMPLE_RESULTSET)
        merged = SimpleCovAdapter(tmp_path / "coverage").merged_coverage(path)
        assert coverage_to_dict(merged)[_USER_RB]["branches"] == {
            "[:if, 0, 2, 4, 6, 7]": {
                "[:then, 1, 3, 6, 3, 20]": 3,
                "[:else, 2, 5, 6, 5, 18]": 2,
            }
        }


class TestNullFileCoverage:
    def test_null_entry_contributes_nothing_to_merge(self, tmp_path: Path) -> None:
        data = {
            "unit": {"coverage": {"a.rb": None}, "timestamp": 1},
            "integration": {"coverage": {"a.rb": {"lines": [1, None]}}, "timestamp": 2},
        }
        path = _write_json(tmp_path, "coverage/.resultset.json", data)
        adapter = SimpleCovAdapter(tmp_path / "coverage")

        assert adapter.merged_coverage(path)["a.rb"].lines == (1, None)
        assert adapter.load(path)["a.rb"].statistics.covered_lines == 1

    def test_file_with_no_data_classifies_empty(self, tmp_path: Path) -> None:
        data = {"unit": {"coverage": {"a.rb": None}, "timestamp": 1}}
        path = _write_json(tmp_path, "coverage/.resultset.json", data)
        source_file = SimpleCovAdapter(tmp_path / "coverage").load(path)["a.rb"]
        assert source_file.lines == ()
        assert source_file.statistics.total_lines == 0

    def test_serializes_null_entry(self) -> None:
        data = {"unit": {"coverage": {"a.rb": None}, "timestamp": 1}}
        assert resultset_to_dict(parse_resultset(data)) == data


class TestSerialization:
    def test_resultset_to_dict_reproduces_input(self) -> None:
        data = resultset_to_dict(parse_resultset(_SAMPLE_RESULTSET))
        assert data == _SAMPLE_RESULTSET

    def test_build_source_files_keys(self) -> None:
        run = parse_resultset(_SAMPLE_RESULTSET).runs[0]
        files = build_source_files(merge(ResultSet(runs=(run,))))
        assert set(files) == {_USER_RB, _ORDER_RB}
        assert files[_USER_RB].file_name == _USER_RB
