"""Tests for scov.parsing.keys."""

from __future__ import annotations

import pytest

from scov.errors import KeyParseError
from scov.parsing.keys import ArmKey, ConditionKey, parse_branch_location


class TestParseBranchLocation:
    def test_full_arm_key(self) -> None:
        assert parse_branch_location("[:then, 1, 13, 6, 13, 30]") == ("then", 1, 13, 6, 13, 30)

    def test_key_without_columns(self) -> None:
        assert parse_branch_location("[:if, 0, 12]") == ("if", 0, 12)

    def test_strips_whitespace(self) -> None:
        assert parse_branch_location("[:else,   2 ,7,  6]") == ("else", 2, 7, 6)

    def test_non_numeric_fields_stay_text(self) -> None:
        assert parse_branch_location("[:when, abc, 4]") == ("when", "abc", 4)

    def test_negative_numbers(self) -> None:
        assert parse_branch_location("[:then, -1, 3]") == ("then", -1, 3)

    def test_reparse_is_stable(self) -> None:
        key = "[:case, 7, 20, 4, 28, 7]"
        assert parse_branch_location(key) == parse_branch_location(key)

    @pytest.mark.parametrize("text", ["[:]", "[: ]", "", "[:, ,]"])
    def test_empty_key_raises(self, text: str) -> None:
        with pytest.raises(KeyParseError):
            parse_branch_location(text)

    def test_key_parse_error_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="no fields"):
            parse_branch_location("[:]")


class TestConditionKey:
    def test_parses_type_id_line(self) -> None:
        key = ConditionKey.parse("[:if, 0, 12, 4, 20, 7]")
        assert key.type == "if"
        assert key.id == 0
        assert key.line == 12
        assert key.raw == "[:if, 0, 12, 4, 20, 7]"

    def test_short_key_defaults_line_to_zero(self) -> None:
        key = ConditionKey.parse("[:if]")
        assert key.type == "if"
        assert key.id == ""
        assert key.line == 0

    def test_equal_text_gives_equal_keys(self) -> None:
        assert ConditionKey.parse("[:if, 0, 3]") == ConditionKey.parse("[:if, 0, 3]")


class TestArmKey:
    def test_parses_full_span(self) -> None:
        key = ArmKey.parse("[:then, 1, 13, 6, 13, 30]")
        assert key.type == "then"
        assert key.id == 1
        assert key.start_line == 13
        assert key.start_column == 6
        assert key.end_line == 13
        assert key.end_column == 30

    def test_missing_columns_are_positional(self) -> None:
        # Fields are read by position, so a four-field key puts its last
        # number in the start column slot and leaves the end unset.
        key = ArmKey.parse("[:else, 2, 7, 9]")
        assert key.start_line == 7
        assert key.start_column == 9
        assert key.end_line == 0
        assert key.end_column is None

    def test_non_numeric_line_falls_back_to_zero(self) -> None:
        key = ArmKey.parse("[:then, 1, x, 0, 4, 2]")
        assert key.start_line == 0
        assert key.end_line == 4

    def test_keys_are_hashable(self) -> None:
        key = ArmKey.parse("[:then, 1, 13, 6, 13, 30]")
        assert {key: 1}[ArmKey.parse("[:then, 1, 13, 6, 13, 30]")] == 1
