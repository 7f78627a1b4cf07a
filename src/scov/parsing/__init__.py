"""Parsing of SimpleCov branch keys."""

from scov.parsing.keys import ArmKey, ConditionKey, parse_branch_location

__all__ = [
    "ArmKey",
    "ConditionKey",
    "parse_branch_location",
]
