"""Decoding of SimpleCov branch keys.

SimpleCov serialises the Ruby arrays that identify branching constructs
with ``inspect``, so a condition looks like ``"[:if, 0, 12, 4, 20, 7]"`` and
one of its arms like ``"[:then, 1, 13, 6, 13, 30]"``.  The leading ``[:``
and trailing ``]`` are dropped and the remaining comma-separated fields are
converted to ``int`` wherever possible.
"""

from __future__ import annotations

from dataclasses import dataclass

from scov.errors import KeyParseError

Field = int | str

_PREFIX_LENGTH = 2
_SUFFIX_LENGTH = 1


def _convert(field: str) -> Field:
    try:
        return int(field)
    except ValueError:
        return field


def parse_branch_location(text: str) -> tuple[Field, ...]:
    """Split a bracketed key into its fields.

    No structural validation is performed beyond splitting: a key with an
    unexpected number of fields still parses, and callers index the result
    positionally.

    Raises:
        KeyParseError: If nothing but whitespace remains after trimming.
    """
    body = text[_PREFIX_LENGTH : len(text) - _SUFFIX_LENGTH]
    parts = [part.strip() for part in body.split(",")]
    if not any(parts):
        raise KeyParseError(f"Branch key has no fields: {text!r}")
    return tuple(_convert(part) for part in parts)


def _text_at(fields: tuple[Field, ...], index: int) -> str:
    if index >= len(fields):
        return ""
    return str(fields[index])


def _line_at(fields: tuple[Field, ...], index: int) -> int:
    # Non-numeric or missing positions fall back to 0, which never matches
    # a real 1-based line.
    if index < len(fields) and isinstance(fields[index], int):
        return int(fields[index])
    return 0


def _column_at(fields: tuple[Field, ...], index: int) -> int | None:
    if index < len(fields) and isinstance(fields[index], int):
        return int(fields[index])
    return None


@dataclass(frozen=True)
class ConditionKey:
    """A branching construct (``if``, ``case``, ternary ...)."""

    raw: str
    """Key text exactly as it appeared in the result set."""

    type: str
    id: Field
    line: int

    @classmethod
    def parse(cls, text: str) -> ConditionKey:
        fields = parse_branch_location(text)
        return cls(
            raw=text,
            type=_text_at(fields, 0),
            id=fields[1] if len(fields) > 1 else "",
            line=_line_at(fields, 2),
        )


@dataclass(frozen=True)
class ArmKey:
    """One arm (outcome) of a branching construct."""

    raw: str
    """Key text exactly as it appeared in the result set."""

    type: str
    id: Field
    start_line: int
    start_column: int | None
    end_line: int
    end_column: int | None

    @classmethod
    def parse(cls, text: str) -> ArmKey:
        fields = parse_branch_location(text)
        return cls(
            raw=text,
            type=_text_at(fields, 0),
            id=fields[1] if len(fields) > 1 else "",
            start_line=_line_at(fields, 2),
            start_column=_column_at(fields, 3),
            end_line=_line_at(fields, 4),
            end_column=_column_at(fields, 5),
        )
