"""
Sorting for rendered report tables

Sort specs follow the JMeter report convention: a list of
``(column_index, direction)`` pairs where direction is 0/"asc" or
1/"desc". Rows are ordered by their raw cell values, so a sort never
needs the original dataset.
"""

import math
from numbers import Number
from typing import Any, Dict, List, Sequence, Tuple

SortSpec = List[Tuple[int, str]]

_DIRECTIONS = {0: 'asc', 1: 'desc', 'asc': 'asc', 'desc': 'desc'}


def normalize_sort_spec(sort_spec, width: int) -> SortSpec:
    """Validate a sort spec, converting numeric directions to "asc"/"desc"."""
    normalized = []
    for entry in sort_spec or []:
        column_index, direction = entry
        if not isinstance(column_index, int) or not 0 <= column_index < width:
            raise ValueError(f"Sort column {column_index!r} outside of {width} columns")
        key = direction.lower() if isinstance(direction, str) else direction
        if key not in _DIRECTIONS:
            raise ValueError(f"Unknown sort direction {direction!r}")
        normalized.append((column_index, _DIRECTIONS[key]))
    return normalized


def sort_key(value: Any) -> Tuple:
    """Numbers before text, text compared case-insensitively, blanks last."""
    if isinstance(value, Number) and not isinstance(value, bool):
        if math.isnan(value):
            return (2, 0.0, "")
        return (0, float(value), "")
    if value is None or value == "":
        return (2, 0.0, "")
    if isinstance(value, str):
        try:
            return (0, float(value), "")
        except ValueError:
            return (1, 0.0, value.lower())
    return (1, 0.0, str(value).lower())


def sort_rows(rows: Sequence, sort_spec: SortSpec) -> List:
    """Stable multi-column sort of rows exposing a ``sort_keys`` sequence.

    Blank values stay last in either direction.
    """
    ordered = list(rows)
    for column_index, direction in reversed(sort_spec):
        present = [row for row in ordered if sort_key(_value(row, column_index))[0] != 2]
        blank = [row for row in ordered if sort_key(_value(row, column_index))[0] == 2]
        present.sort(key=lambda row: sort_key(_value(row, column_index)), reverse=direction == 'desc')
        ordered = present + blank
    return ordered


def _value(row, column_index: int):
    keys = row.sort_keys
    return keys[column_index] if column_index < len(keys) else None


def column_id(column_index: int) -> str:
    return f"col-{column_index}"


def column_index(column_id_: str) -> int:
    return int(column_id_.rsplit('-', 1)[1])


def to_dash_sort_by(sort_spec: SortSpec) -> List[Dict]:
    return [{'column_id': column_id(index), 'direction': direction} for index, direction in sort_spec]


def from_dash_sort_by(sort_by: Sequence[Dict], width: int) -> SortSpec:
    return normalize_sort_spec(
        [(column_index(entry['column_id']), entry['direction']) for entry in sort_by or []],
        width,
    )
