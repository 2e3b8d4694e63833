"""
Cell formatting for the JMeter Report Dashboard

Each report table declares one format per column. Formats are a closed
set of small value types so a table's formatting can be inspected and
tested without rendering anything.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Sequence, Union

import numpy as np

from .cache import safe_computation

logger = logging.getLogger(__name__)

PLACEHOLDER = "N/A"


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError(f"not a number: {value!r}")
    if isinstance(value, str):
        return float(value.strip())
    return float(value)


def _trim(number: float, digits: int = 2) -> str:
    if float(number).is_integer():
        return str(int(number))
    return f"{number:.{digits}f}".rstrip('0').rstrip('.')


def format_duration(ms: Any) -> str:
    """Render a duration given in milliseconds.

    Below ten seconds the value stays in milliseconds (``500ms``,
    ``1500ms``); below a minute it is shown in seconds (``12.5s``);
    longer durations split into minutes and seconds (``2m 5s``).
    """
    value = _to_number(ms)
    if not np.isfinite(value):
        raise ValueError(f"not a finite duration: {ms!r}")
    sign = "-" if value < 0 else ""
    value = abs(value)
    if value < 10_000:
        return f"{sign}{_trim(value)}ms"
    # Round once on the total so tenths never carry into a 60s field
    seconds = round(value / 1000, 1)
    if seconds < 60:
        return f"{sign}{_trim(seconds, 1)}s"
    minutes, rest = divmod(seconds, 60)
    return f"{sign}{int(minutes)}m {_trim(round(rest, 1), 1)}s"


@dataclass(frozen=True)
class Identity:
    """Pass the raw value through as text."""

    def render(self, value: Any) -> str:
        return "" if value is None else str(value)


@dataclass(frozen=True)
class FixedDecimal:
    """Fixed number of decimals, e.g. 3 for Apdex scores."""

    digits: int = 2

    def render(self, value: Any) -> str:
        number = _to_number(value)
        if math.isnan(number):
            return "NaN"
        return f"{number:.{self.digits}f}"


@dataclass(frozen=True)
class Percentage:
    """Two decimals followed by a percent sign."""

    digits: int = 2

    def render(self, value: Any) -> str:
        return FixedDecimal(self.digits).render(value) + "%"


@dataclass(frozen=True)
class Duration:
    """Milliseconds rendered through format_duration."""

    def render(self, value: Any) -> str:
        return format_duration(value)


CellFormat = Union[Identity, FixedDecimal, Percentage, Duration]

IDENTITY = Identity()


@safe_computation(default_return=PLACEHOLDER)
def render_cell(cell_format: CellFormat, value: Any) -> str:
    return cell_format.render(value)


class ColumnFormatter:
    """Positional list of cell formats, one per column of a table."""

    def __init__(self, formats: Sequence[CellFormat]):
        self.formats: List[CellFormat] = list(formats)

    @classmethod
    def identity(cls, width: int) -> "ColumnFormatter":
        return cls([IDENTITY] * width)

    @classmethod
    def from_overrides(cls, width: int, overrides: dict) -> "ColumnFormatter":
        """Identity everywhere except the given ``{column_index: format}``."""
        bad = [index for index in overrides if not 0 <= index < width]
        if bad:
            raise ValueError(f"Format overrides outside of {width} columns: {bad}")
        return cls([overrides.get(index, IDENTITY) for index in range(width)])

    def __len__(self):
        return len(self.formats)

    def check_width(self, titles: Sequence[str]) -> None:
        if len(self.formats) != len(titles):
            raise ValueError(
                f"Formatter declares {len(self.formats)} columns but the table has {len(titles)}"
            )

    def format(self, column_index: int, value: Any) -> str:
        """Display string for one cell; never raises and never mutates the value."""
        if 0 <= column_index < len(self.formats):
            cell_format = self.formats[column_index]
        else:
            cell_format = IDENTITY
        return render_cell(cell_format, value)

    def format_row(self, values: Sequence) -> List[str]:
        return [self.format(index, value) for index, value in enumerate(values)]
