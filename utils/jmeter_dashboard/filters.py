"""
Row filtering for the JMeter Report Dashboard

Holds the filter state shared by every report table, the row inclusion
predicate, and a controller that validates filter changes before
notifying subscribers.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .cache import cached_computation

logger = logging.getLogger(__name__)


class FilterConfigurationError(ValueError):
    """Raised when a series filter cannot be compiled."""

    def __init__(self, series_filter: str, message: str):
        self.series_filter = series_filter
        super().__init__(f"Invalid series filter {series_filter!r}: {message}")


@dataclass(frozen=True)
class FilterState:
    """Filter values shared by every table of a report."""

    show_controllers_only: bool = False
    series_filter: str = ""
    filters_only_sample_series: bool = True

    def to_dict(self) -> Dict:
        return {
            'show_controllers_only': self.show_controllers_only,
            'series_filter': self.series_filter,
            'filters_only_sample_series': self.filters_only_sample_series,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "FilterState":
        if not data:
            return cls()
        return cls(
            show_controllers_only=bool(data.get('show_controllers_only', False)),
            series_filter=data.get('series_filter') or "",
            filters_only_sample_series=bool(data.get('filters_only_sample_series', True)),
        )


@cached_computation()
def compile_series_filter(series_filter: str) -> Tuple[Optional[re.Pattern], Optional[str]]:
    """Compile a series filter as a case-insensitive regex.

    Returns ``(pattern, None)`` on success and ``(None, message)`` when the
    text is not a valid regular expression. An empty filter compiles to
    ``(None, None)``, meaning no filtering.
    """
    if not series_filter:
        return None, None
    try:
        return re.compile(series_filter, re.IGNORECASE), None
    except re.error as e:
        return None, str(e)


def row_included(values: Sequence, is_controller: bool, supports_discrimination: bool,
                 filter_state: FilterState, series_index: Optional[int],
                 pattern: Optional[re.Pattern] = None) -> bool:
    """Decide whether an item row is displayed under the given filter state.

    ``pattern`` is the compiled form of ``filter_state.series_filter``; when
    omitted it is looked up through the compiled filter cache. An invalid
    filter raises FilterConfigurationError.
    """
    if len(values) == 0:
        return False

    if pattern is None and filter_state.series_filter:
        pattern, error = compile_series_filter(filter_state.series_filter)
        if error:
            raise FilterConfigurationError(filter_state.series_filter, error)

    series_match = (
        pattern is None
        or (filter_state.filters_only_sample_series and not supports_discrimination)
        or bool(pattern.search(_series_value(values, series_index)))
    )
    controller_match = (
        not filter_state.show_controllers_only
        or not supports_discrimination
        or is_controller
    )
    return series_match and controller_match


def _series_value(values: Sequence, series_index: Optional[int]) -> str:
    # Tables without a series column match against "" (JMeter's own page tests "undefined")
    if series_index is None or not -len(values) <= series_index < len(values):
        return ""
    return str(values[series_index])


class FilterController:
    """Owns the current FilterState and notifies subscribers of changes.

    Every setter validates before applying: an invalid series filter leaves
    the previous state in effect and notifies nobody.
    """

    def __init__(self, state: Optional[FilterState] = None):
        self._state = state or FilterState()
        self._subscribers: List[Callable[[FilterState, FilterState], None]] = []

    @property
    def state(self) -> FilterState:
        return self._state

    def subscribe(self, callback: Callable[[FilterState, FilterState], None]) -> Callable[[], None]:
        """Register ``callback(old_state, new_state)``; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    def set_show_controllers_only(self, value: bool) -> FilterState:
        return self._apply(replace(self._state, show_controllers_only=bool(value)))

    def set_series_filter(self, value: Optional[str]) -> FilterState:
        return self._apply(replace(self._state, series_filter=value or ""))

    def set_filters_only_sample_series(self, value: bool) -> FilterState:
        return self._apply(replace(self._state, filters_only_sample_series=bool(value)))

    def apply_controls(self, show_controllers_only: bool, series_filter: Optional[str],
                       filters_only_sample_series: bool) -> FilterState:
        """Apply all three control values at once, or none of them."""
        return self._apply(FilterState(
            show_controllers_only=bool(show_controllers_only),
            series_filter=series_filter or "",
            filters_only_sample_series=bool(filters_only_sample_series),
        ))

    def _apply(self, new_state: FilterState) -> FilterState:
        _, error = compile_series_filter(new_state.series_filter)
        if error:
            logger.error(f"Rejected series filter {new_state.series_filter!r}: {error}")
            raise FilterConfigurationError(new_state.series_filter, error)

        old_state = self._state
        if new_state == old_state:
            return old_state

        self._state = new_state
        logger.debug(f"Filter state changed: {old_state} -> {new_state}")
        for callback in list(self._subscribers):
            callback(old_state, new_state)
        return new_state
