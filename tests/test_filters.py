"""
Tests for row filtering and the filter controller.
"""

import pytest

from jmeter_dashboard.cache import pattern_cache
from jmeter_dashboard.filters import (
    FilterConfigurationError,
    FilterController,
    FilterState,
    compile_series_filter,
    row_included,
)


STATE_GRID = [
    FilterState(),
    FilterState(show_controllers_only=True),
    FilterState(series_filter="Login"),
    FilterState(series_filter="nothing-matches-this", show_controllers_only=True),
    FilterState(series_filter="Login", filters_only_sample_series=False, show_controllers_only=True),
]


class TestRowIncluded:

    @pytest.mark.parametrize("state", STATE_GRID[:4])
    def test_non_discriminating_table_includes_everything(self, state):
        assert row_included(["500/Internal Server Error", 3591], False, False, state, 0)

    def test_series_filter_reaches_non_discriminating_table_when_not_sample_only(self):
        state = FilterState(series_filter="Login", filters_only_sample_series=False)
        assert not row_included(["500/Internal Server Error", 3591], False, False, state, 0)
        assert row_included(["Login Request", 3640], False, False, state, 0)

    def test_controllers_only(self):
        state = FilterState(show_controllers_only=True)
        assert row_included(["API Flow Transaction"], True, True, state, 0)
        assert not row_included(["Get Info"], False, True, state, 0)

    def test_series_filter_is_case_insensitive_search(self):
        state = FilterState(series_filter="login")
        assert row_included(["Login Request", 1], False, True, state, 0)
        assert not row_included(["Get Info", 1], False, True, state, 0)

    def test_series_filter_uses_series_column(self):
        state = FilterState(series_filter="^Get")
        assert row_included([0.98, 500, 1500, "Get Info"], False, True, state, 3)
        assert not row_included([0.98, 500, 1500, "Buy Item"], False, True, state, 3)

    def test_series_filter_without_series_column_matches_empty_text(self):
        state = FilterState(series_filter="Info", filters_only_sample_series=False)
        assert not row_included(["Get Info"], False, True, state, None)
        assert row_included(["Get Info"], False, True, FilterState(series_filter="^$"), None)

    def test_empty_row_is_never_included(self):
        assert not row_included([], True, False, FilterState(), 0)
        assert not row_included((), False, True, FilterState(), 0)

    def test_both_conditions_must_hold(self):
        state = FilterState(series_filter="Flow", show_controllers_only=True)
        assert row_included(["API Flow Transaction"], True, True, state, 0)
        assert not row_included(["Flow step"], False, True, state, 0)
        assert not row_included(["Login Request"], True, True, state, 0)

    def test_invalid_pattern_raises_configuration_error(self):
        with pytest.raises(FilterConfigurationError) as exc_info:
            row_included(["Get Info"], False, True, FilterState(series_filter="(unclosed"), 0)
        assert exc_info.value.series_filter == "(unclosed"


class TestCompileSeriesFilter:

    def test_empty_filter_means_no_pattern(self):
        assert compile_series_filter("") == (None, None)

    def test_invalid_pattern_returns_error(self):
        pattern, error = compile_series_filter("[a-")
        assert pattern is None
        assert error

    def test_compiled_once_per_distinct_string(self):
        first, _ = compile_series_filter("Login")
        second, _ = compile_series_filter("Login")
        assert first is second
        assert pattern_cache.hits == 1
        assert pattern_cache.misses == 1


class TestFilterController:

    def test_defaults(self):
        state = FilterController().state
        assert state == FilterState(show_controllers_only=False, series_filter="", filters_only_sample_series=True)

    def test_setters_notify_subscribers(self):
        controller = FilterController()
        events = []
        controller.subscribe(lambda old, new: events.append((old, new)))

        controller.set_show_controllers_only(True)
        controller.set_series_filter("Login")
        controller.set_filters_only_sample_series(False)

        assert len(events) == 3
        assert events[0][0] == FilterState()
        assert events[-1][1] == FilterState(True, "Login", False)
        assert controller.state == FilterState(True, "Login", False)

    def test_unchanged_value_does_not_notify(self):
        controller = FilterController()
        events = []
        controller.subscribe(lambda old, new: events.append(new))
        controller.set_series_filter("")
        controller.set_show_controllers_only(False)
        assert events == []

    def test_invalid_filter_keeps_previous_state(self):
        controller = FilterController(FilterState(series_filter="Login"))
        events = []
        controller.subscribe(lambda old, new: events.append(new))

        with pytest.raises(FilterConfigurationError):
            controller.set_series_filter("*Login")

        assert controller.state.series_filter == "Login"
        assert events == []

    def test_apply_controls_is_all_or_nothing(self):
        controller = FilterController()
        with pytest.raises(FilterConfigurationError):
            controller.apply_controls(True, "(", False)
        assert controller.state == FilterState()

    def test_unsubscribe(self):
        controller = FilterController()
        events = []
        unsubscribe = controller.subscribe(lambda old, new: events.append(new))
        unsubscribe()
        controller.set_show_controllers_only(True)
        assert events == []

    def test_toggle_round_trip(self):
        controller = FilterController()
        controller.set_show_controllers_only(True)
        controller.set_show_controllers_only(False)
        assert controller.state == FilterState()

    def test_state_dict_round_trip(self):
        state = FilterState(True, "Buy|Get", False)
        assert FilterState.from_dict(state.to_dict()) == state
        assert FilterState.from_dict(None) == FilterState()
