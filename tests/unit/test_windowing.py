"""Unit tests for the window planner"""
import pytest

from sensor_telemetry.entities.sensor_data import BoundsRequest, SpanRequest
from sensor_telemetry.exceptions.telemetry_exceptions import InvalidRangeError
from sensor_telemetry.utils.windowing import (
    plan,
    plan_bounds,
    plan_span,
    window_for_duration,
)

NOW_MS = 1_700_000_000_000


class TestWindowForDuration:
    """Window width scaling law"""

    @pytest.mark.parametrize("duration_ms,expected", [
        (1, 30_000),
        (3_600_000, 30_000),
        (30_000_000, 30_000),
        (30_000_999, 30_000),
        (31_000_000, 31_000),
        (86_400_000, 86_400),
        (604_800_000, 604_800),
    ])
    def test_floor_and_scale(self, duration_ms, expected):
        assert window_for_duration(duration_ms) == expected

    def test_monotonically_non_decreasing(self):
        durations = [0, 1, 999, 29_999_999, 30_000_000, 30_001_000, 10**9, 10**12]
        windows = [window_for_duration(d) for d in durations]
        assert windows == sorted(windows)
        assert all(w >= 30_000 for w in windows)


class TestPlanSpan:
    """Lookback requests"""

    def test_one_hour_span(self):
        query_plan = plan_span(3_600_000, now_ms=NOW_MS)

        assert query_plan.window.window_ms == 30_000
        assert query_plan.window.every == "30000ms"
        assert query_plan.time_range.start_ms == NOW_MS - 3_600_000
        assert query_plan.time_range.stop_ms == NOW_MS
        assert query_plan.flux_range == "start: -3600000ms"
        assert query_plan.stop_bound is None

    def test_range_and_window_share_one_now(self):
        query_plan = plan_span(86_400_000, now_ms=NOW_MS)
        assert query_plan.time_range.duration_ms == 86_400_000
        assert query_plan.window.window_ms == 86_400

    def test_uses_wall_clock_when_now_not_given(self):
        query_plan = plan_span(60_000)
        assert query_plan.time_range.stop_ms - query_plan.time_range.start_ms == 60_000
        assert query_plan.time_range.stop_ms > NOW_MS

    @pytest.mark.parametrize("duration_ms", [0, -1, -3_600_000])
    def test_non_positive_span_rejected(self, duration_ms):
        with pytest.raises(InvalidRangeError):
            plan_span(duration_ms, now_ms=NOW_MS)


class TestPlanBounds:
    """Explicit [start, stop) requests"""

    def test_bounds_in_whole_seconds(self):
        query_plan = plan_bounds(1_700_000_000_000, 1_700_003_600_000)

        assert query_plan.start_bound == "1700000000"
        assert query_plan.stop_bound == "1700003601"
        assert query_plan.flux_range == "start: 1700000000, stop: 1700003601"
        assert query_plan.window.window_ms == 30_000

    def test_sub_second_range_not_empty(self):
        query_plan = plan_bounds(1_700_000_000_500, 1_700_000_000_900)
        assert int(query_plan.stop_bound) > int(query_plan.start_bound)

    def test_stop_bound_never_decreases(self):
        start = 1_700_000_000_000
        previous = None
        for stop in range(start + 1, start + 3_000, 7):
            query_plan = plan_bounds(start, stop)
            stop_bound = int(query_plan.stop_bound)
            assert stop_bound > int(query_plan.start_bound)
            if previous is not None:
                assert stop_bound >= previous
            previous = stop_bound

    def test_long_range_scales_window(self):
        query_plan = plan_bounds(0, 7 * 86_400_000)
        assert query_plan.window.window_ms == 604_800

    @pytest.mark.parametrize("start_ms,stop_ms", [(1000, 1000), (2000, 1000)])
    def test_empty_or_inverted_range_rejected(self, start_ms, stop_ms):
        with pytest.raises(InvalidRangeError):
            plan_bounds(start_ms, stop_ms)


class TestPlanDispatch:
    def test_span_request(self):
        query_plan = plan(SpanRequest(duration_ms=3_600_000), now_ms=NOW_MS)
        assert query_plan.start_bound == "-3600000ms"

    def test_bounds_request(self):
        query_plan = plan(BoundsRequest(start_ms=5_000, stop_ms=9_000))
        assert query_plan.flux_range == "start: 5, stop: 10"
