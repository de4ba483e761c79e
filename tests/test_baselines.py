"""Tests for personal baseline calculations."""

from datetime import timedelta

import pytest

from readiness_core.baselines import (
    calculate_direction,
    calculate_hrv_cv,
    calculate_rolling_average,
    compute_baselines,
    detect_hrv_trend,
    get_hrv_stability,
    values_before,
)
from readiness_core.config import BaselineConfig
from readiness_core.models import DailyMetric, HRVTrendDirection


class TestRollingAverage:
    """Tests for calculate_rolling_average."""

    def test_average_of_valid_values(self):
        assert calculate_rolling_average([50, 60, 70]) == 60.0

    def test_none_values_are_skipped(self):
        assert calculate_rolling_average([50, None, 60, None, 70]) == 60.0

    def test_insufficient_samples_returns_none(self):
        assert calculate_rolling_average([50, None, 60]) is None

    def test_only_first_days_are_used(self):
        values = [50] * 7 + [100] * 7
        assert calculate_rolling_average(values, days=7) == 50.0


class TestComputeBaselines:
    """Tests for trailing baseline computation."""

    def test_steady_history(self, steady_history, as_of):
        baselines = compute_baselines(steady_history, as_of)
        assert baselines.as_of == as_of
        assert baselines.hrv.mean == 50.0
        assert baselines.rhr.mean == 50.0
        assert baselines.sleep_hours.mean == 8.0
        assert baselines.respiratory_rate.mean == 14.0
        assert baselines.hrv.sample_count == 7

    def test_scored_day_is_excluded(self, steady_history, as_of):
        """Today's own value must not leak into its baseline."""
        history = steady_history + [DailyMetric(date=as_of, hrv=100.0)]
        assert compute_baselines(history, as_of).hrv.mean == 50.0

    def test_unavailable_below_min_samples(self, history_factory, as_of):
        history = history_factory(days=2, hrv=50.0)
        baseline = compute_baselines(history, as_of).hrv
        assert not baseline.available
        assert baseline.mean is None
        assert baseline.sample_count == 2

    def test_available_at_min_samples(self, history_factory, as_of):
        history = history_factory(days=3, hrv=50.0)
        assert compute_baselines(history, as_of).hrv.available

    def test_window_ignores_older_days(self, history_factory, as_of):
        older = history_factory(days=14, hrv=100.0)[:7]
        recent = history_factory(days=7, hrv=50.0)
        assert compute_baselines(older + recent, as_of).hrv.mean == 50.0

    def test_missing_field_has_no_baseline(self, history_factory, as_of):
        history = history_factory(hrv=50.0)
        baselines = compute_baselines(history, as_of)
        assert baselines.hrv.available
        assert not baselines.rhr.available
        assert not baselines.sleep_score.available

    def test_custom_window(self, history_factory, as_of):
        history = history_factory(days=3, hrv=60.0)
        config = BaselineConfig(window_days=3, min_samples=3)
        baselines = compute_baselines(history, as_of, config=config)
        assert baselines.hrv.mean == 60.0
        assert baselines.hrv.window_days == 3

    def test_empty_history(self, as_of):
        baselines = compute_baselines([], as_of)
        assert not baselines.hrv.available
        assert baselines.hrv.sample_count == 0

    def test_mean_is_not_rounded(self, as_of):
        """A non-terminating mean is kept at full precision."""
        history = [
            DailyMetric(date=as_of - timedelta(days=offset), hrv=hrv)
            for offset, hrv in enumerate([51.0, 51.0, 50.0], start=1)
        ]
        assert compute_baselines(history, as_of).hrv.mean == 152.0 / 3


class TestValuesBefore:
    """Tests for calendar-window extraction."""

    def test_most_recent_first_with_gaps(self, as_of):
        history = [
            DailyMetric(date=as_of - timedelta(days=1), hrv=51.0),
            DailyMetric(date=as_of - timedelta(days=3), hrv=53.0),
        ]
        assert values_before(history, as_of, "hrv", days=3) == [51.0, None, 53.0]


class TestDirection:
    """Tests for direction indicators."""

    def test_up(self):
        indicator = calculate_direction(60, 50)
        assert indicator.direction == "up"
        assert indicator.change_pct == 20.0

    def test_stable_within_threshold(self):
        assert calculate_direction(51, 50).direction == "stable"

    def test_inverse_metric(self):
        """For RHR a higher value is worse."""
        assert calculate_direction(60, 50, inverse=True).direction == "down"

    def test_missing_data(self):
        assert calculate_direction(None, 50) is None
        assert calculate_direction(50, 0) is None

    def test_rounded_for_display(self):
        indicator = calculate_direction(152.0 / 3, 50.0)
        assert indicator.baseline == 50.0
        assert indicator.current == 50.67
        assert indicator.change_pct == 1.3


class TestHRVStability:
    """Tests for HRV coefficient of variation."""

    def test_constant_hrv_is_excellent(self):
        cv = calculate_hrv_cv([50, 50, 50])
        assert cv == 0.0
        assert get_hrv_stability(cv) == "excellent"

    def test_variable_hrv_is_poor(self):
        cv = calculate_hrv_cv([40, 50, 60])
        assert cv == pytest.approx(20.0)
        assert get_hrv_stability(cv) == "poor"

    def test_needs_three_values(self):
        assert calculate_hrv_cv([50, None, 60]) is None
        assert get_hrv_stability(None) is None


class TestHRVTrend:
    """Tests for short vs long HRV trend."""

    def _history(self, history_factory, older, recent):
        return history_factory(days=30, hrv=older)[:23] + history_factory(days=7, hrv=recent)

    def test_improving(self, history_factory, as_of):
        history = self._history(history_factory, 50.0, 60.0)
        assert detect_hrv_trend(history, as_of) == HRVTrendDirection.IMPROVING

    def test_declining(self, history_factory, as_of):
        history = self._history(history_factory, 60.0, 45.0)
        assert detect_hrv_trend(history, as_of) == HRVTrendDirection.DECLINING

    def test_stable(self, history_factory, as_of):
        history = self._history(history_factory, 50.0, 51.0)
        assert detect_hrv_trend(history, as_of) == HRVTrendDirection.STABLE

    def test_insufficient_data(self, history_factory, as_of):
        assert detect_hrv_trend(history_factory(days=2, hrv=50.0), as_of) is None
