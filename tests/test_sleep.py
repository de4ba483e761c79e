"""Tests for sleep scoring, sleep need and sleep debt."""

from datetime import datetime, time, timedelta

import pytest

from readiness_core.baselines import compute_baselines
from readiness_core.models import DailyMetric, SleepBand, SleepSession
from readiness_core.sleep import (
    calculate_disturbance_score,
    calculate_efficiency_score,
    calculate_performance_score,
    calculate_sleep_debt,
    calculate_sleep_need,
    calculate_sleep_score,
    calculate_stage_quality_score,
    calculate_timing_score,
    clock_difference_minutes,
    get_sleep_band,
    typical_sleep_times,
    typical_time_of_day,
)


@pytest.fixture
def good_night(as_of):
    return SleepSession(
        date=as_of,
        duration_hours=8.0,
        time_in_bed_hours=8.5,
        deep_sleep_hours=1.5,
        rem_sleep_hours=2.0,
        wake_events=1,
    )


class TestComponents:
    """Tests for individual sleep components."""

    def test_performance(self):
        assert calculate_performance_score(6.0, 8.0) == 75
        assert calculate_performance_score(9.0, 8.0) == 100
        assert calculate_performance_score(8.0, None) is None

    def test_efficiency(self):
        assert calculate_efficiency_score(7.0, 8.0) == 87
        assert calculate_efficiency_score(7.0, 0) is None

    def test_stage_quality_ideal(self):
        assert calculate_stage_quality_score(1.6, 1.6, 8.0) == 100

    def test_stage_quality_scales_down(self):
        scores = [
            calculate_stage_quality_score(share * 8.0 / 2, share * 8.0 / 2, 8.0)
            for share in (0.45, 0.38, 0.33, 0.25, 0.10, 0.0)
        ]
        assert scores == sorted(scores, reverse=True)
        assert 50 <= scores[2] < 100
        assert scores[-1] == 0

    def test_stage_quality_missing(self):
        assert calculate_stage_quality_score(None, 1.5, 8.0) is None

    @pytest.mark.parametrize("events,expected", [(0, 100), (2, 100), (3, 75), (7, 50), (12, 25)])
    def test_disturbances(self, events, expected):
        assert calculate_disturbance_score(events) == expected

    def test_timing_needs_typical_times(self):
        assert calculate_timing_score(datetime(2024, 1, 14, 23, 0), None) is None

    def test_timing_consistent(self):
        score = calculate_timing_score(
            datetime(2024, 1, 14, 23, 10),
            datetime(2024, 1, 15, 7, 5),
            typical_bedtime=time(23, 0),
            typical_wake_time=time(7, 0),
        )
        assert score == 100

    def test_timing_across_midnight(self):
        """23:30 against a usual 00:15 is 45 minutes, not 23 hours."""
        assert clock_difference_minutes(time(23, 30), time(0, 15)) == pytest.approx(45)
        score = calculate_timing_score(datetime(2024, 1, 14, 23, 30), None, typical_bedtime=time(0, 15))
        assert score == 75

    def test_timing_irregular(self):
        score = calculate_timing_score(datetime(2024, 1, 15, 2, 0), None, typical_bedtime=time(22, 30))
        assert score == 25


class TestTypicalTimes:
    """Tests for circular averaging of clock times."""

    def test_average_across_midnight(self):
        times = [datetime(2024, 1, 14, 23, 30), datetime(2024, 1, 15, 0, 30)]
        assert typical_time_of_day(times) == time(0, 0)

    def test_empty(self):
        assert typical_time_of_day([]) is None

    def test_from_sessions(self, as_of):
        sessions = [
            SleepSession(
                date=as_of - timedelta(days=d),
                bedtime=datetime(2024, 1, 1, 22, 30),
                wake_time=datetime(2024, 1, 2, 6, 30),
            )
            for d in range(1, 4)
        ]
        assert typical_sleep_times(sessions) == (time(22, 30), time(6, 30))


class TestSleepScore:
    """Tests for the composite sleep score."""

    def test_good_night(self, good_night):
        result = calculate_sleep_score(good_night, sleep_need_hours=8.0)
        assert result.score >= 90, f"Expected >= 90, got {result.score}"
        assert result.band == SleepBand.OPTIMAL
        assert not result.sub_scores["timing"].available
        assert result.sub_scores.total_weight == pytest.approx(1.0)

    def test_need_from_baseline(self, good_night, history_factory, as_of):
        history = history_factory(sleep_hours=10.0)
        baselines = compute_baselines(history, as_of)
        result = calculate_sleep_score(good_night, baselines=baselines)
        assert result.sub_scores["performance"].score == 80

    def test_without_need_performance_is_unavailable(self, good_night):
        result = calculate_sleep_score(good_night)
        assert not result.sub_scores["performance"].available
        assert result.sub_scores["performance"].score == 50

    def test_short_fragmented_night(self, as_of):
        session = SleepSession(
            date=as_of,
            duration_hours=4.0,
            time_in_bed_hours=6.5,
            deep_sleep_hours=0.3,
            rem_sleep_hours=0.4,
            wake_events=10,
        )
        result = calculate_sleep_score(session, sleep_need_hours=8.0)
        assert result.score < 60
        assert result.band in (SleepBand.FAIR, SleepBand.PAY_ATTENTION)

    def test_limited_data(self, as_of):
        result = calculate_sleep_score(SleepSession(date=as_of))
        assert result.band == SleepBand.LIMITED_DATA
        assert result.score == 50

    def test_timing_included(self, good_night):
        session = good_night.model_copy(update={
            "bedtime": datetime(2024, 1, 14, 23, 0),
            "wake_time": datetime(2024, 1, 15, 7, 30),
        })
        result = calculate_sleep_score(
            session, sleep_need_hours=8.0, typical_bedtime=time(23, 0), typical_wake_time=time(7, 30)
        )
        assert result.sub_scores["timing"].available
        assert result.sub_scores["timing"].score == 100

    @pytest.mark.parametrize(
        "score,band",
        [(80, SleepBand.OPTIMAL), (60, SleepBand.GOOD), (40, SleepBand.FAIR), (39, SleepBand.PAY_ATTENTION)],
    )
    def test_bands(self, score, band):
        assert get_sleep_band(score) == band


class TestSleepNeed:
    """Tests for tonight's sleep need."""

    def test_base_only(self):
        assert calculate_sleep_need(8.0) == 8.0

    def test_strain_and_debt(self):
        assert calculate_sleep_need(8.0, yesterday_strain=14, sleep_debt=7) == pytest.approx(9.2)

    def test_low_strain_adds_nothing(self):
        assert calculate_sleep_need(7.5, yesterday_strain=5) == 7.5


class TestSleepDebt:
    """Tests for accumulated sleep debt."""

    def test_accumulates_shortfall(self, history_factory, as_of):
        history = history_factory(days=7, end=as_of + timedelta(days=1), sleep_hours=6.0)
        assert calculate_sleep_debt(history, as_of, target_hours=8.0) == pytest.approx(14.0)

    def test_surplus_does_not_repay(self, as_of):
        history = [
            DailyMetric(date=as_of, sleep_hours=10.0),
            DailyMetric(date=as_of - timedelta(days=1), sleep_hours=6.0),
        ]
        assert calculate_sleep_debt(history, as_of, target_hours=8.0) == pytest.approx(2.0)

    def test_target_from_baseline(self, history_factory, as_of):
        history = history_factory(sleep_hours=8.0) + [DailyMetric(date=as_of, sleep_hours=5.0)]
        assert calculate_sleep_debt(history, as_of) == pytest.approx(3.0)

    def test_no_target(self, as_of):
        assert calculate_sleep_debt([DailyMetric(date=as_of, sleep_hours=6.0)], as_of) is None
