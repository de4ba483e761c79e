"""Tests for HRV-guided training readiness."""

from datetime import timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from readiness_core.config import ReadinessConfig
from readiness_core.models import (
    DailyMetric,
    RecoveryBand,
    RecoveryResult,
    SubScoreSet,
    TrainingLoadPoint,
    TrainingRecommendation,
)
from readiness_core.readiness import (
    assess_readiness,
    assess_readiness_from_history,
    calculate_form_signal,
    calculate_hrv_stability_signal,
    calculate_hrv_trend_signal,
    calculate_signal_clarity,
    days_since_hard_session,
    quick_readiness,
)


def recovery_result(on, score, band=RecoveryBand.OPTIMAL):
    return RecoveryResult(date=on, score=score, band=band, sub_scores=SubScoreSet())


class TestSignals:
    """Tests for the individual readiness signals."""

    @pytest.mark.parametrize("rolling,baseline,expected", [
        (50, 50, 0),
        (55, 50, 50),
        (60, 50, 100),
        (70, 50, 100),
        (40, 50, -100),
    ])
    def test_hrv_trend(self, rolling, baseline, expected):
        assert calculate_hrv_trend_signal(rolling, baseline) == expected

    @pytest.mark.parametrize("rolling,baseline", [(None, 50), (50, None), (50, 0)])
    def test_hrv_trend_missing(self, rolling, baseline):
        assert calculate_hrv_trend_signal(rolling, baseline) is None

    @pytest.mark.parametrize("cv,expected", [
        (0, 100),
        (3, 70),
        (5, 50),
        (7.5, 25),
        (12, -20),
        (15, -50),
        (20, -100),
        (40, -100),
    ])
    def test_hrv_stability(self, cv, expected):
        assert calculate_hrv_stability_signal(cv) == expected

    def test_hrv_stability_missing(self):
        assert calculate_hrv_stability_signal(None) is None

    @pytest.mark.parametrize("tsb,expected", [(10, 25), (-10, -25), (50, 100), (-60, -100)])
    def test_form(self, tsb, expected):
        assert calculate_form_signal(tsb) == expected

    def test_form_missing(self):
        assert calculate_form_signal(None) is None

    def test_trend_scale_is_configurable(self):
        assert calculate_hrv_trend_signal(55, 50, ReadinessConfig(hrv_trend_scale=2.0)) == 20


class TestSignalClarity:
    """Tests for signal agreement."""

    @pytest.mark.parametrize("signals,expected", [
        ([50, 70, 30, 25], 80),
        ([50, 70, 30, 0], 85),
        ([-20, -30, -40, 5], 85),
        ([0, 0, 0, 0], 60),
        ([50, -50, 0, 0], 40),
    ])
    def test_clarity(self, signals, expected):
        assert calculate_signal_clarity(signals) == expected

    def test_boundary_is_neutral(self):
        assert calculate_signal_clarity([10, -10, 0, 0]) == 60


class TestAssessReadiness:
    """Tests for the recommendation decision order."""

    def test_train_hard(self):
        result = assess_readiness(rolling_hrv=55, hrv_baseline=50, hrv_cv=3.0, recovery_score=80, tsb=10)

        assert result.recommendation == TrainingRecommendation.TRAIN_HARD
        assert result.confidence == 0.9
        assert result.suggested_tss_range == (100, 200)
        assert result.suggested_intensity_factor == 0.85
        assert result.reasoning == (
            "HRV is 10% above baseline",
            "Excellent HRV stability (CV 3.0%)",
            "Recovery score is 80%",
        )
        assert result.factors.hrv_trend_signal == 50
        assert result.factors.hrv_stability_signal == 70
        assert result.factors.form_signal == 25
        assert result.factors.hrv_change_pct == 10.0

    def test_recent_hard_session_lowers_to_moderate(self):
        result = assess_readiness(
            rolling_hrv=55, hrv_baseline=50, hrv_cv=3.0, recovery_score=80, tsb=10, days_since_hard=1,
        )

        assert result.recommendation == TrainingRecommendation.TRAIN_MODERATE
        assert result.suggested_tss_range == (50, 100)
        assert result.reasoning[-1] == "Last hard session 1 day ago, keep intensity moderate"

    def test_hard_session_today(self):
        result = assess_readiness(
            rolling_hrv=55, hrv_baseline=50, hrv_cv=3.0, recovery_score=80, tsb=10, days_since_hard=0,
        )
        assert result.recommendation == TrainingRecommendation.TRAIN_MODERATE
        assert result.reasoning[-1] == "Hard session today, keep intensity moderate"

    def test_enough_days_since_hard_session(self):
        result = assess_readiness(
            rolling_hrv=55, hrv_baseline=50, hrv_cv=3.0, recovery_score=80, tsb=10, days_since_hard=2,
        )
        assert result.recommendation == TrainingRecommendation.TRAIN_HARD
        assert result.factors.days_since_hard_session == 2

    def test_hrv_drop_means_rest(self):
        """A falling HRV trend wins over an excellent recovery score."""
        result = assess_readiness(rolling_hrv=44, hrv_baseline=50, hrv_cv=3.0, recovery_score=90, tsb=10)

        assert result.recommendation == TrainingRecommendation.REST
        assert result.reasoning[0] == "HRV is 12% below baseline"
        assert result.suggested_tss_range == (0, 20)
        assert result.suggested_intensity_factor == 0.40

    def test_unstable_hrv_means_rest(self):
        result = assess_readiness(rolling_hrv=50, hrv_baseline=50, hrv_cv=13.0, recovery_score=80)

        assert result.recommendation == TrainingRecommendation.REST
        assert "HRV variability is high (CV 13.0%)" in result.reasoning

    def test_overreached_means_rest(self):
        result = assess_readiness(recovery_score=80, tsb=-10)

        assert result.recommendation == TrainingRecommendation.REST
        assert "Training load indicates functional overreaching" in result.reasoning

    def test_fatigued(self):
        result = assess_readiness(recovery_score=40)

        assert result.recommendation == TrainingRecommendation.TRAIN_EASY
        assert result.reasoning[0] == "Recovery score is below 50%"
        assert result.reasoning[-1] == "Limited data available, confidence reduced"
        assert result.confidence == 0.42

    def test_fatigued_but_fresh_is_mixed(self):
        result = assess_readiness(recovery_score=40, tsb=20)

        assert result.recommendation == TrainingRecommendation.TRAIN_EASY
        assert result.reasoning[0] == "Mixed readiness signals detected"

    def test_positive_trend_with_adequate_recovery(self):
        result = assess_readiness(rolling_hrv=52, hrv_baseline=50, hrv_cv=7.0, recovery_score=65, tsb=0)

        assert result.recommendation == TrainingRecommendation.TRAIN_MODERATE
        assert result.reasoning == ("HRV trend is positive", "Recovery is adequate (65%)")

    def test_recovered_and_fresh_without_hrv(self):
        result = assess_readiness(recovery_score=75, tsb=12)

        assert result.recommendation == TrainingRecommendation.TRAIN_MODERATE
        assert "Limited HRV data, moderate recommendation" in result.reasoning
        assert "Limited data available, confidence reduced" not in result.reasoning

    def test_no_data(self):
        result = assess_readiness()

        assert result.recommendation == TrainingRecommendation.TRAIN_EASY
        assert result.confidence == 0.3
        assert result.factors.recovery_signal == 50
        assert result.factors.hrv_change_pct is None
        assert "Limited data available, confidence reduced" in result.reasoning

    def test_thresholds_are_configurable(self):
        config = ReadinessConfig(recovered_score=85)
        result = assess_readiness(
            rolling_hrv=55, hrv_baseline=50, hrv_cv=3.0, recovery_score=80, tsb=10, config=config,
        )
        assert result.recommendation == TrainingRecommendation.TRAIN_MODERATE

    def test_result_is_frozen(self):
        result = assess_readiness(recovery_score=80)
        with pytest.raises(PydanticValidationError):
            result.confidence = 1.0


class TestDaysSinceHardSession:
    """Tests for finding the last hard training day."""

    def test_most_recent_hard_day(self, as_of):
        history = [
            DailyMetric(date=as_of - timedelta(days=3), training_stress=120),
            DailyMetric(date=as_of - timedelta(days=1), training_stress=80),
        ]
        assert days_since_hard_session(history, as_of) == 3

    def test_today_counts(self, as_of):
        history = [DailyMetric(date=as_of, training_stress=150)]
        assert days_since_hard_session(history, as_of) == 0

    def test_threshold_is_exclusive(self, as_of):
        history = [DailyMetric(date=as_of - timedelta(days=1), training_stress=100)]
        assert days_since_hard_session(history, as_of) is None

    def test_outside_lookback(self, as_of):
        history = [DailyMetric(date=as_of - timedelta(days=15), training_stress=200)]
        assert days_since_hard_session(history, as_of) is None

    def test_no_history(self, as_of):
        assert days_since_hard_session([], as_of) is None


class TestReadinessFromHistory:
    """Tests for readiness assembled from daily history."""

    @pytest.fixture
    def rising_history(self, history_factory, as_of):
        """23 days at HRV 50, then a week at 55."""
        return (
            history_factory(days=23, end=as_of - timedelta(days=7), hrv=50.0)
            + history_factory(days=7, end=as_of, hrv=55.0)
        )

    def test_rising_hrv_with_good_recovery(self, rising_history, as_of):
        result = assess_readiness_from_history(
            rising_history,
            as_of,
            recovery=recovery_result(as_of, 80),
            load=TrainingLoadPoint(date=as_of, ctl=60, atl=50, tsb=10),
        )

        assert result.date == as_of
        assert result.recommendation == TrainingRecommendation.TRAIN_HARD
        assert result.factors.hrv_change_pct == 7.5
        assert result.factors.hrv_trend_signal == 37
        assert result.factors.hrv_cv == 0.0
        assert result.factors.hrv_stability_signal == 100

    def test_recent_hard_day_in_history(self, rising_history, as_of):
        history = rising_history[:-1] + [
            DailyMetric(date=as_of - timedelta(days=1), hrv=55.0, training_stress=180),
        ]
        result = assess_readiness_from_history(
            history,
            as_of,
            recovery=recovery_result(as_of, 80),
            load=TrainingLoadPoint(date=as_of, ctl=60, atl=50, tsb=10),
        )

        assert result.recommendation == TrainingRecommendation.TRAIN_MODERATE
        assert result.factors.days_since_hard_session == 1

    def test_limited_recovery_is_ignored(self, rising_history, as_of):
        result = assess_readiness_from_history(
            rising_history,
            as_of,
            recovery=recovery_result(as_of, 90, band=RecoveryBand.LIMITED_DATA),
        )

        assert result.factors.recovery_signal == 50
        assert result.recommendation == TrainingRecommendation.TRAIN_EASY

    def test_short_history(self, history_factory, as_of):
        result = assess_readiness_from_history(history_factory(days=2, hrv=50.0), as_of)

        assert result.factors.hrv_change_pct is None
        assert result.factors.hrv_cv is None
        assert result.confidence == 0.3


class TestQuickReadiness:
    """Tests for the recovery-only check."""

    @pytest.mark.parametrize("score,expected", [
        (85, TrainingRecommendation.TRAIN_HARD),
        (80, TrainingRecommendation.TRAIN_HARD),
        (65, TrainingRecommendation.TRAIN_MODERATE),
        (45, TrainingRecommendation.TRAIN_EASY),
        (30, TrainingRecommendation.REST),
    ])
    def test_bands(self, score, expected):
        assert quick_readiness(score) == expected

    def test_heavy_yesterday(self):
        assert quick_readiness(85, yesterday_tss=200) == TrainingRecommendation.TRAIN_MODERATE
        assert quick_readiness(85, yesterday_tss=150) == TrainingRecommendation.TRAIN_HARD
