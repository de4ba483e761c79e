"""Tests for overtraining risk assessment."""

from datetime import timedelta

import pytest

from readiness_core.config import RiskConfig
from readiness_core.models import (
    DailyMetric,
    RecoveryBand,
    RecoveryResult,
    RiskLevel,
    SubScoreSet,
    TrainingLoadPoint,
)
from readiness_core.risk import (
    CRITICAL_RECOMMENDATION,
    HRV_FACTOR,
    LOW_RECOMMENDATION,
    NO_DATA_RECOMMENDATION,
    RECOVERY_FACTOR,
    RHR_FACTOR,
    SLEEP_DEBT_FACTOR,
    TSB_FACTOR,
    assess_from_history,
    assess_overtraining_risk,
    get_risk_level,
    percent_deviation,
)


class TestRiskScore:
    """Tests for the weighted risk score."""

    def test_no_data(self):
        result = assess_overtraining_risk()
        assert result.score == 0
        assert result.level == RiskLevel.LOW
        assert result.factors == ()
        assert result.recommendation == NO_DATA_RECOMMENDATION

    def test_healthy_athlete(self):
        result = assess_overtraining_risk(
            avg_recovery=85, hrv_deviation_pct=2, rhr_elevation_pct=1, tsb=5, sleep_debt_hours=1
        )
        assert result.score == pytest.approx(10.0)
        assert result.level == RiskLevel.LOW
        assert result.recommendation == LOW_RECOMMENDATION

    def test_worst_case_is_critical(self):
        result = assess_overtraining_risk(
            avg_recovery=40, hrv_deviation_pct=-25, rhr_elevation_pct=20, tsb=-35, sleep_debt_hours=12
        )
        assert result.score == 100
        assert result.level == RiskLevel.CRITICAL
        assert result.recommendation == CRITICAL_RECOMMENDATION

    def test_missing_factor_is_omitted_not_rescaled(self):
        """Sparse data gives a lower score instead of inflating the rest."""
        result = assess_overtraining_risk(avg_recovery=40)
        assert [f.name for f in result.factors] == [RECOVERY_FACTOR]
        assert result.score == pytest.approx(25.0)
        assert result.level == RiskLevel.MODERATE

    @pytest.mark.parametrize(
        "field,values",
        [
            ("avg_recovery", [90, 65, 55, 30]),
            ("hrv_deviation_pct", [0, -12, -18, -30]),
            ("rhr_elevation_pct", [0, 7, 12, 20]),
            ("tsb", [10, -15, -25, -40]),
            ("sleep_debt_hours", [0, 4, 8, 12]),
        ],
    )
    def test_monotonic_in_each_factor(self, field, values):
        scores = [assess_overtraining_risk(**{field: v}).score for v in values]
        assert scores == sorted(scores), f"{field}: {scores}"
        assert scores[0] < scores[-1]

    def test_factor_descriptions(self):
        result = assess_overtraining_risk(hrv_deviation_pct=-22.4, tsb=-31)
        hrv, tsb = result.factors
        assert hrv.name == HRV_FACTOR
        assert hrv.description == "Critical: HRV 22% below baseline"
        assert tsb.name == TSB_FACTOR
        assert "severe overreaching" in tsb.description

    def test_moderate_names_primary_concern(self):
        result = assess_overtraining_risk(avg_recovery=80, rhr_elevation_pct=20, tsb=-15)
        assert result.level == RiskLevel.MODERATE
        assert result.top_factor.name == RHR_FACTOR
        assert f"Primary concern: {RHR_FACTOR}" in result.recommendation

    def test_high_mentions_score(self):
        result = assess_overtraining_risk(avg_recovery=45, hrv_deviation_pct=-25, sleep_debt_hours=4)
        assert result.level == RiskLevel.HIGH
        assert f"({int(result.score)}/100)" in result.recommendation

    def test_custom_weights(self):
        config = RiskConfig(recovery_weight=1.0, hrv_weight=0, rhr_weight=0, tsb_weight=0, sleep_debt_weight=0)
        assert assess_overtraining_risk(avg_recovery=40, config=config).score == 100


class TestRiskLevel:
    """Tests for level thresholds."""

    @pytest.mark.parametrize(
        "score,level",
        [
            (0, RiskLevel.LOW),
            (24.9, RiskLevel.LOW),
            (25, RiskLevel.MODERATE),
            (50, RiskLevel.HIGH),
            (75, RiskLevel.CRITICAL),
            (100, RiskLevel.CRITICAL),
        ],
    )
    def test_levels(self, score, level):
        assert get_risk_level(score) == level


class TestPercentDeviation:
    """Tests for percent_deviation."""

    def test_values(self):
        assert percent_deviation(40, 50) == pytest.approx(-20.0)
        assert percent_deviation(None, 50) is None
        assert percent_deviation(40, 0) is None


class TestAssessFromHistory:
    """Tests for assessing risk from daily history."""

    def _recovery(self, day, score, band=RecoveryBand.GOOD):
        return RecoveryResult(date=day, score=score, band=band, sub_scores=SubScoreSet())

    def test_uses_todays_deviation(self, steady_history, as_of):
        history = steady_history + [DailyMetric(date=as_of, hrv=35.0, rhr=50.0, sleep_hours=8.0)]
        result = assess_from_history(history, as_of)

        names = {f.name for f in result.factors}
        assert names == {HRV_FACTOR, RHR_FACTOR, SLEEP_DEBT_FACTOR}
        assert result.score == pytest.approx(28.0)
        assert result.level == RiskLevel.MODERATE

    def test_recovery_average_skips_limited_data(self, steady_history, as_of):
        scores = [
            self._recovery(as_of, 40),
            self._recovery(as_of - timedelta(days=1), 50),
            self._recovery(as_of - timedelta(days=2), 50, RecoveryBand.LIMITED_DATA),
            self._recovery(as_of - timedelta(days=10), 95),
        ]
        result = assess_from_history(steady_history, as_of, recovery_scores=scores)
        recovery = next(f for f in result.factors if f.name == RECOVERY_FACTOR)
        assert recovery.description == "Critical: Recovery averaging 45%"

    def test_tsb_from_load_points(self, steady_history, as_of):
        points = [TrainingLoadPoint(date=as_of, ctl=40.0, atl=80.0, tsb=-40.0)]
        result = assess_from_history(steady_history, as_of, load_points=points)
        tsb = next(f for f in result.factors if f.name == TSB_FACTOR)
        assert tsb.severity == 1.0

    def test_without_load_points_tsb_is_omitted(self, steady_history, as_of):
        result = assess_from_history(steady_history, as_of)
        assert TSB_FACTOR not in {f.name for f in result.factors}
