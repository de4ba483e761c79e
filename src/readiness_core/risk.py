"""Overtraining risk assessment.

Five physiological and training markers are each scored to a severity in
[0, 1] and combined with fixed weights into a 0-100 risk score. A marker
without data is left out; the remaining weights are NOT scaled up, so sparse
data yields a lower, more conservative score rather than an inflated one.
"""

import logging
from datetime import date, timedelta
from typing import List, Optional, Sequence

from .baselines import compute_baselines, index_by_date
from .config import RiskConfig
from .models import (
    DailyMetric,
    RecoveryBand,
    RecoveryResult,
    RiskFactor,
    RiskLevel,
    RiskResult,
    TrainingLoadPoint,
)
from .sleep import calculate_sleep_debt
from .training_load import latest_load

logger = logging.getLogger(__name__)

RECOVERY_FACTOR = "Recovery Score"
HRV_FACTOR = "HRV Deviation"
RHR_FACTOR = "Resting Heart Rate"
TSB_FACTOR = "Training Stress Balance"
SLEEP_DEBT_FACTOR = "Sleep Debt"

FACTOR_ADVICE = {
    RECOVERY_FACTOR: "Recovery has been low for several days; schedule easier sessions.",
    HRV_FACTOR: "HRV is suppressed; keep intensity low until it returns to baseline.",
    RHR_FACTOR: "Resting heart rate is elevated; consider rest and watch for signs of illness.",
    TSB_FACTOR: "Fatigue is outpacing fitness; reduce training load.",
    SLEEP_DEBT_FACTOR: "Sleep debt is accumulating; prioritize extra sleep.",
}

NO_DATA_RECOMMENDATION = (
    "Not enough data to assess overtraining risk. Keep logging recovery and training."
)
LOW_RECOMMENDATION = "Continue current training. Your body is adapting well to the workload."
CRITICAL_RECOMMENDATION = (
    "CRITICAL: Immediate rest required. Take 5-7 days complete rest or very easy activity. "
    "If symptoms persist, consult a coach or doctor."
)


def percent_deviation(current: Optional[float], baseline: Optional[float]) -> Optional[float]:
    """Percentage change from baseline, None when either is missing or baseline is 0."""
    if current is None or baseline is None or baseline == 0:
        return None
    return (current - baseline) / baseline * 100


def _recovery_factor(avg_recovery: float, weight: float) -> RiskFactor:
    if avg_recovery < 50:
        severity, desc = 1.0, f"Critical: Recovery averaging {int(avg_recovery)}%"
    elif avg_recovery < 60:
        severity, desc = 0.7, f"Poor: Recovery averaging {int(avg_recovery)}%"
    elif avg_recovery < 70:
        severity, desc = 0.4, f"Fair: Recovery averaging {int(avg_recovery)}%"
    else:
        severity, desc = 0.1, f"Good: Recovery averaging {int(avg_recovery)}%"
    return RiskFactor(name=RECOVERY_FACTOR, severity=severity, description=desc, weight=weight)


def _hrv_factor(hrv_deviation_pct: float, weight: float) -> RiskFactor:
    drop = int(abs(hrv_deviation_pct))
    if hrv_deviation_pct < -20:
        severity, desc = 1.0, f"Critical: HRV {drop}% below baseline"
    elif hrv_deviation_pct < -15:
        severity, desc = 0.7, f"High: HRV {drop}% below baseline"
    elif hrv_deviation_pct < -10:
        severity, desc = 0.4, f"Moderate: HRV {drop}% below baseline"
    else:
        severity, desc = 0.1, "Normal: HRV within range"
    return RiskFactor(name=HRV_FACTOR, severity=severity, description=desc, weight=weight)


def _rhr_factor(rhr_elevation_pct: float, weight: float) -> RiskFactor:
    rise = int(rhr_elevation_pct)
    if rhr_elevation_pct > 15:
        severity, desc = 1.0, f"Critical: RHR +{rise}% above baseline"
    elif rhr_elevation_pct > 10:
        severity, desc = 0.7, f"High: RHR +{rise}% above baseline"
    elif rhr_elevation_pct > 5:
        severity, desc = 0.4, f"Moderate: RHR +{rise}% above baseline"
    else:
        severity, desc = 0.1, "Normal: RHR within range"
    return RiskFactor(name=RHR_FACTOR, severity=severity, description=desc, weight=weight)


def _tsb_factor(tsb: float, weight: float) -> RiskFactor:
    if tsb < -30:
        severity, desc = 1.0, f"Critical: TSB {int(tsb)} (severe overreaching)"
    elif tsb < -20:
        severity, desc = 0.7, f"High: TSB {int(tsb)} (functional overreaching)"
    elif tsb < -10:
        severity, desc = 0.3, f"Moderate: TSB {int(tsb)} (fatigued)"
    else:
        severity, desc = 0.1, f"Good: TSB {int(tsb)} (fresh or building)"
    return RiskFactor(name=TSB_FACTOR, severity=severity, description=desc, weight=weight)


def _sleep_debt_factor(debt_hours: float, weight: float) -> RiskFactor:
    if debt_hours > 10:
        severity, label = 1.0, "Critical"
    elif debt_hours > 6:
        severity, label = 0.6, "High"
    elif debt_hours > 3:
        severity, label = 0.3, "Moderate"
    else:
        severity, label = 0.1, "Low"
    return RiskFactor(
        name=SLEEP_DEBT_FACTOR,
        severity=severity,
        description=f"{label}: {debt_hours:.1f} hours sleep debt",
        weight=weight,
    )


def get_risk_level(score: float) -> RiskLevel:
    if score >= 75:
        return RiskLevel.CRITICAL
    elif score >= 50:
        return RiskLevel.HIGH
    elif score >= 25:
        return RiskLevel.MODERATE
    else:
        return RiskLevel.LOW


def generate_recommendation(level: RiskLevel, score: float, factors: Sequence[RiskFactor]) -> str:
    """Advice for the level, naming the most severe factor where it helps."""
    if not factors:
        return NO_DATA_RECOMMENDATION
    if level == RiskLevel.CRITICAL:
        return CRITICAL_RECOMMENDATION
    if level == RiskLevel.LOW:
        return LOW_RECOMMENDATION

    top = max(factors, key=lambda f: f.severity)
    advice = FACTOR_ADVICE[top.name]
    if level == RiskLevel.MODERATE:
        return f"Monitor closely. Primary concern: {top.name}. {advice} Consider 1-2 easier days."
    return (
        f"High overtraining risk detected ({int(score)}/100). {advice} "
        "Take 3-5 recovery days with easy/no training. Prioritize sleep and nutrition."
    )


def assess_overtraining_risk(
    avg_recovery: Optional[float] = None,
    hrv_deviation_pct: Optional[float] = None,
    rhr_elevation_pct: Optional[float] = None,
    tsb: Optional[float] = None,
    sleep_debt_hours: Optional[float] = None,
    config: Optional[RiskConfig] = None,
) -> RiskResult:
    """
    Calculate overtraining risk from physiological markers.

    Args:
        avg_recovery: Average recovery score over the last week
        hrv_deviation_pct: HRV % deviation from baseline (negative = below)
        rhr_elevation_pct: RHR % elevation above baseline
        tsb: Training Stress Balance
        sleep_debt_hours: Accumulated sleep debt
        config: Factor weights

    Returns:
        RiskResult with score min(100, sum(weight * severity * 100))
    """
    config = config or RiskConfig()
    factors: List[RiskFactor] = []

    if avg_recovery is not None:
        factors.append(_recovery_factor(avg_recovery, config.recovery_weight))
    if hrv_deviation_pct is not None:
        factors.append(_hrv_factor(hrv_deviation_pct, config.hrv_weight))
    if rhr_elevation_pct is not None:
        factors.append(_rhr_factor(rhr_elevation_pct, config.rhr_weight))
    if tsb is not None:
        factors.append(_tsb_factor(tsb, config.tsb_weight))
    if sleep_debt_hours is not None:
        factors.append(_sleep_debt_factor(sleep_debt_hours, config.sleep_debt_weight))

    score = round(min(100.0, sum(f.weight * f.severity * 100 for f in factors)), 1)
    level = get_risk_level(score)

    if level in (RiskLevel.HIGH, RiskLevel.CRITICAL):
        logger.info("Overtraining risk %s (%.0f/100)", level.value, score)

    return RiskResult(
        score=score,
        level=level,
        factors=tuple(factors),
        recommendation=generate_recommendation(level, score, factors),
    )


def assess_from_history(
    history: Sequence[DailyMetric],
    as_of: date,
    recovery_scores: Sequence[RecoveryResult] = (),
    load_points: Sequence[TrainingLoadPoint] = (),
    config: Optional[RiskConfig] = None,
) -> RiskResult:
    """
    Assess risk for `as_of` from daily history and earlier results.

    - Recovery: mean of the scored (not limited-data) days in the 7 days
      ending on `as_of`
    - HRV / RHR: today's deviation from the trailing baselines
    - TSB: latest load point on or before `as_of`
    - Sleep debt: 7 nights against the sleep baseline
    """
    window_start = as_of - timedelta(days=6)
    recent = [
        r.score for r in recovery_scores
        if window_start <= r.date <= as_of and r.band != RecoveryBand.LIMITED_DATA
    ]
    avg_recovery = sum(recent) / len(recent) if recent else None

    baselines = compute_baselines(history, as_of)
    today = index_by_date(history).get(as_of)
    hrv_deviation = rhr_elevation = None
    if today is not None:
        hrv_deviation = percent_deviation(today.hrv, baselines.hrv.mean)
        rhr_elevation = percent_deviation(today.rhr, baselines.rhr.mean)

    tsb = None
    if load_points:
        point = latest_load(load_points, as_of)
        tsb = point.tsb if point is not None else None

    return assess_overtraining_risk(
        avg_recovery=avg_recovery,
        hrv_deviation_pct=hrv_deviation,
        rhr_elevation_pct=rhr_elevation,
        tsb=tsb,
        sleep_debt_hours=calculate_sleep_debt(history, as_of),
        config=config,
    )
