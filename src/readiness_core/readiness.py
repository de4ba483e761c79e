"""HRV-guided training readiness.

Turns signals computed elsewhere in the package into a daily training
recommendation:

- HRV trend: short-term HRV average against the long-term one
- HRV stability: coefficient of variation of recent HRV
- Recovery: the composite recovery score
- Form: training stress balance
- Days since the last hard session

Clear fatigue signals win: a falling HRV trend, unstable HRV or an
overreached form means rest even when the recovery score looks fine.
"""

import logging
from datetime import date, timedelta
from typing import List, Optional, Sequence

from .baselines import calculate_hrv_cv, calculate_rolling_average, index_by_date, values_before
from .config import BaselineConfig, ReadinessConfig
from .models import (
    DailyMetric,
    ReadinessFactors,
    ReadinessResult,
    RecoveryBand,
    RecoveryResult,
    TrainingLoadPoint,
    TrainingRecommendation,
)

logger = logging.getLogger(__name__)

# (lowest TSS, highest TSS, intensity factor) suggested per recommendation
RECOMMENDATION_TARGETS = {
    TrainingRecommendation.TRAIN_HARD: (100, 200, 0.85),
    TrainingRecommendation.TRAIN_MODERATE: (50, 100, 0.70),
    TrainingRecommendation.TRAIN_EASY: (20, 50, 0.55),
    TrainingRecommendation.REST: (0, 20, 0.40),
}


def _bounded(value: float) -> int:
    return int(max(-100.0, min(100.0, value)))


def calculate_hrv_trend_signal(
    rolling_hrv: Optional[float],
    baseline_hrv: Optional[float],
    config: Optional[ReadinessConfig] = None,
) -> Optional[int]:
    """HRV trend on -100..100; a 20% change either way saturates it."""
    config = config or ReadinessConfig()
    if rolling_hrv is None or not baseline_hrv or baseline_hrv <= 0:
        return None
    change_pct = (rolling_hrv - baseline_hrv) / baseline_hrv * 100
    return _bounded(change_pct * config.hrv_trend_scale)


def calculate_hrv_stability_signal(cv: Optional[float]) -> Optional[int]:
    """
    HRV stability on -100..100 from the coefficient of variation.

    - CV < 5%: 100 -> 50
    - CV 5-10%: 50 -> 0
    - CV 10-15%: 0 -> -50
    - CV > 15%: -50 -> -100
    """
    if cv is None:
        return None
    if cv < 5:
        return int(100 - cv * 10)
    elif cv < 10:
        return int(50 - (cv - 5) * 10)
    elif cv < 15:
        return int(-(cv - 10) * 10)
    else:
        return int(max(-100.0, -50 - (cv - 15) * 10))


def calculate_form_signal(tsb: Optional[float], config: Optional[ReadinessConfig] = None) -> Optional[int]:
    """Form on -100..100; TSB of +/-40 saturates it."""
    config = config or ReadinessConfig()
    if tsb is None:
        return None
    return _bounded(tsb * config.form_scale)


def days_since_hard_session(
    history: Sequence[DailyMetric],
    as_of: date,
    config: Optional[ReadinessConfig] = None,
) -> Optional[int]:
    """
    Days since the most recent day with training stress above `hard_session_tss`.

    `as_of` itself counts as day 0. None when no hard day falls within
    `hard_session_lookback_days`.
    """
    config = config or ReadinessConfig()
    by_date = index_by_date(history)
    for offset in range(config.hard_session_lookback_days + 1):
        metric = by_date.get(as_of - timedelta(days=offset))
        if metric is not None and (metric.training_stress or 0) > config.hard_session_tss:
            return offset
    return None


def calculate_signal_clarity(signals: Sequence[int], config: Optional[ReadinessConfig] = None) -> int:
    """
    How consistently the signals point one way, 0-100.

    Three or more signals agreeing give 80, plus 5 per neutral signal; all
    neutral gives 60; anything else is mixed and gives 40.
    """
    config = config or ReadinessConfig()
    positive = sum(1 for s in signals if s > config.clear_signal)
    negative = sum(1 for s in signals if s < -config.clear_signal)
    neutral = len(signals) - positive - negative

    if positive >= 3 or negative >= 3:
        return 80 + neutral * 5
    if positive == 0 and negative == 0:
        return 60
    return 40


def _hard_session_note(days: int) -> str:
    if days == 0:
        return "Hard session today, keep intensity moderate"
    unit = "day" if days == 1 else "days"
    return f"Last hard session {days} {unit} ago, keep intensity moderate"


def assess_readiness(
    rolling_hrv: Optional[float] = None,
    hrv_baseline: Optional[float] = None,
    hrv_cv: Optional[float] = None,
    recovery_score: Optional[float] = None,
    tsb: Optional[float] = None,
    days_since_hard: Optional[int] = None,
    on: Optional[date] = None,
    config: Optional[ReadinessConfig] = None,
) -> ReadinessResult:
    """
    Daily training recommendation from readiness signals.

    Decision order, first match wins:
    1. Rest: HRV trend clearly down, HRV unstable or form overreached
    2. Easy: recovery below 50 without fresh form
    3. Hard: HRV trend up, very stable HRV and recovery of at least 70
    4. Moderate: HRV trend up, stable HRV and recovery of at least 60
    5. Moderate: recovered and fresh
    6. Easy: mixed signals
    A hard recommendation within `min_days_between_hard_sessions` of the
    last hard session is lowered to moderate.

    Confidence averages data coverage (25 points per available signal) with
    how consistently the signals agree.

    Args:
        rolling_hrv: Short-term HRV average
        hrv_baseline: Long-term HRV average
        hrv_cv: HRV coefficient of variation in percent
        recovery_score: Recovery score 0-100, treated as 50 when missing
        tsb: Training stress balance
        days_since_hard: From days_since_hard_session
        on: Date the assessment is for
    """
    config = config or ReadinessConfig()

    trend = calculate_hrv_trend_signal(rolling_hrv, hrv_baseline, config)
    stability = calculate_hrv_stability_signal(hrv_cv)
    form = calculate_form_signal(tsb, config)
    recovery = int(max(0.0, min(100.0, recovery_score))) if recovery_score is not None else 50

    data_quality = 25 * sum(1 for s in (trend, stability, recovery_score, form) if s is not None)

    trend_signal = trend or 0
    stability_signal = stability or 0
    form_signal = form or 0
    hrv_change_pct = None
    if trend is not None:
        hrv_change_pct = round((rolling_hrv - hrv_baseline) / hrv_baseline * 100, 1)

    hrv_positive = trend_signal > config.hrv_positive_signal
    hrv_negative = trend_signal < config.hrv_negative_signal
    cv_low = stability_signal > config.cv_low_signal
    cv_moderate = stability_signal > config.cv_moderate_signal
    cv_high = stability_signal < config.cv_high_signal
    recovered = recovery >= config.recovered_score
    fatigued = recovery < config.fatigued_score
    fresh = form_signal > config.fresh_signal
    overreached = form_signal < config.overreached_signal

    reasoning: List[str] = []

    if hrv_negative or cv_high or overreached:
        recommendation = TrainingRecommendation.REST
        if hrv_negative:
            reasoning.append(f"HRV is {abs(hrv_change_pct):.0f}% below baseline")
        if cv_high:
            reasoning.append(f"HRV variability is high (CV {hrv_cv:.1f}%)")
        if overreached:
            reasoning.append("Training load indicates functional overreaching")
    elif fatigued and not fresh:
        recommendation = TrainingRecommendation.TRAIN_EASY
        reasoning.append(f"Recovery score is below {config.fatigued_score:.0f}%")
        reasoning.append("Recommend low-intensity activity")
    elif hrv_positive and cv_low and recovered:
        recommendation = TrainingRecommendation.TRAIN_HARD
        reasoning.append(f"HRV is {hrv_change_pct:.0f}% above baseline")
        reasoning.append(f"Excellent HRV stability (CV {hrv_cv:.1f}%)")
        reasoning.append(f"Recovery score is {recovery}%")
    elif hrv_positive and cv_moderate and recovery >= config.adequate_recovery_score:
        recommendation = TrainingRecommendation.TRAIN_MODERATE
        reasoning.append("HRV trend is positive")
        reasoning.append(f"Recovery is adequate ({recovery}%)")
    elif recovered and fresh:
        recommendation = TrainingRecommendation.TRAIN_MODERATE
        reasoning.append("Recovery and form are good")
        if rolling_hrv is None:
            reasoning.append("Limited HRV data, moderate recommendation")
    else:
        recommendation = TrainingRecommendation.TRAIN_EASY
        reasoning.append("Mixed readiness signals detected")
        reasoning.append("Conservative approach recommended")

    if (
        recommendation == TrainingRecommendation.TRAIN_HARD
        and days_since_hard is not None
        and days_since_hard < config.min_days_between_hard_sessions
    ):
        recommendation = TrainingRecommendation.TRAIN_MODERATE
        reasoning.append(_hard_session_note(days_since_hard))

    clarity = calculate_signal_clarity(
        [trend_signal, stability_signal, recovery - 50, form_signal], config
    )
    confidence = min(100, (data_quality + clarity) // 2)
    if data_quality < config.limited_data_quality:
        reasoning.append("Limited data available, confidence reduced")

    tss_low, tss_high, intensity_factor = RECOMMENDATION_TARGETS[recommendation]

    logger.debug(
        "Readiness %s on %s (trend %d, stability %d, recovery %d, form %d, confidence %d%%)",
        recommendation.value, on, trend_signal, stability_signal, recovery, form_signal, confidence,
    )

    return ReadinessResult(
        date=on,
        recommendation=recommendation,
        confidence=confidence / 100,
        factors=ReadinessFactors(
            hrv_trend_signal=trend_signal,
            hrv_stability_signal=stability_signal,
            recovery_signal=recovery,
            form_signal=form_signal,
            hrv_change_pct=hrv_change_pct,
            hrv_cv=hrv_cv,
            days_since_hard_session=days_since_hard,
        ),
        suggested_tss_low=tss_low,
        suggested_tss_high=tss_high,
        suggested_intensity_factor=intensity_factor,
        reasoning=tuple(reasoning),
    )


def assess_readiness_from_history(
    history: Sequence[DailyMetric],
    as_of: date,
    recovery: Optional[RecoveryResult] = None,
    load: Optional[TrainingLoadPoint] = None,
    baseline_config: Optional[BaselineConfig] = None,
    config: Optional[ReadinessConfig] = None,
) -> ReadinessResult:
    """
    Readiness for `as_of` from daily history.

    HRV windows follow the baseline configuration (7 vs 30 days strictly
    before `as_of`). A recovery result with limited data counts as missing.
    """
    baseline_config = baseline_config or BaselineConfig()
    config = config or ReadinessConfig()

    values = values_before(history, as_of, "hrv", baseline_config.long_window_days)
    rolling = calculate_rolling_average(values, baseline_config.window_days, baseline_config.min_samples)
    long_term = calculate_rolling_average(values, baseline_config.long_window_days, baseline_config.min_samples)
    cv = calculate_hrv_cv(values, baseline_config.window_days)

    recovery_score = None
    if recovery is not None and recovery.band != RecoveryBand.LIMITED_DATA:
        recovery_score = recovery.score

    return assess_readiness(
        rolling_hrv=rolling,
        hrv_baseline=long_term,
        hrv_cv=cv,
        recovery_score=recovery_score,
        tsb=load.tsb if load is not None else None,
        days_since_hard=days_since_hard_session(history, as_of, config),
        on=as_of,
        config=config,
    )


def quick_readiness(
    recovery_score: float,
    yesterday_tss: Optional[float] = None,
    config: Optional[ReadinessConfig] = None,
) -> TrainingRecommendation:
    """Recommendation from the recovery score alone, for days without HRV history."""
    config = config or ReadinessConfig()
    heavy_yesterday = (yesterday_tss or 0) > config.quick_high_tss

    if recovery_score >= config.quick_hard_score and not heavy_yesterday:
        return TrainingRecommendation.TRAIN_HARD
    elif recovery_score >= config.quick_moderate_score:
        return TrainingRecommendation.TRAIN_MODERATE
    elif recovery_score >= config.quick_easy_score:
        return TrainingRecommendation.TRAIN_EASY
    else:
        return TrainingRecommendation.REST
