"""Recovery score calculation.

Five components, each 0-100, compared against personal baselines:

- HRV (30%): drop below baseline, graduated penalty bands
- RHR (20%): elevation above baseline, gentler bands
- Sleep (30%): precomputed sleep score, else duration vs sleep baseline
- Respiratory (10%): stability around baseline, elevated worse than suppressed
- Form (10%): ATL/CTL ratio minus a penalty for the day's training stress

Components without data show a neutral 50 and their weight moves to the rest.
Confounder detectors (illness, alcohol) run on the weighted score.
"""

import logging
from datetime import date
from typing import Dict, Optional, Sequence

from .baselines import compute_baselines, index_by_date
from .config import BaselineConfig, RecoveryConfig
from .confounders import ConfounderDetector, default_detectors, run_detectors
from .models import (
    BaselineSet,
    DailyMetric,
    RecoveryBand,
    RecoveryResult,
    TrainingLoadPoint,
)
from .training_load import calculate_training_load, from_daily_metrics, latest_load
from .weighting import NEUTRAL_SCORE, build_sub_score_set, clamp_score, truncate_score

logger = logging.getLogger(__name__)


def banded_score(
    deviation: float,
    cut_points: Sequence[float],
    cut_scores: Sequence[float],
    tail_slope: float,
) -> int:
    """
    Graduated penalty for an adverse deviation (fraction, positive = worse).

    Linear within each band, from 100 at no deviation down to the score at
    each cut point; past the last cut point the score falls by `tail_slope`
    per unit of deviation until it reaches 0. Never drops below the score at
    the end of the band it is in.
    """
    if deviation <= 0:
        return 100

    prev_cut, prev_score = 0.0, 100.0
    for cut, score in zip(cut_points, cut_scores):
        if deviation <= cut:
            value = prev_score - (deviation - prev_cut) * (prev_score - score) / (cut - prev_cut)
            return max(int(score), truncate_score(value))
        prev_cut, prev_score = cut, score

    return max(0, truncate_score(prev_score - (deviation - prev_cut) * tail_slope))


def calculate_hrv_score(
    hrv: Optional[float],
    baseline: Optional[float],
    config: Optional[RecoveryConfig] = None,
) -> Optional[int]:
    """HRV component, None when today's HRV or its baseline is missing."""
    config = config or RecoveryConfig()
    if hrv is None or baseline is None or baseline <= 0:
        return None
    drop = (baseline - hrv) / baseline
    return banded_score(drop, config.hrv_cut_points, config.hrv_cut_scores, config.hrv_tail_slope)


def calculate_rhr_score(
    rhr: Optional[float],
    baseline: Optional[float],
    config: Optional[RecoveryConfig] = None,
) -> Optional[int]:
    """RHR component; lower than baseline is good, so only elevation is penalized."""
    config = config or RecoveryConfig()
    if rhr is None or baseline is None or baseline <= 0:
        return None
    elevation = (rhr - baseline) / baseline
    return banded_score(elevation, config.rhr_cut_points, config.rhr_cut_scores, config.rhr_tail_slope)


def calculate_sleep_component(
    sleep_score: Optional[float],
    sleep_hours: Optional[float],
    baseline_hours: Optional[float],
) -> Optional[int]:
    """Comprehensive sleep score if present, else hours slept vs typical hours."""
    if sleep_score is not None:
        return int(clamp_score(sleep_score))
    if sleep_hours is None or baseline_hours is None or baseline_hours <= 0:
        return None
    return truncate_score(min(100.0, sleep_hours / baseline_hours * 100))


def calculate_respiratory_score(
    rate: Optional[float],
    baseline: Optional[float],
    config: Optional[RecoveryConfig] = None,
) -> Optional[int]:
    """
    Respiratory component with directional awareness.

    Elevated respiration is a stronger illness/stress signal than suppressed
    respiration, so it is penalized harder.
    """
    config = config or RecoveryConfig()
    if rate is None or baseline is None or baseline <= 0:
        return None

    change = (rate - baseline) / baseline
    stable = config.respiratory_stable_pct

    if change > config.respiratory_elevated_pct:
        return max(0, int(50 - change * 200))
    elif change > stable:
        return max(50, int(100 - (change - stable) * 500))
    elif change >= -stable:
        return 100
    elif change >= -config.respiratory_suppressed_pct:
        return max(70, int(100 - (abs(change) - stable) * 300))
    else:
        return max(40, int(70 - (abs(change) - config.respiratory_suppressed_pct) * 200))


def calculate_tss_penalty(tss: Optional[float], config: Optional[RecoveryConfig] = None) -> float:
    """
    Points taken off the form component for the day's training stress.

    - Easy (< 50): no penalty
    - Moderate (50-100): 0 -> 10
    - Hard (100-200): 10 -> 25
    - Very hard (200-250): 25 -> cap
    - Beyond: capped
    """
    config = config or RecoveryConfig()
    if tss is None or tss < config.tss_easy:
        return 0.0
    if tss < config.tss_moderate:
        span = config.tss_moderate - config.tss_easy
        return (tss - config.tss_easy) * config.tss_penalty_moderate / span
    if tss < config.tss_hard:
        span = config.tss_hard - config.tss_moderate
        step = config.tss_penalty_hard - config.tss_penalty_moderate
        return config.tss_penalty_moderate + (tss - config.tss_moderate) * step / span
    if tss < config.tss_very_hard:
        span = config.tss_very_hard - config.tss_hard
        step = config.tss_penalty_cap - config.tss_penalty_hard
        return config.tss_penalty_hard + (tss - config.tss_hard) * step / span
    return config.tss_penalty_cap


def calculate_form_score(
    load: Optional[TrainingLoadPoint],
    recent_tss: Optional[float] = None,
    config: Optional[RecoveryConfig] = None,
) -> Optional[int]:
    """
    Form component from the fatigue/fitness ratio.

    ATL below CTL (fresh) scores 100, falling to 50 at a ratio of 1.5 and
    further beyond. Needs CTL > 0.
    """
    config = config or RecoveryConfig()
    if load is None or load.ctl <= 0:
        return None

    ratio = load.atl / load.ctl
    if ratio < config.form_fresh_ratio:
        base_score = 100
    elif ratio < config.form_fatigued_ratio:
        base_score = max(50, int(100 - (ratio - config.form_fresh_ratio) * 100))
    else:
        base_score = max(0, int(50 - (ratio - config.form_fatigued_ratio) * 50))

    penalty = calculate_tss_penalty(recent_tss, config)
    return max(0, int(base_score - penalty))


def get_recovery_band(score: int) -> RecoveryBand:
    if score >= 80:
        return RecoveryBand.OPTIMAL
    elif score >= 60:
        return RecoveryBand.GOOD
    elif score >= 40:
        return RecoveryBand.FAIR
    else:
        return RecoveryBand.POOR


def calculate_recovery_score(
    today: DailyMetric,
    baselines: BaselineSet,
    load: Optional[TrainingLoadPoint] = None,
    recent_tss: Optional[float] = None,
    detectors: Optional[Sequence[ConfounderDetector]] = None,
    config: Optional[RecoveryConfig] = None,
) -> RecoveryResult:
    """
    Calculate the recovery score for one day.

    Args:
        today: The day's metrics
        baselines: Personal baselines as of that day
        load: Training load point for the form component
        recent_tss: Training stress used for the form penalty; defaults to
            the day's own training stress
        detectors: Confounder detectors, defaults to illness then alcohol
        config: Weights and penalty bands

    Returns:
        RecoveryResult; LIMITED_DATA with the neutral score when no component
        has data
    """
    config = config or RecoveryConfig()
    if detectors is None:
        detectors = default_detectors()
    if recent_tss is None:
        recent_tss = today.training_stress

    scores: Dict[str, Optional[int]] = {
        "hrv": calculate_hrv_score(today.hrv, baselines.hrv.mean, config),
        "rhr": calculate_rhr_score(today.rhr, baselines.rhr.mean, config),
        "sleep": calculate_sleep_component(today.sleep_score, today.sleep_hours, baselines.sleep_hours.mean),
        "respiratory": calculate_respiratory_score(
            today.respiratory_rate, baselines.respiratory_rate.mean, config
        ),
        "form": calculate_form_score(load, recent_tss, config),
    }
    available = {name: score is not None for name, score in scores.items()}
    sub_scores = build_sub_score_set(
        {name: score for name, score in scores.items() if score is not None},
        available,
        config.weights(),
    )

    weighted = sub_scores.weighted_total()
    if weighted is None:
        logger.debug("No recovery components available on %s", today.date)
        return RecoveryResult(
            date=today.date,
            score=NEUTRAL_SCORE,
            band=RecoveryBand.LIMITED_DATA,
            sub_scores=sub_scores,
        )

    adjustments = run_detectors(detectors, today, baselines, sub_scores)
    penalty = sum(a.penalty for a in adjustments if a.applied)

    score = int(clamp_score(truncate_score(weighted - penalty)))

    logger.debug(
        "Recovery %d on %s (weighted %.1f, confounder penalty %.1f)",
        score, today.date, weighted, penalty,
    )
    return RecoveryResult(
        date=today.date,
        score=score,
        band=get_recovery_band(score),
        sub_scores=sub_scores,
        adjustments=adjustments,
    )


def score_recovery(
    history: Sequence[DailyMetric],
    as_of: date,
    load_points: Sequence[TrainingLoadPoint] = (),
    recent_tss: Optional[float] = None,
    detectors: Optional[Sequence[ConfounderDetector]] = None,
    config: Optional[RecoveryConfig] = None,
    baseline_config: Optional[BaselineConfig] = None,
) -> RecoveryResult:
    """
    Score recovery for `as_of` straight from daily history.

    Baselines come from the days before `as_of`. Without `load_points` the
    training load is folded from the history's training stress.
    """
    today = index_by_date(history).get(as_of) or DailyMetric(date=as_of)
    baselines = compute_baselines(history, as_of, config=baseline_config)

    if not load_points:
        past = [m for m in history if m.date <= as_of]
        load_points = calculate_training_load(from_daily_metrics(past), end=as_of)
    load = latest_load(load_points, as_of)

    return calculate_recovery_score(
        today,
        baselines,
        load=load,
        recent_tss=recent_tss,
        detectors=detectors,
        config=config,
    )
