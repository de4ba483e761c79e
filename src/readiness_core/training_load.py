"""Fitness-Fatigue model calculations (CTL, ATL, TSB, ACWR).

The Fitness-Fatigue (Banister) model uses two exponential moving averages:
- CTL (Chronic Training Load): 42-day EWMA representing "fitness"
- ATL (Acute Training Load): 7-day EWMA representing "fatigue"
- TSB (Training Stress Balance): CTL - ATL representing "form"
"""

import logging
import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import TrainingLoadConfig
from .exceptions import ConfigurationError
from .models import DailyMetric, FormState, TrainingLoadPoint

logger = logging.getLogger(__name__)

DailyLoad = Tuple[date, float]


def calculate_ewma(
    current_value: float,
    previous_ewma: float,
    time_constant: float,
) -> float:
    """
    Exponentially Weighted Moving Average.

    Uses the formula: EWMA_n = EWMA_{n-1} + (value - EWMA_{n-1}) * (1 - decay)
    where decay = e^(-1/time_constant)

    Args:
        current_value: Today's training load
        previous_ewma: Yesterday's EWMA value
        time_constant: Time constant in days (42 for CTL, 7 for ATL)

    Returns:
        New EWMA value
    """
    if time_constant <= 0:
        raise ConfigurationError(
            "Time constant must be positive",
            field="time_constant",
            details={"time_constant": time_constant},
        )
    decay = math.exp(-1 / time_constant)
    return previous_ewma + (current_value - previous_ewma) * (1 - decay)


def group_by_date(loads: Iterable[DailyLoad]) -> Dict[date, float]:
    """Sum training stress per date; several activities on one day add up."""
    totals: Dict[date, float] = defaultdict(float)
    for day, load in loads:
        totals[day] += load
    return dict(totals)


def from_daily_metrics(history: Sequence[DailyMetric]) -> List[DailyLoad]:
    """Extract (date, stress) pairs from daily metrics, treating missing stress as 0."""
    return [(m.date, m.training_stress or 0.0) for m in history]


def calculate_training_load(
    daily_loads: Iterable[DailyLoad],
    start: Optional[date] = None,
    end: Optional[date] = None,
    initial_ctl: float = 0.0,
    initial_atl: float = 0.0,
    config: Optional[TrainingLoadConfig] = None,
) -> List[TrainingLoadPoint]:
    """
    Calculate CTL, ATL and TSB for every day of a date range.

    Each point depends only on the previous point and that day's stress.
    Days without an entry count as zero stress and still get a point.

    Args:
        daily_loads: (date, load) pairs, in any order, duplicates summed
        start: First day to emit; defaults to the earliest load. Loads before
            it still warm up CTL/ATL.
        end: Last day to emit; defaults to the latest load. Loads after it are
            ignored.
        initial_ctl: Starting CTL value (for new users, use 0)
        initial_atl: Starting ATL value (for new users, use 0)
        config: Time constants

    Returns:
        List of TrainingLoadPoint, one per calendar day, oldest first
    """
    config = config or TrainingLoadConfig()
    totals = group_by_date(daily_loads)
    if not totals:
        return []

    first_day = min(totals)
    if start is not None:
        first_day = min(first_day, start)
    emit_from = start or first_day
    last_day = end or max(totals)

    if last_day < emit_from:
        return []

    results: List[TrainingLoadPoint] = []
    ctl = initial_ctl
    atl = initial_atl

    day = first_day
    while day <= last_day:
        load = totals.get(day, 0.0)
        ctl = calculate_ewma(load, ctl, config.ctl_time_constant)
        atl = calculate_ewma(load, atl, config.atl_time_constant)

        if day >= emit_from:
            results.append(
                TrainingLoadPoint(
                    date=day,
                    daily_load=load,
                    ctl=ctl,
                    atl=atl,
                    tsb=ctl - atl,
                )
            )
        day += timedelta(days=1)

    logger.debug(
        "Training load computed for %d days (%s to %s)",
        len(results), emit_from, last_day,
    )
    return results


def latest_load(
    points: Sequence[TrainingLoadPoint],
    as_of: Optional[date] = None,
) -> Optional[TrainingLoadPoint]:
    """
    Most recent point on or before `as_of`.

    With no eligible point the athlete has no training history, which is a
    zero point (CTL = ATL = TSB = 0) on `as_of`. Returns None only when there
    is neither a point nor a date to anchor one.
    """
    eligible = [p for p in points if as_of is None or p.date <= as_of]
    if eligible:
        return max(eligible, key=lambda p: p.date)
    if as_of is None:
        return None
    return TrainingLoadPoint.zero(as_of)


def weekly_stress_total(
    daily_loads: Iterable[DailyLoad],
    as_of: date,
    days: int = 7,
) -> float:
    """Total stress over the `days` days ending on `as_of` (inclusive)."""
    window_start = as_of - timedelta(days=days - 1)
    return sum(
        load for day, load in group_by_date(daily_loads).items()
        if window_start <= day <= as_of
    )


def calculate_acwr(point: TrainingLoadPoint, min_ctl: float = 10.0) -> float:
    """
    Acute:Chronic Workload Ratio (ATL / CTL).

    When CTL is at or below `min_ctl` the ratio is meaningless, so 1.0 is
    returned (treated as optimal for insufficient training history).
    """
    if point.ctl > min_ctl:
        return round(point.atl / point.ctl, 2)
    return 1.0


def determine_form_state(tsb: float) -> FormState:
    """
    Classify form from training stress balance.

    - > 0: Fresh
    - -10 to 0: Neutral
    - -25 to -10: Fatigued
    - < -25: Very fatigued
    """
    if tsb > 0:
        return FormState.FRESH
    elif tsb > -10:
        return FormState.NEUTRAL
    elif tsb > -25:
        return FormState.FATIGUED
    else:
        return FormState.VERY_FATIGUED
