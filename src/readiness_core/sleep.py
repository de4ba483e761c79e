"""Sleep score calculation and sleep need/debt.

The sleep score combines five components, each 0-100:

- Performance (30%): time asleep vs sleep need
- Efficiency (22%): time asleep vs time in bed
- Stage quality (32%): share of deep + REM sleep
- Disturbances (14%): wake events during the night
- Timing (2%): consistency of bed and wake times with the usual ones

Missing components are redistributed the same way as for recovery.
"""

import logging
import math
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .baselines import compute_baselines, index_by_date
from .config import SleepConfig
from .models import BaselineSet, DailyMetric, SleepBand, SleepResult, SleepSession
from .weighting import NEUTRAL_SCORE, build_sub_score_set, truncate_score

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def time_of_day_minutes(value: Union[datetime, time]) -> float:
    """Minutes since midnight."""
    return value.hour * 60 + value.minute + value.second / 60


def clock_difference_minutes(a: Union[datetime, time], b: Union[datetime, time]) -> float:
    """Shortest distance between two clock times, wrapping at midnight."""
    diff = abs(time_of_day_minutes(a) - time_of_day_minutes(b)) % MINUTES_PER_DAY
    return min(diff, MINUTES_PER_DAY - diff)


def typical_time_of_day(times: Sequence[datetime]) -> Optional[time]:
    """
    Circular mean of clock times.

    A plain average of 23:30 and 00:30 would be noon; averaging on the clock
    face gives midnight.
    """
    if not times:
        return None
    angles = [time_of_day_minutes(t) / MINUTES_PER_DAY * 2 * math.pi for t in times]
    x = sum(math.cos(a) for a in angles)
    y = sum(math.sin(a) for a in angles)
    if abs(x) < 1e-9 and abs(y) < 1e-9:
        return None
    minutes = (math.atan2(y, x) / (2 * math.pi) * MINUTES_PER_DAY) % MINUTES_PER_DAY
    minutes = int(round(minutes)) % MINUTES_PER_DAY
    return time(hour=minutes // 60, minute=minutes % 60)


def typical_sleep_times(sessions: Sequence[SleepSession]) -> Tuple[Optional[time], Optional[time]]:
    """Usual (bedtime, wake time) from past sessions."""
    bedtimes = [s.bedtime for s in sessions if s.bedtime is not None]
    wake_times = [s.wake_time for s in sessions if s.wake_time is not None]
    return typical_time_of_day(bedtimes), typical_time_of_day(wake_times)


# =============================================================================
# Components
# =============================================================================

def calculate_performance_score(
    duration_hours: Optional[float],
    need_hours: Optional[float],
) -> Optional[int]:
    if duration_hours is None or need_hours is None or need_hours <= 0:
        return None
    return truncate_score(min(100.0, duration_hours / need_hours * 100))


def calculate_efficiency_score(
    duration_hours: Optional[float],
    time_in_bed_hours: Optional[float],
) -> Optional[int]:
    if duration_hours is None or time_in_bed_hours is None or time_in_bed_hours <= 0:
        return None
    return int(min(100.0, duration_hours / time_in_bed_hours * 100))


def calculate_stage_quality_score(
    deep_hours: Optional[float],
    rem_hours: Optional[float],
    duration_hours: Optional[float],
    config: Optional[SleepConfig] = None,
) -> Optional[int]:
    """
    Deep + REM share of total sleep.

    40% or more is ideal (100). Between 30% and 40% scales 50 -> 100;
    below 30% scales linearly down from 50.
    """
    config = config or SleepConfig()
    if deep_hours is None or rem_hours is None or duration_hours is None or duration_hours <= 0:
        return None

    share = (deep_hours + rem_hours) / duration_hours
    target = config.stage_target_fraction
    floor = config.stage_floor_fraction

    if share >= target:
        return 100
    if share >= floor:
        return int(50 + (share - floor) / (target - floor) * 50)
    return int(min(50.0, share / floor * 50))


def calculate_disturbance_score(wake_events: Optional[int]) -> Optional[int]:
    """Fewer awakenings mean more restful sleep."""
    if wake_events is None:
        return None
    if wake_events <= 2:
        return 100
    elif wake_events <= 5:
        return 75
    elif wake_events <= 8:
        return 50
    else:
        return 25


def calculate_timing_score(
    bedtime: Optional[datetime],
    wake_time: Optional[datetime],
    typical_bedtime: Optional[time] = None,
    typical_wake_time: Optional[time] = None,
) -> Optional[int]:
    """Average deviation from the usual bed and wake times."""
    deviations: List[float] = []
    if bedtime is not None and typical_bedtime is not None:
        deviations.append(clock_difference_minutes(bedtime, typical_bedtime))
    if wake_time is not None and typical_wake_time is not None:
        deviations.append(clock_difference_minutes(wake_time, typical_wake_time))
    if not deviations:
        return None

    avg_deviation = sum(deviations) / len(deviations)
    if avg_deviation <= 30:
        return 100
    elif avg_deviation <= 60:
        return 75
    elif avg_deviation <= 90:
        return 50
    else:
        return 25


def get_sleep_band(score: int) -> SleepBand:
    if score >= 80:
        return SleepBand.OPTIMAL
    elif score >= 60:
        return SleepBand.GOOD
    elif score >= 40:
        return SleepBand.FAIR
    else:
        return SleepBand.PAY_ATTENTION


def calculate_sleep_score(
    session: SleepSession,
    baselines: Optional[BaselineSet] = None,
    sleep_need_hours: Optional[float] = None,
    typical_bedtime: Optional[time] = None,
    typical_wake_time: Optional[time] = None,
    config: Optional[SleepConfig] = None,
) -> SleepResult:
    """
    Calculate the sleep score for one night.

    Args:
        session: The night's sleep
        baselines: Supplies the sleep-duration baseline when no explicit need
        sleep_need_hours: Tonight's sleep need (see calculate_sleep_need)
        typical_bedtime: Usual bedtime for the timing component
        typical_wake_time: Usual wake time for the timing component
        config: Component weights and stage targets

    Returns:
        SleepResult; LIMITED_DATA with the neutral score when no component
        has data
    """
    config = config or SleepConfig()

    need = sleep_need_hours
    if need is None and baselines is not None:
        need = baselines.sleep_hours.mean

    scores: Dict[str, Optional[int]] = {
        "performance": calculate_performance_score(session.duration_hours, need),
        "efficiency": calculate_efficiency_score(session.duration_hours, session.time_in_bed_hours),
        "stage_quality": calculate_stage_quality_score(
            session.deep_sleep_hours, session.rem_sleep_hours, session.duration_hours, config
        ),
        "disturbances": calculate_disturbance_score(session.wake_events),
        "timing": calculate_timing_score(
            session.bedtime, session.wake_time, typical_bedtime, typical_wake_time
        ),
    }
    available = {name: score is not None for name, score in scores.items()}
    sub_scores = build_sub_score_set(
        {name: score for name, score in scores.items() if score is not None},
        available,
        config.weights(),
    )

    weighted = sub_scores.weighted_total()
    if weighted is None:
        logger.debug("No sleep components available on %s", session.date)
        return SleepResult(
            date=session.date,
            score=NEUTRAL_SCORE,
            band=SleepBand.LIMITED_DATA,
            sub_scores=sub_scores,
        )

    score = max(0, min(100, truncate_score(weighted)))
    return SleepResult(
        date=session.date,
        score=score,
        band=get_sleep_band(score),
        sub_scores=sub_scores,
    )


# =============================================================================
# Sleep need and debt
# =============================================================================

def calculate_sleep_need(
    base_sleep_need: float,
    yesterday_strain: float = 0.0,
    sleep_debt: float = 0.0,
) -> float:
    """Calculate tonight's personalized sleep target.

    Formula:
    - Base need (your personal average)
    - + Strain adjustment (higher strain = more sleep needed)
    - + Debt repayment (spread over 7 days)

    Args:
        base_sleep_need: Personal baseline sleep (hours)
        yesterday_strain: Yesterday's strain score (0-21)
        sleep_debt: Accumulated sleep debt (hours)

    Returns:
        Tonight's sleep target in hours
    """
    # ~3 min per strain point above 10
    strain_adjustment = max(0, (yesterday_strain - 10) * 0.05)

    # You can't fully repay sleep debt in one night
    debt_repayment = max(0, sleep_debt) / 7

    return round(base_sleep_need + strain_adjustment + debt_repayment, 2)


def calculate_sleep_debt(
    history: Sequence[DailyMetric],
    as_of: date,
    target_hours: Optional[float] = None,
    window_days: int = 7,
) -> Optional[float]:
    """Calculate accumulated sleep debt over recent days.

    Sums the shortfall against `target_hours` (or, without one, the personal
    sleep baseline) over the `window_days` nights ending on `as_of`.
    Nights without data add nothing.

    Returns:
        Sleep debt in hours (always >= 0), or None when there is no target
    """
    target = target_hours
    if target is None:
        target = compute_baselines(history, as_of).sleep_hours.mean
    if target is None:
        return None

    by_date = index_by_date(history)
    debt = 0.0
    for offset in range(window_days):
        metric = by_date.get(as_of - timedelta(days=offset))
        if metric is not None and metric.sleep_hours is not None:
            debt += max(0.0, target - metric.sleep_hours)
    return round(debt, 2)
