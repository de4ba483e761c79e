"""Personal baseline calculations for all metrics.

Every score in this package compares today against the athlete's own recent
history: "your HRV vs *your* 7-day avg, not 'normal'".

Key concepts:
- Trailing rolling averages over the days strictly before the scored day
- A baseline needs at least 3 contributing days, otherwise it is unavailable
- Direction indicators and HRV stability relative to the personal baseline
"""

import logging
import statistics
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from .config import BaselineConfig
from .models import (
    Baseline,
    BaselineSet,
    DailyMetric,
    DirectionIndicator,
    HRVTrendDirection,
)

logger = logging.getLogger(__name__)

TRACKED_FIELDS = ("hrv", "rhr", "sleep_hours", "sleep_score", "respiratory_rate")


def index_by_date(history: Sequence[DailyMetric]) -> Dict[date, DailyMetric]:
    """Map each date to its metric; a later duplicate replaces an earlier one."""
    return {metric.date: metric for metric in history}


def values_before(
    history: Sequence[DailyMetric],
    as_of: date,
    field: str,
    days: int = 7,
) -> List[Optional[float]]:
    """Get a metric's values for the `days` calendar days before `as_of`.

    Returns:
        List of values (None where missing), ordered from most recent to oldest
        and excluding `as_of` itself
    """
    by_date = index_by_date(history)
    values: List[Optional[float]] = []
    for offset in range(1, days + 1):
        metric = by_date.get(as_of - timedelta(days=offset))
        values.append(getattr(metric, field) if metric is not None else None)
    return values


def calculate_rolling_average(
    values: Sequence[Optional[float]],
    days: int = 7,
    min_samples: int = 3,
) -> Optional[float]:
    """Calculate rolling average for the last N days.

    Args:
        values: List of values, most recent first (may contain None)
        days: Number of days to include in average
        min_samples: Minimum non-missing values required

    Returns:
        Unrounded rolling average or None if insufficient data
    """
    valid_values = [v for v in values[:days] if v is not None]

    if len(valid_values) < min_samples:
        return None

    return sum(valid_values) / len(valid_values)


def compute_baselines(
    history: Sequence[DailyMetric],
    as_of: date,
    window_days: Optional[int] = None,
    config: Optional[BaselineConfig] = None,
) -> BaselineSet:
    """Calculate trailing baselines for every tracked metric.

    The window is the `window_days` calendar days strictly before `as_of`, so
    today's values never influence the baseline they are compared against.
    """
    config = config or BaselineConfig()
    window = window_days or config.window_days

    baselines: Dict[str, Baseline] = {}
    for field in TRACKED_FIELDS:
        values = values_before(history, as_of, field, window)
        sample_count = sum(1 for v in values if v is not None)
        mean = calculate_rolling_average(values, window, config.min_samples)
        if mean is None:
            logger.debug(
                "Baseline %s unavailable on %s: %d of %d days",
                field, as_of, sample_count, config.min_samples,
            )
            baselines[field] = Baseline.unavailable(sample_count, window)
        else:
            baselines[field] = Baseline(mean=mean, sample_count=sample_count, window_days=window)

    return BaselineSet(as_of=as_of, **baselines)


def calculate_direction(
    current: Optional[float],
    baseline: Optional[float],
    threshold_pct: float = 5.0,
    inverse: bool = False,
) -> Optional[DirectionIndicator]:
    """Calculate direction indicator comparing current value to baseline.

    Args:
        current: Current value
        baseline: Baseline value to compare against
        threshold_pct: Percentage change required to register as up/down (default 5%)
        inverse: If True, lower is better (e.g., for RHR)

    Returns:
        DirectionIndicator or None if insufficient data
    """
    if current is None or baseline is None or baseline == 0:
        return None

    change_pct = ((current - baseline) / baseline) * 100

    if abs(change_pct) < threshold_pct:
        direction = "stable"
    elif change_pct > 0:
        direction = "down" if inverse else "up"
    else:
        direction = "up" if inverse else "down"

    return DirectionIndicator(
        direction=direction,
        change_pct=round(change_pct, 1),
        baseline=round(baseline, 2),
        current=round(current, 2),
    )


def calculate_hrv_cv(values: Sequence[Optional[float]], days: int = 7) -> Optional[float]:
    """
    Calculate Coefficient of Variation (CV%) of recent HRV.

    CV% = (std_dev / mean) * 100

    Lower CV indicates more stable HRV, which is generally positive.
    Typical CV for HRV is 5-15%.
    """
    valid_values = [v for v in values[:days] if v is not None]
    if len(valid_values) < 3:
        return None

    mean_val = statistics.mean(valid_values)
    if mean_val == 0:
        return None

    return round(statistics.stdev(valid_values) / mean_val * 100, 1)


def get_hrv_stability(cv: Optional[float]) -> Optional[str]:
    """Classify HRV stability from its coefficient of variation."""
    if cv is None:
        return None
    if cv < 5:
        return "excellent"
    if cv < 10:
        return "good"
    if cv < 15:
        return "moderate"
    return "poor"


def detect_hrv_trend(
    history: Sequence[DailyMetric],
    as_of: date,
    config: Optional[BaselineConfig] = None,
) -> Optional[HRVTrendDirection]:
    """Compare the short-term HRV average against the long-term one.

    Returns:
        IMPROVING when the short window is more than `trend_threshold_pct`
        above the long one, DECLINING when that far below, STABLE otherwise,
        or None if either window lacks data.
    """
    config = config or BaselineConfig()
    values = values_before(history, as_of, "hrv", config.long_window_days)

    short_avg = calculate_rolling_average(values, config.window_days, config.min_samples)
    long_avg = calculate_rolling_average(values, config.long_window_days, config.min_samples)
    if short_avg is None or not long_avg:
        return None

    change_pct = (short_avg - long_avg) / long_avg * 100
    if change_pct > config.trend_threshold_pct:
        return HRVTrendDirection.IMPROVING
    if change_pct < -config.trend_threshold_pct:
        return HRVTrendDirection.DECLINING
    return HRVTrendDirection.STABLE
