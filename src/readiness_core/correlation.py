"""Statistical correlation between two metric series."""

import math
from datetime import date
from typing import Mapping, Optional, Sequence

from .exceptions import SeriesLengthMismatchError, ValidationError
from .models import CorrelationResult, Significance, Trend

MIN_SAMPLES = 3

SIGNIFICANCE_LABELS = {
    Significance.STRONG: "Strong",
    Significance.MODERATE: "Moderate",
    Significance.WEAK: "Weak",
    Significance.NONE: "No",
}


def get_significance(r: float) -> Significance:
    abs_r = abs(r)
    if abs_r >= 0.7:
        return Significance.STRONG
    elif abs_r >= 0.5:
        return Significance.MODERATE
    elif abs_r >= 0.3:
        return Significance.WEAK
    else:
        return Significance.NONE


def get_trend(r: float) -> Trend:
    """Sign of r with a +/-0.1 dead band so noise near zero is not a trend."""
    if r > 0.1:
        return Trend.POSITIVE
    elif r < -0.1:
        return Trend.NEGATIVE
    else:
        return Trend.NONE


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> Optional[CorrelationResult]:
    """
    Calculate Pearson correlation coefficient between two variables.

    r = sum(dx * dy) / sqrt(sum(dx^2) * sum(dy^2))

    Returns:
        CorrelationResult, or None when there are fewer than 3 pairs or either
        series has zero variance (the correlation is undefined, not zero)

    Raises:
        SeriesLengthMismatchError: If x and y differ in length
        ValidationError: If either series holds NaN or infinity
    """
    if len(x) != len(y):
        raise SeriesLengthMismatchError(len(x), len(y))
    for name, series in (("x", x), ("y", y)):
        for index, value in enumerate(series):
            if not math.isfinite(value):
                raise ValidationError(
                    f"Series {name} has a non-finite value at index {index}",
                    field=name,
                    details={"index": index, "value": str(value)},
                )
    n = len(x)
    if n < MIN_SAMPLES:
        return None
    # Constant series; checked directly since the float mean may not be exact
    if len(set(x)) == 1 or len(set(y)) == 1:
        return None

    mean_x = sum(x) / n
    mean_y = sum(y) / n

    sum_xy = 0.0
    sum_x2 = 0.0
    sum_y2 = 0.0
    for xi, yi in zip(x, y):
        dev_x = xi - mean_x
        dev_y = yi - mean_y
        sum_xy += dev_x * dev_y
        sum_x2 += dev_x * dev_x
        sum_y2 += dev_y * dev_y

    if sum_x2 <= 0 or sum_y2 <= 0:
        return None

    r = sum_xy / math.sqrt(sum_x2 * sum_y2)
    r = round(max(-1.0, min(1.0, r)), 4)

    return CorrelationResult(
        coefficient=r,
        r_squared=round(r * r, 4),
        sample_size=n,
        significance=get_significance(r),
        trend=get_trend(r),
    )


def correlate_series(
    x_by_date: Mapping[date, Optional[float]],
    y_by_date: Mapping[date, Optional[float]],
) -> Optional[CorrelationResult]:
    """Correlate two date-keyed series over the dates where both have a value."""
    common = sorted(
        d for d in x_by_date.keys() & y_by_date.keys()
        if x_by_date[d] is not None and y_by_date[d] is not None
    )
    return pearson_correlation(
        [x_by_date[d] for d in common],
        [y_by_date[d] for d in common],
    )


def generate_insight(result: CorrelationResult, x_name: str, y_name: str) -> str:
    """Generate insight text from correlation result."""
    r = result.coefficient
    percent = int(abs(r) * 100)
    label = SIGNIFICANCE_LABELS[result.significance]

    if result.significance == Significance.STRONG:
        if r > 0:
            return f"{label} positive correlation ({percent}%). Higher {x_name} strongly predicts higher {y_name}."
        return f"{label} negative correlation ({percent}%). Higher {x_name} strongly predicts lower {y_name}."
    if result.significance == Significance.MODERATE:
        direction = "positive" if r > 0 else "negative"
        return f"{label} correlation ({percent}%). {x_name} has a noticeable {direction} effect on {y_name}."
    if result.significance == Significance.WEAK:
        return f"Weak correlation ({percent}%). {x_name} has minimal impact on {y_name}."
    return f"No significant correlation. {x_name} and {y_name} appear independent."
