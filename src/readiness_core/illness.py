"""Multi-signal illness indicator.

Non-diagnostic: flags days where several physiological signals deviate from
the personal baseline in the pattern typical of the body fighting something
off. Hosts use the result to set ``DailyMetric.illness_suspected``, which in
turn stops the recovery scorer from blaming the same signals on alcohol.
"""

import logging
from typing import List, Optional

from .config import IllnessConfig
from .models import (
    BaselineSet,
    DailyMetric,
    IllnessIndicator,
    IllnessSeverity,
    IllnessSignal,
    IllnessSignalKind,
)

logger = logging.getLogger(__name__)

# Weight of each signal's deviation in the severity average
SPIKE_WEIGHT = 1.2
SLEEP_WEIGHT = 0.7
RESPIRATORY_WEIGHT = 0.7
ACTIVITY_WEIGHT = 0.3

SIGNAL_CONTEXT = {
    IllnessSignalKind.HRV_SPIKE: "Elevated HRV detected. ",
    IllnessSignalKind.HRV_DROP: "Suppressed HRV detected. ",
    IllnessSignalKind.ELEVATED_RHR: "Elevated resting heart rate detected. ",
    IllnessSignalKind.SLEEP_DISRUPTION: "Sleep disruption detected. ",
    IllnessSignalKind.RESPIRATORY_CHANGE: "Respiratory changes detected. ",
    IllnessSignalKind.ACTIVITY_DROP: "Activity levels reduced. ",
}

SEVERITY_ADVICE = {
    IllnessSeverity.LOW: "Monitor your recovery metrics. Consider taking it easy if symptoms persist.",
    IllnessSeverity.MODERATE: "Your body is showing stress signals. Prioritize rest and recovery today.",
    IllnessSeverity.HIGH: "Rest is strongly recommended. Consult a healthcare provider if you feel unwell.",
}


def _deviation_pct(value: Optional[float], baseline: Optional[float]) -> Optional[float]:
    if value is None or baseline is None or baseline <= 0:
        return None
    return (value - baseline) / baseline * 100


def generate_recommendation(severity: IllnessSeverity, signals: List[IllnessSignal]) -> str:
    """Recommendation led by the signal with the largest deviation."""
    context = ""
    if signals:
        primary = max(signals, key=lambda s: abs(s.deviation_pct))
        context = SIGNAL_CONTEXT[primary.kind]
    return context + SEVERITY_ADVICE[severity]


def detect_illness(
    today: DailyMetric,
    baselines: BaselineSet,
    activity_level: Optional[float] = None,
    activity_baseline: Optional[float] = None,
    config: Optional[IllnessConfig] = None,
) -> Optional[IllnessIndicator]:
    """
    Detect potential illness from deviations against personal baselines.

    Signals:
    - HRV drop below baseline, or a large spike above it (inflammation can
      trigger excessive vagal tone)
    - Resting heart rate elevation
    - Sleep disruption: a large drop, or a mid-range score below baseline
    - Respiratory rate change in either direction
    - Activity drop

    Returns:
        IllnessIndicator when at least one signal fires and confidence reaches
        `min_confidence`, otherwise None
    """
    config = config or IllnessConfig()
    signals: List[IllnessSignal] = []
    weighted_deviation = 0.0

    def add(kind: IllnessSignalKind, deviation: float, value: float, baseline: float, weight: float) -> None:
        nonlocal weighted_deviation
        signals.append(IllnessSignal(kind=kind, deviation_pct=round(deviation, 1), value=value, baseline=baseline))
        weighted_deviation += abs(deviation) * weight

    hrv_base = baselines.hrv.mean
    hrv_dev = _deviation_pct(today.hrv, hrv_base)
    if hrv_dev is not None:
        if hrv_dev < -config.hrv_drop_pct:
            add(IllnessSignalKind.HRV_DROP, hrv_dev, today.hrv, hrv_base, 1.0)
        elif hrv_dev > config.hrv_spike_pct:
            add(IllnessSignalKind.HRV_SPIKE, hrv_dev, today.hrv, hrv_base, SPIKE_WEIGHT)

    rhr_base = baselines.rhr.mean
    rhr_dev = _deviation_pct(today.rhr, rhr_base)
    if rhr_dev is not None and rhr_dev > config.rhr_elevation_pct:
        add(IllnessSignalKind.ELEVATED_RHR, rhr_dev, today.rhr, rhr_base, 1.0)

    sleep_base = baselines.sleep_score.mean
    sleep_dev = _deviation_pct(today.sleep_score, sleep_base)
    if sleep_dev is not None:
        mid_range_below = 60 <= today.sleep_score < 85 and sleep_dev < 0
        if sleep_dev < -config.sleep_drop_pct or mid_range_below:
            add(IllnessSignalKind.SLEEP_DISRUPTION, sleep_dev, today.sleep_score, sleep_base, SLEEP_WEIGHT)

    resp_base = baselines.respiratory_rate.mean
    resp_dev = _deviation_pct(today.respiratory_rate, resp_base)
    if resp_dev is not None and abs(resp_dev) > config.respiratory_change_pct:
        add(IllnessSignalKind.RESPIRATORY_CHANGE, resp_dev, today.respiratory_rate, resp_base, RESPIRATORY_WEIGHT)

    activity_dev = _deviation_pct(activity_level, activity_baseline)
    if activity_dev is not None and activity_dev < -config.activity_drop_pct:
        add(IllnessSignalKind.ACTIVITY_DROP, activity_dev, activity_level, activity_baseline, ACTIVITY_WEIGHT)

    if not signals:
        return None

    avg_deviation = weighted_deviation / len(signals)
    if avg_deviation > 30 or len(signals) >= 4:
        severity = IllnessSeverity.HIGH
    elif avg_deviation > 20 or len(signals) >= 3:
        severity = IllnessSeverity.MODERATE
    else:
        severity = IllnessSeverity.LOW

    signal_confidence = min(len(signals) / 5.0, 1.0)
    deviation_confidence = min(avg_deviation / 50.0, 1.0)
    confidence = round(signal_confidence * 0.6 + deviation_confidence * 0.4, 3)

    if confidence < config.min_confidence:
        logger.debug(
            "Illness signals on %s below confidence threshold: %d signals, confidence %.2f",
            today.date, len(signals), confidence,
        )
        return None

    logger.info(
        "Illness indicator on %s: %s severity, %d signals, confidence %.2f",
        today.date, severity.value, len(signals), confidence,
    )
    return IllnessIndicator(
        date=today.date,
        severity=severity,
        confidence=confidence,
        signals=tuple(signals),
        recommendation=generate_recommendation(severity, signals),
    )
