"""Training phase detection from weekly volume and intensity distribution."""

import logging
from datetime import date
from typing import Iterable, Optional

from .config import PhaseConfig
from .exceptions import ValidationError
from .models import IntensityDistribution, PhaseResult, TrainingPhase
from .training_load import DailyLoad, weekly_stress_total

logger = logging.getLogger(__name__)

PHASE_RECOMMENDATIONS = {
    TrainingPhase.BASE: "Building aerobic base. Keep most sessions easy and add volume gradually.",
    TrainingPhase.BUILD: "Building fitness. Balance hard sessions with easy days to absorb the work.",
    TrainingPhase.PEAK: "High-intensity block. Protect recovery and limit total volume.",
    TrainingPhase.RECOVERY: "Reduced load. Use this time to recover fully before the next block.",
    TrainingPhase.TRANSITION: "Mixed training pattern. Choose a focus for the coming weeks.",
}


def _check_pct(value: float, field: str) -> None:
    if not 0 <= value <= 100:
        raise ValidationError(
            f"{field} must be between 0 and 100",
            field=field,
            details={"value": value},
        )


def detect_phase(
    weekly_tss: float,
    low_intensity_pct: float,
    high_intensity_pct: float,
    config: Optional[PhaseConfig] = None,
) -> PhaseResult:
    """
    Detect the current training phase.

    Rules are checked in priority order, first match wins:
    1. Base: mostly easy (> 70% low intensity) at high volume (> 300 TSS)
    2. Recovery: low volume (< 200 TSS)
    3. Peak: > 25% high intensity
    4. Build: 15-25% high intensity at >= 300 TSS
    5. Transition: everything else

    Args:
        weekly_tss: Training stress over the last 7 days
        low_intensity_pct: % of time in Z1-Z2
        high_intensity_pct: % of time in Z4-Z5

    Raises:
        ValidationError: If a percentage is outside [0, 100]
    """
    config = config or PhaseConfig()
    _check_pct(low_intensity_pct, "low_intensity_pct")
    _check_pct(high_intensity_pct, "high_intensity_pct")

    if low_intensity_pct > config.base_low_intensity_pct and weekly_tss > config.base_min_weekly_tss:
        phase = TrainingPhase.BASE
        confidence = min(low_intensity_pct / 100, config.base_max_confidence)
    elif weekly_tss < config.recovery_max_weekly_tss:
        phase = TrainingPhase.RECOVERY
        confidence = config.recovery_confidence
    elif high_intensity_pct > config.peak_high_intensity_pct:
        phase = TrainingPhase.PEAK
        confidence = min(high_intensity_pct / config.peak_confidence_divisor, config.peak_max_confidence)
    elif (
        config.build_min_high_intensity_pct <= high_intensity_pct <= config.peak_high_intensity_pct
        and weekly_tss >= config.build_min_weekly_tss
    ):
        phase = TrainingPhase.BUILD
        confidence = config.build_confidence
    else:
        phase = TrainingPhase.TRANSITION
        confidence = config.transition_confidence

    logger.debug(
        "Phase %s (confidence %.2f) from weekly TSS %.0f, low %.0f%%, high %.0f%%",
        phase.value, confidence, weekly_tss, low_intensity_pct, high_intensity_pct,
    )
    return PhaseResult(
        phase=phase,
        confidence=confidence,
        weekly_tss=max(0.0, weekly_tss),
        low_intensity_pct=low_intensity_pct,
        high_intensity_pct=high_intensity_pct,
        recommendation=PHASE_RECOMMENDATIONS[phase],
    )


def detect_phase_from_history(
    daily_loads: Iterable[DailyLoad],
    as_of: date,
    zone_distribution: IntensityDistribution,
    config: Optional[PhaseConfig] = None,
) -> PhaseResult:
    """Detect the phase from the week's stress ending on `as_of` and its zone distribution."""
    return detect_phase(
        weekly_stress_total(daily_loads, as_of),
        zone_distribution.low_intensity_pct,
        zone_distribution.high_intensity_pct,
        config,
    )
