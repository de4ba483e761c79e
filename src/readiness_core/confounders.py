"""Confounder detection for the recovery score.

Illness and alcohol both suppress HRV and raise resting heart rate, which
would otherwise read as poor recovery from training. Detectors run in order
after the weighted score is computed; each sees the adjustments produced
before it, so an illness finding can suppress the alcohol penalty.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .config import AlcoholConfig
from .models import (
    BaselineSet,
    ConfounderAdjustment,
    ConfounderKind,
    DailyMetric,
    SubScoreSet,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfounderContext:
    """Everything a detector may look at for one day."""

    today: DailyMetric
    baselines: BaselineSet
    sub_scores: SubScoreSet
    prior: Tuple[ConfounderAdjustment, ...] = ()

    def has_prior(self, kind: ConfounderKind) -> bool:
        return any(a.kind == kind for a in self.prior)


class ConfounderDetector(ABC):
    """Recognizes one non-training cause of suppressed recovery."""

    kind: ConfounderKind

    @abstractmethod
    def evaluate(self, context: ConfounderContext) -> Optional[ConfounderAdjustment]:
        """Return an adjustment, or None when the confounder does not apply."""


class IllnessConfounderDetector(ConfounderDetector):
    """Records a host-supplied illness flag.

    The illness penalty itself is already in the HRV/RHR components, so this
    adjustment subtracts nothing; it exists to explain the day and to keep
    later detectors from double counting the same signals.
    """

    kind = ConfounderKind.ILLNESS

    def evaluate(self, context: ConfounderContext) -> Optional[ConfounderAdjustment]:
        if not context.today.illness_suspected:
            return None
        logger.debug("Illness suspected on %s, suppressing alcohol detection", context.today.date)
        return ConfounderAdjustment(
            kind=self.kind,
            applied=False,
            penalty=0.0,
            confidence=1.0,
            reason="Illness suspected: alcohol detection suppressed, low recovery attributed to illness",
        )


class AlcoholConfounderDetector(ConfounderDetector):
    """Multi-signal alcohol signature.

    Confidence (0-100) builds from:
    1. HRV suppression tiers, which also set the base penalty
    2. Poor sleep score, and a very low one as a proxy for deep-sleep loss
    3. Elevated resting heart rate (low RHR component score)
    4. Stable respiration (alcohol) vs elevated respiration (illness)
    5. Weekend night, taken from the metric's own date
    """

    kind = ConfounderKind.ALCOHOL

    def __init__(self, config: Optional[AlcoholConfig] = None):
        self.config = config or AlcoholConfig()

    def evaluate(self, context: ConfounderContext) -> Optional[ConfounderAdjustment]:
        today = context.today
        cfg = self.config

        if today.illness_suspected or context.has_prior(ConfounderKind.ILLNESS):
            return None
        if not today.has_sleep_data:
            logger.debug("Skipping alcohol detection on %s: no sleep data", today.date)
            return None

        hrv_base = context.baselines.hrv.mean
        if today.hrv is None or hrv_base is None or hrv_base <= 0:
            return None

        hrv_drop_pct = (hrv_base - today.hrv) / hrv_base * 100
        confidence = 0.0
        base_penalty = 0.0
        for drop_pct, points, penalty in cfg.hrv_tiers:
            if hrv_drop_pct > drop_pct:
                confidence += points
                base_penalty = penalty
                break

        # No HRV suppression, unlikely to be alcohol
        if confidence <= 0:
            return None

        sleep_score = today.sleep_score
        if sleep_score is not None:
            if sleep_score < cfg.very_poor_sleep_score:
                confidence += 20.0
            elif sleep_score < cfg.poor_sleep_score:
                confidence += 10.0
            if sleep_score < cfg.deep_sleep_suppression_score:
                confidence += 15.0

        rhr = context.sub_scores.get("rhr")
        rhr_score = rhr.score if rhr is not None and rhr.available else 100
        if rhr_score < cfg.rhr_strong_elevation_score:
            confidence += 15.0
        elif rhr_score < cfg.rhr_moderate_elevation_score:
            confidence += 10.0

        resp_base = context.baselines.respiratory_rate.mean
        if today.respiratory_rate is not None and resp_base:
            rr_change = (today.respiratory_rate - resp_base) / resp_base
            if abs(rr_change) < cfg.stable_respiration:
                confidence += 15.0
            elif rr_change > cfg.elevated_respiration:
                confidence -= 20.0

        weekend = today.date.weekday() >= 5
        if weekend:
            confidence += 10.0

        confidence = max(0.0, min(100.0, confidence))
        threshold = (
            cfg.confidence_threshold_no_sleep_score if sleep_score is None
            else cfg.confidence_threshold
        )

        if confidence < threshold:
            logger.debug(
                "Alcohol signature on %s below threshold (%.0f < %.0f)",
                today.date, confidence, threshold,
            )
            return ConfounderAdjustment(
                kind=self.kind,
                applied=False,
                penalty=0.0,
                confidence=confidence / 100,
                reason=f"HRV {hrv_drop_pct:.0f}% below baseline, alcohol confidence too low",
            )

        penalty = base_penalty * confidence / 100
        if rhr_score < cfg.rhr_strong_elevation_score:
            penalty *= cfg.rhr_strong_penalty_multiplier
        elif rhr_score < cfg.rhr_moderate_elevation_score:
            penalty *= cfg.rhr_moderate_penalty_multiplier

        if weekend and confidence > cfg.weekend_min_confidence:
            penalty *= cfg.weekend_amplifier

        # Good sleep despite drinking lessens the impact
        if sleep_score is not None:
            if sleep_score >= cfg.excellent_sleep_score:
                penalty *= 1 - cfg.excellent_sleep_mitigation
            elif sleep_score >= cfg.good_sleep_score:
                penalty *= 1 - cfg.good_sleep_mitigation

        penalty = round(min(penalty, cfg.max_penalty), 2)
        logger.info(
            "Alcohol penalty on %s: %.1f points (confidence %.0f%%, HRV -%.0f%%)",
            today.date, penalty, confidence, hrv_drop_pct,
        )
        return ConfounderAdjustment(
            kind=self.kind,
            applied=True,
            penalty=penalty,
            confidence=confidence / 100,
            reason=f"HRV {hrv_drop_pct:.0f}% below baseline with alcohol signature",
        )


def default_detectors(alcohol_config: Optional[AlcoholConfig] = None) -> Tuple[ConfounderDetector, ...]:
    """Illness first, so it can suppress the alcohol penalty."""
    return (IllnessConfounderDetector(), AlcoholConfounderDetector(alcohol_config))


def run_detectors(
    detectors: Sequence[ConfounderDetector],
    today: DailyMetric,
    baselines: BaselineSet,
    sub_scores: SubScoreSet,
) -> Tuple[ConfounderAdjustment, ...]:
    """Run detectors in order, passing each the adjustments made so far."""
    adjustments: List[ConfounderAdjustment] = []
    for detector in detectors:
        context = ConfounderContext(
            today=today,
            baselines=baselines,
            sub_scores=sub_scores,
            prior=tuple(adjustments),
        )
        adjustment = detector.evaluate(context)
        if adjustment is not None:
            adjustments.append(adjustment)
    return tuple(adjustments)
