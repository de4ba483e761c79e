"""Proportional weight redistribution shared by the recovery and sleep scorers.

A component without data still appears in the result with the neutral score
of 50, but its weight is handed to the components that do have data in
proportion to their configured weights.
"""

import logging
from typing import Dict, Mapping

from .exceptions import ConfigurationError
from .models import SubScore, SubScoreSet

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50


def clamp_score(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def truncate_score(value: float) -> int:
    """Drop the fraction, after rounding away float drift so 99.9999999 stays 100."""
    return int(round(value, 6))


def rebalance_weights(
    weights: Mapping[str, float],
    available: Mapping[str, bool],
) -> Dict[str, float]:
    """Redistribute weight from unavailable components.

    Args:
        weights: Configured weight per component name
        available: Whether each component has data

    Returns:
        Weight per component: 0 for unavailable components, and the available
        ones scaled to sum to 1.0. All zeros when nothing is available.

    Raises:
        ConfigurationError: If a weight is negative or all weights are zero
    """
    if any(w < 0 for w in weights.values()):
        raise ConfigurationError("Weights must be non-negative", field="weights")
    if sum(weights.values()) <= 0:
        raise ConfigurationError("Weights must have a positive sum", field="weights")

    available_total = sum(w for name, w in weights.items() if available.get(name, False))
    if available_total <= 0:
        return {name: 0.0 for name in weights}

    return {
        name: (w / available_total if available.get(name, False) else 0.0)
        for name, w in weights.items()
    }


def build_sub_score_set(
    scores: Mapping[str, float],
    available: Mapping[str, bool],
    weights: Mapping[str, float],
) -> SubScoreSet:
    """Combine raw component scores into a SubScoreSet with rebalanced weights.

    Unavailable components are reported with the neutral score. Component
    order follows `weights`.
    """
    final_weights = rebalance_weights(weights, available)

    missing = [name for name in weights if not available.get(name, False)]
    if missing:
        logger.debug("Rebalancing weights, unavailable components: %s", ", ".join(missing))

    components = []
    for name in weights:
        is_available = available.get(name, False)
        raw = scores.get(name, NEUTRAL_SCORE) if is_available else NEUTRAL_SCORE
        components.append(
            SubScore(
                name=name,
                score=int(clamp_score(raw)),
                available=is_available,
                weight=final_weights[name],
            )
        )

    return SubScoreSet(components=tuple(components))
