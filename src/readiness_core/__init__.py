"""Readiness calculations from daily wellness and training data.

Pure functions over immutable pydantic models: no I/O, no clock reads.
"""

__version__ = "0.1.0"

from .baselines import (
    calculate_direction,
    calculate_hrv_cv,
    calculate_rolling_average,
    compute_baselines,
    detect_hrv_trend,
    get_hrv_stability,
)
from .config import Settings, get_settings
from .confounders import (
    AlcoholConfounderDetector,
    ConfounderContext,
    ConfounderDetector,
    IllnessConfounderDetector,
    default_detectors,
)
from .correlation import correlate_series, generate_insight, pearson_correlation
from .exceptions import (
    ConfigurationError,
    ErrorCode,
    ReadinessError,
    SeriesLengthMismatchError,
    ValidationError,
)
from .illness import detect_illness
from .models import *  # noqa: F401,F403
from .models import __all__ as _models_all
from .phase import detect_phase, detect_phase_from_history
from .readiness import (
    assess_readiness,
    assess_readiness_from_history,
    days_since_hard_session,
    quick_readiness,
)
from .recovery import calculate_recovery_score, score_recovery
from .risk import assess_from_history, assess_overtraining_risk, percent_deviation
from .sleep import calculate_sleep_debt, calculate_sleep_need, calculate_sleep_score
from .strain import (
    calculate_blended_trimp,
    calculate_cardio_load,
    calculate_non_exercise_load,
    calculate_recovery_factor,
    calculate_strain_score,
    calculate_strength_load,
    calculate_trimp,
    epoc_to_strain,
    trimp_to_epoc,
)
from .training_load import (
    calculate_acwr,
    calculate_training_load,
    determine_form_state,
    from_daily_metrics,
    group_by_date,
    latest_load,
    weekly_stress_total,
)
from .weighting import rebalance_weights
from .zones import HRZones, calculate_hr_zones_karvonen, intensity_distribution

__all__ = [
    "__version__",
    # Baselines
    "calculate_direction",
    "calculate_hrv_cv",
    "calculate_rolling_average",
    "compute_baselines",
    "detect_hrv_trend",
    "get_hrv_stability",
    # Config
    "Settings",
    "get_settings",
    # Confounders
    "AlcoholConfounderDetector",
    "ConfounderContext",
    "ConfounderDetector",
    "IllnessConfounderDetector",
    "default_detectors",
    # Correlation
    "correlate_series",
    "generate_insight",
    "pearson_correlation",
    # Errors
    "ConfigurationError",
    "ErrorCode",
    "ReadinessError",
    "SeriesLengthMismatchError",
    "ValidationError",
    # Illness
    "detect_illness",
    # Phase
    "detect_phase",
    "detect_phase_from_history",
    # Readiness
    "assess_readiness",
    "assess_readiness_from_history",
    "days_since_hard_session",
    "quick_readiness",
    # Recovery
    "calculate_recovery_score",
    "score_recovery",
    # Risk
    "assess_from_history",
    "assess_overtraining_risk",
    "percent_deviation",
    # Sleep
    "calculate_sleep_debt",
    "calculate_sleep_need",
    "calculate_sleep_score",
    # Strain
    "calculate_blended_trimp",
    "calculate_cardio_load",
    "calculate_non_exercise_load",
    "calculate_recovery_factor",
    "calculate_strain_score",
    "calculate_strength_load",
    "calculate_trimp",
    "epoc_to_strain",
    "trimp_to_epoc",
    # Training load
    "calculate_acwr",
    "calculate_training_load",
    "determine_form_state",
    "from_daily_metrics",
    "group_by_date",
    "latest_load",
    "weekly_stress_total",
    # Weighting
    "rebalance_weights",
    # Zones
    "HRZones",
    "calculate_hr_zones_karvonen",
    "intensity_distribution",
] + list(_models_all)
