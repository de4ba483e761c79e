"""Immutable, serializable models for readiness inputs and results."""

from .base import MODEL_CONFIG, to_camel
from .wellness import (
    ActivityStream,
    DailyMetric,
    HeartRateSample,
    SleepSession,
    StrengthSession,
)
from .scores import (
    Baseline,
    BaselineSet,
    ConfounderAdjustment,
    ConfounderKind,
    DirectionIndicator,
    HRVTrendDirection,
    IllnessIndicator,
    IllnessSeverity,
    IllnessSignal,
    IllnessSignalKind,
    RecoveryBand,
    RecoveryResult,
    SleepBand,
    SleepResult,
    StrainBand,
    StrainResult,
    SubScore,
    SubScoreSet,
)
from .training import (
    CorrelationResult,
    FormState,
    IntensityDistribution,
    PhaseResult,
    ReadinessFactors,
    ReadinessResult,
    RiskFactor,
    RiskLevel,
    RiskResult,
    Significance,
    TrainingLoadPoint,
    TrainingPhase,
    TrainingRecommendation,
    Trend,
)

__all__ = [
    "MODEL_CONFIG",
    "to_camel",
    # Inputs
    "ActivityStream",
    "DailyMetric",
    "HeartRateSample",
    "SleepSession",
    "StrengthSession",
    # Scores
    "Baseline",
    "BaselineSet",
    "ConfounderAdjustment",
    "ConfounderKind",
    "DirectionIndicator",
    "HRVTrendDirection",
    "IllnessIndicator",
    "IllnessSeverity",
    "IllnessSignal",
    "IllnessSignalKind",
    "RecoveryBand",
    "RecoveryResult",
    "SleepBand",
    "SleepResult",
    "StrainBand",
    "StrainResult",
    "SubScore",
    "SubScoreSet",
    # Training
    "CorrelationResult",
    "FormState",
    "IntensityDistribution",
    "PhaseResult",
    "ReadinessFactors",
    "ReadinessResult",
    "RiskFactor",
    "RiskLevel",
    "RiskResult",
    "Significance",
    "TrainingLoadPoint",
    "TrainingPhase",
    "TrainingRecommendation",
    "Trend",
]
