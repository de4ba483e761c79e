"""Score models: baselines, sub-score sets, recovery, sleep, strain and illness."""

from datetime import date as date_type
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field

from .base import MODEL_CONFIG


# =============================================================================
# Enums
# =============================================================================

class RecoveryBand(str, Enum):
    """Recovery zone shown to the athlete."""
    OPTIMAL = "optimal"            # 80-100
    GOOD = "good"                  # 60-79
    FAIR = "fair"                  # 40-59
    POOR = "poor"                  # 0-39
    LIMITED_DATA = "limited_data"  # No component available


class SleepBand(str, Enum):
    """Sleep quality zone."""
    OPTIMAL = "optimal"
    GOOD = "good"
    FAIR = "fair"
    PAY_ATTENTION = "pay_attention"
    LIMITED_DATA = "limited_data"


class StrainBand(str, Enum):
    """Strain zone on the 0-21 scale."""
    LIGHT = "light"          # 0-6
    MODERATE = "moderate"    # 6-11
    HARD = "hard"            # 11-16
    VERY_HARD = "very_hard"  # 16-18
    ALL_OUT = "all_out"      # 18-21


class ConfounderKind(str, Enum):
    """Non-training causes that mimic poor recovery."""
    ILLNESS = "illness"
    ALCOHOL = "alcohol"


class HRVTrendDirection(str, Enum):
    """Short-term HRV compared with the longer-term average."""
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class IllnessSeverity(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class IllnessSignalKind(str, Enum):
    HRV_DROP = "hrv_drop"
    HRV_SPIKE = "hrv_spike"
    ELEVATED_RHR = "elevated_rhr"
    SLEEP_DISRUPTION = "sleep_disruption"
    RESPIRATORY_CHANGE = "respiratory_change"
    ACTIVITY_DROP = "activity_drop"


# =============================================================================
# Baselines
# =============================================================================

class Baseline(BaseModel):
    """Rolling mean of one metric over a trailing window."""

    model_config = MODEL_CONFIG

    mean: Optional[float] = Field(None, description="Window mean, None when unavailable")
    sample_count: int = Field(0, ge=0, description="Days that contributed a value")
    window_days: int = Field(7, ge=1)

    @property
    def available(self) -> bool:
        return self.mean is not None

    @classmethod
    def unavailable(cls, sample_count: int = 0, window_days: int = 7) -> "Baseline":
        return cls(mean=None, sample_count=sample_count, window_days=window_days)


class BaselineSet(BaseModel):
    """Personal baselines for every tracked metric as of a date."""

    model_config = MODEL_CONFIG

    as_of: date_type
    hrv: Baseline = Field(default_factory=Baseline)
    rhr: Baseline = Field(default_factory=Baseline)
    sleep_hours: Baseline = Field(default_factory=Baseline)
    sleep_score: Baseline = Field(default_factory=Baseline)
    respiratory_rate: Baseline = Field(default_factory=Baseline)


class DirectionIndicator(BaseModel):
    """Direction indicator showing change from baseline."""

    model_config = MODEL_CONFIG

    direction: str  # 'up', 'down', 'stable'
    change_pct: float
    baseline: float
    current: float


# =============================================================================
# Sub-scores
# =============================================================================

class SubScore(BaseModel):
    """One named component of a composite score."""

    model_config = MODEL_CONFIG

    name: str
    score: int = Field(..., ge=0, le=100)
    available: bool = True
    weight: float = Field(..., ge=0, description="Weight after rebalancing")

    @property
    def contribution(self) -> float:
        return self.score * self.weight


class SubScoreSet(BaseModel):
    """Component scores together with the weights used to combine them."""

    model_config = MODEL_CONFIG

    components: Tuple[SubScore, ...] = ()

    def get(self, name: str) -> Optional[SubScore]:
        for component in self.components:
            if component.name == name:
                return component
        return None

    def __getitem__(self, name: str) -> SubScore:
        component = self.get(name)
        if component is None:
            raise KeyError(name)
        return component

    @property
    def available_names(self) -> Tuple[str, ...]:
        return tuple(c.name for c in self.components if c.available)

    @property
    def total_weight(self) -> float:
        return sum(c.weight for c in self.components)

    def weighted_total(self) -> Optional[float]:
        """Weighted sum of available components, None if nothing is available."""
        if not self.available_names:
            return None
        return sum(c.contribution for c in self.components if c.available)


# =============================================================================
# Recovery
# =============================================================================

class ConfounderAdjustment(BaseModel):
    """Outcome of one confounder detector."""

    model_config = MODEL_CONFIG

    kind: ConfounderKind
    applied: bool = Field(..., description="Whether a penalty was subtracted")
    penalty: float = Field(0.0, ge=0, description="Points subtracted from recovery")
    confidence: float = Field(0.0, ge=0, le=1)
    reason: str = ""


class RecoveryResult(BaseModel):
    """Composite recovery score for one day."""

    model_config = MODEL_CONFIG

    date: date_type
    score: int = Field(..., ge=0, le=100)
    band: RecoveryBand
    sub_scores: SubScoreSet
    adjustments: Tuple[ConfounderAdjustment, ...] = ()

    @property
    def confounder_applied(self) -> bool:
        return any(a.applied for a in self.adjustments)

    @property
    def confounder_penalty(self) -> float:
        return round(sum(a.penalty for a in self.adjustments if a.applied), 2)


# =============================================================================
# Sleep
# =============================================================================

class SleepResult(BaseModel):
    """Composite sleep score for one night."""

    model_config = MODEL_CONFIG

    date: date_type
    score: int = Field(..., ge=0, le=100)
    band: SleepBand
    sub_scores: SubScoreSet


# =============================================================================
# Strain
# =============================================================================

class StrainResult(BaseModel):
    """Daily strain derived from activity impulse."""

    model_config = MODEL_CONFIG

    score: float = Field(..., ge=0, le=21, description="Strain on the 0-21 scale")
    band: StrainBand
    trimp: float = Field(..., ge=0, description="Summed training impulse")
    epoc: float = Field(..., ge=0, description="EPOC estimate from TRIMP")
    recovery_factor: float = Field(1.0, gt=0)
    activity_count: int = Field(0, ge=0)
    cardio_load: int = Field(0, ge=0, le=100, description="Compressed TRIMP with duration and IF bonuses")
    strength_load: int = Field(0, ge=0, le=100, description="Session RPE x duration")
    non_exercise_load: int = Field(0, ge=0, le=100, description="Steps, active calories and MET-minutes")


# =============================================================================
# Illness
# =============================================================================

class IllnessSignal(BaseModel):
    """One physiological signal contributing to an illness indicator."""

    model_config = MODEL_CONFIG

    kind: IllnessSignalKind
    deviation_pct: float
    value: float
    baseline: float


class IllnessIndicator(BaseModel):
    """Multi-signal illness detection result."""

    model_config = MODEL_CONFIG

    date: date_type
    severity: IllnessSeverity
    confidence: float = Field(..., ge=0, le=1)
    signals: Tuple[IllnessSignal, ...] = ()
    recommendation: str = ""

    @property
    def primary_signal(self) -> Optional[IllnessSignal]:
        """Signal with the largest absolute deviation."""
        if not self.signals:
            return None
        return max(self.signals, key=lambda s: abs(s.deviation_pct))

    @property
    def is_significant(self) -> bool:
        """Moderate or high severity with at least 50% confidence."""
        return self.severity != IllnessSeverity.LOW and self.confidence >= 0.5
