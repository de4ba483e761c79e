"""Training load, phase, risk and correlation models."""

from datetime import date as date_type
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field

from .base import MODEL_CONFIG


# =============================================================================
# Enums
# =============================================================================

class FormState(str, Enum):
    """Interpretation of training stress balance."""
    FRESH = "fresh"
    NEUTRAL = "neutral"
    FATIGUED = "fatigued"
    VERY_FATIGUED = "very_fatigued"


class TrainingPhase(str, Enum):
    BASE = "base"
    BUILD = "build"
    PEAK = "peak"
    RECOVERY = "recovery"
    TRANSITION = "transition"


class RiskLevel(str, Enum):
    """Risk level for overtraining."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class Significance(str, Enum):
    STRONG = "strong"      # |r| >= 0.7
    MODERATE = "moderate"  # |r| >= 0.5
    WEAK = "weak"          # |r| >= 0.3
    NONE = "none"


class Trend(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NONE = "none"


class TrainingRecommendation(str, Enum):
    """Daily training recommendation from readiness signals."""
    TRAIN_HARD = "train_hard"
    TRAIN_MODERATE = "train_moderate"
    TRAIN_EASY = "train_easy"
    REST = "rest"


# =============================================================================
# Training load
# =============================================================================

class TrainingLoadPoint(BaseModel):
    """Daily fitness metrics from the Fitness-Fatigue model."""

    model_config = MODEL_CONFIG

    date: date_type
    daily_load: float = Field(0.0, ge=0, description="TSS for the day")
    ctl: float = Field(0.0, ge=0, description="Chronic Training Load (fitness)")
    atl: float = Field(0.0, ge=0, description="Acute Training Load (fatigue)")
    tsb: float = Field(0.0, description="Training Stress Balance (form) = CTL - ATL")

    @classmethod
    def zero(cls, on: date_type) -> "TrainingLoadPoint":
        """Point for an athlete with no training history."""
        return cls(date=on, daily_load=0.0, ctl=0.0, atl=0.0, tsb=0.0)


class IntensityDistribution(BaseModel):
    """Share of training time at low (Z1-Z2) and high (Z4+) intensity."""

    model_config = MODEL_CONFIG

    low_intensity_pct: float = Field(0.0, ge=0, le=100)
    moderate_intensity_pct: float = Field(0.0, ge=0, le=100)
    high_intensity_pct: float = Field(0.0, ge=0, le=100)
    total_minutes: float = Field(0.0, ge=0)


class PhaseResult(BaseModel):
    """Detected training phase with the inputs that produced it."""

    model_config = MODEL_CONFIG

    phase: TrainingPhase
    confidence: float = Field(..., ge=0, le=1)
    weekly_tss: float = Field(..., ge=0)
    low_intensity_pct: float = Field(..., ge=0, le=100)
    high_intensity_pct: float = Field(..., ge=0, le=100)
    recommendation: str = ""


# =============================================================================
# Overtraining risk
# =============================================================================

class RiskFactor(BaseModel):
    """One contributor to overtraining risk."""

    model_config = MODEL_CONFIG

    name: str
    severity: float = Field(..., ge=0, le=1)
    description: str
    weight: float = Field(..., ge=0, le=1)


class RiskResult(BaseModel):
    """Weighted overtraining risk assessment."""

    model_config = MODEL_CONFIG

    score: float = Field(..., ge=0, le=100)
    level: RiskLevel
    factors: Tuple[RiskFactor, ...] = ()
    recommendation: str

    @property
    def top_factor(self) -> Optional[RiskFactor]:
        if not self.factors:
            return None
        return max(self.factors, key=lambda f: f.severity)


# =============================================================================
# Correlation
# =============================================================================

class CorrelationResult(BaseModel):
    """Pearson correlation between two series."""

    model_config = MODEL_CONFIG

    coefficient: float = Field(..., ge=-1, le=1)
    r_squared: float = Field(..., ge=0, le=1)
    sample_size: int = Field(..., ge=3)
    significance: Significance
    trend: Trend


# =============================================================================
# Training readiness
# =============================================================================

class ReadinessFactors(BaseModel):
    """Individual readiness signals, kept for transparency."""

    model_config = MODEL_CONFIG

    hrv_trend_signal: int = Field(0, ge=-100, le=100, description="Positive = HRV above long-term baseline")
    hrv_stability_signal: int = Field(0, ge=-100, le=100, description="Positive = low HRV CV")
    recovery_signal: int = Field(50, ge=0, le=100, description="Recovery score, 50 when unknown")
    form_signal: int = Field(0, ge=-100, le=100, description="Positive = fresh (TSB above zero)")
    hrv_change_pct: Optional[float] = None
    hrv_cv: Optional[float] = None
    days_since_hard_session: Optional[int] = Field(None, ge=0)


class ReadinessResult(BaseModel):
    """HRV-guided training readiness for one day."""

    model_config = MODEL_CONFIG

    date: Optional[date_type] = None
    recommendation: TrainingRecommendation
    confidence: float = Field(..., ge=0, le=1)
    factors: ReadinessFactors
    suggested_tss_low: int = Field(..., ge=0)
    suggested_tss_high: int = Field(..., ge=0)
    suggested_intensity_factor: float = Field(..., ge=0)
    reasoning: Tuple[str, ...] = ()

    @property
    def suggested_tss_range(self) -> Tuple[int, int]:
        return self.suggested_tss_low, self.suggested_tss_high
