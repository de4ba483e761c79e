"""Configuration for readiness calculations.

Every threshold below is an empirically tuned constant rather than a derived
one, so each is a named, overridable field. Calculators take an explicit
``config=`` argument and fall back to the defaults here; they never read the
environment themselves. Host applications that want environment overrides
use ``get_settings()``:

    READINESS_TRAINING_LOAD__CTL_TIME_CONSTANT=28
    READINESS_RECOVERY__HRV_WEIGHT=0.35
"""

from functools import lru_cache
from typing import Dict, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _check_weights(weights: Dict[str, float]) -> Dict[str, float]:
    if any(w < 0 for w in weights.values()):
        raise ValueError("weights must be non-negative")
    if sum(weights.values()) <= 0:
        raise ValueError("weights must have a positive sum")
    return weights


def _check_ascending(values: Tuple[float, ...]) -> Tuple[float, ...]:
    if list(values) != sorted(values):
        raise ValueError("cut points must be ascending")
    return values


class BaselineConfig(BaseModel):
    """Rolling baseline windows."""

    window_days: int = Field(7, ge=1)
    min_samples: int = Field(3, ge=1)
    long_window_days: int = Field(30, ge=1)
    trend_threshold_pct: float = Field(5.0, ge=0)


class RecoveryConfig(BaseModel):
    """Recovery component weights and penalty bands."""

    hrv_weight: float = Field(0.30, ge=0)
    rhr_weight: float = Field(0.20, ge=0)
    sleep_weight: float = Field(0.30, ge=0)
    respiratory_weight: float = Field(0.10, ge=0)
    form_weight: float = Field(0.10, ge=0)

    # HRV drop below baseline (fraction) -> score at that cut point
    hrv_cut_points: Tuple[float, ...] = (0.10, 0.20, 0.35)
    hrv_cut_scores: Tuple[float, ...] = (85.0, 60.0, 30.0)
    hrv_tail_slope: float = 60.0

    # RHR elevation above baseline (fraction) -> score at that cut point
    rhr_cut_points: Tuple[float, ...] = (0.08, 0.15, 0.25)
    rhr_cut_scores: Tuple[float, ...] = (88.0, 67.0, 37.0)
    rhr_tail_slope: float = 100.0

    # Respiratory rate stability
    respiratory_stable_pct: float = 0.05
    respiratory_elevated_pct: float = 0.15
    respiratory_suppressed_pct: float = 0.15

    # Form (ATL/CTL ratio)
    form_fresh_ratio: float = 1.0
    form_fatigued_ratio: float = 1.5

    # Same-day TSS penalty tiers
    tss_easy: float = 50.0
    tss_moderate: float = 100.0
    tss_hard: float = 200.0
    tss_very_hard: float = 250.0
    tss_penalty_moderate: float = 10.0
    tss_penalty_hard: float = 25.0
    tss_penalty_cap: float = 40.0

    @field_validator("hrv_cut_points", "rhr_cut_points")
    @classmethod
    def _ascending(cls, value: Tuple[float, ...]) -> Tuple[float, ...]:
        return _check_ascending(value)

    @model_validator(mode="after")
    def _validate(self) -> "RecoveryConfig":
        _check_weights(self.weights())
        if len(self.hrv_cut_points) != len(self.hrv_cut_scores):
            raise ValueError("hrv_cut_points and hrv_cut_scores must have the same length")
        if len(self.rhr_cut_points) != len(self.rhr_cut_scores):
            raise ValueError("rhr_cut_points and rhr_cut_scores must have the same length")
        return self

    def weights(self) -> Dict[str, float]:
        return {
            "hrv": self.hrv_weight,
            "rhr": self.rhr_weight,
            "sleep": self.sleep_weight,
            "respiratory": self.respiratory_weight,
            "form": self.form_weight,
        }


class AlcoholConfig(BaseModel):
    """Compound alcohol-signature detection."""

    # (hrv drop %, confidence points, base penalty) checked from most severe
    hrv_tiers: Tuple[Tuple[float, float, float], ...] = (
        (35.0, 30.0, 20.0),
        (30.0, 28.0, 16.0),
        (25.0, 25.0, 12.0),
        (20.0, 20.0, 10.0),
        (15.0, 15.0, 7.0),
        (10.0, 10.0, 4.0),
    )
    confidence_threshold: float = 50.0
    confidence_threshold_no_sleep_score: float = 40.0
    max_penalty: float = 15.0

    # Sleep score below which sleep adds confidence; the last one stands in
    # for deep-sleep suppression
    very_poor_sleep_score: float = 40.0
    poor_sleep_score: float = 60.0
    deep_sleep_suppression_score: float = 50.0

    # RHR component score below which RHR counts as elevated, with the
    # matching penalty multipliers
    rhr_strong_elevation_score: float = 30.0
    rhr_moderate_elevation_score: float = 50.0
    rhr_strong_penalty_multiplier: float = Field(1.5, ge=1)
    rhr_moderate_penalty_multiplier: float = Field(1.25, ge=1)

    # Respiratory change from baseline (fraction)
    stable_respiration: float = Field(0.10, ge=0)
    elevated_respiration: float = Field(0.15, ge=0)

    weekend_min_confidence: float = 60.0
    excellent_sleep_score: float = 80.0
    excellent_sleep_mitigation: float = 0.30
    good_sleep_score: float = 65.0
    good_sleep_mitigation: float = 0.15
    weekend_amplifier: float = 1.2


class SleepConfig(BaseModel):
    """Sleep component weights and targets."""

    performance_weight: float = Field(0.30, ge=0)
    efficiency_weight: float = Field(0.22, ge=0)
    stage_quality_weight: float = Field(0.32, ge=0)
    disturbances_weight: float = Field(0.14, ge=0)
    timing_weight: float = Field(0.02, ge=0)

    stage_target_fraction: float = 0.40
    stage_floor_fraction: float = 0.30

    @model_validator(mode="after")
    def _validate(self) -> "SleepConfig":
        _check_weights(self.weights())
        return self

    def weights(self) -> Dict[str, float]:
        return {
            "performance": self.performance_weight,
            "efficiency": self.efficiency_weight,
            "stage_quality": self.stage_quality_weight,
            "disturbances": self.disturbances_weight,
            "timing": self.timing_weight,
        }


class StrainConfig(BaseModel):
    """TRIMP exponents and the EPOC-to-strain mapping."""

    female_exponent: float = 1.67
    male_exponent: float = 1.92
    unspecified_exponent: float = 1.85
    heart_rate_blend: float = Field(0.6, ge=0, le=1)
    first_sample_seconds: float = 1.0
    epoc_coefficient: float = 0.25
    epoc_exponent: float = 1.1
    epoc_max: float = Field(300.0, gt=0)
    max_strain: float = Field(21.0, gt=0, le=21)
    recovery_modulation: float = Field(0.15, ge=0, le=1)
    # Upper bounds of light, moderate, hard and very hard
    band_cut_points: Tuple[float, ...] = (6.0, 11.0, 16.0, 18.0)

    # Cardio load: scale * log10(TRIMP + 1) plus duration and IF bonuses
    cardio_scale: float = Field(18.0, gt=0)
    long_session_minutes: float = 60.0
    duration_bonus_per_minute: float = 0.1
    max_duration_bonus: float = 10.0
    high_intensity_factor: float = 0.8
    intensity_bonus_slope: float = 75.0
    max_intensity_bonus: float = 15.0

    # Strength load: session RPE x minutes, compressed like cardio
    strength_scale: float = Field(3.5, gt=0)
    strength_compression: float = Field(0.8, gt=0)
    volume_exponent: float = 0.25
    max_volume_term: float = 2.0
    volume_weight: float = 0.15
    per_set_bonus: float = 0.05
    max_sets_multiplier: float = Field(1.3, ge=1)

    # Non-exercise load in MET-minutes
    steps_per_unit: float = Field(2000.0, gt=0)
    met_minutes_per_step_unit: float = 20.0
    met_minutes_per_calorie: float = 0.003
    non_exercise_scale: float = Field(16.0, gt=0)
    non_exercise_cap: float = Field(60.0, gt=0)

    @field_validator("band_cut_points")
    @classmethod
    def _ascending(cls, value: Tuple[float, ...]) -> Tuple[float, ...]:
        if len(value) != 4:
            raise ValueError("band_cut_points needs four values")
        return _check_ascending(value)


class TrainingLoadConfig(BaseModel):
    """Fitness-Fatigue model time constants."""

    ctl_time_constant: float = Field(42.0, gt=0)
    atl_time_constant: float = Field(7.0, gt=0)
    min_ctl_for_acwr: float = 10.0


class RiskConfig(BaseModel):
    """Overtraining risk factor weights (percent of total score)."""

    recovery_weight: float = 0.25
    hrv_weight: float = 0.25
    rhr_weight: float = 0.20
    tsb_weight: float = 0.20
    sleep_debt_weight: float = 0.10

    @model_validator(mode="after")
    def _validate(self) -> "RiskConfig":
        _check_weights({
            "recovery": self.recovery_weight,
            "hrv": self.hrv_weight,
            "rhr": self.rhr_weight,
            "tsb": self.tsb_weight,
            "sleep_debt": self.sleep_debt_weight,
        })
        return self


class PhaseConfig(BaseModel):
    """Training phase decision-tree thresholds."""

    base_low_intensity_pct: float = 70.0
    base_min_weekly_tss: float = 300.0
    base_max_confidence: float = 0.95
    recovery_max_weekly_tss: float = 200.0
    recovery_confidence: float = 0.8
    peak_high_intensity_pct: float = 25.0
    peak_confidence_divisor: float = 40.0
    peak_max_confidence: float = 0.9
    build_min_high_intensity_pct: float = 15.0
    build_min_weekly_tss: float = 300.0
    build_confidence: float = 0.75
    transition_confidence: float = 0.5


class IllnessConfig(BaseModel):
    """Illness indicator signal thresholds (percent deviation from baseline)."""

    hrv_drop_pct: float = 10.0
    hrv_spike_pct: float = 100.0
    rhr_elevation_pct: float = 3.0
    sleep_drop_pct: float = 15.0
    respiratory_change_pct: float = 8.0
    activity_drop_pct: float = 25.0
    min_confidence: float = Field(0.5, ge=0, le=1)


class ReadinessConfig(BaseModel):
    """HRV-guided training readiness thresholds.

    Signals are on a -100..100 scale except recovery, which is the 0-100
    recovery score itself.
    """

    # +/-20% HRV change maps to +/-100
    hrv_trend_scale: float = Field(5.0, gt=0)
    # TSB of +/-40 maps to +/-100
    form_scale: float = Field(2.5, gt=0)

    hrv_positive_signal: float = 5.0
    hrv_negative_signal: float = -10.0
    cv_low_signal: float = 50.0
    cv_moderate_signal: float = 0.0
    cv_high_signal: float = -20.0
    fresh_signal: float = 20.0
    overreached_signal: float = -20.0

    recovered_score: float = 70.0
    adequate_recovery_score: float = 60.0
    fatigued_score: float = 50.0

    hard_session_tss: float = Field(100.0, ge=0)
    hard_session_lookback_days: int = Field(14, ge=1)
    min_days_between_hard_sessions: int = Field(2, ge=0)

    # Signals beyond +/-clear_signal count as pointing one way
    clear_signal: float = Field(10.0, ge=0)
    limited_data_quality: int = Field(50, ge=0, le=100)

    # Quick check from the recovery score alone
    quick_hard_score: float = 80.0
    quick_moderate_score: float = 60.0
    quick_easy_score: float = 40.0
    quick_high_tss: float = 150.0


class Settings(BaseSettings):
    """All calculator settings, overridable from READINESS_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="READINESS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    baseline: BaselineConfig = Field(default_factory=BaselineConfig)
    recovery: RecoveryConfig = Field(default_factory=RecoveryConfig)
    alcohol: AlcoholConfig = Field(default_factory=AlcoholConfig)
    sleep: SleepConfig = Field(default_factory=SleepConfig)
    strain: StrainConfig = Field(default_factory=StrainConfig)
    training_load: TrainingLoadConfig = Field(default_factory=TrainingLoadConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)
    phase: PhaseConfig = Field(default_factory=PhaseConfig)
    illness: IllnessConfig = Field(default_factory=IllnessConfig)
    readiness: ReadinessConfig = Field(default_factory=ReadinessConfig)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
