"""Strain calculations (TRIMP -> EPOC -> 0-21 strain).

Activity streams are integrated into a training impulse (TRIMP) using
Banister's exponential heart-rate weighting, converted to an EPOC estimate,
and compressed logarithmically onto a bounded 0-21 scale so that each extra
unit of strain needs progressively more work.
"""

import logging
import math
from typing import Callable, Optional, Sequence

from .config import StrainConfig
from .exceptions import ValidationError
from .models import ActivityStream, HeartRateSample, StrainBand, StrainResult, StrengthSession

logger = logging.getLogger(__name__)

IntensityFn = Callable[[HeartRateSample], Optional[float]]


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def trimp_exponent(sex: str = "unspecified", config: Optional[StrainConfig] = None) -> float:
    """
    Exponential weighting coefficient from Banister's research.

    Female and male coefficients differ because of physiological differences
    in heart rate response; anything else uses a value between the two.
    """
    config = config or StrainConfig()
    sex = (sex or "").lower()
    if sex == "female":
        return config.female_exponent
    if sex == "male":
        return config.male_exponent
    return config.unspecified_exponent


def heart_rate_reserve_fraction(heart_rate: float, resting_hr: float, max_hr: float) -> float:
    """Fraction of heart rate reserve used, clamped to [0, 1]."""
    return _clamp((heart_rate - resting_hr) / (max_hr - resting_hr))


def _integrate(
    samples: Sequence[HeartRateSample],
    intensity: IntensityFn,
    exponent: float,
    first_sample_seconds: float,
) -> float:
    """Sum intensity^k over time in minutes.

    Each sample covers the time since the previous one; the first sample
    covers `first_sample_seconds`.
    """
    total = 0.0
    previous_offset = None
    for sample in sorted(samples, key=lambda s: s.offset_seconds):
        dt = first_sample_seconds if previous_offset is None else sample.offset_seconds - previous_offset
        previous_offset = sample.offset_seconds
        value = intensity(sample)
        if value is None or value <= 0:
            continue
        total += (value ** exponent) * dt / 60
    return total


def calculate_trimp(
    samples: Sequence[HeartRateSample],
    resting_hr: float,
    max_hr: float,
    sex: str = "unspecified",
    exponent: Optional[float] = None,
    config: Optional[StrainConfig] = None,
) -> float:
    """
    Training Impulse from a heart rate stream.

    TRIMP = sum(hrr^k * dt) with dt in minutes, where hrr is the fraction of
    heart rate reserve. The exponent emphasizes high-intensity work.

    Args:
        samples: Heart rate samples of one activity
        resting_hr: Resting heart rate
        max_hr: Maximum heart rate
        sex: 'female', 'male' or anything else for the blended coefficient
        exponent: Explicit exponent overriding `sex`

    Returns:
        TRIMP value, 0 when there are no samples or the HR range is invalid
    """
    config = config or StrainConfig()
    if not samples or max_hr <= resting_hr:
        return 0.0

    k = exponent if exponent is not None else trimp_exponent(sex, config)

    def intensity(sample: HeartRateSample) -> Optional[float]:
        if sample.heart_rate is None:
            return None
        return heart_rate_reserve_fraction(sample.heart_rate, resting_hr, max_hr)

    return _integrate(samples, intensity, k, config.first_sample_seconds)


def calculate_blended_trimp(
    samples: Sequence[HeartRateSample],
    resting_hr: float,
    max_hr: float,
    ftp: Optional[float],
    sex: str = "unspecified",
    exponent: Optional[float] = None,
    config: Optional[StrainConfig] = None,
) -> float:
    """
    Training Impulse from combined heart rate and power.

    Where a sample has both, intensity = 0.6 * hrr + 0.4 * power / FTP; a
    sample with only one of them uses that one. Intensity is clamped to [0, 1].
    Without a usable FTP this is plain heart-rate TRIMP.
    """
    config = config or StrainConfig()
    if not ftp or ftp <= 0:
        return calculate_trimp(samples, resting_hr, max_hr, sex, exponent, config)
    if not samples or max_hr <= resting_hr:
        return 0.0

    k = exponent if exponent is not None else trimp_exponent(sex, config)
    hr_share = config.heart_rate_blend

    def intensity(sample: HeartRateSample) -> Optional[float]:
        hrr = None
        if sample.heart_rate is not None:
            hrr = heart_rate_reserve_fraction(sample.heart_rate, resting_hr, max_hr)
        power_ratio = sample.power / ftp if sample.power is not None else None

        if hrr is not None and power_ratio is not None:
            return _clamp(hr_share * hrr + (1 - hr_share) * power_ratio)
        if hrr is not None:
            return hrr
        if power_ratio is not None:
            return _clamp(power_ratio)
        return None

    return _integrate(samples, intensity, k, config.first_sample_seconds)


def trimp_to_epoc(trimp: float, config: Optional[StrainConfig] = None) -> float:
    """EPOC estimate: 0.25 * TRIMP^1.1."""
    config = config or StrainConfig()
    if trimp <= 0:
        return 0.0
    return config.epoc_coefficient * trimp ** config.epoc_exponent


def epoc_to_strain(epoc: float, config: Optional[StrainConfig] = None) -> float:
    """
    Logarithmic strain: max_strain * ln(epoc + 1) / ln(epoc_max + 1).

    Monotonic in EPOC, bounded to [0, max_strain].
    """
    config = config or StrainConfig()
    if epoc <= 0:
        return 0.0
    strain = config.max_strain * math.log(epoc + 1) / math.log(config.epoc_max + 1)
    return min(config.max_strain, strain)


def calculate_recovery_factor(
    hrv: Optional[float] = None,
    hrv_baseline: Optional[float] = None,
    rhr: Optional[float] = None,
    rhr_baseline: Optional[float] = None,
    sleep_score: Optional[float] = None,
    config: Optional[StrainConfig] = None,
) -> float:
    """
    Recovery modulation of strain, roughly 0.85-1.15.

    signal = 0.6 * zHRV + 0.3 * zRHR + 0.1 * zSleep, clamped to [-1, 1], where
    zHRV and zRHR are fractional changes from baseline (RHR inverted) and
    zSleep centres the sleep score on 75. Missing signals contribute 0.
    """
    config = config or StrainConfig()

    z_hrv = 0.0
    if hrv is not None and hrv_baseline:
        z_hrv = (hrv - hrv_baseline) / hrv_baseline

    z_rhr = 0.0
    if rhr is not None and rhr_baseline:
        z_rhr = (rhr_baseline - rhr) / rhr_baseline

    z_sleep = 0.0
    if sleep_score is not None:
        z_sleep = (sleep_score - 75.0) / 25.0

    signal = _clamp(0.6 * z_hrv + 0.3 * z_rhr + 0.1 * z_sleep, -1.0, 1.0)
    return 1.0 + config.recovery_modulation * signal


# =============================================================================
# Sub-loads (0-100 breakdown of where the day's strain came from)
# =============================================================================

def _to_load(value: float) -> int:
    return max(0, min(100, int(value)))


def calculate_cardio_load(
    trimp: float,
    duration_minutes: Optional[float] = None,
    intensity_factor: Optional[float] = None,
    config: Optional[StrainConfig] = None,
) -> int:
    """
    Cardio load: 18 * log10(TRIMP + 1), plus bonuses.

    - Sustained efforts: +0.1 per minute beyond 60 minutes, up to +10
    - High intensity: +75 per unit of IF above 0.8, up to +15
    """
    config = config or StrainConfig()
    if trimp <= 0:
        return 0

    score = config.cardio_scale * math.log10(trimp + 1)

    if duration_minutes is not None and duration_minutes > config.long_session_minutes:
        score += min(
            config.max_duration_bonus,
            (duration_minutes - config.long_session_minutes) * config.duration_bonus_per_minute,
        )

    if intensity_factor is not None and intensity_factor > config.high_intensity_factor:
        score += min(
            config.max_intensity_bonus,
            (intensity_factor - config.high_intensity_factor) * config.intensity_bonus_slope,
        )

    return _to_load(score)


def _strength_base_load(
    rpe: float,
    duration_minutes: float,
    volume_kg: Optional[float],
    body_mass_kg: Optional[float],
    sets: Optional[int],
    config: StrainConfig,
) -> float:
    if not 1 <= rpe <= 10:
        raise ValidationError("RPE must be between 1 and 10", field="rpe", details={"value": rpe})
    if duration_minutes <= 0:
        return 0.0

    load = config.strength_scale * rpe * duration_minutes

    if volume_kg is not None and body_mass_kg:
        volume_term = min(config.max_volume_term, (volume_kg / body_mass_kg) ** config.volume_exponent)
        load *= 1 + config.volume_weight * volume_term

    if sets:
        load *= min(config.max_sets_multiplier, 1 + (sets - 1) * config.per_set_bonus)

    return load


def _compress_strength(load: float, config: StrainConfig) -> int:
    if load <= 0:
        return 0
    return _to_load(config.strength_compression * config.cardio_scale * math.log10(load + 1))


def calculate_strength_load(
    rpe: float,
    duration_minutes: float,
    volume_kg: Optional[float] = None,
    body_mass_kg: Optional[float] = None,
    sets: Optional[int] = None,
    config: Optional[StrainConfig] = None,
) -> int:
    """
    Strength load from session RPE.

    base = 3.5 * RPE * minutes, raised by relative volume
    (volume / body mass)^0.25 and by 5% per set after the first (max +30%),
    then compressed as 0.8 * 18 * log10(base + 1).

    Raises:
        ValidationError: If RPE is outside 1-10
    """
    config = config or StrainConfig()
    return _compress_strength(
        _strength_base_load(rpe, duration_minutes, volume_kg, body_mass_kg, sets, config), config
    )


def calculate_non_exercise_load(
    steps: Optional[int] = None,
    active_calories: Optional[float] = None,
    met_minutes: Optional[float] = None,
    config: Optional[StrainConfig] = None,
) -> int:
    """
    Everyday activity outside workouts.

    Steps (20 MET-minutes per 2000), active calories (0.003 MET-minutes
    each) and direct MET-minutes are summed, capped at 60 and compressed
    as 16 * ln(1 + load).
    """
    config = config or StrainConfig()
    total = 0.0
    if steps:
        total += config.met_minutes_per_step_unit * steps / config.steps_per_unit
    if active_calories:
        total += active_calories * config.met_minutes_per_calorie
    if met_minutes:
        total += met_minutes

    if total <= 0:
        return 0
    return _to_load(config.non_exercise_scale * math.log1p(min(total, config.non_exercise_cap)))


def get_strain_band(score: float, config: Optional[StrainConfig] = None) -> StrainBand:
    config = config or StrainConfig()
    light, moderate, hard, very_hard = config.band_cut_points
    if score < light:
        return StrainBand.LIGHT
    elif score < moderate:
        return StrainBand.MODERATE
    elif score < hard:
        return StrainBand.HARD
    elif score < very_hard:
        return StrainBand.VERY_HARD
    else:
        return StrainBand.ALL_OUT


def calculate_strain_score(
    activities: Sequence[ActivityStream],
    resting_hr: float,
    max_hr: float,
    ftp: Optional[float] = None,
    sex: str = "unspecified",
    recovery_factor: float = 1.0,
    strength_sessions: Sequence[StrengthSession] = (),
    intensity_factor: Optional[float] = None,
    body_mass_kg: Optional[float] = None,
    steps: Optional[int] = None,
    active_calories: Optional[float] = None,
    met_minutes: Optional[float] = None,
    config: Optional[StrainConfig] = None,
) -> StrainResult:
    """
    Daily strain from all of the day's activities.

    Impulse is summed across activities before conversion, so two sessions
    cost more than either alone but less than double (diminishing returns).
    The resulting strain is scaled by `recovery_factor`.

    The cardio, strength and non-exercise loads are reported alongside the
    score as a 0-100 breakdown; they do not change it.

    Args:
        activities: Activity streams recorded on the day
        resting_hr: Resting heart rate
        max_hr: Maximum heart rate
        ftp: Functional threshold power, enables power blending
        sex: Selects the TRIMP exponent
        recovery_factor: From calculate_recovery_factor, 1.0 for none
        strength_sessions: Resistance sessions rated by RPE
        intensity_factor: Average IF of the day's cardio, for the cardio bonus
        body_mass_kg: Enables the relative-volume term of strength load
        steps, active_calories, met_minutes: Everyday activity outside workouts
    """
    config = config or StrainConfig()

    trimp = sum(
        calculate_blended_trimp(activity.samples, resting_hr, max_hr, ftp, sex, config=config)
        for activity in activities
    )
    epoc = trimp_to_epoc(trimp, config)
    strain = round(_clamp(epoc_to_strain(epoc, config) * recovery_factor, 0.0, config.max_strain), 1)

    cardio_minutes = sum(activity.duration_minutes for activity in activities)
    cardio_load = calculate_cardio_load(trimp, cardio_minutes, intensity_factor, config)
    strength_load = _compress_strength(
        sum(
            _strength_base_load(s.rpe, s.duration_minutes, s.volume_kg, body_mass_kg, s.sets, config)
            for s in strength_sessions
        ),
        config,
    )
    non_exercise_load = calculate_non_exercise_load(steps, active_calories, met_minutes, config)

    logger.debug(
        "Strain %.1f from %d activities (TRIMP %.1f, EPOC %.1f, factor %.2f; "
        "cardio %d, strength %d, non-exercise %d)",
        strain, len(activities), trimp, epoc, recovery_factor,
        cardio_load, strength_load, non_exercise_load,
    )

    return StrainResult(
        score=strain,
        band=get_strain_band(strain, config),
        trimp=round(trimp, 1),
        epoc=round(epoc, 1),
        recovery_factor=round(recovery_factor, 3),
        activity_count=len(activities),
        cardio_load=cardio_load,
        strength_load=strength_load,
        non_exercise_load=non_exercise_load,
    )
