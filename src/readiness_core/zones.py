"""Heart rate zone calculations."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from .exceptions import ValidationError
from .models import ActivityStream, HeartRateSample, IntensityDistribution


@dataclass(frozen=True)
class HRZones:
    """Heart rate training zones."""

    zone1: Tuple[int, int]  # Recovery / Easy
    zone2: Tuple[int, int]  # Aerobic / Endurance
    zone3: Tuple[int, int]  # Tempo / Moderate
    zone4: Tuple[int, int]  # Threshold / Hard
    zone5: Tuple[int, int]  # VO2max / Maximum

    def get_zone_ranges(self) -> List[Tuple[int, int, int, str]]:
        """Get all zones as list of (zone_num, min_hr, max_hr, name)."""
        return [
            (1, self.zone1[0], self.zone1[1], "Recovery"),
            (2, self.zone2[0], self.zone2[1], "Aerobic"),
            (3, self.zone3[0], self.zone3[1], "Tempo"),
            (4, self.zone4[0], self.zone4[1], "Threshold"),
            (5, self.zone5[0], self.zone5[1], "VO2max"),
        ]


def calculate_hr_zones_karvonen(max_hr: int, rest_hr: int) -> HRZones:
    """
    Calculate HR zones using Karvonen (Heart Rate Reserve) method.

    Zone boundaries (% of HRR):
    - Zone 1: 50-60% - Recovery
    - Zone 2: 60-70% - Aerobic
    - Zone 3: 70-80% - Tempo
    - Zone 4: 80-90% - Threshold
    - Zone 5: 90-100% - VO2max

    Raises:
        ValidationError: If max_hr is not above rest_hr
    """
    if max_hr <= rest_hr:
        raise ValidationError(
            "max_hr must be greater than rest_hr",
            field="max_hr",
            details={"max_hr": max_hr, "rest_hr": rest_hr},
        )

    hr_reserve = max_hr - rest_hr

    def zone_hr(pct: float) -> int:
        return int(rest_hr + (hr_reserve * pct))

    return HRZones(
        zone1=(zone_hr(0.50), zone_hr(0.60)),
        zone2=(zone_hr(0.60), zone_hr(0.70)),
        zone3=(zone_hr(0.70), zone_hr(0.80)),
        zone4=(zone_hr(0.80), zone_hr(0.90)),
        zone5=(zone_hr(0.90), max_hr),
    )


def get_zone_for_hr(hr: float, zones: HRZones) -> int:
    """Return zone number (1-5) for a given heart rate, or 0 if below zone 1."""
    if hr < zones.zone1[0]:
        return 0
    elif hr <= zones.zone1[1]:
        return 1
    elif hr <= zones.zone2[1]:
        return 2
    elif hr <= zones.zone3[1]:
        return 3
    elif hr <= zones.zone4[1]:
        return 4
    else:
        return 5


def zone_seconds(samples: Sequence[HeartRateSample], zones: HRZones) -> Dict[int, float]:
    """
    Seconds spent in each zone.

    Each sample accounts for the time since the previous sample; the first
    sample of a stream counts as one second. Samples without heart rate are
    skipped.
    """
    seconds = {zone: 0.0 for zone in range(6)}
    previous_offset = None

    for sample in sorted(samples, key=lambda s: s.offset_seconds):
        dt = 1.0 if previous_offset is None else sample.offset_seconds - previous_offset
        previous_offset = sample.offset_seconds
        if sample.heart_rate is None:
            continue
        seconds[get_zone_for_hr(sample.heart_rate, zones)] += dt

    return seconds


def intensity_distribution(
    samples: Sequence[HeartRateSample],
    zones: HRZones,
) -> IntensityDistribution:
    """Share of time at low (below Z3), moderate (Z3) and high (Z4+) intensity."""
    return _distribution_from_seconds(zone_seconds(samples, zones))


def activities_intensity_distribution(
    activities: Iterable[ActivityStream],
    zones: HRZones,
) -> IntensityDistribution:
    """Time-weighted intensity distribution across several activities."""
    totals = {zone: 0.0 for zone in range(6)}
    for activity in activities:
        for zone, secs in zone_seconds(activity.samples, zones).items():
            totals[zone] += secs
    return _distribution_from_seconds(totals)


def _distribution_from_seconds(seconds: Dict[int, float]) -> IntensityDistribution:
    total = sum(seconds.values())
    if total <= 0:
        return IntensityDistribution()

    low = seconds[0] + seconds[1] + seconds[2]
    moderate = seconds[3]
    high = seconds[4] + seconds[5]

    return IntensityDistribution(
        low_intensity_pct=round(low / total * 100, 1),
        moderate_intensity_pct=round(moderate / total * 100, 1),
        high_intensity_pct=round(high / total * 100, 1),
        total_minutes=round(total / 60, 1),
    )
