"""Input models: daily wellness metrics, sleep sessions and activity streams."""

from datetime import date as date_type, datetime
from typing import Optional, Tuple

from pydantic import BaseModel, Field

from .base import MODEL_CONFIG


class DailyMetric(BaseModel):
    """One day of physiological and training data.

    Every numeric field is independently optional; calculators degrade
    per missing field instead of failing.
    """

    model_config = MODEL_CONFIG

    date: date_type = Field(..., description="Calendar day the metrics belong to")
    hrv: Optional[float] = Field(None, ge=0, description="Overnight HRV in ms")
    rhr: Optional[float] = Field(None, ge=0, description="Resting heart rate in bpm")
    sleep_hours: Optional[float] = Field(None, ge=0, le=24, description="Sleep duration in hours")
    sleep_score: Optional[float] = Field(None, ge=0, le=100, description="Comprehensive sleep score 0-100")
    respiratory_rate: Optional[float] = Field(None, ge=0, description="Breaths per minute")
    training_stress: Optional[float] = Field(None, ge=0, description="Training stress (TSS) for the day")
    illness_suspected: bool = Field(default=False, description="Host-supplied illness flag")

    @property
    def has_sleep_data(self) -> bool:
        return self.sleep_hours is not None or self.sleep_score is not None


class SleepSession(BaseModel):
    """Detailed sleep for one night, used by the sleep scorer."""

    model_config = MODEL_CONFIG

    date: date_type = Field(..., description="Night ending on this date")
    duration_hours: Optional[float] = Field(None, ge=0, le=24, description="Time asleep")
    time_in_bed_hours: Optional[float] = Field(None, ge=0, le=24, description="Time in bed")
    deep_sleep_hours: Optional[float] = Field(None, ge=0)
    rem_sleep_hours: Optional[float] = Field(None, ge=0)
    wake_events: Optional[int] = Field(None, ge=0, description="Awakenings during the night")
    bedtime: Optional[datetime] = None
    wake_time: Optional[datetime] = None


class HeartRateSample(BaseModel):
    """A single point of an activity stream."""

    model_config = MODEL_CONFIG

    offset_seconds: float = Field(..., ge=0, description="Seconds since activity start")
    heart_rate: Optional[float] = Field(None, ge=0)
    power: Optional[float] = Field(None, ge=0, description="Power in watts")


class ActivityStream(BaseModel):
    """Heart rate / power samples recorded during one activity."""

    model_config = MODEL_CONFIG

    samples: Tuple[HeartRateSample, ...] = ()
    start: Optional[datetime] = None

    @property
    def duration_minutes(self) -> float:
        if not self.samples:
            return 0.0
        offsets = [s.offset_seconds for s in self.samples]
        return (max(offsets) - min(offsets)) / 60



class StrengthSession(BaseModel):
    """A resistance training session rated by perceived exertion."""

    model_config = MODEL_CONFIG

    rpe: float = Field(..., ge=1, le=10, description="Session RPE on the 1-10 scale")
    duration_minutes: float = Field(..., ge=0)
    volume_kg: Optional[float] = Field(None, ge=0, description="Total weight x reps")
    sets: Optional[int] = Field(None, ge=0, description="Working sets")
