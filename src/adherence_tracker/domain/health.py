"""Readings reported by the sensor/device provider."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import StrEnum

METERS_PER_MILE = 1609.34
MILE_THRESHOLD_METERS = 1609.0
OUNCES_PER_LITER = 33.814


class DailyMetric(StrEnum):
    """Cumulative daily quantities the provider can total."""

    STEPS = "steps"
    ACTIVE_ENERGY = "active_energy"
    EXERCISE_MINUTES = "exercise_minutes"
    WATER = "water"


class WorkoutActivityType(StrEnum):
    """Provider workout classification."""

    TRADITIONAL_STRENGTH = "traditional_strength_training"
    FUNCTIONAL_STRENGTH = "functional_strength_training"
    RUNNING = "running"
    WALKING = "walking"
    HIKING = "hiking"
    CYCLING = "cycling"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: object) -> "WorkoutActivityType":
        try:
            return cls(str(raw))
        except ValueError:
            return cls.OTHER


MILE_ACTIVITY_TYPES = frozenset(
    {WorkoutActivityType.RUNNING, WorkoutActivityType.WALKING, WorkoutActivityType.HIKING}
)


class SleepStage(StrEnum):
    """Sleep analysis sample categories."""

    IN_BED = "in_bed"
    ASLEEP = "asleep"
    CORE = "core"
    DEEP = "deep"
    REM = "rem"
    AWAKE = "awake"


@dataclass(frozen=True)
class SleepSample:
    """One contiguous sleep analysis interval."""

    stage: SleepStage
    start: datetime
    end: datetime

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60.0)


@dataclass(frozen=True)
class SleepReading:
    """Summary of one night of sleep."""

    total_sleep_minutes: int
    deep_sleep_minutes: int | None = None
    rem_sleep_minutes: int | None = None
    light_sleep_minutes: int | None = None
    awake_minutes: int | None = None
    time_in_bed_minutes: int | None = None
    hrv: float | None = None
    resting_hr: float | None = None
    sleep_start: datetime | None = None
    sleep_end: datetime | None = None


@dataclass(frozen=True)
class WorkoutReading:
    """Workout detected by the provider."""

    activity_type: WorkoutActivityType
    start: datetime
    end: datetime
    duration_minutes: int
    calories: int | None = None
    distance_m: float | None = None


def sleep_window(day: date) -> tuple[datetime, datetime]:
    """Search window for a night's sleep: 20:00 the evening before to 14:00."""
    midnight = datetime.combine(day, time())
    return midnight - timedelta(hours=4), midnight + timedelta(hours=14)


def summarize_sleep_samples(
    samples: list[SleepSample],
    hrv: float | None = None,
    resting_hr: float | None = None,
) -> SleepReading | None:
    """Fold stage samples into a single night summary."""
    if not samples:
        return None

    total = deep = rem = light = awake = in_bed = 0
    for sample in samples:
        minutes = sample.minutes
        if sample.stage in (SleepStage.ASLEEP, SleepStage.CORE):
            total += minutes
            light += minutes
        elif sample.stage is SleepStage.DEEP:
            total += minutes
            deep += minutes
        elif sample.stage is SleepStage.REM:
            total += minutes
            rem += minutes
        elif sample.stage is SleepStage.AWAKE:
            awake += minutes
        elif sample.stage is SleepStage.IN_BED:
            in_bed += minutes

    sleep_start = min(sample.start for sample in samples)
    sleep_end = max(sample.end for sample in samples)
    in_bed = max(in_bed, int((sleep_end - sleep_start).total_seconds() / 60.0))

    return SleepReading(
        total_sleep_minutes=total,
        deep_sleep_minutes=deep or None,
        rem_sleep_minutes=rem or None,
        light_sleep_minutes=light or None,
        awake_minutes=awake or None,
        time_in_bed_minutes=in_bed or None,
        hrv=hrv,
        resting_hr=resting_hr,
        sleep_start=sleep_start,
        sleep_end=sleep_end,
    )
