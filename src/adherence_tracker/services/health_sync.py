"""Merge sensor/device readings into day records."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Protocol

from adherence_tracker.domain.days import DayRecord, WorkoutTag
from adherence_tracker.domain.health import (
    METERS_PER_MILE,
    MILE_ACTIVITY_TYPES,
    MILE_THRESHOLD_METERS,
    DailyMetric,
    SleepReading,
    WorkoutActivityType,
    WorkoutReading,
)
from adherence_tracker.services.days import DayService
from adherence_tracker.services.scoring import calculate_sleep_score

_logger = logging.getLogger(__name__)


class HealthProvider(Protocol):
    """Interface for the external health data source."""

    async def is_authorized(self) -> bool:
        """Return True when reads are permitted."""

    async def fetch_sleep(self, day: date) -> SleepReading | None:
        """Return the night of sleep ending on a date."""

    async def fetch_workouts(self, day: date) -> list[WorkoutReading]:
        """Return workouts started on a date, oldest first."""

    async def fetch_daily_total(self, metric: DailyMetric, day: date) -> float | None:
        """Return the cumulative total of a metric for a date."""


class SyncMode(StrEnum):
    """Sync granularity."""

    FULL = "full"
    QUICK = "quick"
    SLEEP = "sleep"


@dataclass
class SyncReport:
    """Outcome of one sync invocation."""

    day: date
    mode: SyncMode
    merged: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)
    skipped_reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.skipped_reason is None and not self.errors


_WORKOUT_TAG_GUESSES = {
    WorkoutActivityType.TRADITIONAL_STRENGTH: WorkoutTag.PUSH,
    WorkoutActivityType.FUNCTIONAL_STRENGTH: WorkoutTag.PUSH,
    WorkoutActivityType.RUNNING: WorkoutTag.ARMS_CORE,
    WorkoutActivityType.WALKING: WorkoutTag.ARMS_CORE,
    WorkoutActivityType.CYCLING: WorkoutTag.LEGS,
}

_ACTIVITY_FIELDS = {
    DailyMetric.STEPS: "steps",
    DailyMetric.ACTIVE_ENERGY: "active_energy_kcal",
    DailyMetric.EXERCISE_MINUTES: "exercise_minutes",
}


def guess_workout_tag(activity_type: WorkoutActivityType) -> WorkoutTag:
    """Best-effort split guess for an auto-detected workout."""
    return _WORKOUT_TAG_GUESSES.get(activity_type, WorkoutTag.UPPER_PUMP)


def merge_sleep(record: DayRecord, reading: SleepReading | None) -> None:
    """Provider sleep metrics always win; the sleep score is derived alongside."""
    if reading is None:
        return
    record.sleep_duration_minutes = reading.total_sleep_minutes
    record.sleep_deep_minutes = reading.deep_sleep_minutes
    record.sleep_rem_minutes = reading.rem_sleep_minutes
    record.sleep_light_minutes = reading.light_sleep_minutes
    record.sleep_awake_minutes = reading.awake_minutes
    bed = reading.time_in_bed_minutes
    record.sleep_efficiency = (
        reading.total_sleep_minutes / bed if bed is not None and bed > 0 else None
    )
    record.sleep_hrv = reading.hrv
    record.sleep_resting_hr = reading.resting_hr
    record.sleep_score = calculate_sleep_score(
        total_sleep_minutes=reading.total_sleep_minutes,
        deep_sleep_minutes=reading.deep_sleep_minutes,
        rem_sleep_minutes=reading.rem_sleep_minutes,
        awake_minutes=reading.awake_minutes,
        time_in_bed_minutes=reading.time_in_bed_minutes,
        hrv=reading.hrv,
        resting_hr=reading.resting_hr,
    )


def merge_workout(record: DayRecord, workouts: list[WorkoutReading]) -> None:
    """Fill in a detected workout without touching the user's tag or rating."""
    if not workouts:
        return
    primary = workouts[0]
    if record.workout_tag is None:
        record.workout_tag = guess_workout_tag(primary.activity_type)
    elif record.workout_duration_minutes is not None:
        return
    record.workout_detected_from_health = True
    record.workout_duration_minutes = primary.duration_minutes
    record.workout_calories = primary.calories


def merge_mile(record: DayRecord, workouts: list[WorkoutReading]) -> None:
    """Mark the mile done from the longest qualifying run, walk or hike."""
    candidates = [
        workout
        for workout in workouts
        if workout.activity_type in MILE_ACTIVITY_TYPES
        and (workout.distance_m or 0.0) >= MILE_THRESHOLD_METERS
    ]
    if not candidates:
        return
    longest = max(candidates, key=lambda workout: workout.distance_m or 0.0)
    record.mile_completed = True
    record.mile_distance_miles = (longest.distance_m or 0.0) / METERS_PER_MILE
    record.mile_time_seconds = longest.duration_minutes * 60


def merge_water(record: DayRecord, ounces: float | None) -> None:
    """Fill hydration only while no manual amount has been entered."""
    if ounces is not None and record.water_oz == 0:
        record.water_oz = ounces


def merge_activity(record: DayRecord, metric: DailyMetric, value: float | None) -> None:
    """Provider activity totals always overwrite."""
    setattr(record, _ACTIVITY_FIELDS[metric], int(value) if value is not None else None)


@dataclass
class HealthSyncService:
    """Reconciles provider readings with a day's record.

    All category fetches are awaited together, then the record is re-read
    and every merge is applied to it without suspending.
    A failing category is reported and skipped; the rest still merge.
    """

    provider: HealthProvider
    day_service: DayService

    async def full_sync(self, day: date) -> SyncReport:
        """Fetch and merge every category."""
        fetches: dict[str, Callable[[], Awaitable[object]]] = {
            "sleep": lambda: self.provider.fetch_sleep(day),
            "workouts": lambda: self.provider.fetch_workouts(day),
            "water": self._total_fetch(DailyMetric.WATER, day),
        }
        for metric in _ACTIVITY_FIELDS:
            fetches[metric.value] = self._total_fetch(metric, day)
        return await self._sync(day, SyncMode.FULL, fetches)

    async def quick_sync(self, day: date) -> SyncReport:
        """Fetch and merge hydration and step count only."""
        fetches: dict[str, Callable[[], Awaitable[object]]] = {
            "water": self._total_fetch(DailyMetric.WATER, day),
            "steps": self._total_fetch(DailyMetric.STEPS, day),
        }
        return await self._sync(day, SyncMode.QUICK, fetches)

    async def sync_sleep(self, day: date) -> SyncReport:
        """Fetch and merge last night's sleep only."""
        fetches: dict[str, Callable[[], Awaitable[object]]] = {
            "sleep": lambda: self.provider.fetch_sleep(day),
        }
        return await self._sync(day, SyncMode.SLEEP, fetches)

    def _total_fetch(
        self, metric: DailyMetric, day: date
    ) -> Callable[[], Awaitable[object]]:
        return lambda: self.provider.fetch_daily_total(metric, day)

    async def _sync(
        self,
        day: date,
        mode: SyncMode,
        fetches: dict[str, Callable[[], Awaitable[object]]],
    ) -> SyncReport:
        report = SyncReport(day=day, mode=mode)
        record = self.day_service.get_or_create(day)
        if record.is_finalized:
            report.skipped_reason = "finalized"
            _logger.info("Skipping %s sync for finalized day %s", mode, day)
            return report
        try:
            authorized = await self.provider.is_authorized()
        except Exception as exc:
            report.skipped_reason = f"authorization check failed: {exc}"
            _logger.warning("Health provider authorization check failed: %s", exc)
            return report
        if not authorized:
            report.skipped_reason = "unauthorized"
            _logger.info("Health provider not authorized, skipping %s sync", mode)
            return report

        names = list(fetches)
        results = await asyncio.gather(
            *(fetches[name]() for name in names), return_exceptions=True
        )

        # Manual edits or finalization may have landed while awaiting.
        record = self.day_service.get_or_create(day)
        if record.is_finalized:
            report.skipped_reason = "finalized"
            _logger.info(
                "Day %s finalized during %s sync, discarding readings", day, mode
            )
            return report
        for name, result in zip(names, results, strict=True):
            if isinstance(result, BaseException):
                report.errors[name] = f"{type(result).__name__}: {result}"
                _logger.warning("Health sync %s failed for %s: %s", name, day, result)
                continue
            try:
                self._merge(record, name, result)
            except Exception as exc:
                report.errors[name] = f"{type(exc).__name__}: {exc}"
                _logger.exception("Health merge %s failed for %s", name, day)
                continue
            report.merged.append(name)

        if report.merged:
            self.day_service.commit(record)
        return report

    def _merge(self, record: DayRecord, name: str, result: object) -> None:
        if name == "sleep":
            merge_sleep(record, result)  # type: ignore[arg-type]
        elif name == "workouts":
            workouts: list[WorkoutReading] = result  # type: ignore[assignment]
            merge_workout(record, workouts)
            merge_mile(record, workouts)
        elif name == "water":
            merge_water(record, result)  # type: ignore[arg-type]
        else:
            merge_activity(record, DailyMetric(name), result)  # type: ignore[arg-type]
