"""Day record lifecycle: fetch-or-create, manual entry, scoring, finalization."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from adherence_tracker.domain.checklist import ChecklistStatus, build_checklist
from adherence_tracker.domain.days import DayRecord, FoodEntry, SavedMeal, WorkoutTag
from adherence_tracker.domain.errors import TaskNotFoundError
from adherence_tracker.services.checklist_points import ROUTINE_POINTS
from adherence_tracker.services.day_boundary import DayBoundaryDetector
from adherence_tracker.services.scoring import calculate_provisional_score
from adherence_tracker.services.user_settings import UserSettingsService

_logger = logging.getLogger(__name__)


class DayRepository(Protocol):
    """Persistence interface for day records keyed by date."""

    def get_by_date(self, day: date) -> DayRecord | None:
        """Return the record for a date, if present."""

    def create(self, record: DayRecord) -> DayRecord:
        """Insert a new record with its checklist tasks."""

    def save(self, record: DayRecord) -> None:
        """Persist all fields of an existing record."""

    def list_unfinalized_before(self, day: date) -> list[DayRecord]:
        """Return provisional records dated strictly before a date."""

    def list_range(self, start: date, end: date) -> list[DayRecord]:
        """Return records between two dates, inclusive, oldest first."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class DayService:
    """Owns every mutation path of a day record.

    Each mutation is followed by a provisional score recompute before the
    record is saved. Manual edits on a finalized day raise DayFinalizedError.
    """

    repository: DayRepository
    user_settings_service: UserSettingsService
    routine_points: int = ROUTINE_POINTS
    clock: Callable[[], datetime] = _utc_now
    app_day: Callable[[], date | None] | None = None

    def get_day(self, day: date) -> DayRecord | None:
        """Return an existing record without creating one."""
        return self.repository.get_by_date(day)

    def get_or_create(self, day: date) -> DayRecord:
        """Return the record for a date, creating it with its checklist.

        A record created for a date before the current app day is finalized
        straight away.
        """
        existing = self.repository.get_by_date(day)
        if existing is not None:
            return existing
        templates = self.user_settings_service.list_routine_templates()
        record = DayRecord(day=day, tasks=build_checklist(day, templates))
        self.recompute(record)
        _logger.info("Created day record %s with %s tasks", day, len(record.tasks))
        created = self.repository.create(record)
        current_app_day = self.app_day() if self.app_day is not None else None
        if current_app_day is not None and day < current_app_day:
            self.finalize(created)
        return created

    def list_days(self, start: date, end: date) -> list[DayRecord]:
        """Return stored records in a date range."""
        return self.repository.list_range(start, end)

    def recompute(self, record: DayRecord) -> int:
        """Refresh derived nutrition totals and the provisional score."""
        if record.is_finalized:
            return record.score
        if record.food_entries:
            record.refresh_nutrition_totals()
        record.score_provisional = calculate_provisional_score(
            record, self.user_settings_service.get_targets(), self.routine_points
        )
        return record.score_provisional

    def commit(self, record: DayRecord) -> DayRecord:
        """Recompute then persist."""
        self.recompute(record)
        self.repository.save(record)
        return record

    def add_food(  # noqa: PLR0913
        self,
        day: date,
        name: str,
        calories: float,
        protein_g: float,
        carbs_g: float | None = None,
        fat_g: float | None = None,
    ) -> DayRecord:
        """Log a food entry."""
        record = self._editable(day)
        record.food_entries.append(
            FoodEntry(
                name=name,
                calories=calories,
                protein_g=protein_g,
                carbs_g=carbs_g,
                fat_g=fat_g,
                logged_at=self.clock(),
            )
        )
        record.refresh_nutrition_totals()
        return self.commit(record)

    def add_saved_meal(self, day: date, meal: SavedMeal) -> DayRecord:
        """Log a saved meal preset."""
        record = self._editable(day)
        record.food_entries.append(meal.to_food_entry(self.clock()))
        record.refresh_nutrition_totals()
        return self.commit(record)

    def remove_food(self, day: date, entry_id: UUID) -> DayRecord:
        """Delete a food entry if present."""
        record = self._editable(day)
        record.food_entries = [e for e in record.food_entries if e.id != entry_id]
        record.refresh_nutrition_totals()
        return self.commit(record)

    def add_water(self, day: date, ounces: float) -> DayRecord:
        """Add to the day's water total."""
        record = self._editable(day)
        record.water_oz = max(record.water_oz + ounces, 0.0)
        return self.commit(record)

    def set_water(self, day: date, ounces: float) -> DayRecord:
        """Overwrite the day's water total."""
        record = self._editable(day)
        record.water_oz = max(ounces, 0.0)
        return self.commit(record)

    def log_workout(
        self, day: date, tag: WorkoutTag, score: int | None = None
    ) -> DayRecord:
        """Record a workout and its quality rating."""
        record = self._editable(day)
        record.workout_tag = tag
        if score is not None:
            record.workout_score = score
        return self.commit(record)

    def rate_workout(self, day: date, score: int) -> DayRecord:
        """Rate a workout that was logged or detected earlier."""
        record = self._editable(day)
        record.workout_score = score
        return self.commit(record)

    def clear_workout(self, day: date) -> DayRecord:
        """Remove the workout tag and rating."""
        record = self._editable(day)
        record.workout_tag = None
        record.workout_score = None
        return self.commit(record)

    def log_mile(
        self,
        day: date,
        distance_miles: float | None = None,
        time_seconds: int | None = None,
        score: int | None = None,
    ) -> DayRecord:
        """Mark the mile as completed."""
        record = self._editable(day)
        record.mile_completed = True
        if distance_miles is not None:
            record.mile_distance_miles = distance_miles
        if time_seconds is not None:
            record.mile_time_seconds = time_seconds
        if score is not None:
            record.mile_score = score
        return self.commit(record)

    def set_task_status(
        self, day: date, task_id: UUID, status: ChecklistStatus
    ) -> DayRecord:
        """Move a checklist task to a status."""
        record = self._editable(day)
        task = record.task(task_id)
        if task is None:
            raise TaskNotFoundError(day, task_id)
        task.set_status(status, self.clock())
        return self.commit(record)

    def toggle_task(self, day: date, task_id: UUID) -> DayRecord:
        """Cycle a checklist task open -> done -> skipped -> open."""
        record = self._editable(day)
        task = record.task(task_id)
        if task is None:
            raise TaskNotFoundError(day, task_id)
        task.toggle(self.clock())
        return self.commit(record)

    def finalize(self, record: DayRecord) -> bool:
        """Freeze a record's score. Finalizing twice is a no-op."""
        if record.is_finalized:
            return False
        self.recompute(record)
        record.finalize(self.clock())
        self.repository.save(record)
        _logger.info("Finalized %s with score %s", record.day, record.score_final)
        return True

    def finalize_before(self, app_day: date) -> list[DayRecord]:
        """Finalize every provisional record dated before the app day."""
        finalized = []
        for record in self.repository.list_unfinalized_before(app_day):
            if record.day < app_day and self.finalize(record):
                finalized.append(record)
        return finalized

    def attach(self, detector: DayBoundaryDetector) -> None:
        """Finalize past days whenever the detector reports a new app day.

        Days first created after their app day has passed are finalized on
        creation.
        """
        self.app_day = lambda: detector.current_app_day

        def on_day_change() -> None:
            if detector.current_app_day is not None:
                self.finalize_before(detector.current_app_day)

        detector.subscribe(on_day_change)

    def _editable(self, day: date) -> DayRecord:
        record = self.get_or_create(day)
        record.ensure_editable()
        return record
