"""Tests for the day service lifecycle."""

from datetime import UTC, date, datetime
from uuid import uuid4

import pytest

from adherence_tracker.domain.checklist import (
    ChecklistStatus,
    RoutineTaskTemplate,
    ScheduledTime,
)
from adherence_tracker.domain.days import DEFAULT_SAVED_MEALS, WorkoutTag
from adherence_tracker.domain.errors import DayFinalizedError, TaskNotFoundError
from adherence_tracker.domain.targets import UserTargets
from adherence_tracker.services.day_boundary import DayBoundaryDetector
from adherence_tracker.services.days import DayService
from tests.conftest import FixedClock, InMemoryDayRepository, build_day_service

DAY = date(2024, 3, 10)


def test_get_or_create_returns_single_record() -> None:
    repository = InMemoryDayRepository()
    day_service = build_day_service(repository=repository)

    first = day_service.get_or_create(DAY)
    second = day_service.get_or_create(DAY)

    assert first is second
    assert repository.creates == 1
    assert len(first.tasks) == 6
    assert first.score_provisional == 0


def test_get_or_create_copies_routine_templates() -> None:
    template = RoutineTaskTemplate(
        title="Stretch", scheduled_time=ScheduledTime(7, 0)
    )
    service = build_day_service(templates=[template])

    record = service.get_or_create(DAY)

    assert record.tasks[0].display_title == "Stretch"
    assert record.tasks[0].id != template.id
    assert len(record.tasks) == 7


def test_get_day_does_not_create(day_service: DayService) -> None:
    assert day_service.get_day(DAY) is None
    assert day_service.list_days(DAY, DAY) == []


def test_food_entries_drive_nutrition_and_score(day_service: DayService) -> None:
    record = day_service.add_food(DAY, "Chicken", calories=300, protein_g=95)

    assert record.protein_g == 95
    assert record.calories == 300
    assert record.carbs_g is None
    assert record.score_provisional == 13

    entry_id = record.food_entries[0].id
    record = day_service.remove_food(DAY, entry_id)

    assert record.food_entries == []
    assert record.protein_g == 0
    assert record.score_provisional == 0


def test_add_saved_meal_marks_entry(
    day_service: DayService, clock: FixedClock
) -> None:
    record = day_service.add_saved_meal(DAY, DEFAULT_SAVED_MEALS[2])

    entry = record.food_entries[0]
    assert entry.is_saved_meal
    assert entry.logged_at == clock.now
    assert record.carbs_g == 45
    assert record.fat_g == 12


def test_water_add_and_set(day_service: DayService) -> None:
    day_service.add_water(DAY, 40)
    record = day_service.add_water(DAY, 20)
    assert record.water_oz == 60
    assert record.score_provisional == 5

    record = day_service.set_water(DAY, 120)
    assert record.water_oz == 120
    assert record.score_provisional == 10

    record = day_service.add_water(DAY, -500)
    assert record.water_oz == 0


def test_workout_and_mile_logging(day_service: DayService) -> None:
    record = day_service.log_workout(DAY, WorkoutTag.PULL, score=5)
    assert record.workout_completed
    assert record.score_provisional == 20

    record = day_service.log_mile(DAY, distance_miles=1.0, time_seconds=480)
    assert record.mile_completed
    assert record.mile_time_seconds == 480
    assert record.score_provisional == 32

    record = day_service.clear_workout(DAY)
    assert record.workout_tag is None
    assert record.workout_score is None
    assert record.score_provisional == 12


def test_toggle_task_updates_routine_points(day_service: DayService) -> None:
    record = day_service.get_or_create(DAY)
    first = next(task for task in record.tasks if task.is_point_eligible)

    record = day_service.toggle_task(DAY, first.id)
    assert record.task(first.id).status is ChecklistStatus.DONE
    assert record.score_provisional == 3

    record = day_service.toggle_task(DAY, first.id)
    assert record.task(first.id).status is ChecklistStatus.SKIPPED
    assert record.score_provisional == 0


def test_set_task_status(day_service: DayService, clock: FixedClock) -> None:
    record = day_service.get_or_create(DAY)
    task_id = record.tasks[-1].id

    record = day_service.set_task_status(DAY, task_id, ChecklistStatus.DONE)

    assert record.task(task_id).completed_at == clock.now
    assert record.score_provisional == 2


def test_unknown_task_raises(day_service: DayService) -> None:
    with pytest.raises(TaskNotFoundError):
        day_service.toggle_task(DAY, uuid4())


def test_recompute_uses_current_targets() -> None:
    service = build_day_service(targets=UserTargets(protein_target_g=100))
    record = service.add_food(DAY, "Steak", calories=500, protein_g=100)

    assert record.score_provisional == 27


def test_finalize_freezes_score(day_service: DayService, clock: FixedClock) -> None:
    record = day_service.log_workout(DAY, WorkoutTag.LEGS, score=5)

    assert day_service.finalize(record) is True

    assert record.is_finalized
    assert record.score_final == 20
    assert record.score == 20
    assert record.finalized_at == clock.now


def test_finalize_twice_is_noop(day_service: DayService) -> None:
    record = day_service.get_or_create(DAY)
    day_service.finalize(record)
    first_finalized_at = record.finalized_at

    assert day_service.finalize(record) is False
    assert record.finalized_at == first_finalized_at


def test_finalized_day_rejects_manual_edits(day_service: DayService) -> None:
    record = day_service.get_or_create(DAY)
    day_service.finalize(record)

    with pytest.raises(DayFinalizedError):
        day_service.add_water(DAY, 10)
    with pytest.raises(DayFinalizedError):
        day_service.toggle_task(DAY, record.tasks[0].id)

    assert record.water_oz == 0
    assert record.score == 0


def test_recompute_leaves_final_score_alone(day_service: DayService) -> None:
    record = day_service.log_workout(DAY, WorkoutTag.LEGS, score=5)
    day_service.finalize(record)
    record.water_oz = 120

    assert day_service.recompute(record) == 20
    assert record.score_final == 20


def test_finalize_before_only_touches_past_days(day_service: DayService) -> None:
    past = day_service.get_or_create(date(2024, 3, 8))
    yesterday = day_service.get_or_create(date(2024, 3, 9))
    today = day_service.get_or_create(DAY)

    finalized = day_service.finalize_before(DAY)

    assert [record.day for record in finalized] == [past.day, yesterday.day]
    assert past.is_finalized
    assert yesterday.is_finalized
    assert not today.is_finalized
    assert day_service.finalize_before(DAY) == []


def test_attach_finalizes_on_day_change() -> None:
    clock = FixedClock(datetime(2024, 3, 10, 23, 0, tzinfo=UTC))
    service = build_day_service(clock)
    detector = DayBoundaryDetector(clock=clock)
    detector.initialize()
    service.attach(detector)
    record = service.add_water(DAY, 120)

    clock.now = datetime(2024, 3, 11, 3, 59, tzinfo=UTC)
    detector.check()
    assert not record.is_finalized

    clock.now = datetime(2024, 3, 11, 4, 1, tzinfo=UTC)
    detector.check()
    assert record.is_finalized
    assert record.score_final == 10


def test_list_days_returns_range(day_service: DayService) -> None:
    day_service.get_or_create(date(2024, 3, 8))
    day_service.get_or_create(DAY)
    day_service.get_or_create(date(2024, 3, 12))

    records = day_service.list_days(date(2024, 3, 8), DAY)

    assert [record.day for record in records] == [date(2024, 3, 8), DAY]


def test_rate_workout_keeps_tag(day_service: DayService) -> None:
    day_service.log_workout(DAY, WorkoutTag.PUSH)

    record = day_service.rate_workout(DAY, 3)

    assert record.workout_tag is WorkoutTag.PUSH
    assert record.workout_score == 3
    assert record.score_provisional == 16


def test_day_created_after_its_app_day_passed_is_finalized(
    clock: FixedClock,
) -> None:
    service = build_day_service(clock)
    detector = DayBoundaryDetector(clock=clock)
    detector.initialize()
    service.attach(detector)

    past = service.get_or_create(date(2024, 3, 1))

    assert past.is_finalized
    assert past.score_final == 0
    with pytest.raises(DayFinalizedError):
        service.add_water(date(2024, 3, 1), 16)
    assert not service.get_or_create(DAY).is_finalized
