"""Day record endpoints."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from adherence_tracker.api.models import (
    FoodEntryIn,
    MileIn,
    TaskStatusIn,
    WaterIn,
    WorkoutIn,
)
from adherence_tracker.services.checklist_points import allocate_points
from adherence_tracker.services.day_boundary import app_day_for
from adherence_tracker.services.health_sync import SyncMode, SyncReport
from adherence_tracker.services.scoring import score_grade

if TYPE_CHECKING:
    from adherence_tracker.containers import AppContainer
    from adherence_tracker.domain.days import DayRecord


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


router = APIRouter(tags=["days"], dependencies=[Depends(require_token)])


@router.get("/days/today")
async def today(request: Request) -> dict[str, object]:
    """Return the record for the current app day."""
    container: AppContainer = request.app.state.container
    detector = container.day_boundary_detector
    detector.check()
    app_day = detector.current_app_day or app_day_for(
        detector.clock(), detector.cutoff_hour
    )
    record = container.day_service.get_or_create(app_day)
    return _day_payload(record, container.settings.routine_points)


@router.get("/days")
async def list_days(start: date, end: date, request: Request) -> dict[str, object]:
    """Return stored records in a date range."""
    container: AppContainer = request.app.state.container
    if start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start must not be after end",
        )
    records = container.day_service.list_days(start, end)
    return {
        "days": [
            _day_payload(record, container.settings.routine_points)
            for record in records
        ]
    }


@router.get("/days/{day}")
async def get_day(day: date, request: Request) -> dict[str, object]:
    """Return the record for a date, creating it on first access."""
    container: AppContainer = request.app.state.container
    record = container.day_service.get_or_create(day)
    return _day_payload(record, container.settings.routine_points)


@router.post("/days/{day}/food")
async def add_food(day: date, body: FoodEntryIn, request: Request) -> dict[str, object]:
    """Log a food entry."""
    container: AppContainer = request.app.state.container
    record = container.day_service.add_food(
        day,
        name=body.name,
        calories=body.calories,
        protein_g=body.protein_g,
        carbs_g=body.carbs_g,
        fat_g=body.fat_g,
    )
    return _day_payload(record, container.settings.routine_points)


@router.delete("/days/{day}/food/{entry_id}")
async def remove_food(
    day: date, entry_id: UUID, request: Request
) -> dict[str, object]:
    """Delete a food entry."""
    container: AppContainer = request.app.state.container
    record = container.day_service.remove_food(day, entry_id)
    return _day_payload(record, container.settings.routine_points)


@router.post("/days/{day}/water")
async def log_water(day: date, body: WaterIn, request: Request) -> dict[str, object]:
    """Add or set water intake."""
    container: AppContainer = request.app.state.container
    if body.replace:
        record = container.day_service.set_water(day, body.ounces)
    else:
        record = container.day_service.add_water(day, body.ounces)
    return _day_payload(record, container.settings.routine_points)


@router.post("/days/{day}/workout")
async def log_workout(
    day: date, body: WorkoutIn, request: Request
) -> dict[str, object]:
    """Tag and rate the day's workout."""
    container: AppContainer = request.app.state.container
    record = container.day_service.log_workout(day, body.tag, body.score)
    return _day_payload(record, container.settings.routine_points)


@router.post("/days/{day}/mile")
async def log_mile(day: date, body: MileIn, request: Request) -> dict[str, object]:
    """Mark the mile done."""
    container: AppContainer = request.app.state.container
    record = container.day_service.log_mile(
        day,
        distance_miles=body.distance_miles,
        time_seconds=body.time_seconds,
        score=body.score,
    )
    return _day_payload(record, container.settings.routine_points)


@router.post("/days/{day}/checklist/{task_id}")
async def set_task_status(
    day: date, task_id: UUID, body: TaskStatusIn, request: Request
) -> dict[str, object]:
    """Set a checklist task's status."""
    container: AppContainer = request.app.state.container
    record = container.day_service.set_task_status(day, task_id, body.status)
    return _day_payload(record, container.settings.routine_points)


@router.post("/days/{day}/checklist/{task_id}/toggle")
async def toggle_task(day: date, task_id: UUID, request: Request) -> dict[str, object]:
    """Cycle a checklist task's status."""
    container: AppContainer = request.app.state.container
    record = container.day_service.toggle_task(day, task_id)
    return _day_payload(record, container.settings.routine_points)


@router.post("/days/{day}/sync")
async def sync_day(
    day: date, request: Request, mode: SyncMode = SyncMode.FULL
) -> dict[str, object]:
    """Pull readings from the health provider into the day."""
    container: AppContainer = request.app.state.container
    sync_service = container.health_sync_service
    if mode is SyncMode.QUICK:
        report = await sync_service.quick_sync(day)
    elif mode is SyncMode.SLEEP:
        report = await sync_service.sync_sleep(day)
    else:
        report = await sync_service.full_sync(day)
    record = container.day_service.get_or_create(day)
    return {
        "sync": _report_payload(report),
        "day": _day_payload(record, container.settings.routine_points),
    }


@router.post("/app-day/check")
async def check_app_day(request: Request) -> dict[str, object]:
    """Foreground/resume hook: re-evaluate the app day."""
    container: AppContainer = request.app.state.container
    detector = container.day_boundary_detector
    changed = detector.check()
    app_day = detector.current_app_day
    return {
        "app_day": app_day.isoformat() if app_day else None,
        "changed": changed,
    }


def _day_payload(record: DayRecord, routine_points: int) -> dict[str, object]:
    allocation = allocate_points(record.tasks, routine_points)
    return {
        "day": record.day.isoformat(),
        "score": record.score,
        "score_provisional": record.score_provisional,
        "score_final": record.score_final,
        "is_finalized": record.is_finalized,
        "grade": score_grade(record.score),
        "nutrition": {
            "protein_g": record.protein_g,
            "calories": record.calories,
            "carbs_g": record.carbs_g,
            "fat_g": record.fat_g,
            "food_entries": [
                {
                    "id": str(entry.id),
                    "name": entry.name,
                    "calories": entry.calories,
                    "protein_g": entry.protein_g,
                }
                for entry in record.food_entries
            ],
        },
        "water_oz": record.water_oz,
        "workout": {
            "tag": record.workout_tag.value if record.workout_tag else None,
            "score": record.workout_score,
            "detected_from_health": record.workout_detected_from_health,
            "duration_minutes": record.workout_duration_minutes,
            "calories": record.workout_calories,
        },
        "mile": {
            "completed": record.mile_completed,
            "score": record.mile_score,
            "distance_miles": record.mile_distance_miles,
            "time_seconds": record.mile_time_seconds,
        },
        "sleep": {
            "score": record.sleep_score,
            "duration_minutes": record.sleep_duration_minutes,
            "deep_minutes": record.sleep_deep_minutes,
            "rem_minutes": record.sleep_rem_minutes,
            "efficiency": record.sleep_efficiency,
            "hrv": record.sleep_hrv,
            "resting_hr": record.sleep_resting_hr,
        },
        "activity": {
            "steps": record.steps,
            "active_energy_kcal": record.active_energy_kcal,
            "exercise_minutes": record.exercise_minutes,
        },
        "checklist": [
            {
                "id": str(task.id),
                "title": task.display_title,
                "description": task.display_description,
                "scheduled_time": str(task.scheduled_time),
                "status": task.status.value,
                "points": allocation.get(task.id, 0),
                "point_eligible": task.is_point_eligible,
            }
            for task in record.tasks
        ],
    }


def _report_payload(report: SyncReport) -> dict[str, object]:
    return {
        "mode": report.mode.value,
        "merged": report.merged,
        "errors": report.errors,
        "skipped_reason": report.skipped_reason,
    }
