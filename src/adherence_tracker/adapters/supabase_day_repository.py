"""Supabase repository for day records."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from adherence_tracker.domain.checklist import (
    BuiltInKind,
    BuiltInTask,
    ChecklistStatus,
    ChecklistTask,
    CustomKind,
    ScheduledTime,
)
from adherence_tracker.domain.days import DayRecord, FoodEntry, WorkoutTag
from adherence_tracker.services.days import DayRepository

_PLAIN_COLUMNS = (
    "protein_g",
    "calories",
    "carbs_g",
    "fat_g",
    "water_oz",
    "workout_score",
    "workout_detected_from_health",
    "workout_duration_minutes",
    "workout_calories",
    "mile_completed",
    "mile_score",
    "mile_distance_miles",
    "mile_time_seconds",
    "sleep_score",
    "sleep_duration_minutes",
    "sleep_deep_minutes",
    "sleep_rem_minutes",
    "sleep_light_minutes",
    "sleep_awake_minutes",
    "sleep_efficiency",
    "sleep_hrv",
    "sleep_resting_hr",
    "steps",
    "active_energy_kcal",
    "exercise_minutes",
    "score_provisional",
    "score_final",
    "is_finalized",
)


@dataclass
class SupabaseDayRepository(DayRepository):
    """Supabase implementation for day records, tasks and food entries."""

    client: Client

    def get_by_date(self, day: date) -> DayRecord | None:
        """Return the record for a date with its tasks and food entries."""
        response = (
            self.client.table("day_records")
            .select("*")
            .eq("day", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return self._hydrate(response.data)[0]

    def create(self, record: DayRecord) -> DayRecord:
        """Insert the day row followed by its checklist tasks."""
        response = (
            self.client.table("day_records").insert(_day_row(record)).execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to create day record {record.day}")
        self._write_tasks(record)
        self._write_food_entries(record)
        return record

    def save(self, record: DayRecord) -> None:
        """Update the day row and sync its child rows."""
        self.client.table("day_records").update(_day_row(record)).eq(
            "day", record.day.isoformat()
        ).execute()
        self._write_tasks(record)
        self.client.table("food_entries").delete().eq(
            "day", record.day.isoformat()
        ).execute()
        self._write_food_entries(record)

    def list_unfinalized_before(self, day: date) -> list[DayRecord]:
        """Return provisional records dated before a date."""
        response = (
            self.client.table("day_records")
            .select("*")
            .eq("is_finalized", False)
            .lt("day", day.isoformat())
            .order("day", desc=False)
            .execute()
        )
        return self._hydrate(response.data or [])

    def list_range(self, start: date, end: date) -> list[DayRecord]:
        """Return records between two dates, inclusive."""
        response = (
            self.client.table("day_records")
            .select("*")
            .gte("day", start.isoformat())
            .lte("day", end.isoformat())
            .order("day", desc=False)
            .execute()
        )
        return self._hydrate(response.data or [])

    def _hydrate(self, rows: list[dict[str, object]]) -> list[DayRecord]:
        if not rows:
            return []
        records = [_parse_day(row) for row in rows]
        days = [record.day.isoformat() for record in records]
        by_day = {record.day: record for record in records}

        task_rows = (
            self.client.table("checklist_tasks")
            .select("*")
            .in_("day", days)
            .order("position", desc=False)
            .execute()
        ).data or []
        for row in task_rows:
            task = _parse_task(row)
            if task.day in by_day:
                by_day[task.day].tasks.append(task)

        food_rows = (
            self.client.table("food_entries")
            .select("*")
            .in_("day", days)
            .order("logged_at", desc=False)
            .execute()
        ).data or []
        for row in food_rows:
            day = date.fromisoformat(str(row["day"]))
            if day in by_day:
                by_day[day].food_entries.append(_parse_food(row))
        return records

    def _write_tasks(self, record: DayRecord) -> None:
        payload = [
            _task_row(task, position) for position, task in enumerate(record.tasks)
        ]
        if payload:
            self.client.table("checklist_tasks").upsert(payload).execute()

    def _write_food_entries(self, record: DayRecord) -> None:
        payload = [_food_row(record.day, entry) for entry in record.food_entries]
        if payload:
            self.client.table("food_entries").insert(payload).execute()


def _day_row(record: DayRecord) -> dict[str, object]:
    row: dict[str, object] = {"day": record.day.isoformat()}
    for column in _PLAIN_COLUMNS:
        row[column] = getattr(record, column)
    row["workout_tag"] = record.workout_tag.value if record.workout_tag else None
    row["finalized_at"] = _iso(record.finalized_at)
    return row


def _parse_day(row: dict[str, object]) -> DayRecord:
    record = DayRecord(day=date.fromisoformat(str(row["day"])))
    for column in _PLAIN_COLUMNS:
        if column in row and row[column] is not None:
            setattr(record, column, row[column])
    tag = row.get("workout_tag")
    record.workout_tag = WorkoutTag(tag) if isinstance(tag, str) and tag else None
    record.finalized_at = _parse_datetime(row.get("finalized_at"))
    return record


def _task_row(task: ChecklistTask, position: int) -> dict[str, object]:
    row: dict[str, object] = {
        "id": str(task.id),
        "day": task.day.isoformat(),
        "position": position,
        "scheduled_hour": task.scheduled_time.hour,
        "scheduled_minute": task.scheduled_time.minute,
        "status": task.status.value,
        "completed_at": _iso(task.completed_at),
        "skipped_at": _iso(task.skipped_at),
        "built_in_task": None,
        "custom_title": None,
        "custom_description": None,
        "custom_points": None,
    }
    if isinstance(task.kind, CustomKind):
        row["kind"] = "custom"
        row["custom_title"] = task.kind.title
        row["custom_description"] = task.kind.description
        row["custom_points"] = task.kind.points_placeholder
    else:
        row["kind"] = "built_in"
        row["built_in_task"] = task.kind.task.value
    return row


def _parse_task(row: dict[str, object]) -> ChecklistTask:
    kind: BuiltInKind | CustomKind
    if row.get("kind") == "custom":
        kind = CustomKind(
            title=str(row.get("custom_title") or "Custom Task"),
            description=row.get("custom_description"),  # type: ignore[arg-type]
            points_placeholder=int(row.get("custom_points") or 1),
        )
    else:
        kind = BuiltInKind(BuiltInTask(str(row["built_in_task"])))
    return ChecklistTask(
        id=UUID(str(row["id"])),
        day=date.fromisoformat(str(row["day"])),
        kind=kind,
        scheduled_time=ScheduledTime(
            int(row.get("scheduled_hour") or 0),
            int(row.get("scheduled_minute") or 0),
        ),
        status=ChecklistStatus(str(row.get("status") or "open")),
        completed_at=_parse_datetime(row.get("completed_at")),
        skipped_at=_parse_datetime(row.get("skipped_at")),
    )


def _food_row(day: date, entry: FoodEntry) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "day": day.isoformat(),
        "name": entry.name,
        "calories": entry.calories,
        "protein_g": entry.protein_g,
        "carbs_g": entry.carbs_g,
        "fat_g": entry.fat_g,
        "is_saved_meal": entry.is_saved_meal,
        "logged_at": _iso(entry.logged_at),
    }


def _parse_food(row: dict[str, object]) -> FoodEntry:
    carbs = row.get("carbs_g")
    fat = row.get("fat_g")
    return FoodEntry(
        id=UUID(str(row["id"])),
        name=str(row.get("name") or "item"),
        calories=float(row.get("calories") or 0.0),
        protein_g=float(row.get("protein_g") or 0.0),
        carbs_g=float(carbs) if isinstance(carbs, int | float) else None,
        fat_g=float(fat) if isinstance(fat, int | float) else None,
        is_saved_meal=bool(row.get("is_saved_meal")),
        logged_at=_parse_datetime(row.get("logged_at")),
    )


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_datetime(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None
