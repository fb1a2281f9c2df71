"""Supabase repository for user targets and routine templates."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from adherence_tracker.domain.checklist import RoutineTaskTemplate, ScheduledTime
from adherence_tracker.domain.targets import UserTargets
from adherence_tracker.services.user_settings import UserSettingsRepository

_TARGETS_ROW_ID = 1


@dataclass
class SupabaseUserSettingsRepository(UserSettingsRepository):
    """Supabase implementation for user settings."""

    client: Client

    def get_targets(self) -> UserTargets | None:
        """Return the stored targets row."""
        response = (
            self.client.table("user_targets")
            .select(
                "protein_target_g, water_target_oz, calorie_target, "
                "current_weight_lb, goal_weight_lb"
            )
            .eq("id", _TARGETS_ROW_ID)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return UserTargets(
            protein_target_g=float(row.get("protein_target_g") or 0.0),
            water_target_oz=float(row.get("water_target_oz") or 0.0),
            calorie_target=_optional_float(row.get("calorie_target")),
            current_weight_lb=_optional_float(row.get("current_weight_lb")),
            goal_weight_lb=_optional_float(row.get("goal_weight_lb")),
        )

    def save_targets(self, targets: UserTargets) -> None:
        """Upsert the single targets row."""
        self.client.table("user_targets").upsert(
            {
                "id": _TARGETS_ROW_ID,
                "protein_target_g": targets.protein_target_g,
                "water_target_oz": targets.water_target_oz,
                "calorie_target": targets.calorie_target,
                "current_weight_lb": targets.current_weight_lb,
                "goal_weight_lb": targets.goal_weight_lb,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).execute()

    def list_routine_templates(self) -> list[RoutineTaskTemplate]:
        """Return saved templates in their stored order."""
        response = (
            self.client.table("routine_templates")
            .select(
                "id, title, description, points, scheduled_hour, scheduled_minute"
            )
            .order("position", desc=False)
            .execute()
        )
        return [_parse_template(row) for row in response.data or []]

    def save_routine_templates(self, templates: list[RoutineTaskTemplate]) -> None:
        """Replace all saved templates."""
        self.client.table("routine_templates").delete().neq(
            "id", "00000000-0000-0000-0000-000000000000"
        ).execute()
        payload = [
            {
                "id": str(template.id),
                "position": position,
                "title": template.title,
                "description": template.description,
                "points": template.points,
                "scheduled_hour": template.scheduled_time.hour,
                "scheduled_minute": template.scheduled_time.minute,
            }
            for position, template in enumerate(templates)
        ]
        if payload:
            self.client.table("routine_templates").insert(payload).execute()


def _parse_template(row: dict[str, object]) -> RoutineTaskTemplate:
    return RoutineTaskTemplate(
        id=UUID(str(row["id"])),
        title=str(row.get("title") or "Custom Task"),
        description=row.get("description"),  # type: ignore[arg-type]
        points=int(row.get("points") or 1),
        scheduled_time=ScheduledTime(
            _int_or(row.get("scheduled_hour"), 12),
            _int_or(row.get("scheduled_minute"), 0),
        ),
    )


def _int_or(value: object, default: int) -> int:
    if isinstance(value, int | float):
        return int(value)
    return default


def _optional_float(value: object) -> float | None:
    if isinstance(value, int | float):
        return float(value)
    return None
