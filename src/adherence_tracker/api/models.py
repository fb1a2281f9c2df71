"""Pydantic models for API request bodies."""

from pydantic import BaseModel, Field

from adherence_tracker.domain.checklist import ChecklistStatus
from adherence_tracker.domain.days import WorkoutTag


class FoodEntryIn(BaseModel):
    """Food entry payload."""

    name: str
    calories: float = Field(ge=0)
    protein_g: float = Field(ge=0)
    carbs_g: float | None = Field(default=None, ge=0)
    fat_g: float | None = Field(default=None, ge=0)


class WaterIn(BaseModel):
    """Water payload; ``replace`` overwrites instead of adding."""

    ounces: float
    replace: bool = False


class WorkoutIn(BaseModel):
    """Workout log payload."""

    tag: WorkoutTag
    score: int | None = Field(default=None, ge=0, le=5)


class MileIn(BaseModel):
    """Mile completion payload."""

    distance_miles: float | None = Field(default=None, ge=0)
    time_seconds: int | None = Field(default=None, ge=0)
    score: int | None = Field(default=None, ge=0, le=5)


class TaskStatusIn(BaseModel):
    """Checklist status payload."""

    status: ChecklistStatus
