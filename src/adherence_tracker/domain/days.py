"""Domain models for a single day's record."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID, uuid4

from adherence_tracker.domain.checklist import ChecklistTask
from adherence_tracker.domain.errors import DayFinalizedError


class WorkoutTag(StrEnum):
    """Training split a workout belongs to."""

    PULL = "Pull (Back/Bis)"
    PUSH = "Push (Chest/Shoulders)"
    LEGS = "Legs"
    ARMS_CORE = "Arms+Core"
    UPPER_PUMP = "Upper Pump"
    REST = "Rest"


@dataclass(frozen=True)
class FoodEntry:
    """Logged food or meal."""

    name: str
    calories: float
    protein_g: float
    carbs_g: float | None = None
    fat_g: float | None = None
    is_saved_meal: bool = False
    logged_at: datetime | None = None
    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class SavedMeal:
    """Quick-add meal preset."""

    name: str
    calories: float
    protein_g: float
    carbs_g: float | None = None
    fat_g: float | None = None

    def to_food_entry(self, logged_at: datetime) -> FoodEntry:
        return FoodEntry(
            name=self.name,
            calories=self.calories,
            protein_g=self.protein_g,
            carbs_g=self.carbs_g,
            fat_g=self.fat_g,
            is_saved_meal=True,
            logged_at=logged_at,
        )


DEFAULT_SAVED_MEALS = (
    SavedMeal(name="Clear Whey Shake", calories=90, protein_g=20),
    SavedMeal(name="Casein Shake", calories=120, protein_g=24),
    SavedMeal(name="Meal Prep Bowl", calories=450, protein_g=40, carbs_g=45, fat_g=12),
)


@dataclass
class DayRecord:
    """Aggregate record for one calendar day."""

    day: date
    tasks: list[ChecklistTask] = field(default_factory=list)
    food_entries: list[FoodEntry] = field(default_factory=list)

    # Nutrition
    protein_g: float = 0.0
    calories: float = 0.0
    carbs_g: float | None = None
    fat_g: float | None = None

    # Hydration
    water_oz: float = 0.0

    # Workout
    workout_tag: WorkoutTag | None = None
    workout_score: int | None = None
    workout_detected_from_health: bool = False
    workout_duration_minutes: int | None = None
    workout_calories: int | None = None

    # Mile
    mile_completed: bool = False
    mile_score: int | None = None
    mile_distance_miles: float | None = None
    mile_time_seconds: int | None = None

    # Sleep
    sleep_score: int | None = None
    sleep_duration_minutes: int | None = None
    sleep_deep_minutes: int | None = None
    sleep_rem_minutes: int | None = None
    sleep_light_minutes: int | None = None
    sleep_awake_minutes: int | None = None
    sleep_efficiency: float | None = None
    sleep_hrv: float | None = None
    sleep_resting_hr: float | None = None

    # Activity
    steps: int | None = None
    active_energy_kcal: int | None = None
    exercise_minutes: int | None = None

    # Score
    score_provisional: int = 0
    score_final: int | None = None
    is_finalized: bool = False
    finalized_at: datetime | None = None

    @property
    def workout_completed(self) -> bool:
        return self.workout_tag is not None

    @property
    def score(self) -> int:
        """Return the final score once frozen, otherwise the live one."""
        if self.score_final is not None:
            return self.score_final
        return self.score_provisional

    def ensure_editable(self) -> None:
        """Raise if the day has been finalized."""
        if self.is_finalized:
            raise DayFinalizedError(self.day)

    def task(self, task_id: UUID) -> ChecklistTask | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def refresh_nutrition_totals(self) -> None:
        """Re-derive nutrition totals from the logged food entries."""
        self.protein_g = sum(entry.protein_g for entry in self.food_entries)
        self.calories = sum(entry.calories for entry in self.food_entries)
        carbs = [e.carbs_g for e in self.food_entries if e.carbs_g is not None]
        fats = [e.fat_g for e in self.food_entries if e.fat_g is not None]
        self.carbs_g = sum(carbs) if carbs else None
        self.fat_g = sum(fats) if fats else None

    def finalize(self, at: datetime) -> bool:
        """Freeze the provisional score. Returns False when already final."""
        if self.is_finalized:
            return False
        self.score_final = self.score_provisional
        self.is_finalized = True
        self.finalized_at = at
        return True
