"""Checklist domain models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID, uuid4


@dataclass(frozen=True, order=True)
class ScheduledTime:
    """Time of day a task is due."""

    hour: int
    minute: int

    @property
    def minutes_since_midnight(self) -> int:
        return self.hour * 60 + self.minute

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


class ChecklistStatus(StrEnum):
    """Status of a checklist task."""

    OPEN = "open"
    DONE = "done"
    SKIPPED = "skipped"


class BuiltInTask(StrEnum):
    """Fixed catalog of daily routine tasks."""

    AM_SKINCARE = "AM Skincare"
    LUNCH_VITAMINS = "Lunch Vitamins"
    CREATINE = "Creatine"
    POST_WORKOUT_LOG = "Post-Workout Log"
    CLOSE_THE_DAY = "Close the Day"
    PM_SKINCARE = "PM Skincare"

    @property
    def default_time(self) -> ScheduledTime:
        return _DEFAULT_TIMES[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def counts_for_points(self) -> bool:
        return self not in _REMINDER_ONLY


_DEFAULT_TIMES = {
    BuiltInTask.AM_SKINCARE: ScheduledTime(8, 40),
    BuiltInTask.LUNCH_VITAMINS: ScheduledTime(12, 0),
    BuiltInTask.CREATINE: ScheduledTime(17, 15),
    BuiltInTask.POST_WORKOUT_LOG: ScheduledTime(19, 45),
    BuiltInTask.CLOSE_THE_DAY: ScheduledTime(20, 30),
    BuiltInTask.PM_SKINCARE: ScheduledTime(23, 0),
}

_DESCRIPTIONS = {
    BuiltInTask.AM_SKINCARE: "Rinse face + apply AM moisturizer",
    BuiltInTask.LUNCH_VITAMINS: "Fish oil + Vitamin D3/K2",
    BuiltInTask.CREATINE: "Creatine chews",
    BuiltInTask.POST_WORKOUT_LOG: "Log workout, tag type, rate quality",
    BuiltInTask.CLOSE_THE_DAY: "Confirm workout + mile + protein + water",
    BuiltInTask.PM_SKINCARE: "Wash face + apply PM moisturizer",
}

_REMINDER_ONLY = frozenset({BuiltInTask.POST_WORKOUT_LOG, BuiltInTask.CLOSE_THE_DAY})


@dataclass(frozen=True)
class BuiltInKind:
    """Task drawn from the built-in catalog."""

    task: BuiltInTask


@dataclass(frozen=True)
class CustomKind:
    """User-defined task created from a routine template."""

    title: str
    description: str | None = None
    points_placeholder: int = 1


TaskKind = BuiltInKind | CustomKind


@dataclass(frozen=True)
class RoutineTaskTemplate:
    """Saved custom task that is copied into every new day."""

    title: str
    scheduled_time: ScheduledTime
    description: str | None = None
    points: int = 1
    id: UUID = field(default_factory=uuid4)


@dataclass
class ChecklistTask:
    """A single obligation for a day."""

    day: date
    kind: TaskKind
    scheduled_time: ScheduledTime
    status: ChecklistStatus = ChecklistStatus.OPEN
    completed_at: datetime | None = None
    skipped_at: datetime | None = None
    id: UUID = field(default_factory=uuid4)

    @classmethod
    def built_in(cls, task: BuiltInTask, day: date) -> "ChecklistTask":
        """Create a task from the built-in catalog at its default time."""
        return cls(day=day, kind=BuiltInKind(task), scheduled_time=task.default_time)

    @classmethod
    def from_template(
        cls, template: RoutineTaskTemplate, day: date
    ) -> "ChecklistTask":
        """Create a custom task from a saved template."""
        return cls(
            day=day,
            kind=CustomKind(
                title=template.title,
                description=template.description,
                points_placeholder=template.points,
            ),
            scheduled_time=template.scheduled_time,
        )

    @property
    def is_custom(self) -> bool:
        return isinstance(self.kind, CustomKind)

    @property
    def is_point_eligible(self) -> bool:
        if isinstance(self.kind, CustomKind):
            return True
        return self.kind.task.counts_for_points

    @property
    def display_title(self) -> str:
        if isinstance(self.kind, CustomKind):
            return self.kind.title or "Custom Task"
        return self.kind.task.value

    @property
    def display_description(self) -> str | None:
        if isinstance(self.kind, CustomKind):
            return self.kind.description
        return self.kind.task.description

    @property
    def is_done(self) -> bool:
        return self.status is ChecklistStatus.DONE

    def mark_done(self, at: datetime) -> None:
        self.status = ChecklistStatus.DONE
        self.completed_at = at
        self.skipped_at = None

    def mark_skipped(self, at: datetime) -> None:
        self.status = ChecklistStatus.SKIPPED
        self.skipped_at = at
        self.completed_at = None

    def reset(self) -> None:
        self.status = ChecklistStatus.OPEN
        self.completed_at = None
        self.skipped_at = None

    def set_status(self, status: ChecklistStatus, at: datetime) -> None:
        """Move the task to a status, stamping the matching timestamp."""
        if status is ChecklistStatus.DONE:
            self.mark_done(at)
        elif status is ChecklistStatus.SKIPPED:
            self.mark_skipped(at)
        else:
            self.reset()

    def toggle(self, at: datetime) -> None:
        """Cycle open -> done -> skipped -> open."""
        if self.status is ChecklistStatus.OPEN:
            self.mark_done(at)
        elif self.status is ChecklistStatus.DONE:
            self.mark_skipped(at)
        else:
            self.reset()


def sort_tasks(tasks: list[ChecklistTask]) -> list[ChecklistTask]:
    """Order tasks by scheduled time, keeping insertion order for ties."""
    return sorted(tasks, key=lambda task: task.scheduled_time.minutes_since_midnight)


def build_checklist(
    day: date, templates: list[RoutineTaskTemplate]
) -> list[ChecklistTask]:
    """Materialize the full task set for a new day."""
    tasks = [ChecklistTask.built_in(task, day) for task in BuiltInTask]
    tasks.extend(ChecklistTask.from_template(template, day) for template in templates)
    return sort_tasks(tasks)
