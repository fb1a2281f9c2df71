"""Domain errors."""

from datetime import date
from uuid import UUID


class DayFinalizedError(Exception):
    """Raised when a manual edit targets a day that has been finalized."""

    def __init__(self, day: date) -> None:
        self.day = day
        super().__init__(f"Day {day.isoformat()} is finalized and can't be edited")


class TaskNotFoundError(LookupError):
    """Raised when a checklist task id is not part of the day."""

    def __init__(self, day: date, task_id: UUID) -> None:
        self.day = day
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found for {day.isoformat()}")
