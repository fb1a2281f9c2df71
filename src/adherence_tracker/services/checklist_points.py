"""Fair division of the routine point budget across checklist tasks."""

from collections.abc import Sequence
from uuid import UUID

from adherence_tracker.domain.checklist import ChecklistTask, sort_tasks

ROUTINE_POINTS = 10


def allocate_points(
    tasks: Sequence[ChecklistTask], budget: int = ROUTINE_POINTS
) -> dict[UUID, int]:
    """Split the budget across point-eligible tasks so it sums exactly.

    Every eligible task gets ``budget // n`` points and the first
    ``budget % n`` tasks in day order get one extra. Reminder-only tasks
    are left out of the mapping.
    """
    eligible = [task for task in sort_tasks(list(tasks)) if task.is_point_eligible]
    return split_budget([task.id for task in eligible], budget)


def split_budget(
    task_ids: Sequence[UUID], budget: int = ROUTINE_POINTS
) -> dict[UUID, int]:
    """Split the budget evenly over ids in day order, remainder first."""
    if not task_ids:
        return {}
    base, remainder = divmod(max(budget, 0), len(task_ids))
    return {
        task_id: base + (1 if index < remainder else 0)
        for index, task_id in enumerate(task_ids)
    }


def points_for(
    task: ChecklistTask,
    tasks: Sequence[ChecklistTask],
    budget: int = ROUTINE_POINTS,
) -> int:
    """Return the points currently allocated to one task."""
    return allocate_points(tasks, budget).get(task.id, 0)


def total_points_earned(
    tasks: Sequence[ChecklistTask], budget: int = ROUTINE_POINTS
) -> int:
    """Sum the allocation of every completed task."""
    allocation = allocate_points(tasks, budget)
    return sum(allocation.get(task.id, 0) for task in tasks if task.is_done)
