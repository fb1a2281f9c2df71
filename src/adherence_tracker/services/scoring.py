"""Sleep and daily adherence scoring.

Pure functions only: every input combination, including missing optional
metrics and zero or negative targets, yields a score in range.
"""

import math
from collections.abc import Mapping
from uuid import UUID

from adherence_tracker.domain.days import DayRecord
from adherence_tracker.domain.targets import UserTargets
from adherence_tracker.services.checklist_points import (
    ROUTINE_POINTS,
    allocate_points,
    split_budget,
)

PROTEIN_WEIGHT = 25
PROTEIN_BONUS = 2.0
WORKOUT_COMPLETION_WEIGHT = 10
WORKOUT_QUALITY_WEIGHT = 10
MILE_COMPLETION_WEIGHT = 7
MILE_QUALITY_WEIGHT = 8
SLEEP_WEIGHT = 20
HYDRATION_WEIGHT = 10
ROUTINE_WEIGHT = ROUTINE_POINTS
MAX_DAILY_SCORE = 100

DEFAULT_WORKOUT_QUALITY_POINTS = 6.0
DEFAULT_MILE_QUALITY_POINTS = 5.0
MAX_QUALITY = 5
MAX_SLEEP_SCORE = 5.0

OPTIMAL_SLEEP_HOURS_MIN = 7.0
OPTIMAL_SLEEP_HOURS_MAX = 9.0
OPTIMAL_EFFICIENCY = 0.85
OPTIMAL_DEEP_SLEEP_MIN = 0.15
OPTIMAL_DEEP_SLEEP_MAX = 0.25
GOOD_HRV_MS = 50.0
FAIR_HRV_MS = 30.0

_GRADES = ((90, "Elite"), (75, "Strong"), (60, "Decent"), (40, "Slipping"))


def calculate_sleep_score(  # noqa: PLR0913
    total_sleep_minutes: int,
    deep_sleep_minutes: int | None = None,
    rem_sleep_minutes: int | None = None,
    awake_minutes: int | None = None,
    time_in_bed_minutes: int | None = None,
    hrv: float | None = None,
    resting_hr: float | None = None,
) -> int:
    """Score a night of sleep from 0 to 5.

    Duration (2), efficiency (1.5), deep-sleep share (1.5) and an HRV bonus
    (0.5) are summed, capped at 5, rounded to the nearest half and truncated.
    REM, awake time and resting heart rate are accepted but not weighted.
    """
    score = (
        _duration_points(total_sleep_minutes)
        + _efficiency_points(total_sleep_minutes, time_in_bed_minutes)
        + _deep_sleep_points(total_sleep_minutes, deep_sleep_minutes)
        + _hrv_points(hrv)
    )
    capped = min(score, MAX_SLEEP_SCORE)
    rounded = _round_half_up(capped * 2) / 2
    return int(rounded)


def calculate_daily_score(  # noqa: PLR0913
    protein: float,
    protein_target: float,
    workout_completed: bool,
    workout_score: int | None,
    mile_completed: bool,
    mile_score: int | None,
    sleep_score: int | None,
    sleep_duration_minutes: int | None,
    water: float,
    water_target: float,
    checklist_completion: Mapping[UUID, bool],
    checklist_allocation: Mapping[UUID, int] | None = None,
) -> int:
    """Compose the 0-100 daily score from per-category inputs.

    ``checklist_completion`` is keyed by point-eligible task id in day order.
    Without an explicit allocation the routine budget is split over those
    keys, earliest first.
    """
    if checklist_allocation is None:
        checklist_allocation = split_budget(list(checklist_completion), ROUTINE_WEIGHT)
    total = (
        _protein_points(protein, protein_target)
        + _workout_points(workout_completed, workout_score)
        + _mile_points(mile_completed, mile_score)
        + _sleep_points(sleep_score, sleep_duration_minutes)
        + _ratio(water, water_target) * HYDRATION_WEIGHT
        + _routine_points(checklist_completion, checklist_allocation)
    )
    capped = min(total, float(MAX_DAILY_SCORE))
    return max(int(_round_half_up(capped)), 0)


def calculate_provisional_score(
    record: DayRecord, targets: UserTargets, routine_points: int = ROUTINE_WEIGHT
) -> int:
    """Score a day record against the user's targets."""
    completion = {task.id: task.is_done for task in record.tasks}
    return calculate_daily_score(
        protein=record.protein_g,
        protein_target=targets.protein_target_g,
        workout_completed=record.workout_completed,
        workout_score=record.workout_score,
        mile_completed=record.mile_completed,
        mile_score=record.mile_score,
        sleep_score=record.sleep_score,
        sleep_duration_minutes=record.sleep_duration_minutes,
        water=record.water_oz,
        water_target=targets.water_target_oz,
        checklist_completion=completion,
        checklist_allocation=allocate_points(record.tasks, routine_points),
    )


def score_grade(score: int) -> str:
    """Return the label for a daily score band."""
    for threshold, label in _GRADES:
        if score >= threshold:
            return label
    return "Reset"


def _round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


def _ratio(value: float, target: float) -> float:
    if target <= 0:
        return 0.0
    return min(max(value / target, 0.0), 1.0)


def _quality(value: int | None) -> int | None:
    if value is None:
        return None
    return min(max(value, 0), MAX_QUALITY)


def _duration_points(total_sleep_minutes: int) -> float:
    hours = total_sleep_minutes / 60.0
    if OPTIMAL_SLEEP_HOURS_MIN <= hours <= OPTIMAL_SLEEP_HOURS_MAX:
        return 2.0
    if 6.0 <= hours < OPTIMAL_SLEEP_HOURS_MIN:
        return 1.5
    if 5.0 <= hours < 6.0:
        return 1.0
    if OPTIMAL_SLEEP_HOURS_MAX < hours <= 10.0:
        return 1.5
    return 0.5


def _efficiency_points(total_sleep_minutes: int, time_in_bed: int | None) -> float:
    if time_in_bed is None or time_in_bed <= 0:
        return 1.0
    efficiency = total_sleep_minutes / time_in_bed
    if efficiency >= OPTIMAL_EFFICIENCY:
        return 1.5
    if efficiency >= 0.75:
        return 1.0
    if efficiency >= 0.65:
        return 0.5
    return 0.0


def _deep_sleep_points(total_sleep_minutes: int, deep_minutes: int | None) -> float:
    if deep_minutes is None or total_sleep_minutes <= 0:
        return 0.75
    share = deep_minutes / total_sleep_minutes
    if OPTIMAL_DEEP_SLEEP_MIN <= share <= OPTIMAL_DEEP_SLEEP_MAX:
        return 1.5
    if 0.10 <= share < OPTIMAL_DEEP_SLEEP_MIN:
        return 1.0
    if share >= 0.08:
        return 0.5
    return 0.0


def _hrv_points(hrv: float | None) -> float:
    if hrv is None:
        return 0.0
    if hrv >= GOOD_HRV_MS:
        return 0.5
    if hrv >= FAIR_HRV_MS:
        return 0.25
    return 0.0


def _protein_points(protein: float, target: float) -> float:
    points = _ratio(protein, target) * PROTEIN_WEIGHT
    # No bonus without a real target, so all-zero inputs score zero.
    if target > 0 and protein >= target:
        points += PROTEIN_BONUS
    return min(points, PROTEIN_WEIGHT + PROTEIN_BONUS)


def _workout_points(completed: bool, score: int | None) -> float:
    if not completed:
        return 0.0
    quality = _quality(score)
    if quality is None:
        return WORKOUT_COMPLETION_WEIGHT + DEFAULT_WORKOUT_QUALITY_POINTS
    return WORKOUT_COMPLETION_WEIGHT + quality * (WORKOUT_QUALITY_WEIGHT / MAX_QUALITY)


def _mile_points(completed: bool, score: int | None) -> float:
    if not completed:
        return 0.0
    quality = _quality(score)
    if quality is None:
        return MILE_COMPLETION_WEIGHT + DEFAULT_MILE_QUALITY_POINTS
    return MILE_COMPLETION_WEIGHT + quality * (MILE_QUALITY_WEIGHT / MAX_QUALITY)


def _sleep_points(score: int | None, duration_minutes: int | None) -> float:
    points = 0.0
    if score is not None:
        points += min(max(score, 0), MAX_SLEEP_SCORE) * 3.0
    if duration_minutes is not None:
        hours = duration_minutes / 60.0
        if hours >= 7.0:
            points += 5.0
        elif hours >= 6.0:
            points += 3.0
        elif hours >= 5.0:
            points += 1.0
    return points


def _routine_points(
    completion: Mapping[UUID, bool], allocation: Mapping[UUID, int]
) -> float:
    return float(
        sum(points for task_id, points in allocation.items() if completion.get(task_id))
    )
