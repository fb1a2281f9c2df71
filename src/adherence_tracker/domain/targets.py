"""User target models."""

from dataclasses import dataclass

PROTEIN_PER_GOAL_LB = 0.85


@dataclass(frozen=True)
class UserTargets:
    """Daily nutrition and hydration targets."""

    protein_target_g: float = 190.0
    water_target_oz: float = 120.0
    calorie_target: float | None = None
    current_weight_lb: float | None = None
    goal_weight_lb: float | None = None


def protein_target_for(goal_weight_lb: float) -> float:
    """Protein target in grams for a goal body weight."""
    return goal_weight_lb * PROTEIN_PER_GOAL_LB


def water_target_for(current_weight_lb: float) -> float:
    """Water target in ounces: half the current body weight."""
    return current_weight_lb / 2.0
