"""User settings service."""

from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from adherence_tracker.domain.checklist import RoutineTaskTemplate
from adherence_tracker.domain.targets import (
    UserTargets,
    protein_target_for,
    water_target_for,
)


class UserSettingsRepository(Protocol):
    """Persistence interface for user targets and routine templates."""

    def get_targets(self) -> UserTargets | None:
        """Return stored targets if any."""

    def save_targets(self, targets: UserTargets) -> None:
        """Persist targets."""

    def list_routine_templates(self) -> list[RoutineTaskTemplate]:
        """Return saved custom task templates."""

    def save_routine_templates(self, templates: list[RoutineTaskTemplate]) -> None:
        """Replace the saved custom task templates."""


@dataclass
class UserSettingsService:
    """Service for targets and custom routine tasks."""

    repository: UserSettingsRepository

    def get_targets(self) -> UserTargets:
        """Return the stored targets or the defaults."""
        return self.repository.get_targets() or UserTargets()

    def set_targets(self, targets: UserTargets) -> None:
        """Persist new targets."""
        self.repository.save_targets(targets)

    def set_body_weights(
        self, current_weight_lb: float, goal_weight_lb: float
    ) -> UserTargets:
        """Store body weights and derive protein and water targets from them."""
        targets = replace(
            self.get_targets(),
            current_weight_lb=current_weight_lb,
            goal_weight_lb=goal_weight_lb,
            protein_target_g=protein_target_for(goal_weight_lb),
            water_target_oz=water_target_for(current_weight_lb),
        )
        self.repository.save_targets(targets)
        return targets

    def list_routine_templates(self) -> list[RoutineTaskTemplate]:
        """Return saved custom task templates."""
        return self.repository.list_routine_templates()

    def add_routine_template(self, template: RoutineTaskTemplate) -> None:
        """Append a custom task template; applies to days created afterwards."""
        templates = self.repository.list_routine_templates()
        templates.append(template)
        self.repository.save_routine_templates(templates)

    def remove_routine_template(self, template_id: UUID) -> bool:
        """Remove a template by id. Returns False when it wasn't saved."""
        templates = self.repository.list_routine_templates()
        remaining = [t for t in templates if t.id != template_id]
        if len(remaining) == len(templates):
            return False
        self.repository.save_routine_templates(remaining)
        return True
