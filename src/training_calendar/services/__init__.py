"""Services for editing and coordinating training plans."""

from .base import BaseService
from .plan_editor import (
    WorkoutSpec,
    WorkoutUpdate,
    build_workout,
    apply_update,
    add_workout,
    update_workout,
    update_nickname,
    remove_workout,
    reorder_within_day,
    move_workout,
    convert_units,
)
from .session import (
    DOCUMENT_SLOT,
    PLAN_SLOT,
    SETTINGS_SLOT,
    PlanGenerator,
    TrainingSession,
    TrainingStep,
)

__all__ = [
    # Base classes
    "BaseService",
    # Plan editing
    "WorkoutSpec",
    "WorkoutUpdate",
    "build_workout",
    "apply_update",
    "add_workout",
    "update_workout",
    "update_nickname",
    "remove_workout",
    "reorder_within_day",
    "move_workout",
    "convert_units",
    # Session
    "TrainingSession",
    "TrainingStep",
    "PlanGenerator",
    "SETTINGS_SLOT",
    "PLAN_SLOT",
    "DOCUMENT_SLOT",
]
