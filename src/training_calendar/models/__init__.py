"""Data models for the training calendar."""

from .plans import (
    # Enums
    Day,
    WorkoutType,
    MeasurementType,
    # Constants
    DAYS,
    DAY_KEYS,
    WORKOUT_TYPES,
    MAX_AMOUNT,
    # Measurements
    Distance,
    Duration,
    Measurement,
    # Core dataclasses
    Workout,
    WeekDays,
    Week,
    Plan,
    WorkoutLocation,
    # Utility functions
    compute_weekly_total,
    recompute_weekly_total,
    parse_iso_date,
)

from .document import (
    SCHEMA_VERSION,
    PlanSource,
    RaceDistance,
    WorkoutSlot,
    TrainingDay,
    PlanSettings,
    PlanDocument,
)

__all__ = [
    "Day",
    "WorkoutType",
    "MeasurementType",
    "DAYS",
    "DAY_KEYS",
    "WORKOUT_TYPES",
    "MAX_AMOUNT",
    "Distance",
    "Duration",
    "Measurement",
    "Workout",
    "WeekDays",
    "Week",
    "Plan",
    "WorkoutLocation",
    "compute_weekly_total",
    "recompute_weekly_total",
    "parse_iso_date",
    "SCHEMA_VERSION",
    "PlanSource",
    "RaceDistance",
    "WorkoutSlot",
    "TrainingDay",
    "PlanSettings",
    "PlanDocument",
]
