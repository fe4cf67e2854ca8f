"""Plan state engine for running training calendars."""

from .exceptions import TrainingCalendarError, ErrorCode
from .models import Plan, PlanDocument, PlanSettings, Week, Workout
from .schema import validate, normalize, wrap, parse_document, to_json, from_json
from .services.session import TrainingSession, TrainingStep
from .units import DistanceUnit, convert_distance, format_distance

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Errors
    "TrainingCalendarError",
    "ErrorCode",
    # Models
    "Plan",
    "PlanDocument",
    "PlanSettings",
    "Week",
    "Workout",
    # Schema
    "validate",
    "normalize",
    "wrap",
    "parse_document",
    "to_json",
    "from_json",
    # Session
    "TrainingSession",
    "TrainingStep",
    # Units
    "DistanceUnit",
    "convert_distance",
    "format_distance",
]
