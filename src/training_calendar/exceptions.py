"""
Custom exceptions for the training calendar engine.

This module defines a hierarchy of exceptions that provide clear error
handling throughout the package. Each exception includes:
- A descriptive message
- An error code for host applications
- HTTP-style status code mapping
- Optional details for debugging
"""

from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent error responses."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Workout errors
    WORKOUT_NOT_FOUND = "WORKOUT_NOT_FOUND"
    WORKOUT_VALIDATION_ERROR = "WORKOUT_VALIDATION_ERROR"

    # Plan errors
    WEEK_NOT_FOUND = "WEEK_NOT_FOUND"
    INVALID_DAY = "INVALID_DAY"
    PLAN_VALIDATION_ERROR = "PLAN_VALIDATION_ERROR"
    PLAN_IMPORT_FAILED = "PLAN_IMPORT_FAILED"
    UNSUPPORTED_SCHEMA_VERSION = "UNSUPPORTED_SCHEMA_VERSION"

    # Session errors
    SESSION_STATE_ERROR = "SESSION_STATE_ERROR"
    NO_ACTIVE_PLAN = "NO_ACTIVE_PLAN"
    PLAN_GENERATION_FAILED = "PLAN_GENERATION_FAILED"
    GENERATOR_NOT_CONFIGURED = "GENERATOR_NOT_CONFIGURED"

    # Storage errors
    STORAGE_ERROR = "STORAGE_ERROR"


class TrainingCalendarError(Exception):
    """
    Base exception for all training calendar errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        status_code: HTTP-style status code for host responses
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for host responses."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Validation Errors (400)
# ============================================================================

class ValidationError(TrainingCalendarError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=error_details,
        )


class WorkoutValidationError(ValidationError):
    """Raised when workout data passed to an edit is invalid."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, field=field, details=details)
        self.code = ErrorCode.WORKOUT_VALIDATION_ERROR


class PlanValidationError(ValidationError):
    """
    Raised when a plan document fails structural validation.

    Every problem found is kept in ``errors`` so a single attempt
    reports all of them.
    """

    def __init__(
        self,
        errors: List[str],
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["errors"] = list(errors)
        super().__init__(
            message=message or f"Invalid plan structure: {'; '.join(errors)}",
            details=error_details,
        )
        self.errors = list(errors)
        self.code = ErrorCode.PLAN_VALIDATION_ERROR


class PlanImportError(PlanValidationError):
    """Raised when an import is rejected; the current session is left unchanged."""

    def __init__(
        self,
        errors: List[str],
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            errors=errors,
            message=f"Import rejected: {'; '.join(errors)}",
            details=details,
        )
        self.code = ErrorCode.PLAN_IMPORT_FAILED


class UnsupportedSchemaVersionError(ValidationError):
    """Raised when a document declares a schema version this package cannot read."""

    def __init__(
        self,
        version: str,
        supported: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["version"] = version
        error_details["supported"] = supported
        super().__init__(
            message=f"Unsupported schema version '{version}' (this build reads up to {supported})",
            field="version",
            details=error_details,
        )
        self.code = ErrorCode.UNSUPPORTED_SCHEMA_VERSION


class InvalidDayError(ValidationError):
    """Raised when a day key outside Mon..Sun is addressed."""

    def __init__(
        self,
        day: Any,
        valid_days: List[str],
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["day"] = str(day)
        super().__init__(
            message=f"Invalid day key '{day}'. Expected one of: {', '.join(valid_days)}",
            field="day",
            details=error_details,
        )
        self.code = ErrorCode.INVALID_DAY


# ============================================================================
# Not Found Errors (404)
# ============================================================================

class NotFoundError(TrainingCalendarError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} '{resource_id}' not found"
        error_details = details or {}
        error_details["resource_type"] = resource_type
        error_details["resource_id"] = resource_id
        super().__init__(
            message=message,
            code=ErrorCode.NOT_FOUND,
            status_code=404,
            details=error_details,
        )


class WeekNotFoundError(NotFoundError):
    """Raised when a week number does not exist in the plan."""

    def __init__(self, week_number: int, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            resource_type="Week",
            resource_id=str(week_number),
            details=details,
        )
        self.code = ErrorCode.WEEK_NOT_FOUND


class WorkoutNotFoundError(NotFoundError):
    """Raised when a workout position or id does not address an existing workout."""

    def __init__(self, location: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            resource_type="Workout",
            resource_id=location,
            details=details,
        )
        self.code = ErrorCode.WORKOUT_NOT_FOUND


# ============================================================================
# Session Errors (409)
# ============================================================================

class SessionStateError(TrainingCalendarError):
    """Raised when an operation is not allowed in the session's current state."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.SESSION_STATE_ERROR,
            status_code=409,
            details=details,
        )


class NoActivePlanError(SessionStateError):
    """Raised when an edit is attempted before a plan was generated or imported."""

    def __init__(
        self,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(
            message="No training plan loaded. Generate or import a plan first.",
            details=error_details,
        )
        self.code = ErrorCode.NO_ACTIVE_PLAN


class PlanGenerationError(TrainingCalendarError):
    """Raised when the injected plan generator fails."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.PLAN_GENERATION_FAILED,
            status_code=500,
            details=details,
        )


class GeneratorNotConfiguredError(TrainingCalendarError):
    """Raised when generation is requested but no plan generator was injected."""

    def __init__(
        self,
        message: str = "No plan generator configured for this session",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.GENERATOR_NOT_CONFIGURED,
            status_code=501,
            details=details,
        )


# ============================================================================
# Storage Errors
# ============================================================================

class StorageError(TrainingCalendarError):
    """Raised when reading or writing persisted session slots fails."""

    def __init__(
        self,
        message: str = "Session storage operation failed",
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(
            message=message,
            code=ErrorCode.STORAGE_ERROR,
            status_code=500,
            details=error_details,
        )
