"""
Versioned plan document schema: validation, normalization and wrapping.

Handles:
- Structural validation of untyped (imported) documents, collecting every
  problem with a path such as ``Week 2, Weds`` or ``Week 1, Tue, workout 3``
- Normalization of legacy shapes (null bucket entries, missing
  measurementType, missing or duplicate ids, stale weekly totals)
- Wrapping a plan in the versioned envelope and revising it after edits
- JSON encoding and decoding of documents
"""

from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any, List, Mapping, Optional, Set, Tuple, Union
import json
import logging
import math
import re

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import PlanValidationError, UnsupportedSchemaVersionError
from .models.document import (
    SCHEMA_VERSION,
    PlanDocument,
    PlanSettings,
    PlanSource,
    RaceDistance,
)
from .models.plans import (
    DAY_KEYS,
    MAX_AMOUNT,
    WORKOUT_TYPES,
    Day,
    MeasurementType,
    Plan,
    Workout,
    WorkoutType,
    parse_iso_date,
    recompute_weekly_total,
)
from .units import DistanceUnit


logger = logging.getLogger(__name__)

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


# ============================================================================
# Input schemas (untyped data entering through import)
# ============================================================================

class RunInputSchema(BaseModel):
    """Wire shape of one workout."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    type: WorkoutType
    measurementType: Optional[MeasurementType] = None
    distance: Optional[float] = Field(None, ge=0, le=MAX_AMOUNT, allow_inf_nan=False, strict=True)
    time: Optional[float] = Field(None, ge=0, le=MAX_AMOUNT, allow_inf_nan=False, strict=True)
    nickname: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_measurement(self) -> "RunInputSchema":
        if self.measurementType is MeasurementType.DISTANCE and self.distance is None:
            raise ValueError("measurementType is 'distance' but distance is not set")
        if self.measurementType is MeasurementType.TIME and self.time is None:
            raise ValueError("measurementType is 'time' but time is not set")
        return self


class WorkoutSlotSchema(BaseModel):
    """Wire shape of a workout-type assignment in the settings."""

    runType: WorkoutType
    nickname: Optional[str] = None


class TrainingDaySchema(BaseModel):
    """Wire shape of one training day in the settings."""

    day: Day
    workouts: List[WorkoutSlotSchema] = Field(default_factory=list)


class SettingsInputSchema(BaseModel):
    """Wire shape of the generation settings."""

    model_config = ConfigDict(extra="ignore")

    todayDate: date
    raceDate: date
    raceDistance: RaceDistance
    customRaceDistance: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    unit: DistanceUnit = DistanceUnit.KM
    trainingDays: List[TrainingDaySchema] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_race(self) -> "SettingsInputSchema":
        if self.raceDate <= self.todayDate:
            raise ValueError("Race date must be after today's date")
        if self.raceDistance is RaceDistance.CUSTOM and not self.customRaceDistance:
            raise ValueError("Custom distance is required and must be greater than 0")
        return self


class DocumentHeaderSchema(BaseModel):
    """Wire shape of the envelope fields around settings and plan."""

    model_config = ConfigDict(extra="ignore")

    createdAt: datetime
    updatedAt: datetime
    source: PlanSource


# ============================================================================
# Validation
# ============================================================================

@dataclass
class ValidationResult:
    """Outcome of validating a raw document."""

    valid: bool
    errors: List[str] = field(default_factory=list)

    @property
    def error(self) -> Optional[str]:
        """All errors joined into one message."""
        return "; ".join(self.errors) if self.errors else None


def _format_pydantic_errors(exc: ValidationError, prefix: str) -> List[str]:
    """Turn pydantic error entries into path-qualified messages."""
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"])
        message = err["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]

        if err["loc"] and err["loc"][-1] in ("type", "runType") and err["type"] == "enum":
            message = (
                f'Invalid workout type "{err["input"]}". '
                f"Expected one of: {', '.join(WORKOUT_TYPES)}"
            )
        elif err["loc"] and err["loc"][-1] == "day" and err["type"] == "enum":
            message = (
                f'Invalid day key "{err["input"]}". '
                f"Expected one of: {', '.join(DAY_KEYS)}"
            )

        parts = [p for p in (prefix, loc) if p]
        messages.append(f"{', '.join(parts)}: {message}" if parts else message)
    return messages


def _parse_version(version: str) -> Optional[Tuple[int, int, int]]:
    match = _VERSION_PATTERN.match(version.strip())
    if not match:
        return None
    return tuple(int(part) for part in match.groups())


def is_newer_major(version: str) -> bool:
    """True when a version belongs to a major release this build cannot read."""
    parsed = _parse_version(version)
    return parsed is not None and parsed[0] > _parse_version(SCHEMA_VERSION)[0]


def _version_problem(version: Any) -> Optional[str]:
    if not isinstance(version, str) or not version.strip():
        return "version: Missing training plan schema version."
    if _parse_version(version) is None:
        return f'version: "{version}" is not a MAJOR.MINOR.PATCH version'
    if is_newer_major(version):
        return f'version: unsupported schema version "{version}" (this build reads up to {SCHEMA_VERSION})'
    return None


def _validate_run(raw: Any, prefix: str, errors: List[str]) -> None:
    if not isinstance(raw, Mapping):
        errors.append(f"{prefix}: workout must be an object")
        return
    try:
        RunInputSchema.model_validate(raw)
    except ValidationError as exc:
        errors.extend(_format_pydantic_errors(exc, prefix))


def _validate_week(raw: Any, position: int, errors: List[str]) -> Optional[Any]:
    """Validate one week; returns its week number when it is usable."""
    if not isinstance(raw, Mapping):
        errors.append(f"Week {position}: week must be an object")
        return None

    number = raw.get("week")
    label = f"Week {number if number is not None else position}"
    valid_number = isinstance(number, int) and not isinstance(number, bool) and number >= 1
    if not valid_number:
        errors.append(f"{label}: week number must be a positive integer")

    start_date = raw.get("startDate")
    if not isinstance(start_date, str):
        errors.append(f"{label}: startDate is missing")
    else:
        try:
            parse_iso_date(start_date)
        except ValueError:
            errors.append(f'{label}: startDate "{start_date}" is not an ISO date')

    weekly_total = raw.get("weeklyTotal")
    if weekly_total is not None and (
        isinstance(weekly_total, bool)
        or not isinstance(weekly_total, (int, float))
        or not math.isfinite(weekly_total)
    ):
        errors.append(f"{label}: weeklyTotal must be a number")

    days = raw.get("days")
    if days is None:
        errors.append(f"{label}: days is missing")
    elif not isinstance(days, Mapping):
        errors.append(f"{label}: days must be an object keyed by day")
    else:
        invalid_keys = [str(key) for key in days if key not in DAY_KEYS]
        if invalid_keys:
            errors.append(
                f"{label}: Invalid day key(s): {', '.join(invalid_keys)}. "
                f"Expected one of: {', '.join(DAY_KEYS)}"
            )
        for key, runs in days.items():
            if runs is None:
                continue
            if not isinstance(runs, list):
                errors.append(f"{label}, {key}: runs must be an array")
                continue
            for index, run in enumerate(runs):
                if run is None:
                    continue
                _validate_run(run, f"{label}, {key}, workout {index + 1}", errors)

    return number if valid_number else None


def _validate_plan(raw_plan: Any, errors: List[str]) -> None:
    if raw_plan is None:
        errors.append("plan: missing")
        return
    if not isinstance(raw_plan, Mapping):
        errors.append("plan: must be an object")
        return

    weeks = raw_plan.get("weeks")
    if weeks is None:
        errors.append("plan: weeks array is missing")
        return
    if not isinstance(weeks, list):
        errors.append("plan: weeks must be an array")
        return

    numbers = []
    for position, raw_week in enumerate(weeks, start=1):
        number = _validate_week(raw_week, position, errors)
        if number is not None:
            numbers.append(number)

    duplicates = sorted(n for n, count in Counter(numbers).items() if count > 1)
    if duplicates:
        errors.append(f"plan: duplicate week number(s): {', '.join(str(n) for n in duplicates)}")
    elif len(numbers) == len(weeks) and sorted(numbers) != list(range(1, len(numbers) + 1)):
        errors.append(f"plan: week numbers must run from 1 to {len(numbers)} without gaps")


def validate(raw: Any) -> ValidationResult:
    """
    Validate a raw (decoded JSON) document against the current schema.

    Every structural problem is collected rather than stopping at the
    first one. Never raises.

    Args:
        raw: The decoded document

    Returns:
        ValidationResult with ``valid`` and the itemized ``errors``
    """
    if not isinstance(raw, Mapping):
        return ValidationResult(valid=False, errors=["Document must be a JSON object"])

    errors: List[str] = []

    try:
        DocumentHeaderSchema.model_validate(raw)
    except ValidationError as exc:
        errors.extend(_format_pydantic_errors(exc, ""))

    version_problem = _version_problem(raw.get("version"))
    if version_problem:
        errors.append(version_problem)

    settings = raw.get("settings")
    if settings is None:
        errors.append("settings: missing")
    else:
        try:
            SettingsInputSchema.model_validate(settings)
        except ValidationError as exc:
            errors.extend(_format_pydantic_errors(exc, "settings"))

    _validate_plan(raw.get("plan"), errors)

    return ValidationResult(valid=not errors, errors=errors)


# ============================================================================
# Normalization
# ============================================================================

def normalize(plan: Plan) -> Plan:
    """
    Restore every plan invariant on an already-typed plan.

    Weeks are sorted by number, workouts without a unique id get a fresh
    one, and every weekly total is folded again.
    """
    seen_ids: Set[str] = set()
    weeks = []
    for week in sorted(plan.weeks, key=lambda w: w.week):
        days = week.days
        for day, bucket in week.days.items():
            fixed = []
            changed = False
            for workout in bucket:
                if not workout.id or workout.id in seen_ids:
                    workout = replace(workout, id=Workout.generate_id())
                    changed = True
                seen_ids.add(workout.id)
                fixed.append(workout)
            if changed:
                days = days.with_bucket(day, fixed)
        weeks.append(recompute_weekly_total(replace(week, days=days)))
    return Plan(tuple(weeks))


def normalize_raw_plan(raw_plan: Mapping[str, Any]) -> Plan:
    """
    Build a normalized Plan from a validated raw plan mapping.

    Null bucket entries are dropped, missing day keys become empty
    buckets and missing measurementType is inferred (distance first).
    """
    return normalize(Plan.from_dict(raw_plan))


# ============================================================================
# Wrapping
# ============================================================================

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def wrap(
    settings: PlanSettings,
    plan: Plan,
    source: PlanSource = PlanSource.GENERATED,
    now: Optional[datetime] = None,
) -> PlanDocument:
    """Wrap a plan in a new versioned document."""
    stamp = now or _utcnow()
    return PlanDocument(
        version=SCHEMA_VERSION,
        created_at=stamp,
        updated_at=stamp,
        source=PlanSource(source),
        settings=settings,
        plan=normalize(plan),
    )


def revise_after_edit(
    document: PlanDocument,
    plan: Plan,
    settings: Optional[PlanSettings] = None,
    now: Optional[datetime] = None,
) -> PlanDocument:
    """
    Re-wrap a document after an edit.

    updated_at moves forward and a generated document becomes edited;
    imported and edited documents keep their source.
    """
    source = PlanSource.EDITED if document.source is PlanSource.GENERATED else document.source
    return replace(
        document,
        updated_at=now or _utcnow(),
        source=source,
        settings=settings or document.settings,
        plan=normalize(plan),
    )


def parse_document(raw: Any) -> PlanDocument:
    """
    Validate and normalize a raw document into a PlanDocument.

    Raises:
        UnsupportedSchemaVersionError: If the document is from a newer major version
        PlanValidationError: If validation fails; ``errors`` lists every problem
    """
    if isinstance(raw, Mapping) and isinstance(raw.get("version"), str):
        if is_newer_major(raw["version"]):
            raise UnsupportedSchemaVersionError(raw["version"], SCHEMA_VERSION)

    result = validate(raw)
    if not result.valid:
        raise PlanValidationError(result.errors)

    header = DocumentHeaderSchema.model_validate(raw)
    settings = SettingsInputSchema.model_validate(raw["settings"])
    logger.debug(
        f"Parsed {header.source.value} document v{raw['version'].strip()} "
        f"with {len(raw['plan']['weeks'])} weeks"
    )
    return PlanDocument(
        version=raw["version"].strip(),
        created_at=_as_aware(header.createdAt),
        updated_at=_as_aware(header.updatedAt),
        source=header.source,
        settings=PlanSettings.from_dict(settings.model_dump(mode="json")),
        plan=normalize_raw_plan(raw["plan"]),
    )


# ============================================================================
# JSON codec
# ============================================================================

def to_json(document: PlanDocument, indent: Optional[int] = 2) -> str:
    """Serialize a document to JSON text."""
    return json.dumps(document.to_dict(), indent=indent, ensure_ascii=False)


def from_json(data: Union[str, bytes]) -> PlanDocument:
    """
    Parse JSON text (or UTF-8 bytes) into a validated document.

    Raises:
        PlanValidationError: On malformed JSON or failed validation
    """
    try:
        raw = json.loads(data.decode("utf-8") if isinstance(data, bytes) else data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise PlanValidationError([f"Malformed JSON: {e}"])
    return parse_document(raw)
