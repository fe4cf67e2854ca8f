"""
Plan editing operations.

Every operation takes a Plan and returns a new Plan; nothing is mutated
in place. Weeks are addressed by their 1-based week number, days by Day
(or its string key) and workouts by their 0-based position in the day.
Weekly totals of every touched week are folded again from scratch.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple, Union
import logging
import math

from ..exceptions import (
    InvalidDayError,
    ValidationError,
    WeekNotFoundError,
    WorkoutNotFoundError,
    WorkoutValidationError,
)
from ..models.plans import (
    DAY_KEYS,
    MAX_AMOUNT,
    Day,
    Distance,
    Duration,
    Measurement,
    MeasurementType,
    Plan,
    Week,
    WeekDays,
    Workout,
    WorkoutType,
    recompute_weekly_total,
)
from ..units import DistanceUnit, convert_distance, round_half_up


logger = logging.getLogger(__name__)

DEFAULT_DISTANCE = 5.0
DEFAULT_MINUTES = 30.0

DayKey = Union[Day, str]


def _coerce_enum(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise WorkoutValidationError(
            f"Invalid {field} \"{value}\". Expected one of: {choices}",
            field=field,
        )


@dataclass(frozen=True)
class WorkoutSpec:
    """What to create with add_workout."""
    type: WorkoutType
    measurement_type: Optional[MeasurementType] = None
    distance: Optional[float] = None
    time: Optional[float] = None
    nickname: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "type", _coerce_enum(WorkoutType, self.type, "type"))
        if self.measurement_type is not None:
            object.__setattr__(
                self, "measurement_type", _coerce_enum(MeasurementType, self.measurement_type, "measurement_type")
            )


@dataclass(frozen=True)
class WorkoutUpdate:
    """Partial update for update_workout; None means leave unchanged."""
    type: Optional[WorkoutType] = None
    measurement_type: Optional[MeasurementType] = None
    distance: Optional[float] = None
    time: Optional[float] = None
    description: Optional[str] = None

    def __post_init__(self):
        if self.type is not None:
            object.__setattr__(self, "type", _coerce_enum(WorkoutType, self.type, "type"))
        if self.measurement_type is not None:
            object.__setattr__(
                self, "measurement_type", _coerce_enum(MeasurementType, self.measurement_type, "measurement_type")
            )


# ============================================================================
# Addressing helpers
# ============================================================================

def _coerce_day(day: DayKey) -> Day:
    try:
        return Day(day)
    except ValueError:
        raise InvalidDayError(day, list(DAY_KEYS))


def _get_week(plan: Plan, week_number: int) -> Week:
    week = plan.get_week(week_number)
    if week is None:
        raise WeekNotFoundError(week_number)
    return week


def _check_index(bucket: Tuple[Workout, ...], index: int, week: int, day: Day) -> None:
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(bucket):
        raise WorkoutNotFoundError(
            f"week {week}, {day.value}, index {index}",
            details={"bucket_size": len(bucket)},
        )


def _check_amount(value: float, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise WorkoutValidationError(f"{field} must be a number", field=field)
    if value < 0:
        raise WorkoutValidationError(f"{field} cannot be negative", field=field)
    if value > MAX_AMOUNT:
        raise WorkoutValidationError(f"{field} cannot exceed {MAX_AMOUNT:g}", field=field)
    return float(value)


def _default_distance(workout_type: WorkoutType) -> float:
    return 0.0 if workout_type is WorkoutType.STRENGTH else DEFAULT_DISTANCE


def _replace_bucket(week: Week, day: Day, workouts) -> Week:
    return replace(week, days=week.days.with_bucket(day, workouts))


# ============================================================================
# Workout construction
# ============================================================================

def build_workout(spec: WorkoutSpec) -> Workout:
    """
    Create a new workout with a fresh id.

    Distance-measured unless a time is given (or asked for). A missing
    distance defaults to 5 (0 for Strength), a missing time to 30 minutes.
    """
    measurement_type = spec.measurement_type
    if measurement_type is None:
        if spec.time is not None and spec.distance is None:
            measurement_type = MeasurementType.TIME
        else:
            measurement_type = MeasurementType.DISTANCE

    measurement: Measurement
    if measurement_type is MeasurementType.TIME:
        minutes = DEFAULT_MINUTES if spec.time is None else _check_amount(spec.time, "time")
        measurement = Duration(minutes)
    else:
        if spec.distance is None:
            measurement = Distance(_default_distance(spec.type))
        else:
            measurement = Distance(_check_amount(spec.distance, "distance"))

    return Workout(
        id=Workout.generate_id(),
        type=spec.type,
        measurement=measurement,
        nickname=spec.nickname,
        description=spec.description,
    )


def apply_update(workout: Workout, updates: WorkoutUpdate) -> Workout:
    """
    Apply a partial update to one workout.

    Changing the measurement type replaces the measurement, which clears
    the previous distance or time. A lone distance or time implies its
    measurement type; a value contradicting the requested type is rejected.
    """
    measurement_type = updates.measurement_type
    if measurement_type is None:
        if updates.distance is not None and updates.time is not None:
            raise WorkoutValidationError(
                "Give either distance or time, not both",
                field="measurement_type",
            )
        if updates.distance is not None:
            measurement_type = MeasurementType.DISTANCE
        elif updates.time is not None:
            measurement_type = MeasurementType.TIME
    else:
        opposite = "time" if measurement_type is MeasurementType.DISTANCE else "distance"
        if getattr(updates, opposite) is not None:
            raise WorkoutValidationError(
                f"{opposite} cannot be set on a {measurement_type.value}-measured workout",
                field=opposite,
            )

    workout_type = updates.type or workout.type
    measurement = workout.measurement
    if measurement_type is MeasurementType.DISTANCE:
        if updates.distance is not None:
            measurement = Distance(_check_amount(updates.distance, "distance"))
        elif not isinstance(measurement, Distance):
            measurement = Distance(_default_distance(workout_type))
    elif measurement_type is MeasurementType.TIME:
        if updates.time is not None:
            measurement = Duration(_check_amount(updates.time, "time"))
        elif not isinstance(measurement, Duration):
            measurement = Duration(DEFAULT_MINUTES)

    changes = {"type": workout_type, "measurement": measurement}
    if updates.description is not None:
        changes["description"] = updates.description
    return replace(workout, **changes)


# ============================================================================
# Operations
# ============================================================================

def add_workout(plan: Plan, week: int, day: DayKey, spec: WorkoutSpec) -> Plan:
    """Append a new workout to the end of a day."""
    day = _coerce_day(day)
    target = _get_week(plan, week)
    workout = build_workout(spec)
    updated = _replace_bucket(target, day, target.days[day] + (workout,))
    logger.debug(f"Added {workout.type.value} workout {workout.id} to week {week}, {day.value}")
    return plan.with_week(recompute_weekly_total(updated))


def update_workout(
    plan: Plan,
    week: int,
    day: DayKey,
    index: int,
    updates: WorkoutUpdate,
) -> Plan:
    """Apply a partial update to the workout at a position."""
    day = _coerce_day(day)
    target = _get_week(plan, week)
    bucket = target.days[day]
    _check_index(bucket, index, week, day)

    updated_workout = apply_update(bucket[index], updates)
    new_bucket = bucket[:index] + (updated_workout,) + bucket[index + 1:]
    logger.debug(f"Updated workout {updated_workout.id} in week {week}, {day.value}")
    return plan.with_week(recompute_weekly_total(_replace_bucket(target, day, new_bucket)))


def update_nickname(plan: Plan, week: int, day: DayKey, index: int, nickname: Optional[str]) -> Plan:
    """Set or clear a workout's nickname. An empty nickname clears it."""
    day = _coerce_day(day)
    target = _get_week(plan, week)
    bucket = target.days[day]
    _check_index(bucket, index, week, day)

    renamed = replace(bucket[index], nickname=nickname)
    new_bucket = bucket[:index] + (renamed,) + bucket[index + 1:]
    return plan.with_week(_replace_bucket(target, day, new_bucket))


def remove_workout(plan: Plan, week: int, day: DayKey, index: int) -> Plan:
    """Delete the workout at a position; later workouts shift down."""
    day = _coerce_day(day)
    target = _get_week(plan, week)
    bucket = target.days[day]
    _check_index(bucket, index, week, day)

    logger.debug(f"Removed workout {bucket[index].id} from week {week}, {day.value}")
    new_bucket = bucket[:index] + bucket[index + 1:]
    return plan.with_week(recompute_weekly_total(_replace_bucket(target, day, new_bucket)))


def reorder_within_day(
    plan: Plan,
    week: int,
    day: DayKey,
    from_index: int,
    to_index: int,
) -> Plan:
    """Move a workout to another position in the same day."""
    day = _coerce_day(day)
    target = _get_week(plan, week)
    bucket = target.days[day]
    _check_index(bucket, from_index, week, day)
    _check_index(bucket, to_index, week, day)

    if from_index == to_index:
        return plan
    workouts: List[Workout] = list(bucket)
    moved = workouts.pop(from_index)
    workouts.insert(to_index, moved)
    return plan.with_week(_replace_bucket(target, day, workouts))


def move_workout(
    plan: Plan,
    from_week: int,
    from_day: DayKey,
    from_index: int,
    to_week: int,
    to_day: DayKey,
    to_index: int,
) -> Plan:
    """
    Relocate a workout to any day of any week.

    The workout is removed first and then inserted at ``to_index`` of the
    destination; an index past the end appends. The source week is
    recomputed, then the destination week when it is a different one.
    Within a single week both halves are applied before the one recompute.

    Raises:
        InvalidDayError: If a day key is unknown
        WeekNotFoundError: If either week does not exist
        WorkoutNotFoundError: If ``from_index`` is out of range or ``to_index`` is negative
    """
    from_day = _coerce_day(from_day)
    to_day = _coerce_day(to_day)
    source = _get_week(plan, from_week)
    destination = _get_week(plan, to_week)

    bucket = source.days[from_day]
    _check_index(bucket, from_index, from_week, from_day)
    if isinstance(to_index, bool) or not isinstance(to_index, int) or to_index < 0:
        raise WorkoutNotFoundError(f"week {to_week}, {to_day.value}, index {to_index}")

    moved = bucket[from_index]
    source_days = source.days.with_bucket(from_day, bucket[:from_index] + bucket[from_index + 1:])

    logger.debug(
        f"Moving workout {moved.id} from week {from_week}, {from_day.value} "
        f"to week {to_week}, {to_day.value} at {to_index}"
    )

    if from_week == to_week:
        workouts = list(source_days[to_day])
        workouts.insert(min(to_index, len(workouts)), moved)
        week = recompute_weekly_total(replace(source, days=source_days.with_bucket(to_day, workouts)))
        return plan.with_week(week)

    source_week = recompute_weekly_total(replace(source, days=source_days))

    workouts = list(destination.days[to_day])
    workouts.insert(min(to_index, len(workouts)), moved)
    destination_week = recompute_weekly_total(_replace_bucket(destination, to_day, workouts))

    return plan.with_week(source_week).with_week(destination_week)


def _convert_workout(workout: Workout, from_unit: DistanceUnit, to_unit: DistanceUnit) -> Workout:
    if not isinstance(workout.measurement, Distance):
        return workout
    converted = convert_distance(workout.measurement.value, from_unit, to_unit)
    return replace(workout, measurement=Distance(round_half_up(converted, 1)))


def convert_units(
    plan: Plan,
    from_unit: Union[DistanceUnit, str],
    to_unit: Union[DistanceUnit, str],
) -> Plan:
    """
    Convert every distance in the plan to another unit.

    Distances are rounded to one decimal and weekly totals are folded
    from the rounded values. Converting there and back is therefore only
    approximately the identity (within 0.1 for one-decimal inputs).
    Duration-measured workouts are left as they are.
    """
    try:
        from_unit = DistanceUnit(from_unit)
        to_unit = DistanceUnit(to_unit)
    except ValueError as e:
        raise ValidationError(f"Unknown distance unit: {e}", field="unit")

    if from_unit == to_unit:
        return plan

    weeks = []
    for week in plan.weeks:
        days = WeekDays(tuple(
            tuple(_convert_workout(w, from_unit, to_unit) for w in bucket)
            for bucket in week.days.buckets
        ))
        weeks.append(recompute_weekly_total(replace(week, days=days)))

    logger.debug(f"Converted {len(weeks)} weeks from {from_unit.value} to {to_unit.value}")
    return Plan(tuple(weeks))
