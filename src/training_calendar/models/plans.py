"""Data models for the training plan document: workouts, weeks and plans."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union
import uuid

from ..units import round_half_up


class Day(str, Enum):
    """The seven fixed day keys of a week, Monday first."""
    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"
    SUN = "Sun"

    @property
    def index(self) -> int:
        """Position of the day within the week (Mon=0)."""
        return DAYS.index(self)


DAYS: Tuple[Day, ...] = tuple(Day)
DAY_KEYS: Tuple[str, ...] = tuple(d.value for d in Day)


class WorkoutType(str, Enum):
    """Types of scheduled activity."""
    REST = "Rest"
    EASY = "Easy"
    LONG = "Long"
    INTERVAL = "Interval"
    TEMPO = "Tempo"
    RACE = "Race"
    STRENGTH = "Strength"


WORKOUT_TYPES: Tuple[str, ...] = tuple(t.value for t in WorkoutType)


class MeasurementType(str, Enum):
    """How a workout is measured."""
    DISTANCE = "distance"
    TIME = "time"


# Upper bound for one workout's distance or minutes
MAX_AMOUNT = 10_000.0


@dataclass(frozen=True)
class Distance:
    """A distance in the plan's current unit."""
    value: float

    @property
    def measurement_type(self) -> MeasurementType:
        return MeasurementType.DISTANCE


@dataclass(frozen=True)
class Duration:
    """A duration in minutes."""
    minutes: float

    @property
    def measurement_type(self) -> MeasurementType:
        return MeasurementType.TIME


Measurement = Union[Distance, Duration]


def parse_iso_date(value: Union[str, date]) -> date:
    """Parse 'YYYY-MM-DD' (or a full ISO timestamp) into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if len(text) > 10:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return date.fromisoformat(text)


def _clean_text(value: Optional[str]) -> Optional[str]:
    """Empty or whitespace-only text is stored as absent."""
    if value is None or not value.strip():
        return None
    return value


@dataclass(frozen=True)
class Workout:
    """
    One scheduled activity.

    Carries at most one measurement: a Distance or a Duration.
    Unmeasured workouts (measurement None) only come from legacy data.
    """
    id: str
    type: WorkoutType
    measurement: Optional[Measurement] = None
    nickname: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.type, str) and not isinstance(self.type, WorkoutType):
            object.__setattr__(self, "type", WorkoutType(self.type))
        object.__setattr__(self, "nickname", _clean_text(self.nickname))
        object.__setattr__(self, "description", _clean_text(self.description))
        object.__setattr__(self, "notes", _clean_text(self.notes))

    @staticmethod
    def generate_id() -> str:
        """Generate a unique workout ID."""
        return f"run_{uuid.uuid4().hex[:12]}"

    @property
    def measurement_type(self) -> Optional[MeasurementType]:
        if self.measurement is None:
            return None
        return self.measurement.measurement_type

    @property
    def distance(self) -> Optional[float]:
        """Distance value, or None for time-measured workouts."""
        if isinstance(self.measurement, Distance):
            return self.measurement.value
        return None

    @property
    def time(self) -> Optional[float]:
        """Duration in minutes, or None for distance-measured workouts."""
        if isinstance(self.measurement, Duration):
            return self.measurement.minutes
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire format; absent fields are omitted."""
        data: Dict[str, Any] = {"id": self.id, "type": self.type.value}
        if self.measurement is not None:
            data["measurementType"] = self.measurement_type.value
            if self.distance is not None:
                data["distance"] = self.distance
            else:
                data["time"] = self.time
        for key in ("nickname", "description", "notes"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Workout":
        """
        Create from the wire format.

        Missing measurementType is inferred from whichever field is
        present, distance first. A missing id gets a fresh one.
        """
        measurement_type = data.get("measurementType")
        distance = data.get("distance")
        time = data.get("time")
        if measurement_type is None:
            if distance is not None:
                measurement_type = MeasurementType.DISTANCE
            elif time is not None:
                measurement_type = MeasurementType.TIME

        measurement: Optional[Measurement] = None
        if measurement_type is not None:
            if MeasurementType(measurement_type) is MeasurementType.DISTANCE:
                measurement = Distance(float(distance))
            else:
                measurement = Duration(float(time))

        return cls(
            id=data.get("id") or cls.generate_id(),
            type=WorkoutType(data["type"]),
            measurement=measurement,
            nickname=data.get("nickname"),
            description=data.get("description"),
            notes=data.get("notes"),
        )


Bucket = Tuple[Workout, ...]


@dataclass(frozen=True)
class WeekDays:
    """Fixed seven-slot structure of day buckets, indexed by Day."""
    buckets: Tuple[Bucket, ...] = ((),) * 7

    def __post_init__(self):
        if len(self.buckets) != len(DAYS):
            raise ValueError(f"A week has exactly {len(DAYS)} day buckets, got {len(self.buckets)}")
        object.__setattr__(self, "buckets", tuple(tuple(b) for b in self.buckets))

    @classmethod
    def from_mapping(cls, days: Mapping[Union[Day, str], Iterable[Workout]]) -> "WeekDays":
        """Build from a day-keyed mapping; missing days become empty buckets."""
        buckets: List[Bucket] = [()] * len(DAYS)
        for key, workouts in days.items():
            buckets[Day(key).index] = tuple(workouts)
        return cls(tuple(buckets))

    def __getitem__(self, day: Union[Day, str]) -> Bucket:
        return self.buckets[Day(day).index]

    def __iter__(self) -> Iterator[Day]:
        return iter(DAYS)

    def items(self) -> Iterator[Tuple[Day, Bucket]]:
        return zip(DAYS, self.buckets)

    def with_bucket(self, day: Union[Day, str], workouts: Iterable[Workout]) -> "WeekDays":
        """Return a copy with one day's bucket replaced."""
        buckets = list(self.buckets)
        buckets[Day(day).index] = tuple(workouts)
        return WeekDays(tuple(buckets))

    def all_workouts(self) -> Iterator[Workout]:
        for bucket in self.buckets:
            yield from bucket

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {day.value: [w.to_dict() for w in bucket] for day, bucket in self.items()}


def compute_weekly_total(days: WeekDays) -> int:
    """Rounded sum of distance over distance-measured workouts."""
    total = sum(w.distance for w in days.all_workouts() if w.distance is not None)
    return int(round_half_up(total))


@dataclass(frozen=True)
class Week:
    """One seven-day unit of the plan."""
    week: int
    start_date: date
    days: WeekDays = field(default_factory=WeekDays)
    weekly_total: int = 0

    @property
    def workout_count(self) -> int:
        return sum(len(bucket) for bucket in self.days.buckets)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week": self.week,
            "startDate": self.start_date.isoformat(),
            "days": self.days.to_dict(),
            "weeklyTotal": self.weekly_total,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Week":
        """Create from the wire format; null bucket entries are skipped."""
        raw_days = data.get("days") or {}
        days = WeekDays.from_mapping({
            key: [Workout.from_dict(item) for item in (bucket or []) if item is not None]
            for key, bucket in raw_days.items()
        })
        return cls(
            week=int(data["week"]),
            start_date=parse_iso_date(data["startDate"]),
            days=days,
            weekly_total=int(data.get("weeklyTotal") or 0),
        )


def recompute_weekly_total(week: Week) -> Week:
    """Return the week with weekly_total folded from all seven buckets."""
    return replace(week, weekly_total=compute_weekly_total(week.days))


@dataclass(frozen=True)
class WorkoutLocation:
    """Where a workout sits in a plan."""
    week: int
    day: Day
    index: int

    def __str__(self) -> str:
        return f"week {self.week}, {self.day.value}, workout {self.index}"


@dataclass(frozen=True)
class Plan:
    """The full ordered sequence of training weeks."""
    weeks: Tuple[Week, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "weeks", tuple(self.weeks))

    @property
    def total_weeks(self) -> int:
        return len(self.weeks)

    @property
    def workout_count(self) -> int:
        return sum(w.workout_count for w in self.weeks)

    @property
    def is_empty(self) -> bool:
        return not self.weeks

    @property
    def peak_week(self) -> Optional[Week]:
        """Week with the highest total; the earliest wins a tie."""
        peak: Optional[Week] = None
        for week in self.weeks:
            if peak is None or week.weekly_total > peak.weekly_total:
                peak = week
        return peak

    def get_week(self, week_number: int) -> Optional[Week]:
        """Get a specific week by number."""
        for week in self.weeks:
            if week.week == week_number:
                return week
        return None

    def find_workout(self, workout_id: str) -> Optional[WorkoutLocation]:
        """Locate a workout by id."""
        for week in self.weeks:
            for day, bucket in week.days.items():
                for index, workout in enumerate(bucket):
                    if workout.id == workout_id:
                        return WorkoutLocation(week.week, day, index)
        return None

    def with_week(self, updated: Week) -> "Plan":
        """Return a copy with the week of the same number replaced."""
        return Plan(tuple(updated if w.week == updated.week else w for w in self.weeks))

    def to_dict(self) -> Dict[str, Any]:
        return {"weeks": [w.to_dict() for w in self.weeks]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Plan":
        return cls(tuple(Week.from_dict(w) for w in data.get("weeks") or []))
