"""Generation settings and the versioned document wrapper around a plan."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ..units import DistanceUnit
from .plans import Day, Plan, WorkoutType, parse_iso_date


SCHEMA_VERSION = "1.0.0"


class PlanSource(str, Enum):
    """Provenance of a document."""
    GENERATED = "generated"
    IMPORTED = "imported"
    EDITED = "edited"


class RaceDistance(str, Enum):
    """Race-distance categories offered by the generator."""
    FIVE_K = "5k"
    TEN_K = "10k"
    HALF_MARATHON = "half"
    FULL_MARATHON = "full"
    CUSTOM = "custom"

    @property
    def label(self) -> str:
        labels = {
            RaceDistance.FIVE_K: "5K",
            RaceDistance.TEN_K: "10K",
            RaceDistance.HALF_MARATHON: "Half Marathon",
            RaceDistance.FULL_MARATHON: "Full Marathon",
            RaceDistance.CUSTOM: "Custom",
        }
        return labels[self]


@dataclass(frozen=True)
class WorkoutSlot:
    """A workout type assigned to a training day by the user."""
    run_type: WorkoutType
    nickname: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"runType": self.run_type.value}
        if self.nickname:
            data["nickname"] = self.nickname
        return data


@dataclass(frozen=True)
class TrainingDay:
    """Weekday to workout-type assignments."""
    day: Day
    workouts: List[WorkoutSlot] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day.value, "workouts": [w.to_dict() for w in self.workouts]}


@dataclass(frozen=True)
class PlanSettings:
    """The parameters that produced (or last matched) a plan."""
    today_date: date
    race_date: date
    race_distance: RaceDistance
    custom_race_distance: Optional[float] = None
    unit: DistanceUnit = DistanceUnit.KM
    training_days: List[TrainingDay] = field(default_factory=list)

    @property
    def weeks_until_race(self) -> int:
        return max(0, (self.race_date - self.today_date).days // 7)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "todayDate": self.today_date.isoformat(),
            "raceDate": self.race_date.isoformat(),
            "raceDistance": self.race_distance.value,
            "unit": self.unit.value,
            "trainingDays": [d.to_dict() for d in self.training_days],
        }
        if self.custom_race_distance is not None:
            data["customRaceDistance"] = self.custom_race_distance
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlanSettings":
        """Create from the wire format (assumed already validated)."""
        return cls(
            today_date=parse_iso_date(data["todayDate"]),
            race_date=parse_iso_date(data["raceDate"]),
            race_distance=RaceDistance(data["raceDistance"]),
            custom_race_distance=data.get("customRaceDistance"),
            unit=DistanceUnit(data.get("unit") or DistanceUnit.KM),
            training_days=[
                TrainingDay(
                    day=Day(d["day"]),
                    workouts=[
                        WorkoutSlot(WorkoutType(w["runType"]), w.get("nickname") or None)
                        for w in d.get("workouts") or []
                    ],
                )
                for d in data.get("trainingDays") or []
            ],
        )


@dataclass(frozen=True)
class PlanDocument:
    """The versioned, provenance-tagged envelope that is persisted and exported."""
    version: str
    created_at: datetime
    updated_at: datetime
    source: PlanSource
    settings: PlanSettings
    plan: Plan

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "source": self.source.value,
            "settings": self.settings.to_dict(),
            "plan": self.plan.to_dict(),
        }
