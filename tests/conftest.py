"""Shared fixtures for training calendar tests."""

from datetime import date

import pytest

from training_calendar.models import (
    Distance,
    Duration,
    Plan,
    PlanSettings,
    RaceDistance,
    Week,
    WeekDays,
    Workout,
)
from training_calendar.units import DistanceUnit


@pytest.fixture
def plan_settings():
    """Half-marathon settings seven weeks out."""
    return PlanSettings(
        today_date=date(2026, 1, 5),
        race_date=date(2026, 3, 1),
        race_distance=RaceDistance.HALF_MARATHON,
        unit=DistanceUnit.KM,
    )


@pytest.fixture
def sample_plan():
    """
    Two-week plan.

    Week 1: Mon Easy 5km, Wed Tempo 40min (total 5)
    Week 2: Sat Long 12km (total 12)
    """
    week1 = Week(
        week=1,
        start_date=date(2026, 1, 5),
        days=WeekDays.from_mapping({
            "Mon": [Workout("w1-easy", "Easy", Distance(5.0))],
            "Wed": [Workout("w1-tempo", "Tempo", Duration(40.0))],
        }),
        weekly_total=5,
    )
    week2 = Week(
        week=2,
        start_date=date(2026, 1, 12),
        days=WeekDays.from_mapping({
            "Sat": [Workout("w2-long", "Long", Distance(12.0), nickname="Sunday crew")],
        }),
        weekly_total=12,
    )
    return Plan((week1, week2))


@pytest.fixture
def raw_document():
    """A valid decoded plan document, as it would arrive from a file."""
    return {
        "version": "1.0.0",
        "createdAt": "2026-01-05T08:00:00+00:00",
        "updatedAt": "2026-01-06T09:30:00+00:00",
        "source": "imported",
        "settings": {
            "todayDate": "2026-01-05",
            "raceDate": "2026-03-01",
            "raceDistance": "half",
            "unit": "km",
            "trainingDays": [
                {"day": "Mon", "workouts": [{"runType": "Easy"}]},
                {"day": "Sat", "workouts": [{"runType": "Long", "nickname": "Long run"}]},
            ],
        },
        "plan": {
            "weeks": [
                {
                    "week": 1,
                    "startDate": "2026-01-05",
                    "days": {
                        "Mon": [
                            {"id": "a1", "type": "Easy", "measurementType": "distance", "distance": 5},
                        ],
                        "Tue": [],
                        "Wed": [
                            {"id": "a2", "type": "Tempo", "measurementType": "time", "time": 40},
                        ],
                        "Thu": [],
                        "Fri": [],
                        "Sat": [
                            {"id": "a3", "type": "Long", "measurementType": "distance", "distance": 10.5},
                        ],
                        "Sun": [],
                    },
                    "weeklyTotal": 16,
                },
                {
                    "week": 2,
                    "startDate": "2026-01-12",
                    "days": {
                        "Mon": [],
                        "Tue": [
                            {"id": "b1", "type": "Interval", "measurementType": "distance", "distance": 6},
                        ],
                        "Wed": [],
                        "Thu": [],
                        "Fri": [],
                        "Sat": [
                            {"id": "b2", "type": "Long", "measurementType": "distance", "distance": 12},
                        ],
                        "Sun": [],
                    },
                    "weeklyTotal": 18,
                },
            ]
        },
    }


class FakeGenerator:
    """Plan generator double that records the settings it was called with."""

    def __init__(self, plan):
        self.plan = plan
        self.calls = []

    def __call__(self, settings):
        self.calls.append(settings)
        return self.plan


@pytest.fixture
def fake_generator(sample_plan):
    return FakeGenerator(sample_plan)
