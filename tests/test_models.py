"""Tests for plan and document models."""

from datetime import date

import pytest

from training_calendar.models import (
    DAY_KEYS,
    Day,
    Distance,
    Duration,
    MeasurementType,
    Plan,
    PlanSettings,
    RaceDistance,
    TrainingDay,
    Week,
    WeekDays,
    Workout,
    WorkoutLocation,
    WorkoutSlot,
    WorkoutType,
    compute_weekly_total,
    parse_iso_date,
    recompute_weekly_total,
)
from training_calendar.units import DistanceUnit


class TestWorkout:
    """Tests for the Workout model."""

    def test_type_coerced_from_string(self):
        workout = Workout("x", "Easy", Distance(5.0))
        assert workout.type is WorkoutType.EASY

    def test_measurement_accessors(self):
        run = Workout("x", "Easy", Distance(5.0))
        timed = Workout("y", "Tempo", Duration(40.0))

        assert run.distance == 5.0
        assert run.time is None
        assert run.measurement_type is MeasurementType.DISTANCE
        assert timed.time == 40.0
        assert timed.distance is None
        assert timed.measurement_type is MeasurementType.TIME

    def test_blank_nickname_stored_as_absent(self):
        workout = Workout("x", "Easy", Distance(5.0), nickname="   ", description="")
        assert workout.nickname is None
        assert workout.description is None
        assert "nickname" not in workout.to_dict()

    def test_blank_notes_stored_as_absent(self):
        workout = Workout("x", "Easy", Distance(5.0), notes="")
        assert workout.notes is None
        assert "notes" not in workout.to_dict()

    def test_notes_kept(self):
        workout = Workout("x", "Easy", Distance(5.0), notes="Bring gels")
        assert workout.to_dict()["notes"] == "Bring gels"

    def test_to_dict_uses_wire_names(self):
        workout = Workout("x", "Long", Distance(12.0), nickname="Sunday crew")
        assert workout.to_dict() == {
            "id": "x",
            "type": "Long",
            "measurementType": "distance",
            "distance": 12.0,
            "nickname": "Sunday crew",
        }

    def test_to_dict_time_measured(self):
        data = Workout("y", "Tempo", Duration(40.0)).to_dict()
        assert data["measurementType"] == "time"
        assert data["time"] == 40.0
        assert "distance" not in data

    def test_generated_ids_are_unique(self):
        ids = {Workout.generate_id() for _ in range(50)}
        assert len(ids) == 50
        assert all(i.startswith("run_") for i in ids)


class TestWorkoutFromDict:
    """Tests for reading workouts from the wire format."""

    def test_infers_distance_first(self):
        """Legacy data with both fields and no type is distance-measured."""
        workout = Workout.from_dict({"id": "a", "type": "Easy", "distance": 5, "time": 30})
        assert workout.distance == 5.0
        assert workout.time is None

    def test_infers_time(self):
        workout = Workout.from_dict({"id": "a", "type": "Tempo", "time": 45})
        assert workout.measurement_type is MeasurementType.TIME
        assert workout.time == 45.0

    def test_declared_type_keeps_only_its_field(self):
        workout = Workout.from_dict(
            {"id": "a", "type": "Tempo", "measurementType": "time", "distance": 8, "time": 45}
        )
        assert workout.time == 45.0
        assert workout.distance is None

    def test_unmeasured_legacy_workout(self):
        workout = Workout.from_dict({"id": "a", "type": "Rest"})
        assert workout.measurement is None
        assert "measurementType" not in workout.to_dict()

    def test_missing_id_is_generated(self):
        workout = Workout.from_dict({"type": "Easy", "distance": 5})
        assert workout.id.startswith("run_")


class TestWeekDays:
    """Tests for the fixed seven-bucket week structure."""

    def test_default_has_seven_empty_buckets(self):
        days = WeekDays()
        assert len(days.buckets) == 7
        assert all(days[day] == () for day in Day)

    def test_wrong_bucket_count_rejected(self):
        with pytest.raises(ValueError):
            WeekDays(((),) * 6)

    def test_from_mapping_fills_missing_days(self):
        workout = Workout("x", "Easy", Distance(5.0))
        days = WeekDays.from_mapping({"Wed": [workout]})
        assert days["Wed"] == (workout,)
        assert days[Day.MON] == ()

    def test_iteration_is_monday_first(self):
        assert [d.value for d in WeekDays()] == list(DAY_KEYS)

    def test_with_bucket_leaves_original(self):
        days = WeekDays()
        workout = Workout("x", "Easy", Distance(5.0))
        updated = days.with_bucket("Fri", [workout])
        assert updated["Fri"] == (workout,)
        assert days["Fri"] == ()

    def test_to_dict_has_all_seven_keys(self):
        assert list(WeekDays().to_dict()) == list(DAY_KEYS)


class TestWeeklyTotal:
    """Tests for weekly total folding."""

    def test_sums_distances_and_ignores_time(self):
        days = WeekDays.from_mapping({
            "Mon": [Workout("a", "Easy", Distance(5.0))],
            "Tue": [Workout("b", "Tempo", Duration(40.0))],
            "Sat": [Workout("c", "Long", Distance(7.5))],
        })
        assert compute_weekly_total(days) == 13

    def test_empty_week_is_zero(self):
        assert compute_weekly_total(WeekDays()) == 0

    def test_recompute_replaces_stale_total(self):
        week = Week(
            week=1,
            start_date=date(2026, 1, 5),
            days=WeekDays.from_mapping({"Mon": [Workout("a", "Easy", Distance(4.4))]}),
            weekly_total=99,
        )
        assert recompute_weekly_total(week).weekly_total == 4


class TestWeek:
    def test_from_dict_skips_null_entries(self):
        week = Week.from_dict({
            "week": 1,
            "startDate": "2026-01-05",
            "days": {"Mon": [None, {"id": "a", "type": "Easy", "distance": 5}], "Tue": None},
            "weeklyTotal": 5,
        })
        assert [w.id for w in week.days["Mon"]] == ["a"]
        assert week.days["Tue"] == ()
        assert week.workout_count == 1

    def test_to_dict(self, sample_plan):
        data = sample_plan.weeks[0].to_dict()
        assert data["week"] == 1
        assert data["startDate"] == "2026-01-05"
        assert data["weeklyTotal"] == 5
        assert set(data["days"]) == set(DAY_KEYS)


class TestPlan:
    """Tests for the Plan model."""

    def test_counts(self, sample_plan):
        assert sample_plan.total_weeks == 2
        assert sample_plan.workout_count == 3
        assert not sample_plan.is_empty
        assert Plan().is_empty

    def test_peak_week(self, sample_plan):
        assert sample_plan.peak_week.week == 2
        assert Plan().peak_week is None

    def test_peak_week_tie_goes_to_earliest(self):
        weeks = tuple(Week(n, date(2026, 1, 5), weekly_total=10) for n in (1, 2))
        assert Plan(weeks).peak_week.week == 1

    def test_get_week(self, sample_plan):
        assert sample_plan.get_week(2).weekly_total == 12
        assert sample_plan.get_week(3) is None

    def test_find_workout(self, sample_plan):
        location = sample_plan.find_workout("w2-long")
        assert location == WorkoutLocation(2, Day.SAT, 0)
        assert str(location) == "week 2, Sat, workout 0"
        assert sample_plan.find_workout("missing") is None

    def test_with_week_replaces_by_number(self, sample_plan):
        replacement = Week(2, date(2026, 1, 12))
        updated = sample_plan.with_week(replacement)
        assert updated.get_week(2) is replacement
        assert updated.get_week(1) is sample_plan.get_week(1)
        assert sample_plan.get_week(2).weekly_total == 12


class TestPlanSettings:
    """Tests for generation settings."""

    def test_weeks_until_race(self, plan_settings):
        assert plan_settings.weeks_until_race == 7

    def test_to_dict_omits_unset_custom_distance(self, plan_settings):
        data = plan_settings.to_dict()
        assert data["raceDistance"] == "half"
        assert data["unit"] == "km"
        assert "customRaceDistance" not in data

    def test_from_dict(self):
        settings = PlanSettings.from_dict({
            "todayDate": "2026-01-05",
            "raceDate": "2026-04-01",
            "raceDistance": "custom",
            "customRaceDistance": 30,
            "unit": "miles",
            "trainingDays": [{"day": "Tue", "workouts": [{"runType": "Interval", "nickname": ""}]}],
        })
        assert settings.race_distance is RaceDistance.CUSTOM
        assert settings.custom_race_distance == 30
        assert settings.unit is DistanceUnit.MILES
        assert settings.training_days == [
            TrainingDay(Day.TUE, [WorkoutSlot(WorkoutType.INTERVAL, None)])
        ]

    def test_race_distance_labels(self):
        assert RaceDistance.HALF_MARATHON.label == "Half Marathon"
        assert RaceDistance.FIVE_K.label == "5K"


class TestParseIsoDate:
    def test_plain_date(self):
        assert parse_iso_date("2026-01-05") == date(2026, 1, 5)

    def test_timestamp(self):
        assert parse_iso_date("2026-01-05T10:00:00Z") == date(2026, 1, 5)

    def test_date_passthrough(self):
        assert parse_iso_date(date(2026, 1, 5)) == date(2026, 1, 5)
