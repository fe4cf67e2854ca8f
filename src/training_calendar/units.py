"""Distance unit conversion and display helpers."""

from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Union


MILES_PER_KM = 0.621371


class DistanceUnit(str, Enum):
    """Linear units a plan can be expressed in."""
    KM = "km"
    MILES = "miles"

    @property
    def label(self) -> str:
        """Short label used next to a number."""
        return "km" if self is DistanceUnit.KM else "mi"

    @property
    def other(self) -> "DistanceUnit":
        """The unit a display toggle switches to."""
        return DistanceUnit.MILES if self is DistanceUnit.KM else DistanceUnit.KM


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with halves going up (2.5 -> 3), unlike the builtin round()."""
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def km_to_miles(km: float) -> float:
    """Convert kilometers to miles."""
    return km * MILES_PER_KM


def miles_to_km(miles: float) -> float:
    """Convert miles to kilometers."""
    return miles / MILES_PER_KM


def convert_distance(
    value: float,
    from_unit: Union[DistanceUnit, str],
    to_unit: Union[DistanceUnit, str],
) -> float:
    """
    Convert a distance between units.

    The result is not rounded; callers decide on precision.

    Raises:
        ValueError: If either unit is unknown
    """
    from_unit = DistanceUnit(from_unit)
    to_unit = DistanceUnit(to_unit)
    if from_unit == to_unit:
        return value
    if from_unit is DistanceUnit.KM:
        return km_to_miles(value)
    return miles_to_km(value)


def format_distance(distance: float, unit: Union[DistanceUnit, str]) -> str:
    """Format a distance like '12.5km' or '7.8mi'."""
    rounded = round_half_up(distance, 1)
    text = f"{rounded:.1f}".rstrip("0").rstrip(".")
    return f"{text}{DistanceUnit(unit).label}"


def format_week_date_range(start_date: date) -> str:
    """Format a week as 'Jan 1-7', or 'Jan 29 - Feb 4' when it crosses a month."""
    end_date = start_date + timedelta(days=6)
    start_month = start_date.strftime("%b")
    end_month = end_date.strftime("%b")
    if start_month == end_month:
        return f"{start_month} {start_date.day}-{end_date.day}"
    return f"{start_month} {start_date.day} - {end_month} {end_date.day}"
