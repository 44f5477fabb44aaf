"""
Drum Fit Calculator (core)

Works out how much cement fills a cylindrical drum once one or more people are
standing in it. People are modelled as upright cylinders (height × width),
the drum as an upright cylinder (height × diameter). All lengths in cm,
volumes in cm³; cement is reported in litres (cm³ / 1000).

Outcome order (first match wins):
  1. Person taller than the drum or wider than its diameter → does not fit.
  2. People volume >= drum volume → overflow (percent uncapped, no cement).
  3. Otherwise → cement = drum volume − people volume.

Input checking lives in build_specs(); compute() assumes positive inputs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Tuple

LITERS_PER_CM3 = 1.0 / 1000.0

MSG_DOES_NOT_FIT = "Person does not fit in the drum."
MSG_OVERFILLED = "Too many people! Drum overfilled."


class InvalidInputError(ValueError):
    """Raised when a dimension or count is missing, non-numeric or not positive."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


# ---------------- Geometry ----------------
def cylinder_volume(diameter: float, height: float) -> float:
    return math.pi * (diameter / 2) ** 2 * height


def max_fit_by_volume(capacity: float, volume_each: float) -> int:
    if not volume_each or volume_each <= 0:
        return 0
    return math.floor(capacity / volume_each)


def to_liters(volume_cm3: float) -> float:
    return volume_cm3 * LITERS_PER_CM3


@dataclass(frozen=True)
class DrumSpec:
    height: float
    diameter: float

    @property
    def volume(self) -> float:
        return cylinder_volume(self.diameter, self.height)


@dataclass(frozen=True)
class PersonSpec:
    height: float
    width: float  # treated as the diameter of the person's cylinder
    count: int = 1

    @property
    def volume(self) -> float:
        return cylinder_volume(self.width, self.height)

    @property
    def total_volume(self) -> float:
        return self.volume * self.count


@dataclass(frozen=True)
class FitResult:
    message: str
    percent_filled: float
    actual_count: int
    cement_volume: float

    @property
    def cement_liters(self) -> float:
        return to_liters(self.cement_volume)

    @property
    def overflow(self) -> bool:
        return self.percent_filled > 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "percent_filled": float(self.percent_filled),
            "actual_count": int(self.actual_count),
            "cement_volume_cm3": float(self.cement_volume),
            "cement_liters": round(self.cement_liters, 2),
        }


# ---------------- Calculation ----------------
def compute(drum: DrumSpec, person: PersonSpec) -> FitResult:
    """Fit `person.count` people into `drum` and return the cement needed.

    Exact equality of people volume and drum volume counts as overflow.
    """
    if person.height > drum.height or person.width > drum.diameter:
        return FitResult(message=MSG_DOES_NOT_FIT, percent_filled=0, actual_count=0, cement_volume=0)

    person_volume = person.volume
    drum_volume = drum.volume
    total_people_volume = person_volume * person.count

    if total_people_volume >= drum_volume:
        return FitResult(
            message=MSG_OVERFILLED,
            percent_filled=(total_people_volume / drum_volume) * 100,
            actual_count=max_fit_by_volume(drum_volume, person_volume),
            cement_volume=0,
        )

    cement_volume = drum_volume - total_people_volume
    percent_filled = min((total_people_volume / drum_volume) * 100, 100)
    return FitResult(
        message=f"Cement needed: {to_liters(cement_volume):.2f} liters (with {person.count} person(s) inside).",
        percent_filled=percent_filled,
        actual_count=person.count,
        cement_volume=cement_volume,
    )


# ---------------- Input checking ----------------
def _to_float(name: str, value: Any) -> float:
    if value is None:
        raise InvalidInputError(name, "value is required")
    if isinstance(value, bool):
        raise InvalidInputError(name, "expected a number")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise InvalidInputError(name, "value is required")
    try:
        num = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(name, f"not a number: {value!r}") from None
    if not math.isfinite(num):
        raise InvalidInputError(name, "must be finite")
    return num


def parse_dimension(name: str, value: Any) -> float:
    num = _to_float(name, value)
    if num <= 0:
        raise InvalidInputError(name, "must be greater than zero")
    return num


def parse_count(name: str, value: Any) -> int:
    num = _to_float(name, value)
    if not num.is_integer():
        raise InvalidInputError(name, "must be a whole number")
    if num < 1:
        raise InvalidInputError(name, "must be at least 1")
    return int(num)


def build_specs(
    person_height: Any,
    person_width: Any,
    drum_height: Any,
    drum_diameter: Any,
    person_count: Any = 1,
) -> Tuple[DrumSpec, PersonSpec]:
    """Validate raw inputs (numbers or strings) and return (drum, person).

    Raises InvalidInputError naming the first offending field.
    """
    person = PersonSpec(
        height=parse_dimension("person_height", person_height),
        width=parse_dimension("person_width", person_width),
        count=parse_count("person_count", person_count),
    )
    drum = DrumSpec(
        height=parse_dimension("drum_height", drum_height),
        diameter=parse_dimension("drum_diameter", drum_diameter),
    )
    return drum, person
