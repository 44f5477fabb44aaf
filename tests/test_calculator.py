import math
from dataclasses import replace

import pytest

import drum_calculator as calc
from drum_calculator import DrumSpec, InvalidInputError, PersonSpec


def test_volumes_match_cylinder_formula(drum, person):
    assert math.isclose(drum.volume, math.pi * 30 ** 2 * 100)
    assert math.isclose(person.volume, math.pi * 15 ** 2 * 90)
    assert math.isclose(replace(person, count=3).total_volume, 3 * person.volume)


def test_person_taller_than_drum_does_not_fit(drum):
    res = calc.compute(drum, PersonSpec(height=170.0, width=40.0, count=1))
    assert (res.percent_filled, res.actual_count, res.cement_volume) == (0, 0, 0)
    assert res.message == calc.MSG_DOES_NOT_FIT


def test_person_wider_than_drum_does_not_fit(drum):
    res = calc.compute(drum, PersonSpec(height=50.0, width=61.0, count=3))
    assert (res.percent_filled, res.actual_count, res.cement_volume) == (0, 0, 0)
    assert not res.overflow


def test_single_person_leaves_room_for_cement(drum, person):
    res = calc.compute(drum, person)
    assert math.isclose(res.cement_volume, math.pi * (90000 - 20250))
    assert math.isclose(res.cement_volume, 219126.09, rel_tol=1e-7)
    assert math.isclose(res.cement_liters, 219.126, rel_tol=1e-5)
    assert math.isclose(res.percent_filled, 22.5)
    assert res.actual_count == 1
    assert res.message == "Cement needed: 219.13 liters (with 1 person(s) inside)."


def test_too_many_people_overflow(drum, person):
    res = calc.compute(drum, replace(person, count=5))
    assert math.isclose(res.percent_filled, 112.5)
    assert res.actual_count == 4
    assert res.cement_volume == 0
    assert res.overflow
    assert res.message == calc.MSG_OVERFILLED


def test_exact_volume_match_is_overflow(drum):
    res = calc.compute(drum, PersonSpec(height=100.0, width=60.0, count=1))
    assert res.message == calc.MSG_OVERFILLED
    assert res.percent_filled == 100
    assert res.cement_volume == 0
    assert res.actual_count == 1


@pytest.mark.parametrize(
    "height, width, count",
    [(50.0, 20.0, 1), (50.0, 20.0, 3), (99.9, 59.9, 1), (10.0, 5.0, 40)],
)
def test_normal_fit_properties(drum, height, width, count):
    person = PersonSpec(height=height, width=width, count=count)
    res = calc.compute(drum, person)
    assert res.cement_volume > 0
    assert math.isclose(res.cement_volume, drum.volume - person.total_volume)
    assert 0 <= res.percent_filled < 100
    assert res.actual_count == count


@pytest.mark.parametrize("count", [3, 7, 30])
def test_overflow_reports_people_that_fit_by_volume(count):
    # each person takes 40% of the drum, so two fit by volume
    drum = DrumSpec(height=100.0, diameter=10.0)
    person = PersonSpec(height=40.0, width=10.0, count=count)
    res = calc.compute(drum, person)
    assert res.cement_volume == 0
    assert res.actual_count == math.floor(drum.volume / person.volume) == 2
    assert math.isclose(res.percent_filled, count * 40.0)


def test_compute_is_repeatable(drum, person):
    crowd = replace(person, count=3)
    assert calc.compute(drum, crowd) == calc.compute(drum, crowd)


def test_max_fit_by_volume_floor_and_zero_guard():
    assert calc.max_fit_by_volume(1000.0, 300.0) == 3
    assert calc.max_fit_by_volume(900.0, 300.0) == 3
    assert calc.max_fit_by_volume(1000.0, 0.0) == 0


def test_result_to_dict(drum, person):
    data = calc.compute(drum, person).to_dict()
    assert data["actual_count"] == 1
    assert data["cement_liters"] == 219.13
    assert set(data) == {"message", "percent_filled", "actual_count", "cement_volume_cm3", "cement_liters"}


def test_build_specs_accepts_numeric_strings():
    drum, person = calc.build_specs(" 90 ", "30", 100, 60.0, "2")
    assert drum == DrumSpec(height=100.0, diameter=60.0)
    assert person == PersonSpec(height=90.0, width=30.0, count=2)


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"person_height": None}, "person_height"),
        ({"person_width": ""}, "person_width"),
        ({"drum_height": "abc"}, "drum_height"),
        ({"drum_diameter": 0}, "drum_diameter"),
        ({"drum_diameter": -5}, "drum_diameter"),
        ({"drum_height": float("nan")}, "drum_height"),
        ({"person_height": True}, "person_height"),
        ({"person_count": 0}, "person_count"),
        ({"person_count": 2.5}, "person_count"),
    ],
)
def test_build_specs_rejects_bad_input(kwargs, field):
    raw = {"person_height": 90, "person_width": 30, "drum_height": 100, "drum_diameter": 60, "person_count": 1}
    raw.update(kwargs)
    with pytest.raises(InvalidInputError) as exc:
        calc.build_specs(**raw)
    assert exc.value.field == field
    assert isinstance(exc.value, ValueError)


def test_parse_count_accepts_integral_float():
    assert calc.parse_count("n", 3.0) == 3
    assert calc.parse_count("n", "4") == 4
