from decimal import Decimal

import pytest

from results.exceptions import ConfigurationError, InvalidInput
from results.models import GradeScale
from results.services.grade_scale import (
    DEFAULT_GRADE_SCALE,
    get_scale,
    grade_for_percentage,
    replace_scale,
    seed_default_scale,
)


def test_get_scale_never_seeds(db):
    assert get_scale() == []
    assert GradeScale.objects.count() == 0


def test_seed_only_writes_into_an_empty_table(db):
    assert seed_default_scale() is True
    assert seed_default_scale() is False
    assert GradeScale.objects.count() == len(DEFAULT_GRADE_SCALE)


def test_forced_seed_replaces_custom_scale(db):
    replace_scale([
        {"min": 0, "max": 49.99, "grade": "F", "grade_point": 0},
        {"min": 50, "max": 100, "grade": "P", "grade_point": 4},
    ])
    assert seed_default_scale(force=True) is True
    assert [b.letter_grade for b in get_scale()][:2] == ["A+", "A"]


def test_default_scale_covers_every_hundredth(grade_scale):
    scale = get_scale()
    for hundredths in range(0, 10001):
        pct = Decimal(hundredths) / 100
        matches = [b for b in scale if b.min_percentage <= pct <= b.max_percentage]
        assert len(matches) == 1, pct


@pytest.mark.parametrize(
    "pct, letter, point",
    [
        ("100", "A+", "4.00"),
        ("85", "A+", "4.00"),
        ("84.99", "A", "4.00"),
        ("84.999", "A", "4.00"),
        ("74.5", "B", "3.00"),
        ("55", "D+", "1.50"),
        ("50", "D", "1.00"),
        ("49.99", "F", "0.00"),
        ("0", "F", "0.00"),
    ],
)
def test_grade_for_percentage_boundaries(grade_scale, pct, letter, point):
    band = grade_for_percentage(Decimal(pct))
    assert band.letter_grade == letter
    assert band.grade_point == Decimal(point)


@pytest.mark.parametrize("pct", ["-0.01", "100.01", "150"])
def test_grade_for_percentage_rejects_out_of_range(grade_scale, pct):
    with pytest.raises(InvalidInput):
        grade_for_percentage(Decimal(pct))


def test_empty_scale_is_a_configuration_error(db):
    with pytest.raises(ConfigurationError):
        grade_for_percentage(Decimal("70"))


def test_scale_gap_is_a_configuration_error_not_an_f(db):
    # written directly: replace_scale would refuse this scale
    GradeScale.objects.create(min_percentage=Decimal("0"), max_percentage=Decimal("49.99"), letter_grade="F", grade_point=Decimal("0"))
    GradeScale.objects.create(min_percentage=Decimal("60"), max_percentage=Decimal("100"), letter_grade="A", grade_point=Decimal("4"))

    with pytest.raises(ConfigurationError):
        grade_for_percentage(Decimal("55"))


@pytest.mark.parametrize(
    "entries",
    [
        [],
        None,
        [{"min": 10, "max": 100, "grade": "P", "grade_point": 4}],
        [{"min": 0, "max": 99, "grade": "P", "grade_point": 4}],
        [
            {"min": 0, "max": 50, "grade": "F", "grade_point": 0},
            {"min": 50, "max": 100, "grade": "P", "grade_point": 4},
        ],
        [
            {"min": 0, "max": 49.99, "grade": "F", "grade_point": 0},
            {"min": 50.5, "max": 100, "grade": "P", "grade_point": 4},
        ],
        [{"min": 0, "max": 100, "grade": "P", "grade_point": 5}],
        [{"min": 0, "max": 100, "grade_point": 4}],
        [{"min": "zero", "max": 100, "grade": "P", "grade_point": 4}],
    ],
)
def test_replace_scale_rejects_invalid_scales_and_keeps_the_old_one(grade_scale, entries):
    with pytest.raises(InvalidInput):
        replace_scale(entries)
    assert GradeScale.objects.count() == len(DEFAULT_GRADE_SCALE)


def test_replace_scale_swaps_wholesale(grade_scale):
    scale = replace_scale([
        {"min_marks": 50, "max_marks": 100, "grade": "P", "grade_point": 4},
        {"min_marks": 0, "max_marks": 49.99, "grade": "F", "grade_point": 0},
    ])

    assert [b.letter_grade for b in scale] == ["P", "F"]
    assert GradeScale.objects.count() == 2
    assert scale[1].remarks == "Fail"
    assert grade_for_percentage(Decimal("49.999")).letter_grade == "F"
