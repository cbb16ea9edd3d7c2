import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction

from results.exceptions import ConfigurationError, InvalidInput
from results.models import GradeScale
from results.services import Q2, t2, to_decimal

logger = logging.getLogger(__name__)

# HEC Pakistan scale: (min, max, letter, point, remarks)
DEFAULT_GRADE_SCALE = [
    ("85.00", "100.00", "A+", "4.00", "Excellent"),
    ("80.00", "84.99", "A", "4.00", "Excellent"),
    ("75.00", "79.99", "B+", "3.50", "Very Good"),
    ("70.00", "74.99", "B", "3.00", "Good"),
    ("65.00", "69.99", "C+", "2.50", "Satisfactory"),
    ("60.00", "64.99", "C", "2.00", "Satisfactory"),
    ("55.00", "59.99", "D+", "1.50", "Pass"),
    ("50.00", "54.99", "D", "1.00", "Pass"),
    ("0.00", "49.99", "F", "0.00", "Fail"),
]

MAX_GRADE_POINT = Decimal("4.00")


def default_scale_entries():
    return [
        {
            "min_percentage": Decimal(lo),
            "max_percentage": Decimal(hi),
            "letter_grade": letter,
            "grade_point": Decimal(gp),
            "remarks": remarks,
        }
        for lo, hi, letter, gp, remarks in DEFAULT_GRADE_SCALE
    ]


def get_scale():
    """All bands, highest first. Never writes; seeding is a deployment step."""
    return list(GradeScale.objects.all().order_by("-min_percentage"))


def seed_default_scale(force=False) -> bool:
    """
    Install DEFAULT_GRADE_SCALE.

    Only writes when the table is empty unless force=True, in which case the
    existing scale is replaced.
    """
    if not force and GradeScale.objects.exists():
        return False
    replace_scale(default_scale_entries())
    logger.info("Seeded default grade scale (%d bands)", len(DEFAULT_GRADE_SCALE))
    return True


def grade_for_percentage(percentage, scale=None) -> GradeScale:
    """
    Return the band containing percentage (truncated to 2 dp).

    scale may be a preloaded list from get_scale() so batch callers hit the
    database once.
    """
    pct = t2(percentage)
    if pct < 0 or pct > 100:
        raise InvalidInput(f"Percentage must be between 0 and 100, got {pct}")

    if scale is None:
        scale = get_scale()
    if not scale:
        raise ConfigurationError("Grade scale is empty. Run 'manage.py seed_grade_scale' first.")

    for band in scale:
        if band.min_percentage <= pct <= band.max_percentage:
            return band

    raise ConfigurationError(f"No grade band covers {pct}%. Check the grade scale for gaps.")


def _normalize_entry(row_no, entry):
    def pick(*keys):
        for k in keys:
            if k in entry and entry[k] not in (None, ""):
                return entry[k]
        return None

    lo = pick("min_percentage", "min_marks", "min")
    hi = pick("max_percentage", "max_marks", "max")
    letter = pick("letter_grade", "grade")
    gp = pick("grade_point", "point")
    remarks = pick("remarks")

    if lo is None or hi is None or letter is None or gp is None:
        raise InvalidInput(f"Row {row_no}: min, max, grade and grade_point are required")

    try:
        lo = to_decimal(lo).quantize(Q2)
        hi = to_decimal(hi).quantize(Q2)
        gp = to_decimal(gp).quantize(Q2)
    except (InvalidOperation, ValueError):
        raise InvalidInput(f"Row {row_no}: min, max and grade_point must be numbers")

    if not (0 <= lo <= hi <= 100):
        raise InvalidInput(f"Row {row_no}: range {lo}-{hi} must satisfy 0 <= min <= max <= 100")
    if not (0 <= gp <= MAX_GRADE_POINT):
        raise InvalidInput(f"Row {row_no}: grade_point {gp} must be between 0 and {MAX_GRADE_POINT}")

    letter = str(letter).strip()
    if not letter:
        raise InvalidInput(f"Row {row_no}: grade label is empty")

    return {
        "min_percentage": lo,
        "max_percentage": hi,
        "letter_grade": letter,
        "grade_point": gp,
        "remarks": str(remarks).strip() if remarks is not None else ("Fail" if gp == 0 else "Pass"),
    }


def validate_scale(entries):
    """
    Normalize entries and check that they tile [0, 100] at 0.01 resolution
    with no overlap and no gap. Returns normalized dicts, lowest band first.
    """
    if not isinstance(entries, (list, tuple)) or not entries:
        raise InvalidInput("Grade scale array is required")

    rows = [_normalize_entry(i, e) for i, e in enumerate(entries, start=1)]
    rows.sort(key=lambda r: r["min_percentage"])

    if rows[0]["min_percentage"] != 0:
        raise InvalidInput(f"Grade scale must start at 0, lowest band starts at {rows[0]['min_percentage']}")
    if rows[-1]["max_percentage"] != 100:
        raise InvalidInput(f"Grade scale must end at 100, highest band ends at {rows[-1]['max_percentage']}")

    for prev, cur in zip(rows, rows[1:]):
        expected = prev["max_percentage"] + Q2
        if cur["min_percentage"] < expected:
            raise InvalidInput(
                f"Bands {prev['letter_grade']} and {cur['letter_grade']} overlap "
                f"({prev['max_percentage']} / {cur['min_percentage']})"
            )
        if cur["min_percentage"] > expected:
            raise InvalidInput(
                f"Gap between {prev['letter_grade']} and {cur['letter_grade']} "
                f"({prev['max_percentage']} / {cur['min_percentage']})"
            )

    return rows


def replace_scale(entries):
    """Delete every band and insert entries, all or nothing."""
    rows = validate_scale(entries)

    with transaction.atomic():
        GradeScale.objects.all().delete()
        GradeScale.objects.bulk_create([GradeScale(**r) for r in rows])

    logger.info("Grade scale replaced with %d bands", len(rows))
    return get_scale()
