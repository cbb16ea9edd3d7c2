"""
Result-processing pipeline.

grade_scale -> marks -> grades -> gpa -> processing -> publication,
with reports reading what the pipeline wrote.
"""

from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP

Q2 = Decimal("0.01")


def to_decimal(x) -> Decimal:
    return Decimal(str(x))


def q2(x) -> Decimal:
    """Round to 2 dp (GPA values)."""
    return to_decimal(x).quantize(Q2, rounding=ROUND_HALF_UP)


def t2(x) -> Decimal:
    """Truncate to 2 dp (percentages)."""
    return to_decimal(x).quantize(Q2, rounding=ROUND_DOWN)
