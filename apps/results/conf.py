from decimal import Decimal

from django.conf import settings

DEFAULTS = {
    "PASSING_CGPA": Decimal("2.00"),
    "PROBATION_CGPA": Decimal("1.50"),
    "MAX_FAILED_COURSES": 2,
    "TOPPERS_LIMIT": 10,
}


def get_setting(name):
    """Read a key from settings.RESULTS, falling back to DEFAULTS."""
    overrides = getattr(settings, "RESULTS", {}) or {}
    return overrides.get(name, DEFAULTS[name])
