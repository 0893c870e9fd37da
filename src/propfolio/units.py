"""Convert periodic amounts to and from their monthly equivalent.

Inputs are not validated; callers sanitize user input beforehand.
"""

from __future__ import annotations

WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12
MONTHS_PER_QUARTER = 3


def monthly_from_weekly(amount: float) -> float:
    return amount * WEEKS_PER_YEAR / MONTHS_PER_YEAR


def monthly_from_annual(amount: float) -> float:
    return amount / MONTHS_PER_YEAR


def monthly_from_quarterly(amount: float) -> float:
    return amount / MONTHS_PER_QUARTER


def normalize_rent_to_monthly(amount: float, frequency: str) -> float:
    """Monthly rent for an amount paid ``weekly`` or ``monthly``."""
    if frequency == "weekly":
        return monthly_from_weekly(amount)
    return amount


def weekly_from_monthly(amount: float) -> float:
    return amount * MONTHS_PER_YEAR / WEEKS_PER_YEAR


def annual_from_monthly(amount: float) -> float:
    return amount * MONTHS_PER_YEAR
