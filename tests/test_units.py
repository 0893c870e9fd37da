"""Tests for period-to-monthly conversions."""

import math

import pytest

from propfolio.units import (
    annual_from_monthly,
    monthly_from_annual,
    monthly_from_quarterly,
    monthly_from_weekly,
    normalize_rent_to_monthly,
    weekly_from_monthly,
)


def test_weekly_rent_to_monthly() -> None:
    assert normalize_rent_to_monthly(1000, "weekly") == pytest.approx(1000 * 52 / 12)
    assert normalize_rent_to_monthly(1000, "weekly") == pytest.approx(4333.33, abs=0.01)


def test_monthly_rent_unchanged() -> None:
    assert normalize_rent_to_monthly(1000, "monthly") == 1000


def test_annual_and_quarterly() -> None:
    assert monthly_from_annual(1200) == 100
    assert monthly_from_quarterly(600) == 200
    assert monthly_from_weekly(12) == pytest.approx(52)


def test_projections_invert_monthly() -> None:
    assert weekly_from_monthly(monthly_from_weekly(450)) == pytest.approx(450)
    assert annual_from_monthly(100) == 1200


def test_no_validation_of_inputs() -> None:
    assert monthly_from_annual(-1200) == -100
    assert math.isnan(normalize_rent_to_monthly(float("nan"), "weekly"))
