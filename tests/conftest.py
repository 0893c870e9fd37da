"""Pytest fixtures."""

from datetime import date

import pytest

from propfolio.models import CashflowConfig, PortfolioSnapshot, Property, UserProfile, ValuationEntry


def make_property(
    id: str = "prop-1",
    purchase_price: float = 500000,
    purchase_date: date = date(2020, 1, 1),
    current_loan_amount: float | None = None,
    **kwargs,
) -> Property:
    """Build a property with sensible defaults for tests."""
    fields = dict(
        user_id="user-1",
        street="12 Smith St",
        suburb="Fitzroy",
        state="VIC",
        postcode="3065",
        property_type="House",
    )
    fields.update(kwargs)
    return Property(
        id=id,
        purchase_price=purchase_price,
        purchase_date=purchase_date,
        current_loan_amount=current_loan_amount,
        **fields,
    )


def make_valuation(property_id: str, value: float, on: date, id: str | None = None) -> ValuationEntry:
    return ValuationEntry(
        id=id or f"{property_id}-{on.isoformat()}",
        property_id=property_id,
        value=value,
        date_recorded=on,
    )


@pytest.fixture
def free_user() -> UserProfile:
    return UserProfile(id="user-1", email="owner@example.com", subscription_tier="free")


@pytest.fixture
def pro_user() -> UserProfile:
    return UserProfile(id="user-1", email="owner@example.com", subscription_tier="pro")


@pytest.fixture
def two_property_snapshot(pro_user: UserProfile) -> PortfolioSnapshot:
    """Property A bought 2020 with no revaluation; B bought 2021 and revalued in 2022."""
    a = make_property("A", 500000, date(2020, 1, 1), current_loan_amount=400000, street="1 Alpha Rd")
    b = make_property(
        "B",
        300000,
        date(2021, 1, 1),
        current_loan_amount=240000,
        street="2 Beta St",
        suburb="Newtown",
        state="NSW",
        postcode="2042",
        property_type="Apartment",
    )
    return PortfolioSnapshot(
        user=pro_user,
        properties=[a, b],
        valuations={
            "A": [],
            "B": [make_valuation("B", 320000, date(2022, 1, 1))],
        },
        cashflows={
            "A": [
                CashflowConfig(
                    id="cf-a",
                    property_id="A",
                    effective_from=date(2020, 2, 1),
                    rent_income=500,
                    rent_frequency="weekly",
                    mortgage_payment=1800,
                    insurance_annual=1200,
                    rates_strata_quarterly=600,
                    other_expenses=50,
                )
            ],
            "B": [],
        },
    )
