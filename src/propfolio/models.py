"""Data models for properties, valuations, cashflow and derived portfolio metrics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from .units import annual_from_monthly, weekly_from_monthly

AUSTRALIAN_STATES: dict[str, str] = {
    "NSW": "New South Wales",
    "VIC": "Victoria",
    "QLD": "Queensland",
    "SA": "South Australia",
    "WA": "Western Australia",
    "TAS": "Tasmania",
    "NT": "Northern Territory",
    "ACT": "Australian Capital Territory",
}

PROPERTY_TYPES: tuple[str, ...] = ("House", "Apartment", "Townhouse")

RENT_FREQUENCIES: tuple[str, ...] = ("weekly", "monthly")

SUBSCRIPTION_TIERS: tuple[str, ...] = ("free", "pro")


@dataclass
class UserProfile:
    """Account owner and subscription tier."""

    id: str
    email: str
    subscription_tier: str = "free"
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_pro(self) -> bool:
        return self.subscription_tier == "pro"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "subscription_tier": self.subscription_tier,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Property:
    """An investment property owned by a single user."""

    id: str
    user_id: str
    street: str
    suburb: str
    state: str
    postcode: str
    property_type: str
    purchase_price: float
    purchase_date: date
    bedrooms: int | None = None
    initial_loan_amount: float | None = None
    current_loan_amount: float | None = None
    interest_rate: float | None = None
    lender_name: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def address(self) -> str:
        return f"{self.street}, {self.suburb}, {self.state} {self.postcode}"

    @property
    def short_address(self) -> str:
        return f"{self.suburb}, {self.state}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "street": self.street,
            "suburb": self.suburb,
            "state": self.state,
            "postcode": self.postcode,
            "property_type": self.property_type,
            "bedrooms": self.bedrooms,
            "purchase_price": self.purchase_price,
            "purchase_date": self.purchase_date.isoformat(),
            "initial_loan_amount": self.initial_loan_amount,
            "current_loan_amount": self.current_loan_amount,
            "interest_rate": self.interest_rate,
            "lender_name": self.lender_name,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class ValuationEntry:
    """A recorded valuation of a property on a given date."""

    id: str
    property_id: str
    value: float
    date_recorded: date
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "property_id": self.property_id,
            "value": self.value,
            "date_recorded": self.date_recorded.isoformat(),
            "source": self.source,
        }


@dataclass
class CashflowConfig:
    """Rent and expense rates applying from ``effective_from`` until superseded."""

    id: str
    property_id: str
    effective_from: date
    rent_income: float | None = None
    rent_frequency: str | None = None
    mortgage_payment: float | None = None
    insurance_annual: float | None = None
    rates_strata_quarterly: float | None = None
    other_expenses: float | None = None
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "property_id": self.property_id,
            "effective_from": self.effective_from.isoformat(),
            "rent_income": self.rent_income,
            "rent_frequency": self.rent_frequency,
            "mortgage_payment": self.mortgage_payment,
            "insurance_annual": self.insurance_annual,
            "rates_strata_quarterly": self.rates_strata_quarterly,
            "other_expenses": self.other_expenses,
            "notes": self.notes,
        }


@dataclass
class PortfolioSnapshot:
    """Everything the metrics layer needs for one user, already fetched.

    ``valuations`` and ``cashflows`` are keyed by property id and sorted
    descending (by ``date_recorded`` and ``effective_from`` respectively).
    """

    user: UserProfile
    properties: list[Property]
    valuations: dict[str, list[ValuationEntry]] = field(default_factory=dict)
    cashflows: dict[str, list[CashflowConfig]] = field(default_factory=dict)

    def valuations_for(self, property_id: str) -> list[ValuationEntry]:
        return self.valuations.get(property_id, [])

    def cashflows_for(self, property_id: str) -> list[CashflowConfig]:
        return self.cashflows.get(property_id, [])


@dataclass
class CashflowTotals:
    """Normalized monthly income and expenses with derived projections."""

    monthly_income: float = 0.0
    monthly_expenses: float = 0.0

    @property
    def monthly_net(self) -> float:
        return self.monthly_income - self.monthly_expenses

    @property
    def weekly_income(self) -> float:
        return weekly_from_monthly(self.monthly_income)

    @property
    def weekly_expenses(self) -> float:
        return weekly_from_monthly(self.monthly_expenses)

    @property
    def weekly_net(self) -> float:
        return weekly_from_monthly(self.monthly_net)

    @property
    def annual_income(self) -> float:
        return annual_from_monthly(self.monthly_income)

    @property
    def annual_expenses(self) -> float:
        return annual_from_monthly(self.monthly_expenses)

    @property
    def annual_net(self) -> float:
        return annual_from_monthly(self.monthly_net)

    def to_dict(self) -> dict[str, Any]:
        return {
            "monthly_income": self.monthly_income,
            "monthly_expenses": self.monthly_expenses,
            "monthly_net": self.monthly_net,
            "weekly_income": self.weekly_income,
            "weekly_expenses": self.weekly_expenses,
            "weekly_net": self.weekly_net,
            "annual_income": self.annual_income,
            "annual_expenses": self.annual_expenses,
            "annual_net": self.annual_net,
        }


@dataclass
class PropertyMetrics:
    """Point-in-time metrics for one property."""

    property: Property
    current_value: float
    growth: float
    growth_percentage: float
    equity: float
    current_loan: float
    lvr: float
    cashflow: CashflowTotals = field(default_factory=CashflowTotals)
    has_cashflow: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "property": self.property.to_dict(),
            "current_value": self.current_value,
            "growth": self.growth,
            "growth_percentage": self.growth_percentage,
            "equity": self.equity,
            "current_loan": self.current_loan,
            "lvr": self.lvr,
            "cashflow": self.cashflow.to_dict(),
            "has_cashflow": self.has_cashflow,
        }


@dataclass
class ValuePoint:
    """Total portfolio value on a date."""

    date: date
    total_value: float

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "total_value": self.total_value}


@dataclass
class PortfolioSummary:
    """Portfolio-level totals derived from per-property metrics."""

    property_count: int
    total_value: float
    total_debt: float
    total_equity: float
    average_lvr: float
    total_invested: float
    total_equity_growth: float
    total_return_percentage: float
    average_growth_percentage: float
    average_holding_years: float
    annualized_growth_rate: float
    cashflow: CashflowTotals
    properties_with_cashflow: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "property_count": self.property_count,
            "total_value": self.total_value,
            "total_debt": self.total_debt,
            "total_equity": self.total_equity,
            "average_lvr": self.average_lvr,
            "total_invested": self.total_invested,
            "total_equity_growth": self.total_equity_growth,
            "total_return_percentage": self.total_return_percentage,
            "average_growth_percentage": self.average_growth_percentage,
            "average_holding_years": self.average_holding_years,
            "annualized_growth_rate": self.annualized_growth_rate,
            "cashflow": self.cashflow.to_dict(),
            "properties_with_cashflow": self.properties_with_cashflow,
        }
