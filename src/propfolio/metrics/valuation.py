"""Point-in-time valuation lookup and current-value metrics."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from ..models import CashflowTotals, Property, PropertyMetrics, ValuationEntry


def _or_zero(value: float | None) -> float:
    return value if value is not None else 0.0


def sort_valuations(entries: Iterable[ValuationEntry]) -> list[ValuationEntry]:
    """Return entries sorted descending by ``date_recorded``.

    The sort is stable, so entries sharing a date keep their relative order.
    """
    return sorted(entries, key=lambda e: e.date_recorded, reverse=True)


def resolve_value_at(
    valuations: Sequence[ValuationEntry],
    purchase_price: float,
    query_date: date,
) -> float:
    """Value in effect on ``query_date``.

    ``valuations`` must already be sorted descending by ``date_recorded``.
    Returns the first entry recorded on or before ``query_date``, falling back
    to the purchase price when none qualifies. Properties not yet purchased on
    ``query_date`` are the caller's concern.
    """
    for entry in valuations:
        if entry.date_recorded <= query_date:
            return entry.value
    return purchase_price


def current_value(
    prop: Property,
    valuations: Sequence[ValuationEntry],
    as_of: date,
) -> float:
    """Most recent known value of ``prop`` as of ``as_of``."""
    return resolve_value_at(valuations, prop.purchase_price, as_of)


def calculate_growth(current: float, purchase_price: float) -> float:
    return current - purchase_price


def calculate_growth_percentage(current: float, purchase_price: float) -> float:
    if purchase_price == 0:
        return 0.0
    return (current - purchase_price) / purchase_price * 100


def calculate_equity(current: float, current_loan: float) -> float:
    return current - current_loan


def calculate_lvr(current_loan: float, current: float) -> float:
    """Loan-to-value ratio as a percentage; 0 when the value is 0."""
    if current == 0:
        return 0.0
    return current_loan / current * 100


def property_metrics(
    prop: Property,
    valuations: Sequence[ValuationEntry],
    as_of: date,
    cashflow: CashflowTotals | None = None,
) -> PropertyMetrics:
    """Growth, equity and LVR for one property as of ``as_of``."""
    value = current_value(prop, valuations, as_of)
    loan = _or_zero(prop.current_loan_amount)
    return PropertyMetrics(
        property=prop,
        current_value=value,
        growth=calculate_growth(value, prop.purchase_price),
        growth_percentage=calculate_growth_percentage(value, prop.purchase_price),
        equity=calculate_equity(value, loan),
        current_loan=loan,
        lvr=calculate_lvr(loan, value),
        cashflow=cashflow or CashflowTotals(),
        has_cashflow=cashflow is not None,
    )
