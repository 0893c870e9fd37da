"""Portfolio-level aggregation: value over time and summary totals."""

from __future__ import annotations

from datetime import date
from typing import Sequence

from ..models import CashflowTotals, PortfolioSummary, Property, PropertyMetrics, ValuationEntry, ValuePoint
from .valuation import calculate_lvr, resolve_value_at

DAYS_PER_YEAR = 365

Holding = tuple[Property, Sequence[ValuationEntry]]


def _event_dates(holdings: Sequence[Holding]) -> list[date]:
    """Purchase and valuation dates across all holdings, deduplicated, ascending."""
    dates: set[date] = set()
    for prop, valuations in holdings:
        dates.add(prop.purchase_date)
        dates.update(v.date_recorded for v in valuations)
    return sorted(dates)


def portfolio_value_at(holdings: Sequence[Holding], on: date) -> float:
    """Total value of the properties owned on ``on`` (forward-filled)."""
    total = 0.0
    for prop, valuations in holdings:
        if on < prop.purchase_date:
            continue
        total += resolve_value_at(valuations, prop.purchase_price, on)
    return total


def portfolio_value_series(holdings: Sequence[Holding]) -> list[ValuePoint]:
    """One point per distinct purchase or valuation date, oldest first.

    Each holding pairs a property with its valuations sorted descending by
    ``date_recorded``. A property only contributes from its purchase date on,
    and always at its latest valuation on or before the point's date.
    """
    return [ValuePoint(date=d, total_value=portfolio_value_at(holdings, d)) for d in _event_dates(holdings)]


def holding_period_years(prop: Property, as_of: date) -> float:
    return (as_of - prop.purchase_date).days / DAYS_PER_YEAR


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def summarize_portfolio(metrics: Sequence[PropertyMetrics], as_of: date) -> PortfolioSummary:
    """Sum per-property metrics into portfolio totals.

    - Average LVR is total debt over total value, not a mean of ratios.
    - Average capital growth is the unweighted mean of per-property growth %.
    - Annualized growth divides that mean by the mean holding period in years.
    All ratios are zero-guarded, so an empty portfolio yields zeros.
    """
    total_value = sum(m.current_value for m in metrics)
    total_debt = sum(m.current_loan for m in metrics)
    total_invested = sum(m.property.purchase_price for m in metrics)
    total_growth = sum(m.growth for m in metrics)

    cashflow = CashflowTotals(
        monthly_income=sum(m.cashflow.monthly_income for m in metrics),
        monthly_expenses=sum(m.cashflow.monthly_expenses for m in metrics),
    )

    avg_growth = _mean([m.growth_percentage for m in metrics])
    avg_holding = _mean([holding_period_years(m.property, as_of) for m in metrics])
    annualized = avg_growth / avg_holding if avg_holding > 0 else 0.0
    total_return = (total_value - total_invested) / total_invested * 100 if total_invested else 0.0

    return PortfolioSummary(
        property_count=len(metrics),
        total_value=total_value,
        total_debt=total_debt,
        total_equity=total_value - total_debt,
        average_lvr=calculate_lvr(total_debt, total_value),
        total_invested=total_invested,
        total_equity_growth=total_growth,
        total_return_percentage=total_return,
        average_growth_percentage=avg_growth,
        average_holding_years=avg_holding,
        annualized_growth_rate=annualized,
        cashflow=cashflow,
        properties_with_cashflow=sum(1 for m in metrics if m.has_cashflow),
    )
