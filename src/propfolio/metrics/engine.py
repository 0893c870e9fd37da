"""Portfolio engine: applies the metric functions to a fetched snapshot."""

from __future__ import annotations

from datetime import date
from typing import Callable

from ..logging import get_logger
from ..models import CashflowTotals, PortfolioSnapshot, PortfolioSummary, PropertyMetrics, ValuePoint
from .cashflow import resolve_cashflow
from .portfolio import portfolio_value_series, summarize_portfolio
from .valuation import property_metrics

logger = get_logger(__name__)

SORT_KEYS: dict[str, Callable[[PropertyMetrics], float | str]] = {
    "address": lambda m: f"{m.property.street}, {m.property.suburb}",
    "value": lambda m: m.current_value,
    "growth": lambda m: m.growth,
    "growth_percent": lambda m: m.growth_percentage,
    "lvr": lambda m: m.lvr,
    "equity": lambda m: m.equity,
    "cashflow": lambda m: m.cashflow.monthly_net,
}


class PortfolioEngine:
    """
    Derives per-property metrics, value history and portfolio totals.
    Holds no user state: every call takes the snapshot it works on.
    """

    def property_metrics(self, snapshot: PortfolioSnapshot, as_of: date | None = None) -> list[PropertyMetrics]:
        """Metrics for every property in the snapshot, in snapshot order."""
        as_of = as_of or date.today()
        results = []
        for prop in snapshot.properties:
            configs = snapshot.cashflows_for(prop.id)
            cashflow = resolve_cashflow(configs) if configs else None
            results.append(property_metrics(prop, snapshot.valuations_for(prop.id), as_of, cashflow))
        return results

    def cashflow(self, snapshot: PortfolioSnapshot, property_id: str) -> CashflowTotals:
        return resolve_cashflow(snapshot.cashflows_for(property_id))

    def value_series(self, snapshot: PortfolioSnapshot) -> list[ValuePoint]:
        holdings = [(p, snapshot.valuations_for(p.id)) for p in snapshot.properties]
        series = portfolio_value_series(holdings)
        logger.debug("Built value series with %d points for user %s", len(series), snapshot.user.id)
        return series

    def summary(self, snapshot: PortfolioSnapshot, as_of: date | None = None) -> PortfolioSummary:
        as_of = as_of or date.today()
        summary = summarize_portfolio(self.property_metrics(snapshot, as_of), as_of)
        logger.debug(
            "Summarized %d properties for user %s: value=%.2f debt=%.2f",
            summary.property_count,
            snapshot.user.id,
            summary.total_value,
            summary.total_debt,
        )
        return summary

    def compare(
        self,
        snapshot: PortfolioSnapshot,
        sort_by: str = "address",
        descending: bool = False,
        as_of: date | None = None,
    ) -> list[PropertyMetrics]:
        """Per-property metrics sorted for side-by-side comparison."""
        if sort_by not in SORT_KEYS:
            raise ValueError(f"Unknown sort field {sort_by!r}; choose from {', '.join(SORT_KEYS)}")
        metrics = self.property_metrics(snapshot, as_of)
        key = SORT_KEYS[sort_by]
        if sort_by == "address":
            return sorted(metrics, key=lambda m: str(key(m)).lower(), reverse=descending)
        return sorted(metrics, key=key, reverse=descending)
