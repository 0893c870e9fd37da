"""Portfolio aggregation and derived metrics."""

from .cashflow import active_config, cashflow_history, monthly_totals, resolve_cashflow, sort_configs
from .engine import SORT_KEYS, PortfolioEngine
from .portfolio import portfolio_value_at, portfolio_value_series, summarize_portfolio
from .valuation import (
    calculate_equity,
    calculate_growth,
    calculate_growth_percentage,
    calculate_lvr,
    current_value,
    property_metrics,
    resolve_value_at,
    sort_valuations,
)

__all__ = [
    "PortfolioEngine",
    "SORT_KEYS",
    "active_config",
    "cashflow_history",
    "monthly_totals",
    "resolve_cashflow",
    "sort_configs",
    "portfolio_value_at",
    "portfolio_value_series",
    "summarize_portfolio",
    "calculate_equity",
    "calculate_growth",
    "calculate_growth_percentage",
    "calculate_lvr",
    "current_value",
    "property_metrics",
    "resolve_value_at",
    "sort_valuations",
]
