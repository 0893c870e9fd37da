"""Resolve the active cashflow configuration and normalize it to monthly figures."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from ..models import CashflowConfig, CashflowTotals
from ..units import monthly_from_annual, monthly_from_quarterly, normalize_rent_to_monthly


def sort_configs(configs: Iterable[CashflowConfig]) -> list[CashflowConfig]:
    """Return configurations sorted descending by ``effective_from`` (stable)."""
    return sorted(configs, key=lambda c: c.effective_from, reverse=True)


def active_config(configs: Sequence[CashflowConfig]) -> CashflowConfig | None:
    """The most recent configuration, i.e. element 0 of a descending list.

    No query date is involved, so a configuration dated in the future is
    still the active one.
    """
    return configs[0] if configs else None


def monthly_income(config: CashflowConfig) -> float:
    if config.rent_income and config.rent_frequency:
        return normalize_rent_to_monthly(config.rent_income, config.rent_frequency)
    return 0.0


def monthly_expenses(config: CashflowConfig) -> float:
    mortgage = config.mortgage_payment or 0.0
    insurance = monthly_from_annual(config.insurance_annual) if config.insurance_annual else 0.0
    rates_strata = (
        monthly_from_quarterly(config.rates_strata_quarterly)
        if config.rates_strata_quarterly
        else 0.0
    )
    other = config.other_expenses or 0.0
    return mortgage + insurance + rates_strata + other


def monthly_totals(config: CashflowConfig | None) -> CashflowTotals:
    """Monthly income and expenses for a single configuration."""
    if config is None:
        return CashflowTotals()
    return CashflowTotals(
        monthly_income=monthly_income(config),
        monthly_expenses=monthly_expenses(config),
    )


def resolve_cashflow(configs: Sequence[CashflowConfig]) -> CashflowTotals:
    """Current monthly cashflow for a property (zeros when unconfigured)."""
    return monthly_totals(active_config(configs))


def cashflow_history(
    configs: Sequence[CashflowConfig],
) -> list[tuple[date, CashflowTotals]]:
    """Totals for every configuration, oldest first."""
    return [(c.effective_from, monthly_totals(c)) for c in reversed(configs)]
