"""Export portfolio metrics and cashflow history to CSV and JSON."""

from __future__ import annotations

import csv
import json
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Sequence

from ..formatters import format_date
from ..metrics.cashflow import monthly_totals
from ..models import CashflowConfig, PortfolioSummary, PropertyMetrics, ValuePoint

PORTFOLIO_FIELDS = [
    "Address",
    "Property Type",
    "Bedrooms",
    "Purchase Date",
    "Purchase Price",
    "Current Value",
    "Capital Growth ($)",
    "Capital Growth (%)",
    "Equity",
    "Current Loan",
    "LVR (%)",
    "Interest Rate (%)",
    "Lender",
]

CASHFLOW_FIELDS = [
    "Effective From",
    "Rent Income",
    "Rent Frequency",
    "Mortgage Payment",
    "Insurance (Annual)",
    "Rates/Strata (Quarterly)",
    "Other Expenses",
    "Monthly Income",
    "Total Expenses",
    "Net Cashflow",
    "Notes",
]


def _serialize(obj: Any) -> Any:
    """JSON serializer for dates."""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def _blank(value: Any) -> Any:
    return "" if value is None else value


def portfolio_filename(today: date | None = None) -> str:
    today = today or date.today()
    return f"property-portfolio-{today.isoformat()}.csv"


def cashflow_filename(address: str, today: date | None = None) -> str:
    today = today or date.today()
    slug = re.sub(r"[^a-z0-9]", "-", address.lower())
    return f"cashflow-{slug}-{today.isoformat()}.csv"


def portfolio_rows(metrics: Sequence[PropertyMetrics]) -> list[dict[str, Any]]:
    """One CSV row per property, keyed by ``PORTFOLIO_FIELDS``."""
    rows = []
    for m in metrics:
        p = m.property
        rows.append({
            "Address": p.address,
            "Property Type": p.property_type,
            "Bedrooms": _blank(p.bedrooms),
            "Purchase Date": format_date(p.purchase_date),
            "Purchase Price": p.purchase_price,
            "Current Value": m.current_value,
            "Capital Growth ($)": m.growth,
            "Capital Growth (%)": f"{m.growth_percentage:.2f}",
            "Equity": m.equity,
            "Current Loan": m.current_loan,
            "LVR (%)": f"{m.lvr:.2f}",
            "Interest Rate (%)": _blank(p.interest_rate),
            "Lender": _blank(p.lender_name),
        })
    return rows


def cashflow_rows(configs: Sequence[CashflowConfig]) -> list[dict[str, Any]]:
    """One CSV row per configuration, in the order given."""
    rows = []
    for c in configs:
        totals = monthly_totals(c)
        rows.append({
            "Effective From": format_date(c.effective_from),
            "Rent Income": c.rent_income or 0,
            "Rent Frequency": _blank(c.rent_frequency),
            "Mortgage Payment": c.mortgage_payment or 0,
            "Insurance (Annual)": c.insurance_annual or 0,
            "Rates/Strata (Quarterly)": c.rates_strata_quarterly or 0,
            "Other Expenses": c.other_expenses or 0,
            "Monthly Income": f"{totals.monthly_income:.2f}",
            "Total Expenses": f"{totals.monthly_expenses:.2f}",
            "Net Cashflow": f"{totals.monthly_net:.2f}",
            "Notes": _blank(c.notes),
        })
    return rows


def _write_csv(rows: list[dict[str, Any]], fieldnames: list[str], path: Path | str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)
    return path


def export_portfolio_csv(metrics: Sequence[PropertyMetrics], path: Path | str) -> Path:
    """Export per-property metrics to CSV."""
    return _write_csv(portfolio_rows(metrics), PORTFOLIO_FIELDS, path)


def export_cashflow_csv(configs: Sequence[CashflowConfig], path: Path | str) -> Path:
    """Export a property's cashflow configurations to CSV."""
    return _write_csv(cashflow_rows(configs), CASHFLOW_FIELDS, path)


def export_json(
    summary: PortfolioSummary,
    metrics: Sequence[PropertyMetrics],
    series: Sequence[ValuePoint],
    path: Path | str,
) -> Path:
    """Export the full portfolio picture to JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "exported_at": datetime.utcnow().isoformat(),
        "summary": summary.to_dict(),
        "properties": [m.to_dict() for m in metrics],
        "value_history": [p.to_dict() for p in series],
    }

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=_serialize)
    return path
