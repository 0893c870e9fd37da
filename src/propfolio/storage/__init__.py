"""Storage layer for portfolio records and exports."""

from .db import Storage
from .export import (
    CASHFLOW_FIELDS,
    PORTFOLIO_FIELDS,
    cashflow_filename,
    export_cashflow_csv,
    export_json,
    export_portfolio_csv,
    portfolio_filename,
)

__all__ = [
    "Storage",
    "CASHFLOW_FIELDS",
    "PORTFOLIO_FIELDS",
    "cashflow_filename",
    "export_cashflow_csv",
    "export_json",
    "export_portfolio_csv",
    "portfolio_filename",
]
