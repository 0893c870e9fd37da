"""Display formatting for currency, percentages and dates (Australian conventions)."""

from __future__ import annotations

from datetime import date


def format_currency(amount: float | None) -> str:
    """Whole-dollar AUD, e.g. ``$123,457`` or ``-$1,200``."""
    if amount is None:
        return "$0"
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


def format_signed_currency(amount: float) -> str:
    return f"+{format_currency(amount)}" if amount >= 0 else format_currency(amount)


def format_percentage(value: float | None, decimals: int = 2) -> str:
    """``value`` is already a percentage (5.0 -> ``5.00%``)."""
    if value is None:
        return f"{0:.{decimals}f}%"
    return f"{value:.{decimals}f}%"


def format_signed_percentage(value: float, decimals: int = 2) -> str:
    prefix = "+" if value >= 0 else ""
    return f"{prefix}{format_percentage(value, decimals)}"


def format_date(value: date | None) -> str:
    """``DD/MM/YYYY``; empty string for missing dates."""
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")
