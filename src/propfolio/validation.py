"""Sanitize raw form input into model records.

The metrics layer assumes non-negative numbers and known enum values; this
module is where that is enforced.
"""

from __future__ import annotations

import math
import uuid
from datetime import date, datetime

from .exceptions import ValidationError
from .logging import get_logger
from .models import (
    AUSTRALIAN_STATES,
    PROPERTY_TYPES,
    RENT_FREQUENCIES,
    CashflowConfig,
    Property,
    ValuationEntry,
)

logger = get_logger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


def parse_date(value: str | date | None, field_name: str = "date") -> date:
    """Parse ``YYYY-MM-DD``, ``DD/MM/YYYY`` or ``YYYY-MM`` (first of month).

    Timestamps such as ``2024-01-05T10:00:00`` keep only their date part.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field_name} is required")
    text = text.split("T")[0]
    for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%Y-%m"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValidationError(f"{field_name}: unrecognised date {value!r} (use YYYY-MM-DD or DD/MM/YYYY)")


def parse_money(value: float | str | None, field_name: str, required: bool = False) -> float | None:
    """Non-negative amount, or None for blank optional input."""
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(f"{field_name} is required")
        return None
    try:
        amount = float(str(value).replace(",", "").replace("$", "").strip())
    except ValueError:
        raise ValidationError(f"{field_name}: not a number: {value!r}") from None
    if math.isnan(amount) or math.isinf(amount):
        raise ValidationError(f"{field_name}: not a finite number")
    if amount < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return amount


def parse_choice(value: str | None, choices: tuple[str, ...] | list[str], field_name: str) -> str:
    for choice in choices:
        if value is not None and value.strip().lower() == choice.lower():
            return choice
    raise ValidationError(f"{field_name} must be one of: {', '.join(choices)}")


def build_property(
    user_id: str,
    street: str,
    suburb: str,
    state: str,
    postcode: str,
    property_type: str,
    purchase_price: float | str,
    purchase_date: str | date,
    bedrooms: int | None = None,
    initial_loan_amount: float | str | None = None,
    current_loan_amount: float | str | None = None,
    interest_rate: float | str | None = None,
    lender_name: str | None = None,
) -> Property:
    """Validate property form fields and build a ``Property``."""
    for name, text in (("street", street), ("suburb", suburb), ("postcode", postcode)):
        if not (text or "").strip():
            raise ValidationError(f"{name} is required")
    if bedrooms is not None and bedrooms < 0:
        raise ValidationError("bedrooms must not be negative")
    return Property(
        id=new_id(),
        user_id=user_id,
        street=street.strip(),
        suburb=suburb.strip(),
        state=parse_choice(state, list(AUSTRALIAN_STATES), "state"),
        postcode=postcode.strip(),
        property_type=parse_choice(property_type, PROPERTY_TYPES, "property_type"),
        purchase_price=parse_money(purchase_price, "purchase_price", required=True),
        purchase_date=parse_date(purchase_date, "purchase_date"),
        bedrooms=bedrooms,
        initial_loan_amount=parse_money(initial_loan_amount, "initial_loan_amount"),
        current_loan_amount=parse_money(current_loan_amount, "current_loan_amount"),
        interest_rate=parse_money(interest_rate, "interest_rate"),
        lender_name=(lender_name or "").strip() or None,
    )


def build_valuation(
    prop: Property,
    value: float | str,
    date_recorded: str | date,
    source: str | None = None,
) -> ValuationEntry:
    """Validate a valuation for ``prop``.

    Valuations dated before the purchase are accepted but logged.
    """
    recorded = parse_date(date_recorded, "date_recorded")
    if recorded < prop.purchase_date:
        logger.warning(
            "Valuation dated %s precedes purchase date %s for property %s",
            recorded,
            prop.purchase_date,
            prop.id,
        )
    return ValuationEntry(
        id=new_id(),
        property_id=prop.id,
        value=parse_money(value, "value", required=True),
        date_recorded=recorded,
        source=(source or "").strip() or None,
    )


def purchase_valuation(prop: Property) -> ValuationEntry:
    """The initial valuation recorded alongside a new property."""
    return ValuationEntry(
        id=new_id(),
        property_id=prop.id,
        value=prop.purchase_price,
        date_recorded=prop.purchase_date,
        source="Purchase",
    )


def build_cashflow(
    property_id: str,
    effective_from: str | date,
    rent_income: float | str | None = None,
    rent_frequency: str | None = None,
    mortgage_payment: float | str | None = None,
    insurance_annual: float | str | None = None,
    rates_strata_quarterly: float | str | None = None,
    other_expenses: float | str | None = None,
    notes: str | None = None,
) -> CashflowConfig:
    """Validate a cashflow configuration.

    Rent frequency defaults to monthly when rent is given without one.
    """
    rent = parse_money(rent_income, "rent_income")
    frequency: str | None = None
    if rent_frequency:
        frequency = parse_choice(rent_frequency, RENT_FREQUENCIES, "rent_frequency")
    elif rent is not None:
        frequency = "monthly"
    return CashflowConfig(
        id=new_id(),
        property_id=property_id,
        effective_from=parse_date(effective_from, "effective_from"),
        rent_income=rent,
        rent_frequency=frequency,
        mortgage_payment=parse_money(mortgage_payment, "mortgage_payment"),
        insurance_annual=parse_money(insurance_annual, "insurance_annual"),
        rates_strata_quarterly=parse_money(rates_strata_quarterly, "rates_strata_quarterly"),
        other_expenses=parse_money(other_expenses, "other_expenses"),
        notes=(notes or "").strip() or None,
    )
