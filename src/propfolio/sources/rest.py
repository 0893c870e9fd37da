"""PostgREST-style remote data source.

Reads the ``users``, ``properties``, ``value_history`` and ``cashflow`` tables
through ``{base_url}/rest/v1/<table>`` using PostgREST filter syntax
(``eq.``, ``in.(...)``, ``order=col.desc``).
"""

from __future__ import annotations

import os
from typing import Any

import httpx

from ..exceptions import NotFoundError, SourceError, ValidationError
from ..logging import get_logger
from ..metrics import sort_configs, sort_valuations
from ..models import (
    RENT_FREQUENCIES,
    CashflowConfig,
    PortfolioSnapshot,
    Property,
    UserProfile,
    ValuationEntry,
)
from ..validation import parse_choice, parse_date
from .base import PortfolioSource

logger = get_logger(__name__)


def _opt_float(value: Any) -> float | None:
    return float(value) if value is not None else None


def _rent_frequency(value: Any) -> str | None:
    """Stored frequencies are matched case-insensitively; unknown ones are rejected."""
    if value is None or value == "":
        return None
    return parse_choice(str(value), RENT_FREQUENCIES, "rent_frequency")


class RestPortfolioSource(PortfolioSource):
    """
    Connector for a hosted relational store exposed over PostgREST.

    Valuations and cashflow rows are fetched in one request each for all of
    the user's properties.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = (base_url or os.environ.get("PROPFOLIO_URL", "")).rstrip("/")
        self.api_key = api_key or os.environ.get("PROPFOLIO_API_KEY", "")
        self.timeout = timeout
        self._client = client

    @property
    def source_name(self) -> str:
        return "rest"

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

    def _get(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        url = f"{self.base_url}/rest/v1/{table}"
        client = self._client or httpx.Client(timeout=self.timeout)
        try:
            resp = client.get(url, params={"select": "*", **params}, headers=self._headers())
        except httpx.HTTPError as e:
            raise SourceError(f"{table}: request failed: {e!s}") from e
        finally:
            if self._client is None:
                client.close()
        if resp.status_code != 200:
            raise SourceError(f"{table}: HTTP {resp.status_code}: {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as e:
            raise SourceError(f"{table}: invalid JSON response") from e
        if not isinstance(data, list):
            raise SourceError(f"{table}: expected a list of rows")
        logger.debug("Fetched %d rows from %s", len(data), table)
        return data

    def fetch(self, user_id: str) -> PortfolioSnapshot:
        """Fetch a user's full portfolio in four requests."""
        if not self.base_url or not self.api_key:
            raise SourceError("PROPFOLIO_URL and PROPFOLIO_API_KEY must be set for the remote source.")

        users = self._get("users", {"id": f"eq.{user_id}"})
        if not users:
            raise NotFoundError(f"User not found: {user_id}")

        try:
            user = self._parse_user(users[0])
            properties = [
                self._parse_property(r)
                for r in self._get("properties", {"user_id": f"eq.{user_id}", "order": "created_at.desc"})
            ]
            ids = [p.id for p in properties]
            valuations: dict[str, list[ValuationEntry]] = {pid: [] for pid in ids}
            cashflows: dict[str, list[CashflowConfig]] = {pid: [] for pid in ids}
            if ids:
                in_filter = f"in.({','.join(ids)})"
                valuation_rows = self._get(
                    "value_history", {"property_id": in_filter, "order": "date_recorded.desc,created_at.desc"}
                )
                for r in valuation_rows:
                    entry = self._parse_valuation(r)
                    valuations.setdefault(entry.property_id, []).append(entry)
                cashflow_rows = self._get(
                    "cashflow", {"property_id": in_filter, "order": "effective_from.desc,created_at.desc"}
                )
                for r in cashflow_rows:
                    config = self._parse_cashflow(r)
                    cashflows.setdefault(config.property_id, []).append(config)
                valuations = {pid: sort_valuations(v) for pid, v in valuations.items()}
                cashflows = {pid: sort_configs(c) for pid, c in cashflows.items()}
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise SourceError(f"Malformed row from remote source: {e!s}") from e

        logger.info("Fetched %d properties for %s from %s", len(properties), user_id, self.base_url)
        return PortfolioSnapshot(user=user, properties=properties, valuations=valuations, cashflows=cashflows)

    def _parse_user(self, row: dict[str, Any]) -> UserProfile:
        return UserProfile(
            id=str(row["id"]),
            email=str(row.get("email") or ""),
            subscription_tier=str(row.get("subscription_tier") or "free"),
        )

    def _parse_property(self, row: dict[str, Any]) -> Property:
        bedrooms = row.get("bedrooms")
        return Property(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            street=str(row.get("street") or ""),
            suburb=str(row.get("suburb") or ""),
            state=str(row.get("state") or ""),
            postcode=str(row.get("postcode") or ""),
            property_type=str(row.get("property_type") or ""),
            bedrooms=int(bedrooms) if bedrooms is not None else None,
            purchase_price=float(row["purchase_price"]),
            purchase_date=parse_date(row["purchase_date"], "purchase_date"),
            initial_loan_amount=_opt_float(row.get("initial_loan_amount")),
            current_loan_amount=_opt_float(row.get("current_loan_amount")),
            interest_rate=_opt_float(row.get("interest_rate")),
            lender_name=row.get("lender_name"),
        )

    def _parse_valuation(self, row: dict[str, Any]) -> ValuationEntry:
        return ValuationEntry(
            id=str(row["id"]),
            property_id=str(row["property_id"]),
            value=float(row["value"]),
            date_recorded=parse_date(row["date_recorded"], "date_recorded"),
            source=row.get("source"),
        )

    def _parse_cashflow(self, row: dict[str, Any]) -> CashflowConfig:
        # Older rows carry a "YYYY-MM" month instead of effective_from
        effective = row.get("effective_from") or row.get("month")
        return CashflowConfig(
            id=str(row["id"]),
            property_id=str(row["property_id"]),
            effective_from=parse_date(effective, "effective_from"),
            rent_income=_opt_float(row.get("rent_income")),
            rent_frequency=_rent_frequency(row.get("rent_frequency")),
            mortgage_payment=_opt_float(row.get("mortgage_payment")),
            insurance_annual=_opt_float(row.get("insurance_annual")),
            rates_strata_quarterly=_opt_float(row.get("rates_strata_quarterly")),
            other_expenses=_opt_float(row.get("other_expenses")),
            notes=row.get("notes"),
        )
