"""DuckDB storage for users, properties, value_history and cashflow."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Iterable

import duckdb

from ..exceptions import NotFoundError
from ..logging import get_logger
from ..models import CashflowConfig, PortfolioSnapshot, Property, UserProfile, ValuationEntry

logger = get_logger(__name__)

_PROPERTY_COLS = [
    "id", "user_id", "street", "suburb", "state", "postcode", "property_type",
    "bedrooms", "purchase_price", "purchase_date", "initial_loan_amount",
    "current_loan_amount", "interest_rate", "lender_name", "created_at",
]

_CASHFLOW_COLS = [
    "id", "property_id", "effective_from", "rent_income", "rent_frequency",
    "mortgage_payment", "insurance_annual", "rates_strata_quarterly",
    "other_expenses", "notes",
]


def _placeholders(n: int) -> str:
    return ", ".join("?" for _ in range(n))


class Storage:
    """
    DuckDB storage for portfolio records.
    Reads come back batched per user and sorted the way the metrics layer expects.
    """

    def __init__(self, db_path: Path | str = "propfolio.duckdb") -> None:
        self.db_path = Path(db_path)
        self._conn: duckdb.DuckDBPyConnection | None = None

    def _connect(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = duckdb.connect(str(self.db_path))
            self._init_schema()
            logger.debug("Opened DuckDB store at %s", self.db_path)
        return self._conn

    def _init_schema(self) -> None:
        conn = self._conn
        conn.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT,
                subscription_tier TEXT,
                created_at TIMESTAMP
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS properties (
                id TEXT PRIMARY KEY,
                user_id TEXT,
                street TEXT,
                suburb TEXT,
                state TEXT,
                postcode TEXT,
                property_type TEXT,
                bedrooms INTEGER,
                purchase_price DOUBLE,
                purchase_date DATE,
                initial_loan_amount DOUBLE,
                current_loan_amount DOUBLE,
                interest_rate DOUBLE,
                lender_name TEXT,
                created_at TIMESTAMP
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS value_history (
                id TEXT PRIMARY KEY,
                property_id TEXT,
                value DOUBLE,
                date_recorded DATE,
                source TEXT,
                created_at TIMESTAMP
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS cashflow (
                id TEXT PRIMARY KEY,
                property_id TEXT,
                effective_from DATE,
                rent_income DOUBLE,
                rent_frequency TEXT,
                mortgage_payment DOUBLE,
                insurance_annual DOUBLE,
                rates_strata_quarterly DOUBLE,
                other_expenses DOUBLE,
                notes TEXT,
                created_at TIMESTAMP
            )
        """)

    # Users

    def save_user(self, user: UserProfile) -> None:
        """Upsert a user profile."""
        conn = self._connect()
        conn.execute(
            "INSERT OR REPLACE INTO users (id, email, subscription_tier, created_at) VALUES (?, ?, ?, ?)",
            [user.id, user.email, user.subscription_tier, user.created_at],
        )

    def get_user(self, user_id: str) -> UserProfile:
        conn = self._connect()
        row = conn.execute(
            "SELECT id, email, subscription_tier, created_at FROM users WHERE id = ?", [user_id]
        ).fetchone()
        if row is None:
            raise NotFoundError(f"User not found: {user_id}")
        return UserProfile(id=row[0], email=row[1], subscription_tier=row[2], created_at=row[3])

    def set_tier(self, user_id: str, tier: str) -> None:
        self.get_user(user_id)
        self._connect().execute("UPDATE users SET subscription_tier = ? WHERE id = ?", [tier, user_id])
        logger.info("User %s moved to %s tier", user_id, tier)

    # Properties

    def save_property(self, prop: Property) -> None:
        """Upsert a property."""
        conn = self._connect()
        conn.execute(
            f"INSERT OR REPLACE INTO properties ({', '.join(_PROPERTY_COLS)}) "
            f"VALUES ({_placeholders(len(_PROPERTY_COLS))})",
            [getattr(prop, c) for c in _PROPERTY_COLS],
        )

    def _property_from_row(self, row: tuple) -> Property:
        return Property(**dict(zip(_PROPERTY_COLS, row)))

    def get_property(self, property_id: str) -> Property:
        conn = self._connect()
        row = conn.execute(
            f"SELECT {', '.join(_PROPERTY_COLS)} FROM properties WHERE id = ?", [property_id]
        ).fetchone()
        if row is None:
            raise NotFoundError(f"Property not found: {property_id}")
        return self._property_from_row(row)

    def load_properties(self, user_id: str) -> list[Property]:
        """All properties owned by ``user_id``, newest first."""
        conn = self._connect()
        rows = conn.execute(
            f"SELECT {', '.join(_PROPERTY_COLS)} FROM properties WHERE user_id = ? ORDER BY created_at DESC",
            [user_id],
        ).fetchall()
        return [self._property_from_row(r) for r in rows]

    def count_properties(self, user_id: str) -> int:
        conn = self._connect()
        return conn.execute("SELECT COUNT(*) FROM properties WHERE user_id = ?", [user_id]).fetchone()[0]

    # Valuations

    def save_valuation(self, entry: ValuationEntry) -> None:
        conn = self._connect()
        conn.execute(
            """
            INSERT OR REPLACE INTO value_history
            (id, property_id, value, date_recorded, source, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [entry.id, entry.property_id, entry.value, entry.date_recorded, entry.source, datetime.utcnow()],
        )

    def load_valuations(self, property_ids: Iterable[str]) -> dict[str, list[ValuationEntry]]:
        """Valuations for many properties in one query, newest first per property.

        Entries sharing a date are ordered most recently entered first.
        """
        ids = list(property_ids)
        grouped: dict[str, list[ValuationEntry]] = {pid: [] for pid in ids}
        if not ids:
            return grouped
        conn = self._connect()
        rows = conn.execute(
            f"""
            SELECT id, property_id, value, date_recorded, source FROM value_history
            WHERE property_id IN ({_placeholders(len(ids))})
            ORDER BY date_recorded DESC, created_at DESC
            """,
            ids,
        ).fetchall()
        for r in rows:
            grouped[r[1]].append(
                ValuationEntry(id=r[0], property_id=r[1], value=r[2], date_recorded=r[3], source=r[4])
            )
        return grouped

    # Cashflow

    def save_cashflow(self, config: CashflowConfig) -> None:
        conn = self._connect()
        cols = _CASHFLOW_COLS + ["created_at"]
        conn.execute(
            f"INSERT OR REPLACE INTO cashflow ({', '.join(cols)}) VALUES ({_placeholders(len(cols))})",
            [getattr(config, c) for c in _CASHFLOW_COLS] + [datetime.utcnow()],
        )

    def get_cashflow(self, config_id: str) -> CashflowConfig:
        conn = self._connect()
        row = conn.execute(
            f"SELECT {', '.join(_CASHFLOW_COLS)} FROM cashflow WHERE id = ?", [config_id]
        ).fetchone()
        if row is None:
            raise NotFoundError(f"Cashflow entry not found: {config_id}")
        return CashflowConfig(**dict(zip(_CASHFLOW_COLS, row)))

    def update_cashflow(self, config: CashflowConfig) -> None:
        """Overwrite an existing configuration in place; its entry time is kept."""
        self.get_cashflow(config.id)
        cols = [c for c in _CASHFLOW_COLS if c != "id"]
        self._connect().execute(
            f"UPDATE cashflow SET {', '.join(f'{c} = ?' for c in cols)} WHERE id = ?",
            [getattr(config, c) for c in cols] + [config.id],
        )
        logger.info("Updated cashflow entry %s", config.id)

    def delete_cashflow(self, config_id: str) -> None:
        self.get_cashflow(config_id)
        self._connect().execute("DELETE FROM cashflow WHERE id = ?", [config_id])
        logger.info("Deleted cashflow entry %s", config_id)

    def load_cashflows(self, property_ids: Iterable[str]) -> dict[str, list[CashflowConfig]]:
        """Cashflow configurations for many properties, most recent ``effective_from`` first."""
        ids = list(property_ids)
        grouped: dict[str, list[CashflowConfig]] = {pid: [] for pid in ids}
        if not ids:
            return grouped
        conn = self._connect()
        rows = conn.execute(
            f"""
            SELECT {', '.join(_CASHFLOW_COLS)} FROM cashflow
            WHERE property_id IN ({_placeholders(len(ids))})
            ORDER BY effective_from DESC, created_at DESC
            """,
            ids,
        ).fetchall()
        for r in rows:
            config = CashflowConfig(**dict(zip(_CASHFLOW_COLS, r)))
            grouped[config.property_id].append(config)
        return grouped

    def load_snapshot(self, user_id: str) -> PortfolioSnapshot:
        """Everything needed to compute one user's portfolio."""
        user = self.get_user(user_id)
        properties = self.load_properties(user_id)
        ids = [p.id for p in properties]
        snapshot = PortfolioSnapshot(
            user=user,
            properties=properties,
            valuations=self.load_valuations(ids),
            cashflows=self.load_cashflows(ids),
        )
        logger.debug("Loaded snapshot for %s: %d properties", user_id, len(properties))
        return snapshot

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
