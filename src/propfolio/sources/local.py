"""Portfolio source backed by the local DuckDB store."""

from __future__ import annotations

from ..models import PortfolioSnapshot
from ..storage import Storage
from .base import PortfolioSource


class DuckDBPortfolioSource(PortfolioSource):
    """Reads snapshots through an existing ``Storage``."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    @property
    def source_name(self) -> str:
        return "duckdb"

    def fetch(self, user_id: str) -> PortfolioSnapshot:
        return self.storage.load_snapshot(user_id)
