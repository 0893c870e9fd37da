"""Base interface for portfolio data sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import PortfolioSnapshot


class PortfolioSource(ABC):
    """
    Abstract interface for where a user's portfolio records live.
    Implementations: local DuckDB store, remote PostgREST endpoint.
    """

    @abstractmethod
    def fetch(self, user_id: str) -> PortfolioSnapshot:
        """
        Fetch a user's profile, properties, valuations and cashflow configurations.
        Valuations and configurations come back batched per property, newest first.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Identifier for this data source."""
        ...
