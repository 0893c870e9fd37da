"""Data sources for portfolio snapshots."""

from .base import PortfolioSource
from .local import DuckDBPortfolioSource
from .rest import RestPortfolioSource

__all__ = [
    "PortfolioSource",
    "DuckDBPortfolioSource",
    "RestPortfolioSource",
]
