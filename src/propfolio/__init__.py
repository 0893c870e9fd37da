"""propfolio: property investment portfolio tracking."""

__version__ = "0.1.0"
