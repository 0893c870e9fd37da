"""Exception hierarchy for propfolio.

The metrics layer never raises; these cover input handling, tier gating,
storage lookups and remote sources.
"""


class PropfolioError(Exception):
    """Base exception for all propfolio errors."""


class ValidationError(PropfolioError):
    """Raised when user input cannot be sanitized into a valid record."""


class TierLimitError(PropfolioError):
    """Raised when the subscription tier does not allow an action."""


class NotFoundError(PropfolioError):
    """Raised when a referenced user or property does not exist."""


class SourceError(PropfolioError):
    """Raised when a data source cannot be read."""


class ConfigurationError(PropfolioError):
    """Raised when configuration is invalid or missing."""
