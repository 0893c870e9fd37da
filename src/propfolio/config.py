"""Configuration loader."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.yaml"


@dataclass
class TierLimits:
    """What the free tier may do; pro is unrestricted."""

    free_max_properties: int = 2
    pro_features: tuple[str, ...] = ("advanced_dashboard", "csv_export")


@dataclass
class StorageSettings:
    """Local DuckDB store and export locations."""

    db_path: Path = field(default_factory=lambda: Path("output") / "propfolio.duckdb")
    output_dir: Path = field(default_factory=lambda: Path("output"))


@dataclass
class LoggingSettings:
    level: str = "INFO"
    format_type: str = "standard"


@dataclass
class RemoteSettings:
    """PostgREST-style remote data store."""

    base_url: str = ""
    api_key: str = ""
    timeout_seconds: float = 30.0


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load config from YAML file.

    An explicit path must exist. Without one, the project ``config.yaml`` is
    used when present and built-in defaults otherwise.
    """
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")
    else:
        path = DEFAULT_CONFIG_PATH
        if not path.exists():
            return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def get_tier_limits(config: dict[str, Any]) -> TierLimits:
    """Extract subscription tier limits from config."""
    sub = config.get("subscription") or {}
    features = sub.get("pro_features", list(TierLimits.pro_features))
    try:
        max_properties = int(sub.get("free_max_properties", 2))
    except (TypeError, ValueError):
        raise ConfigurationError("subscription.free_max_properties must be an integer") from None
    if max_properties < 0:
        raise ConfigurationError("subscription.free_max_properties must not be negative")
    return TierLimits(
        free_max_properties=max_properties,
        pro_features=tuple(str(f) for f in features),
    )


def get_storage_settings(config: dict[str, Any]) -> StorageSettings:
    """Extract storage paths from config."""
    st = config.get("storage") or {}
    output_dir = Path(st.get("output_dir", "output"))
    db_path = st.get("db_path")
    return StorageSettings(
        db_path=Path(db_path) if db_path else output_dir / "propfolio.duckdb",
        output_dir=output_dir,
    )


def get_logging_settings(config: dict[str, Any]) -> LoggingSettings:
    """Extract logging settings; ``PROPFOLIO_LOG_LEVEL`` overrides the file."""
    lg = config.get("logging") or {}
    format_type = str(lg.get("format", "standard"))
    if format_type not in ("standard", "json"):
        raise ConfigurationError(f"logging.format must be 'standard' or 'json', got {format_type!r}")
    return LoggingSettings(
        level=os.environ.get("PROPFOLIO_LOG_LEVEL", str(lg.get("level", "INFO"))),
        format_type=format_type,
    )


def get_remote_settings(config: dict[str, Any]) -> RemoteSettings:
    """Extract remote store settings. URL and key come from the environment first."""
    rm = config.get("remote") or {}
    return RemoteSettings(
        base_url=os.environ.get("PROPFOLIO_URL", str(rm.get("base_url", "") or "")),
        api_key=os.environ.get("PROPFOLIO_API_KEY", ""),
        timeout_seconds=float(rm.get("timeout_seconds", 30)),
    )
