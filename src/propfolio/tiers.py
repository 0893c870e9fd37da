"""Subscription tier checks (free vs pro)."""

from __future__ import annotations

from .config import TierLimits
from .exceptions import TierLimitError
from .models import UserProfile

FEATURE_LABELS: dict[str, str] = {
    "advanced_dashboard": "advanced analytics",
    "csv_export": "CSV export",
}


def can_add_property(profile: UserProfile, current_count: int, limits: TierLimits | None = None) -> bool:
    """Pro users are unlimited; free users stop at ``free_max_properties``."""
    limits = limits or TierLimits()
    return profile.is_pro or current_count < limits.free_max_properties


def ensure_can_add_property(profile: UserProfile, current_count: int, limits: TierLimits | None = None) -> None:
    limits = limits or TierLimits()
    if not can_add_property(profile, current_count, limits):
        raise TierLimitError(
            f"You have reached the limit of {limits.free_max_properties} properties on the free tier. "
            "Upgrade to Pro for unlimited properties."
        )


def has_feature(profile: UserProfile, feature: str, limits: TierLimits | None = None) -> bool:
    """Features not listed as pro-only are available to everyone."""
    limits = limits or TierLimits()
    return profile.is_pro or feature not in limits.pro_features


def require_feature(profile: UserProfile, feature: str, limits: TierLimits | None = None) -> None:
    if not has_feature(profile, feature, limits):
        label = FEATURE_LABELS.get(feature, feature)
        raise TierLimitError(f"Upgrade to Pro to unlock {label}")
