"""Provider status mapping and entitlement derivation.

Everything here is pure so the table can be exercised without any adapter.
Unknown provider statuses map to CANCELED: a state we do not understand must
not keep a user entitled.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from subsync.domain.model import ENTITLING_STATUSES, SubscriptionStatus, UserMode

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

PROVIDER_STATUS_MAP: Final[Mapping[str, SubscriptionStatus]] = MappingProxyType(
    {
        "active": SubscriptionStatus.ACTIVE,
        "trialing": SubscriptionStatus.TRIALING,
        "past_due": SubscriptionStatus.PAST_DUE,
        "canceled": SubscriptionStatus.CANCELED,
        "unpaid": SubscriptionStatus.UNPAID,
    }
)

FALLBACK_STATUS: Final[SubscriptionStatus] = SubscriptionStatus.CANCELED


def map_provider_status(raw_status: str) -> SubscriptionStatus:
    """Translate a provider status string into the local status enum."""

    return PROVIDER_STATUS_MAP.get(raw_status.strip().lower(), FALLBACK_STATUS)


def mode_for_status(status: SubscriptionStatus) -> UserMode:
    return UserMode.FULL if status in ENTITLING_STATUSES else UserMode.RESTRICTED


def resolve_mode(
    status: SubscriptionStatus,
    *,
    grace_period_ends_at: datetime | None,
    now: datetime,
    grace_mode: UserMode,
) -> UserMode:
    """Return the entitlement for ``status``, honouring an open grace window.

    A PAST_DUE subscription whose grace period ends strictly after ``now``
    yields ``grace_mode``; every other combination falls back to
    :func:`mode_for_status`.
    """

    if (
        status == SubscriptionStatus.PAST_DUE
        and grace_period_ends_at is not None
        and grace_period_ends_at > now
    ):
        return grace_mode
    return mode_for_status(status)


__all__ = [
    "FALLBACK_STATUS",
    "PROVIDER_STATUS_MAP",
    "map_provider_status",
    "mode_for_status",
    "resolve_mode",
]
