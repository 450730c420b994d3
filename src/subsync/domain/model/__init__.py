"""Billing domain model used across subsync."""

from __future__ import annotations

from .billing import Subscription, User
from .enums import ENTITLING_STATUSES, NON_TERMINAL_STATUSES, SubscriptionStatus, UserMode

__all__ = [
    "ENTITLING_STATUSES",
    "NON_TERMINAL_STATUSES",
    "Subscription",
    "SubscriptionStatus",
    "User",
    "UserMode",
]
