"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class SubscriptionStatus(StrEnum):
    """Local mirror of the provider's subscription lifecycle."""

    ACTIVE = "ACTIVE"
    TRIALING = "TRIALING"
    PAST_DUE = "PAST_DUE"
    CANCELED = "CANCELED"
    UNPAID = "UNPAID"


class UserMode(StrEnum):
    """Feature-access level derived from subscription health."""

    FULL = "FULL"
    RESTRICTED = "RESTRICTED"


NON_TERMINAL_STATUSES: Final[frozenset[SubscriptionStatus]] = frozenset(
    {
        SubscriptionStatus.ACTIVE,
        SubscriptionStatus.TRIALING,
        SubscriptionStatus.PAST_DUE,
    }
)

ENTITLING_STATUSES: Final[frozenset[SubscriptionStatus]] = frozenset(
    {
        SubscriptionStatus.ACTIVE,
        SubscriptionStatus.TRIALING,
    }
)
