"""Billing entities tracked by the reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from .enums import SubscriptionStatus, UserMode

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(slots=True, kw_only=True)
class User:
    """Entitlement projection of a user account.

    ``mode`` is the only field the engine writes.
    """

    id: UUID = field(default_factory=uuid4)
    email: str | None = None
    mode: UserMode = UserMode.RESTRICTED
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(slots=True, kw_only=True)
class Subscription:
    """Local snapshot of a provider subscription.

    ``grace_period_ends_at`` is only set while ``status`` is PAST_DUE.
    ``user_mode`` is hydrated from the owning user when the subscription is
    loaded; it is never written through the subscription.
    """

    id: UUID = field(default_factory=uuid4)
    user_id: UUID
    external_id: str
    status: SubscriptionStatus
    cancel_at_period_end: bool = False
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    grace_period_ends_at: datetime | None = None
    canceled_at: datetime | None = None
    updated_at: datetime | None = None
    user_mode: UserMode | None = None

    def grace_period_lapsed(self, now: datetime) -> bool:
        return (
            self.status == SubscriptionStatus.PAST_DUE
            and self.grace_period_ends_at is not None
            and self.grace_period_ends_at <= now
        )
