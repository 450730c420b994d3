"""Ports for persisting billing state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypedDict, Unpack, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from subsync.domain.model import Subscription, SubscriptionStatus, User, UserMode


class SubscriptionFields(TypedDict, total=False):
    """Subscription columns the engine is allowed to write."""

    status: SubscriptionStatus
    cancel_at_period_end: bool
    grace_period_ends_at: datetime | None
    current_period_start: datetime | None
    current_period_end: datetime | None
    canceled_at: datetime | None


@runtime_checkable
class SubscriptionRepository(Protocol):
    """Persistence contract for subscriptions."""

    def add(self, subscription: Subscription) -> None: ...

    def get(self, subscription_id: UUID) -> Subscription | None: ...

    def find_due_for_sweep(self, now: datetime) -> Sequence[Subscription]:
        """PAST_DUE subscriptions whose grace period ended at or before ``now``."""
        ...

    def find_syncable(self) -> Sequence[Subscription]:
        """Subscriptions in a non-terminal status."""
        ...

    def update_subscription(
        self,
        subscription_id: UUID,
        **fields: Unpack[SubscriptionFields],
    ) -> bool:
        """Write ``fields`` keyed by primary id; return whether a row matched."""
        ...


@runtime_checkable
class UserRepository(Protocol):
    """Persistence contract for the user entitlement projection."""

    def add(self, user: User) -> None: ...

    def get_by_email(self, email: str) -> User | None: ...

    def get_mode(self, user_id: UUID) -> UserMode | None: ...

    def update_user_mode(self, user_id: UUID, mode: UserMode) -> bool: ...


__all__ = ["SubscriptionFields", "SubscriptionRepository", "UserRepository"]
