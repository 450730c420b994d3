"""Ports for reading subscription truth from the billing provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(slots=True, frozen=True)
class ProviderSubscription:
    """Authoritative subscription record as reported by the provider."""

    external_id: str
    status: str
    cancel_at_period_end: bool
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None


class ProviderError(RuntimeError):
    """Base class for failures reported by a billing provider adapter."""


class ProviderSubscriptionNotFound(ProviderError):  # noqa: N818
    """The provider has no record of the requested subscription."""

    def __init__(self, external_id: str) -> None:
        super().__init__(f"Subscription {external_id} does not exist at the provider")
        self.external_id = external_id


@runtime_checkable
class SubscriptionProvider(Protocol):
    """Read-only view of the billing provider."""

    async def fetch_subscription(self, external_id: str) -> ProviderSubscription:
        """Return the provider record or raise ``ProviderSubscriptionNotFound``."""
        ...

    async def ping(self) -> None:
        """Raise if the provider cannot be reached or rejects our credentials."""
        ...

    async def aclose(self) -> None: ...


__all__ = [
    "ProviderError",
    "ProviderSubscription",
    "ProviderSubscriptionNotFound",
    "SubscriptionProvider",
]
