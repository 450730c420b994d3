"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import SubscriptionFields, SubscriptionRepository, UserRepository
from .provider import (
    ProviderError,
    ProviderSubscription,
    ProviderSubscriptionNotFound,
    SubscriptionProvider,
)
from .unit_of_work import BillingRepositories, BillingUnitOfWork, UnitOfWorkFactory

__all__ = [
    "BillingRepositories",
    "BillingUnitOfWork",
    "ProviderError",
    "ProviderSubscription",
    "ProviderSubscriptionNotFound",
    "SubscriptionFields",
    "SubscriptionProvider",
    "SubscriptionRepository",
    "UnitOfWorkFactory",
    "UserRepository",
]
