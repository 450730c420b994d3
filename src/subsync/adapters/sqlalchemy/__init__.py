"""SQLAlchemy adapter package for the billing store."""

from __future__ import annotations

from .repositories import SqlAlchemySubscriptionRepository, SqlAlchemyUserRepository
from .tables import metadata, subscription_table, user_table
from .unit_of_work import SqlAlchemyBillingUnitOfWork, startup

__all__ = [
    "SqlAlchemyBillingUnitOfWork",
    "SqlAlchemySubscriptionRepository",
    "SqlAlchemyUserRepository",
    "metadata",
    "startup",
    "subscription_table",
    "user_table",
]
