"""Unit-of-work abstraction for coordinating billing repositories."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from subsync.domain.ports.persistence import SubscriptionRepository, UserRepository


@dataclass(slots=True)
class BillingRepositories:
    """Repositories touched by one reconciliation step."""

    subscriptions: SubscriptionRepository
    users: UserRepository


@runtime_checkable
class BillingUnitOfWork(Protocol):
    """Transaction boundary: writes made inside land together on ``commit``."""

    @property
    def repositories(self) -> BillingRepositories: ...

    def __enter__(self) -> BillingUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


type UnitOfWorkFactory = Callable[[], BillingUnitOfWork]


__all__ = ["BillingRepositories", "BillingUnitOfWork", "UnitOfWorkFactory"]
