"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from subsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyBillingUnitOfWork,
    is_started,
    startup,
)
from subsync.adapters.stripe import StripeSubscriptionProvider
from subsync.config import get_reconciliation_config
from subsync.domain.reconciliation import ReconciliationEngine, ReconciliationResult

if TYPE_CHECKING:
    from subsync.config import ReconciliationConfig
    from subsync.domain.model import User, UserMode
    from subsync.domain.ports import SubscriptionProvider, UnitOfWorkFactory


log = getLogger(__name__)


class UserNotFoundError(LookupError):
    """Raised when a manual override targets an unknown user."""

    def __init__(self, email: str) -> None:
        super().__init__(f"No user with email {email}")
        self.email = email


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyBillingUnitOfWork


def run_reconciliation(
    *,
    provider: SubscriptionProvider | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ReconciliationConfig | None = None,
    concurrency: int | None = None,
    deadline_seconds: float | None = None,
    grace_mode: UserMode | None = None,
) -> ReconciliationResult:
    """Run one reconciliation pass with the configured adapters.

    Explicit keyword values win over ``config``, which defaults to the
    environment.
    """

    settings = config or get_reconciliation_config()
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    effective_provider = provider or StripeSubscriptionProvider()
    engine = ReconciliationEngine(
        provider=effective_provider,
        unit_of_work_factory=effective_uow,
        concurrency=concurrency if concurrency is not None else settings.sync_concurrency,
        grace_mode=grace_mode or settings.grace_period_mode,
    )
    deadline = deadline_seconds if deadline_seconds is not None else settings.deadline_seconds
    log.info(
        "Starting reconciliation: concurrency=%s, deadline=%s, grace_mode=%s",
        engine.concurrency,
        deadline,
        engine.grace_mode,
    )
    return engine.run(deadline=deadline)


def set_user_mode(
    email: str,
    mode: UserMode,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> User:
    """Force a user's entitlement, bypassing provider state.

    Reconciliation only writes modes for subscriptions whose provider record
    drifted, so the override holds until the provider next reports a change
    to the user's status or cancel-at-period-end flag.
    """

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    with effective_uow() as uow:
        users = uow.repositories.users
        user = users.get_by_email(email)
        if user is None:
            raise UserNotFoundError(email)
        previous = user.mode
        users.update_user_mode(user.id, mode)
        uow.commit()
    user.mode = mode
    log.info("Set mode of user %s (%s): %s -> %s", user.id, email, previous, mode)
    return user
