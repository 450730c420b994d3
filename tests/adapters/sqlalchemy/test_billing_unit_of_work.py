from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from subsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyBillingUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from subsync.domain.model import SubscriptionStatus, UserMode
from subsync.domain.reconciliation import ReconciliationEngine
from tests.helpers.billing import (
    NOW,
    FakeProvider,
    fixed_clock,
    make_subscription,
    make_user,
    remote,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine


def test_unit_of_work_requires_startup() -> None:
    shutdown()

    with pytest.raises(StartupError):
        SqlAlchemyBillingUnitOfWork()


def test_startup_refuses_to_reinitialise(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    try:
        assert is_started()
        assert configured_engine() is sqlite_engine
        with pytest.raises(StartupError):
            startup(engine=sqlite_engine)
    finally:
        shutdown()

    assert not is_started()


def test_repositories_unavailable_outside_context(
    sqlite_unit_of_work: Callable[[], SqlAlchemyBillingUnitOfWork],
) -> None:
    uow = sqlite_unit_of_work()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_uncommitted_writes_are_discarded(
    sqlite_unit_of_work: Callable[[], SqlAlchemyBillingUnitOfWork],
) -> None:
    user = make_user(mode=UserMode.FULL)
    with sqlite_unit_of_work() as uow:
        uow.repositories.users.add(user)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        uow.repositories.users.update_user_mode(user.id, UserMode.RESTRICTED)

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.users.get_mode(user.id) == UserMode.FULL


def test_writes_roll_back_together_on_error(
    sqlite_unit_of_work: Callable[[], SqlAlchemyBillingUnitOfWork],
) -> None:
    user = make_user(mode=UserMode.FULL)
    subscription = make_subscription(
        user,
        status=SubscriptionStatus.PAST_DUE,
        grace_period_ends_at=NOW,
    )
    with sqlite_unit_of_work() as uow:
        uow.repositories.users.add(user)
        uow.repositories.subscriptions.add(subscription)
        uow.commit()

    with pytest.raises(RuntimeError), sqlite_unit_of_work() as uow:
        uow.repositories.users.update_user_mode(user.id, UserMode.RESTRICTED)
        uow.repositories.subscriptions.update_subscription(
            subscription.id,
            grace_period_ends_at=None,
        )
        raise RuntimeError("crash before commit")

    with sqlite_unit_of_work() as uow:
        loaded = uow.repositories.subscriptions.get(subscription.id)

    assert loaded is not None
    assert loaded.user_mode == UserMode.FULL
    assert loaded.grace_period_ends_at == NOW


def test_engine_converges_against_sqlite(
    sqlite_unit_of_work: Callable[[], SqlAlchemyBillingUnitOfWork],
) -> None:
    lapsed_user = make_user(mode=UserMode.FULL)
    lapsed = make_subscription(
        lapsed_user,
        status=SubscriptionStatus.PAST_DUE,
        grace_period_ends_at=NOW - timedelta(days=1),
    )
    drifted_user = make_user(mode=UserMode.FULL)
    drifted = make_subscription(drifted_user, status=SubscriptionStatus.ACTIVE)
    missing_user = make_user(mode=UserMode.FULL)
    missing = make_subscription(missing_user, status=SubscriptionStatus.TRIALING)
    with sqlite_unit_of_work() as uow:
        for user in (lapsed_user, drifted_user, missing_user):
            uow.repositories.users.add(user)
        for subscription in (lapsed, drifted, missing):
            uow.repositories.subscriptions.add(subscription)
        uow.commit()

    provider = FakeProvider()
    provider.answer(remote(lapsed.external_id, "past_due"))
    provider.answer(remote(drifted.external_id, "past_due"))
    engine = ReconciliationEngine(
        provider=provider,
        unit_of_work_factory=sqlite_unit_of_work,
        clock=fixed_clock(NOW),
    )

    first = engine.run()
    second = engine.run()

    assert first.as_dict() == {
        "expiredGracePeriods": 1,
        "syncedSubscriptions": 2,
        "errors": 0,
    }
    assert second.as_dict() == {
        "expiredGracePeriods": 0,
        "syncedSubscriptions": 0,
        "errors": 0,
    }
    with sqlite_unit_of_work() as uow:
        users = uow.repositories.users
        subscriptions = uow.repositories.subscriptions
        assert users.get_mode(lapsed_user.id) == UserMode.RESTRICTED
        assert users.get_mode(drifted_user.id) == UserMode.RESTRICTED
        assert users.get_mode(missing_user.id) == UserMode.RESTRICTED
        reloaded_missing = subscriptions.get(missing.id)
        assert reloaded_missing is not None
        assert reloaded_missing.status == SubscriptionStatus.CANCELED
        assert reloaded_missing.canceled_at == NOW
