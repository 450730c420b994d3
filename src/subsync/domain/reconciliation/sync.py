"""Provider sync pass.

Re-reads every non-terminal subscription from the billing provider and
writes back whatever drifted. Lookups run concurrently behind a semaphore;
each subscription is an independent unit, so one failure never stops the
rest of the pass.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from subsync.domain.entitlement import map_provider_status, resolve_mode
from subsync.domain.model import SubscriptionStatus, UserMode
from subsync.domain.ports.provider import ProviderSubscriptionNotFound

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from subsync.domain.model import Subscription
    from subsync.domain.ports.persistence import SubscriptionFields
    from subsync.domain.ports.provider import ProviderSubscription, SubscriptionProvider
    from subsync.domain.ports.unit_of_work import UnitOfWorkFactory

log = getLogger(__name__)

DEFAULT_SYNC_CONCURRENCY = 8


class SyncOutcome(StrEnum):
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    CANCELED_MISSING = "canceled_missing"
    FAILED = "failed"
    ABANDONED = "abandoned"


@dataclass(slots=True)
class SyncResult:
    synced: int = 0
    unchanged: int = 0
    errors: int = 0
    abandoned: int = 0

    def record(self, outcome: SyncOutcome) -> None:
        match outcome:
            case SyncOutcome.UPDATED | SyncOutcome.CANCELED_MISSING:
                self.synced += 1
            case SyncOutcome.UNCHANGED:
                self.unchanged += 1
            case SyncOutcome.FAILED:
                self.errors += 1
            case SyncOutcome.ABANDONED:
                self.abandoned += 1
                self.errors += 1


def is_dirty(subscription: Subscription, remote: ProviderSubscription) -> bool:
    """Return whether the local snapshot disagrees with the provider record."""

    return (
        map_provider_status(remote.status) != subscription.status
        or remote.cancel_at_period_end != subscription.cancel_at_period_end
    )


@dataclass(slots=True)
class ProviderSyncPass:
    """Concurrent provider lookups with per-subscription store writes.

    Only the provider calls are awaited. Units of work are synchronous and
    run on the event loop, so a commit briefly holds up the other lookups in
    flight; with ``concurrency`` bounded this stays small next to the
    provider round trips.
    """

    provider: SubscriptionProvider
    unit_of_work_factory: UnitOfWorkFactory
    concurrency: int = DEFAULT_SYNC_CONCURRENCY
    grace_mode: UserMode = UserMode.FULL

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError("Sync concurrency must be at least 1")

    def find_candidates(self) -> Sequence[Subscription]:
        with self.unit_of_work_factory() as uow:
            return list(uow.repositories.subscriptions.find_syncable())

    async def run(
        self,
        candidates: Sequence[Subscription],
        *,
        now: datetime,
        timeout: float | None = None,
    ) -> SyncResult:
        """Sync ``candidates`` against the provider.

        ``timeout`` bounds the whole pass in seconds. Subscriptions still in
        flight when it expires are cancelled and counted as errors; writes that
        already committed stay.
        """

        result = SyncResult()
        if not candidates:
            return result

        semaphore = asyncio.Semaphore(self.concurrency)
        tasks = {
            asyncio.create_task(
                self._sync_one(subscription, now=now, semaphore=semaphore),
                name=f"sync-{subscription.id}",
            ): subscription
            for subscription in candidates
        }
        done, pending = await asyncio.wait(
            list(tasks),
            timeout=None if timeout is None else max(timeout, 0.0),
        )

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            log.warning(
                "Sync deadline reached: abandoned %s of %s subscriptions",
                len(pending),
                len(tasks),
            )
            for task in pending:
                log.warning("Abandoned sync of subscription %s", tasks[task].id)
                result.record(SyncOutcome.ABANDONED)

        for task in done:
            result.record(task.result())
        return result

    async def _sync_one(
        self,
        subscription: Subscription,
        *,
        now: datetime,
        semaphore: asyncio.Semaphore,
    ) -> SyncOutcome:
        try:
            async with semaphore:
                remote = await self.provider.fetch_subscription(subscription.external_id)
        except ProviderSubscriptionNotFound:
            try:
                return self._cancel_missing(subscription, now)
            except Exception:
                log.exception("Error canceling missing subscription %s", subscription.id)
                return SyncOutcome.FAILED
        except Exception:
            log.exception(
                "Error fetching subscription %s (%s) from provider",
                subscription.id,
                subscription.external_id,
            )
            return SyncOutcome.FAILED

        try:
            return self._apply_remote(subscription, now, remote)
        except Exception:
            log.exception("Error applying provider state to subscription %s", subscription.id)
            return SyncOutcome.FAILED

    def _apply_remote(
        self,
        subscription: Subscription,
        now: datetime,
        remote: ProviderSubscription,
    ) -> SyncOutcome:
        if not is_dirty(subscription, remote):
            return SyncOutcome.UNCHANGED

        new_status = map_provider_status(remote.status)
        fields: SubscriptionFields = {
            "status": new_status,
            "cancel_at_period_end": remote.cancel_at_period_end,
        }
        if remote.current_period_start is not None:
            fields["current_period_start"] = remote.current_period_start
        if remote.current_period_end is not None:
            fields["current_period_end"] = remote.current_period_end

        grace_period_ends_at = subscription.grace_period_ends_at
        if new_status != SubscriptionStatus.PAST_DUE and grace_period_ends_at is not None:
            fields["grace_period_ends_at"] = None
            grace_period_ends_at = None
        if new_status == SubscriptionStatus.CANCELED and subscription.canceled_at is None:
            fields["canceled_at"] = now

        new_mode = resolve_mode(
            new_status,
            grace_period_ends_at=grace_period_ends_at,
            now=now,
            grace_mode=self.grace_mode,
        )

        with self.unit_of_work_factory() as uow:
            uow.repositories.subscriptions.update_subscription(subscription.id, **fields)
            if subscription.user_mode != new_mode:
                uow.repositories.users.update_user_mode(subscription.user_id, new_mode)
            uow.commit()

        log.info(
            "Synced subscription %s for user %s: %s -> %s (cancel_at_period_end=%s, mode=%s)",
            subscription.id,
            subscription.user_id,
            subscription.status,
            new_status,
            remote.cancel_at_period_end,
            new_mode,
        )
        return SyncOutcome.UPDATED

    def _cancel_missing(self, subscription: Subscription, now: datetime) -> SyncOutcome:
        fields: SubscriptionFields = {
            "status": SubscriptionStatus.CANCELED,
            "grace_period_ends_at": None,
        }
        if subscription.canceled_at is None:
            fields["canceled_at"] = now

        with self.unit_of_work_factory() as uow:
            uow.repositories.subscriptions.update_subscription(subscription.id, **fields)
            uow.repositories.users.update_user_mode(subscription.user_id, UserMode.RESTRICTED)
            uow.commit()

        log.warning(
            "Subscription %s (%s) not found at provider, marked %s",
            subscription.id,
            subscription.external_id,
            SubscriptionStatus.CANCELED,
        )
        return SyncOutcome.CANCELED_MISSING
