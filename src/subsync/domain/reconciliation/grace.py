"""Grace period sweeper.

Finds PAST_DUE subscriptions whose grace window has lapsed, revokes the user's
entitlement and clears the grace marker. Both writes happen in one unit of
work, and downgrading an already restricted user is a no-op, so an
interrupted sweep is safe to re-run.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from subsync.domain.model import UserMode

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from subsync.domain.model import Subscription
    from subsync.domain.ports.unit_of_work import UnitOfWorkFactory

log = getLogger(__name__)


@dataclass(slots=True)
class SweepResult:
    expired: int = 0
    skipped: int = 0
    errors: int = 0


@dataclass(slots=True)
class GracePeriodSweeper:
    unit_of_work_factory: UnitOfWorkFactory

    def find_due(self, now: datetime) -> Sequence[Subscription]:
        with self.unit_of_work_factory() as uow:
            return list(uow.repositories.subscriptions.find_due_for_sweep(now))

    def sweep(self, now: datetime, *, due: Sequence[Subscription] | None = None) -> SweepResult:
        """Expire every lapsed grace period; per-item failures are counted, not raised."""

        candidates = self.find_due(now) if due is None else due
        result = SweepResult()
        for subscription in candidates:
            try:
                expired = self._expire(subscription, now)
            except Exception:
                log.exception(
                    "Failed to expire grace period for subscription %s (user %s)",
                    subscription.id,
                    subscription.user_id,
                )
                result.errors += 1
                continue
            if not expired:
                result.skipped += 1
                continue
            result.expired += 1
            log.info(
                "User %s grace period expired (subscription %s), downgraded to %s",
                subscription.user_id,
                subscription.id,
                UserMode.RESTRICTED,
            )
        return result

    def _expire(self, subscription: Subscription, now: datetime) -> bool:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            # The push path may have settled the invoice since the candidate
            # query ran; only act on what the store says now.
            current = repositories.subscriptions.get(subscription.id)
            if current is None or not current.grace_period_lapsed(now):
                log.debug("Subscription %s no longer due for sweep", subscription.id)
                return False
            repositories.users.update_user_mode(current.user_id, UserMode.RESTRICTED)
            repositories.subscriptions.update_subscription(
                current.id,
                grace_period_ends_at=None,
            )
            uow.commit()
        return True
