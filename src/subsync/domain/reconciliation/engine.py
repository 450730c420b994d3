"""Reconciliation driver.

Runs the grace period sweeper and then the provider sync pass, and folds
their outcomes into one summary. The engine keeps nothing between runs:
every invocation re-reads the store, which is what makes repeated or
overlapping runs converge instead of conflicting.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from subsync.domain.clock import utcnow
from subsync.domain.model import UserMode

from .grace import GracePeriodSweeper
from .sync import DEFAULT_SYNC_CONCURRENCY, ProviderSyncPass

if TYPE_CHECKING:
    from collections.abc import Callable

    from subsync.domain.clock import Clock
    from subsync.domain.ports.provider import SubscriptionProvider
    from subsync.domain.ports.unit_of_work import UnitOfWorkFactory

log = getLogger(__name__)


class ReconciliationStartupError(RuntimeError):
    """Raised when a run cannot start: the store or the provider is unusable."""


@dataclass(slots=True, frozen=True)
class ReconciliationResult:
    """Counts reported back to the scheduler.

    A non-zero ``errors`` value describes per-subscription failures only; it
    does not mean the run itself failed.
    """

    expired_grace_periods: int = 0
    synced_subscriptions: int = 0
    errors: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "expiredGracePeriods": self.expired_grace_periods,
            "syncedSubscriptions": self.synced_subscriptions,
            "errors": self.errors,
        }


@dataclass(slots=True)
class ReconciliationEngine:
    provider: SubscriptionProvider
    unit_of_work_factory: UnitOfWorkFactory
    concurrency: int = DEFAULT_SYNC_CONCURRENCY
    grace_mode: UserMode = UserMode.FULL
    clock: Clock = field(default=utcnow)

    def run(self, *, deadline: float | None = None) -> ReconciliationResult:
        """Synchronous entry point; see :meth:`run_async`."""

        return asyncio.run(self.run_async(deadline=deadline))

    async def run_async(self, *, deadline: float | None = None) -> ReconciliationResult:
        """Execute one convergence pass.

        ``deadline`` is a budget in seconds measured from the start of the run.
        It bounds the provider preflight and the sync pass; the grace sweep is
        local store work and is not interrupted, but the time it takes is spent
        from the same budget. Per-subscription failures are counted in the
        result; only failures that prevent the run from starting raise
        :class:`ReconciliationStartupError`.
        """

        if deadline is not None and deadline <= 0:
            raise ValueError("Deadline must be a positive number of seconds")

        loop = asyncio.get_running_loop()
        deadline_at = None if deadline is None else loop.time() + deadline
        now = self.clock()
        log.info("[Reconciliation] Starting subscription reconciliation at %s", now.isoformat())

        try:
            await self._preflight(deadline_at)

            sweeper = GracePeriodSweeper(self.unit_of_work_factory)
            due = self._load("grace period candidates", sweeper.find_due, now)
            sweep = sweeper.sweep(now, due=due)

            sync_pass = ProviderSyncPass(
                provider=self.provider,
                unit_of_work_factory=self.unit_of_work_factory,
                concurrency=self.concurrency,
                grace_mode=self.grace_mode,
            )
            candidates = self._load("sync candidates", sync_pass.find_candidates)
            timeout = None if deadline_at is None else deadline_at - loop.time()
            synced = await sync_pass.run(candidates, now=now, timeout=timeout)
        finally:
            await self.provider.aclose()

        result = ReconciliationResult(
            expired_grace_periods=sweep.expired,
            synced_subscriptions=synced.synced,
            errors=sweep.errors + synced.errors,
        )
        log.info(
            "[Reconciliation] Complete: %s grace periods expired, %s subscriptions synced, "
            "%s unchanged, %s errors",
            result.expired_grace_periods,
            result.synced_subscriptions,
            synced.unchanged,
            result.errors,
        )
        return result

    async def _preflight(self, deadline_at: float | None) -> None:
        try:
            async with asyncio.timeout_at(deadline_at):
                await self.provider.ping()
        except Exception as exc:
            log.exception("[Reconciliation] Billing provider is unreachable")
            raise ReconciliationStartupError("Billing provider is unreachable") from exc

    def _load[**P, T](
        self,
        what: str,
        loader: Callable[P, T],
        *args: P.args,
        **kwargs: P.kwargs,
    ) -> T:
        try:
            return loader(*args, **kwargs)
        except Exception as exc:
            log.exception("[Reconciliation] Could not load %s from the store", what)
            raise ReconciliationStartupError(f"Could not load {what} from the store") from exc
