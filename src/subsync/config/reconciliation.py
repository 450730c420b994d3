"""Reconciliation run defaults."""

from __future__ import annotations

from dataclasses import dataclass

from subsync.domain.model import UserMode
from subsync.domain.reconciliation.sync import DEFAULT_SYNC_CONCURRENCY

from .env import env_choice, env_float, env_int


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    sync_concurrency: int = DEFAULT_SYNC_CONCURRENCY
    deadline_seconds: float | None = None
    # Entitlement held while a PAST_DUE subscription is inside its grace window.
    grace_period_mode: UserMode = UserMode.FULL


def get_reconciliation_config() -> ReconciliationConfig:
    return ReconciliationConfig(
        sync_concurrency=env_int(
            "SUBSYNC_SYNC_CONCURRENCY",
            default=DEFAULT_SYNC_CONCURRENCY,
            minimum=1,
        ),
        deadline_seconds=env_float("SUBSYNC_RUN_DEADLINE_SECONDS"),
        grace_period_mode=env_choice(
            "SUBSYNC_GRACE_PERIOD_MODE",
            UserMode,
            default=UserMode.FULL,
        ),
    )
