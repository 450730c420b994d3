"""Pull-based convergence between the local billing store and the provider.

Flow of one run:
1) preflight the provider
2) sweep lapsed grace periods (store only)
3) re-sync every non-terminal subscription against the provider
4) report ``{expiredGracePeriods, syncedSubscriptions, errors}``
"""

from __future__ import annotations

from .engine import ReconciliationEngine, ReconciliationResult, ReconciliationStartupError
from .grace import GracePeriodSweeper, SweepResult
from .sync import DEFAULT_SYNC_CONCURRENCY, ProviderSyncPass, SyncOutcome, SyncResult, is_dirty

__all__ = [
    "DEFAULT_SYNC_CONCURRENCY",
    "GracePeriodSweeper",
    "ProviderSyncPass",
    "ReconciliationEngine",
    "ReconciliationResult",
    "ReconciliationStartupError",
    "SweepResult",
    "SyncOutcome",
    "SyncResult",
    "is_dirty",
]
