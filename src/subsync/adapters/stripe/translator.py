"""Translate Stripe payloads into provider records."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from subsync.domain.ports.provider import ProviderSubscription

if TYPE_CHECKING:
    from .schema import StripeSubscriptionPayload


def _epoch_to_datetime(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=UTC)


def parse_subscription(payload: StripeSubscriptionPayload) -> ProviderSubscription:
    return ProviderSubscription(
        external_id=payload.id,
        status=payload.status,
        cancel_at_period_end=payload.cancel_at_period_end,
        current_period_start=_epoch_to_datetime(payload.period_start),
        current_period_end=_epoch_to_datetime(payload.period_end),
    )
