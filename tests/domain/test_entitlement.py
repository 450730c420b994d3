from __future__ import annotations

from datetime import timedelta

import pytest

from subsync.domain.entitlement import (
    FALLBACK_STATUS,
    PROVIDER_STATUS_MAP,
    map_provider_status,
    mode_for_status,
    resolve_mode,
)
from subsync.domain.model import SubscriptionStatus, UserMode
from tests.helpers.billing import NOW


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("active", SubscriptionStatus.ACTIVE),
        ("trialing", SubscriptionStatus.TRIALING),
        ("past_due", SubscriptionStatus.PAST_DUE),
        ("canceled", SubscriptionStatus.CANCELED),
        ("unpaid", SubscriptionStatus.UNPAID),
    ],
)
def test_map_provider_status_known_values(raw: str, expected: SubscriptionStatus) -> None:
    assert map_provider_status(raw) == expected


def test_map_provider_status_is_case_and_whitespace_insensitive() -> None:
    assert map_provider_status("  PAST_DUE ") == SubscriptionStatus.PAST_DUE


@pytest.mark.parametrize("raw", ["incomplete", "incomplete_expired", "paused", "", "mystery"])
def test_unknown_provider_status_falls_back_to_canceled(raw: str) -> None:
    assert map_provider_status(raw) == FALLBACK_STATUS == SubscriptionStatus.CANCELED


def test_status_map_is_read_only() -> None:
    with pytest.raises(TypeError):
        PROVIDER_STATUS_MAP["paused"] = SubscriptionStatus.ACTIVE  # type: ignore[index]


@pytest.mark.parametrize(
    ("status", "mode"),
    [
        (SubscriptionStatus.ACTIVE, UserMode.FULL),
        (SubscriptionStatus.TRIALING, UserMode.FULL),
        (SubscriptionStatus.PAST_DUE, UserMode.RESTRICTED),
        (SubscriptionStatus.CANCELED, UserMode.RESTRICTED),
        (SubscriptionStatus.UNPAID, UserMode.RESTRICTED),
    ],
)
def test_mode_for_status(status: SubscriptionStatus, mode: UserMode) -> None:
    assert mode_for_status(status) == mode


def test_resolve_mode_keeps_grace_mode_while_grace_is_open() -> None:
    ends_at = NOW + timedelta(days=3)

    assert (
        resolve_mode(
            SubscriptionStatus.PAST_DUE,
            grace_period_ends_at=ends_at,
            now=NOW,
            grace_mode=UserMode.FULL,
        )
        == UserMode.FULL
    )
    assert (
        resolve_mode(
            SubscriptionStatus.PAST_DUE,
            grace_period_ends_at=ends_at,
            now=NOW,
            grace_mode=UserMode.RESTRICTED,
        )
        == UserMode.RESTRICTED
    )


@pytest.mark.parametrize("ends_at", [None, NOW, NOW - timedelta(seconds=1)])
def test_resolve_mode_restricts_past_due_without_open_grace(ends_at: object) -> None:
    assert (
        resolve_mode(
            SubscriptionStatus.PAST_DUE,
            grace_period_ends_at=ends_at,  # type: ignore[arg-type]
            now=NOW,
            grace_mode=UserMode.FULL,
        )
        == UserMode.RESTRICTED
    )


def test_resolve_mode_ignores_grace_for_other_statuses() -> None:
    ends_at = NOW + timedelta(days=3)

    assert (
        resolve_mode(
            SubscriptionStatus.CANCELED,
            grace_period_ends_at=ends_at,
            now=NOW,
            grace_mode=UserMode.FULL,
        )
        == UserMode.RESTRICTED
    )
    assert (
        resolve_mode(
            SubscriptionStatus.ACTIVE,
            grace_period_ends_at=None,
            now=NOW,
            grace_mode=UserMode.RESTRICTED,
        )
        == UserMode.FULL
    )
