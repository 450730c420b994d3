from __future__ import annotations

from datetime import UTC, datetime

from subsync.adapters.stripe import StripeSubscriptionPayload, parse_subscription


def test_parse_subscription_converts_epochs_to_utc() -> None:
    payload = StripeSubscriptionPayload.model_validate(
        {
            "id": "sub_1",
            "status": "trialing",
            "cancel_at_period_end": True,
            "current_period_start": 1735689600,
            "current_period_end": 1738368000,
            "customer": "cus_1",
        }
    )

    result = parse_subscription(payload)

    assert result.external_id == "sub_1"
    assert result.status == "trialing"
    assert result.cancel_at_period_end is True
    assert result.current_period_start == datetime(2025, 1, 1, tzinfo=UTC)
    assert result.current_period_end == datetime(2025, 2, 1, tzinfo=UTC)


def test_parse_subscription_spans_all_items() -> None:
    payload = StripeSubscriptionPayload.model_validate(
        {
            "id": "sub_2",
            "status": "active",
            "items": {
                "data": [
                    {"id": "si_a", "current_period_start": 200, "current_period_end": 900},
                    {"id": "si_b", "current_period_start": 100, "current_period_end": 1000},
                ]
            },
        }
    )

    result = parse_subscription(payload)

    assert result.cancel_at_period_end is False
    assert result.current_period_start == datetime.fromtimestamp(100, tz=UTC)
    assert result.current_period_end == datetime.fromtimestamp(1000, tz=UTC)


def test_parse_subscription_without_periods() -> None:
    payload = StripeSubscriptionPayload.model_validate({"id": "sub_3", "status": "paused"})

    result = parse_subscription(payload)

    assert result.status == "paused"
    assert result.current_period_start is None
    assert result.current_period_end is None
