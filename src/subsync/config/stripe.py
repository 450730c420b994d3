"""Stripe configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_int, optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

STRIPE_BASE_URL = "https://api.stripe.com/v1"
STRIPE_TIMEOUT_SECONDS = 15.0
# Stripe allows 100 read requests per second in live mode; stay well below it so
# the push path keeps headroom.
DEFAULT_STRIPE_REQUESTS_PER_SECOND = 20


@dataclass(frozen=True)
class StripeConfig:
    """Holds Stripe API configuration values."""

    secret_key: str
    resilience: ResilienceConfig
    api_version: str | None = None


def build_stripe_resilience(
    *,
    secret_key: str,
    base_url: str = STRIPE_BASE_URL,
    api_version: str | None = None,
    requests_per_second: int = DEFAULT_STRIPE_REQUESTS_PER_SECOND,
    retry: RetryPolicy | None = None,
) -> ResilienceConfig:
    headers = {"Authorization": f"Bearer {secret_key}"}
    if api_version:
        headers["Stripe-Version"] = api_version
    return ResilienceConfig(
        name="stripe",
        base_url=base_url,
        timeout_seconds=STRIPE_TIMEOUT_SECONDS,
        retry=retry or RetryPolicy(),
        ratelimit=RateLimit(max_calls=requests_per_second, per_seconds=1.0),
        default_headers=headers,
    )


def get_stripe_config(*, resilience: ResilienceConfig | None = None) -> StripeConfig:
    values = require_env_vars(("STRIPE_SECRET_KEY",))
    secret_key = values["STRIPE_SECRET_KEY"]
    api_version = optional_env_var("STRIPE_API_VERSION")
    return StripeConfig(
        secret_key=secret_key,
        api_version=api_version,
        resilience=resilience
        or build_stripe_resilience(
            secret_key=secret_key,
            base_url=optional_env_var("STRIPE_API_BASE_URL") or STRIPE_BASE_URL,
            api_version=api_version,
            requests_per_second=env_int(
                "STRIPE_REQUESTS_PER_SECOND",
                default=DEFAULT_STRIPE_REQUESTS_PER_SECOND,
                minimum=1,
            ),
        ),
    )
