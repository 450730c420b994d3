"""Public interface for the Stripe adapter."""

from __future__ import annotations

from .client import StripeAPIError, StripeSubscriptionProvider
from .schema import StripeErrorResponse, StripeSubscriptionList, StripeSubscriptionPayload
from .translator import parse_subscription

__all__ = [
    "StripeAPIError",
    "StripeErrorResponse",
    "StripeSubscriptionList",
    "StripeSubscriptionPayload",
    "StripeSubscriptionProvider",
    "parse_subscription",
]
