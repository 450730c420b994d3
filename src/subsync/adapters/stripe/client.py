"""Read-only Stripe client used by the reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

from pydantic import ValidationError

from subsync.adapters.http_resilience import ResilientClient
from subsync.config.stripe import StripeConfig, get_stripe_config
from subsync.domain.ports.provider import ProviderError, ProviderSubscriptionNotFound

from .schema import StripeErrorResponse, StripeSubscriptionList, StripeSubscriptionPayload
from .translator import parse_subscription

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from subsync.config.http_resilience import ResilienceConfig
    from subsync.domain.ports.provider import ProviderSubscription, SubscriptionProvider

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class StripeAPIError(ProviderError):
    """Raised when Stripe answers with an error or an unreadable payload."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


def _raise_for_error(response: httpx.Response) -> None:
    if response.is_success:
        return
    message = f"Stripe request failed with HTTP {response.status_code}"
    code: str | None = None
    try:
        detail = StripeErrorResponse.model_validate(response.json()).error
    except (ValueError, ValidationError):
        detail = None
    if detail is not None:
        code = detail.code
        if detail.message:
            message = f"{message}: {detail.message}"
    log.error(message)
    raise StripeAPIError(message, status_code=response.status_code, code=code)


@dataclass(slots=True)
class StripeSubscriptionProvider:
    config: StripeConfig = field(default_factory=get_stripe_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False, repr=False)

    @property
    def client(self) -> ResilientClient:
        # Created lazily so one client (and its rate limiter) serves a whole run.
        if self._client is None:
            self._client = self.client_factory(self.config.resilience)
        return self._client

    async def fetch_subscription(self, external_id: str) -> ProviderSubscription:
        response = await self.client.get(f"subscriptions/{quote(external_id, safe='')}")
        if response.status_code == 404:  # noqa: PLR2004
            raise ProviderSubscriptionNotFound(external_id)
        _raise_for_error(response)
        try:
            payload = StripeSubscriptionPayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise StripeAPIError(
                f"Unexpected Stripe payload for subscription {external_id}",
                status_code=response.status_code,
            ) from exc
        return parse_subscription(payload)

    async def ping(self) -> None:
        response = await self.client.get("subscriptions", params={"limit": 1})
        _raise_for_error(response)
        try:
            StripeSubscriptionList.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise StripeAPIError("Unexpected Stripe payload for subscription list") from exc

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


if TYPE_CHECKING:
    _provider_check: SubscriptionProvider = StripeSubscriptionProvider()
