"""Pydantic models describing the Stripe subscription payloads we read."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class StripeBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SubscriptionItemPayload(StripeBaseModel):
    id: str
    current_period_start: int | None = None
    current_period_end: int | None = None


class SubscriptionItemList(StripeBaseModel):
    data: list[SubscriptionItemPayload] = Field(default_factory=list)


class StripeSubscriptionPayload(StripeBaseModel):
    id: str
    status: str
    cancel_at_period_end: bool = False
    # Newer API versions only report billing periods on the items.
    current_period_start: int | None = None
    current_period_end: int | None = None
    items: SubscriptionItemList = Field(default_factory=SubscriptionItemList)

    @property
    def period_start(self) -> int | None:
        if self.current_period_start is not None:
            return self.current_period_start
        starts = [
            item.current_period_start
            for item in self.items.data
            if item.current_period_start is not None
        ]
        return min(starts) if starts else None

    @property
    def period_end(self) -> int | None:
        if self.current_period_end is not None:
            return self.current_period_end
        ends = [
            item.current_period_end for item in self.items.data if item.current_period_end is not None
        ]
        return max(ends) if ends else None


class StripeSubscriptionList(StripeBaseModel):
    data: list[StripeSubscriptionPayload] = Field(default_factory=list)
    has_more: bool = False


class StripeErrorDetail(StripeBaseModel):
    type: str | None = None
    code: str | None = None
    message: str | None = None


class StripeErrorResponse(StripeBaseModel):
    error: StripeErrorDetail
