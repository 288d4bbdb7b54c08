from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, constr


class RefundReason(str, Enum):
    DUPLICATE = "duplicate"
    FRAUDULENT = "fraudulent"
    REQUESTED_BY_CUSTOMER = "requested_by_customer"


class CreatePaymentIntentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    booking_id: UUID
    amount: int | None = Field(
        default=None, gt=0, description="Minor units; defaults to the booking total"
    )
    currency: constr(strip_whitespace=True, min_length=3, max_length=3) | None = None


class PaymentIntentResponse(BaseModel):
    client_secret: str | None
    payment_intent_id: str
    amount: int
    currency: str
    status: str


class PaymentIntentStatusResponse(BaseModel):
    id: str
    status: str
    amount: int
    currency: str


class RefundRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    booking_id: UUID
    amount: int | None = Field(
        default=None, gt=0, description="Minor units; full refund when omitted"
    )
    reason: RefundReason | None = None


class RefundResponse(BaseModel):
    refund_id: str
    amount: int
    currency: str
    status: str
    reason: str | None = None


class StripeWebhookEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    type: str
    data: dict[str, Any] = Field(default_factory=dict)
    livemode: bool | None = None
    created: int | None = None


class WebhookResponse(BaseModel):
    received: bool = True
