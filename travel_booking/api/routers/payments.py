from uuid import UUID

from fastapi import APIRouter, Depends

from travel_booking.api.auth import Principal, Role, get_principal
from travel_booking.api.dependencies import AppServices, get_services
from travel_booking.api.schemas.payments import (
    CreatePaymentIntentRequest,
    PaymentIntentResponse,
    PaymentIntentStatusResponse,
    RefundRequest,
    RefundResponse,
)
from travel_booking.domain.errors import BookingNotFoundError, ForbiddenError

router = APIRouter(prefix="/payments")


@router.post("/intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    payload: CreatePaymentIntentRequest,
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> PaymentIntentResponse:
    booking = await services.bookings.get_booking_by_id(payload.booking_id)
    if booking is None:
        raise BookingNotFoundError(payload.booking_id)
    if booking.customer_id != principal.user_id:
        raise ForbiddenError("Not allowed to pay for this booking")

    intent = await services.payments.create_payment_intent(
        booking.id, amount_minor=payload.amount, currency=payload.currency
    )
    return PaymentIntentResponse(
        client_secret=intent.client_secret,
        payment_intent_id=intent.intent_id,
        amount=intent.amount,
        currency=intent.currency,
        status=intent.status,
    )


@router.post("/refund", response_model=RefundResponse)
async def create_refund(
    payload: RefundRequest,
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> RefundResponse:
    booking = await services.bookings.get_booking_by_id(payload.booking_id)
    if booking is None:
        raise BookingNotFoundError(payload.booking_id)
    if booking.customer_id != principal.user_id and principal.role != Role.ADMIN:
        raise ForbiddenError("Not allowed to refund this booking")

    refund = await services.payments.process_refund(
        booking.id,
        amount_minor=payload.amount,
        reason=payload.reason.value if payload.reason else None,
    )
    return RefundResponse(
        refund_id=refund.refund_id,
        amount=refund.amount,
        currency=refund.currency,
        status=refund.status,
        reason=refund.reason,
    )


@router.get("/intent/{intent_id}", response_model=PaymentIntentStatusResponse)
async def get_payment_intent(
    intent_id: str,
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> PaymentIntentStatusResponse:
    intent = await services.payments.get_payment_intent(intent_id)
    if principal.role != Role.ADMIN:
        try:
            booking_id = UUID(intent.metadata.get("bookingId", ""))
        except ValueError:
            raise ForbiddenError("Not allowed to view this payment") from None
        owner = await services.bookings.get_booking_by_id(booking_id)
        if owner is None or owner.customer_id != principal.user_id:
            raise ForbiddenError("Not allowed to view this payment")
    return PaymentIntentStatusResponse(
        id=intent.intent_id,
        status=intent.status,
        amount=intent.amount,
        currency=intent.currency,
    )
