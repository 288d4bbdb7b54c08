"""Payment intents and refunds on top of the payment provider gateway."""

import logging
from uuid import UUID

from travel_booking.application.interfaces.payment_gateway import (
    PaymentGateway,
    PaymentIntentResult,
    RefundResult,
)
from travel_booking.application.services.booking_service import BookingService
from travel_booking.domain.entities.booking import Booking, PaymentStatus
from travel_booking.domain.errors import (
    BookingNotFoundError,
    PaymentIntentNotFoundError,
    RefundNotAllowedError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def intent_idempotency_key(booking_id: UUID, amount: int, currency: str) -> str:
    return f"booking-{booking_id}-intent-{amount}-{currency}"


def refund_idempotency_key(booking_id: UUID, amount: int | None) -> str:
    return f"booking-{booking_id}-refund-{amount if amount is not None else 'full'}"


class PaymentService:
    def __init__(self, bookings: BookingService, gateway: PaymentGateway) -> None:
        self._bookings = bookings
        self._gateway = gateway

    async def create_payment_intent(
        self,
        booking_id: UUID,
        amount_minor: int | None = None,
        currency: str | None = None,
    ) -> PaymentIntentResult:
        """
        Open a provider payment intent for the booking.

        The amount defaults to the booking total in minor units. The intent id
        is stored as the booking's ``payment_id``.
        """
        booking = await self._require_booking(booking_id)
        if booking.payment_status != PaymentStatus.PENDING:
            raise ValidationError(
                "booking_id", f"booking payment is already {booking.payment_status.value}"
            )
        if not booking.is_active:
            raise ValidationError("booking_id", f"booking is {booking.status.value}")

        amount = amount_minor if amount_minor is not None else booking.total.to_cents()
        if amount <= 0:
            raise ValidationError("amount", "must be greater than zero")
        currency_code = (currency or booking.currency).lower()

        intent = await self._gateway.create_payment_intent(
            amount=amount,
            currency=currency_code,
            metadata={"bookingId": str(booking.id), "customerId": str(booking.customer_id)},
            idempotency_key=intent_idempotency_key(booking.id, amount, currency_code),
        )
        await self._bookings.update_payment_status(
            booking.id, booking.payment_status, payment_id=intent.intent_id
        )
        logger.info(
            "Payment intent created",
            extra={
                "booking_id": str(booking.id),
                "payment_intent_id": intent.intent_id,
                "amount": amount,
                "currency": currency_code,
            },
        )
        return intent

    async def process_refund(
        self,
        booking_id: UUID,
        amount_minor: int | None = None,
        reason: str | None = None,
    ) -> RefundResult:
        booking = await self._require_booking(booking_id)
        if not booking.payment_id:
            raise RefundNotAllowedError(booking.id, "no payment found for this booking")
        if booking.payment_status != PaymentStatus.PAID:
            raise RefundNotAllowedError(
                booking.id, f"payment status is {booking.payment_status.value}"
            )
        if amount_minor is not None and amount_minor <= 0:
            raise ValidationError("amount", "must be greater than zero")

        refund = await self._gateway.create_refund(
            payment_intent_id=booking.payment_id,
            amount=amount_minor,
            reason=reason,
            idempotency_key=refund_idempotency_key(booking.id, amount_minor),
        )
        await self._bookings.update_payment_status(booking.id, PaymentStatus.REFUNDED)
        logger.info(
            "Refund processed",
            extra={
                "booking_id": str(booking.id),
                "refund_id": refund.refund_id,
                "amount": refund.amount,
            },
        )
        return refund

    async def get_payment_intent(self, intent_id: str) -> PaymentIntentResult:
        intent = await self._gateway.retrieve_payment_intent(intent_id)
        if intent is None:
            raise PaymentIntentNotFoundError(intent_id)
        return intent

    async def mark_refunded(
        self,
        booking_id: UUID | None = None,
        payment_intent_id: str | None = None,
    ) -> Booking | None:
        """
        Reconcile a refund reported by the provider.

        The booking is found by id, else by its stored intent id. Only a PAID
        booking moves to REFUNDED; anything else is left untouched.
        """
        booking = None
        if booking_id is not None:
            booking = await self._bookings.get_booking_by_id(booking_id)
        if booking is None and payment_intent_id:
            booking = await self._bookings.get_booking_by_payment_id(payment_intent_id)
        if booking is None:
            return None
        if booking.payment_status != PaymentStatus.PAID:
            return booking
        return await self._bookings.update_payment_status(booking.id, PaymentStatus.REFUNDED)

    async def _require_booking(self, booking_id: UUID) -> Booking:
        booking = await self._bookings.get_booking_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking
