import logging
from typing import Any
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from travel_booking.api.schemas.payments import StripeWebhookEnvelope
from travel_booking.application.interfaces.payment_gateway import PaymentGateway
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.application.services.booking_service import BookingService
from travel_booking.application.services.notification_service import NotificationService
from travel_booking.application.services.payment_service import PaymentService
from travel_booking.domain.entities.booking import BookingStatus
from travel_booking.domain.errors import (
    SignatureVerificationError,
    ValidationError,
    WebhookNotConfiguredError,
)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"
CHARGE_REFUNDED = "charge.refunded"


def _parse_booking_id(raw: Any) -> UUID | None:
    if not raw:
        return None
    try:
        return UUID(str(raw))
    except ValueError:
        return None


class HandleStripeWebhookUseCase:
    """
    Reconcile provider events with bookings.

    The signature is verified before anything else; a bad signature never
    touches state. Every handled event is idempotent so provider retries and
    replays are harmless.
    """

    def __init__(
        self,
        bookings: BookingService,
        payments: PaymentService,
        notifications: NotificationService,
        payment_gateway: PaymentGateway,
        transaction_manager: TransactionManager,
        stripe_webhook_secret: str | None,
    ) -> None:
        self._bookings = bookings
        self._payments = payments
        self._notifications = notifications
        self._payment_gateway = payment_gateway
        self._transaction_manager = transaction_manager
        self._stripe_webhook_secret = stripe_webhook_secret
        self._logger = logging.getLogger(__name__)

    async def execute(self, raw_body: bytes, signature: str | None) -> str:
        if not self._stripe_webhook_secret:
            raise WebhookNotConfiguredError()
        if not raw_body:
            raise SignatureVerificationError("Empty webhook body")

        try:
            event_dict = await self._payment_gateway.parse_webhook_event(
                payload=raw_body,
                signature_header=signature,
                webhook_secret=self._stripe_webhook_secret,
            )
        except SignatureVerificationError as exc:
            self._logger.warning(
                "Stripe webhook rejected", extra={"reason": exc.message}
            )
            raise

        try:
            event = StripeWebhookEnvelope.model_validate(event_dict)
        except PydanticValidationError as exc:
            raise ValidationError("payload", "invalid event payload") from exc

        data_obj = event.data.get("object") or {}
        if event.type == PAYMENT_SUCCEEDED:
            await self._handle_payment_succeeded(event.id, data_obj)
        elif event.type == PAYMENT_FAILED:
            self._logger.warning(
                "Stripe webhook: payment failed",
                extra={
                    "stripe_event_id": event.id,
                    "payment_intent_id": data_obj.get("id"),
                    "booking_id": (data_obj.get("metadata") or {}).get("bookingId"),
                },
            )
        elif event.type == CHARGE_REFUNDED:
            await self._handle_charge_refunded(event.id, data_obj)
        else:
            self._logger.info(
                "Stripe webhook: unhandled event type acknowledged",
                extra={"stripe_event_id": event.id, "event_type": event.type},
            )
        return event.type

    async def _handle_payment_succeeded(self, event_id: str | None, intent: dict[str, Any]) -> None:
        intent_id = intent.get("id")
        booking_id = _parse_booking_id((intent.get("metadata") or {}).get("bookingId"))
        if booking_id is None:
            self._logger.warning(
                "Stripe webhook: payment without booking reference",
                extra={"stripe_event_id": event_id, "payment_intent_id": intent_id},
            )
            return

        async with self._transaction_manager.start():
            booking, transitioned = await self._bookings.confirm_paid_booking(
                booking_id, payment_id=intent_id
            )
            if booking is None:
                self._logger.warning(
                    "Stripe webhook: booking not found",
                    extra={"stripe_event_id": event_id, "booking_id": str(booking_id)},
                )
                return
            if booking.status == BookingStatus.CONFIRMED:
                await self._notifications.send_booking_confirmation(booking)

        self._logger.info(
            "Stripe webhook processed: payment succeeded",
            extra={
                "stripe_event_id": event_id,
                "payment_intent_id": intent_id,
                "booking_id": str(booking_id),
                "transitioned": transitioned,
            },
        )

    async def _handle_charge_refunded(self, event_id: str | None, charge: dict[str, Any]) -> None:
        intent_id = charge.get("payment_intent")
        booking_id = _parse_booking_id((charge.get("metadata") or {}).get("bookingId"))

        async with self._transaction_manager.start():
            booking = await self._payments.mark_refunded(
                booking_id=booking_id, payment_intent_id=intent_id
            )

        if booking is None:
            self._logger.warning(
                "Stripe webhook: refund for unknown booking",
                extra={"stripe_event_id": event_id, "payment_intent_id": intent_id},
            )
            return
        self._logger.info(
            "Stripe webhook processed: charge refunded",
            extra={
                "stripe_event_id": event_id,
                "payment_intent_id": intent_id,
                "booking_id": str(booking.id),
                "payment_status": booking.payment_status.value,
            },
        )
