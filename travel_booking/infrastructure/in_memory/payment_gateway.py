from typing import Any
from uuid import uuid4

from travel_booking.application.interfaces.payment_gateway import (
    PaymentGateway,
    PaymentIntentResult,
    RefundResult,
)
from travel_booking.infrastructure.gateways.stripe_gateway import verify_and_decode_event


class StubPaymentGateway(PaymentGateway):
    """
    Provider double with Stripe-shaped ids.

    Honors idempotency keys like the real API and verifies webhook
    signatures with the same routine as the Stripe adapter.
    """

    def __init__(self, tolerance_seconds: int = 300) -> None:
        self.intents: dict[str, PaymentIntentResult] = {}
        self.refunds: list[RefundResult] = []
        self._by_idempotency_key: dict[str, Any] = {}
        self._tolerance = tolerance_seconds

    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict[str, str],
        idempotency_key: str,
    ) -> PaymentIntentResult:
        if idempotency_key in self._by_idempotency_key:
            return self._by_idempotency_key[idempotency_key]
        intent_id = f"pi_{uuid4().hex[:24]}"
        intent = PaymentIntentResult(
            client_secret=f"{intent_id}_secret_{uuid4().hex[:16]}",
            intent_id=intent_id,
            amount=amount,
            currency=currency.lower(),
            status="requires_payment_method",
            metadata=dict(metadata),
        )
        self.intents[intent_id] = intent
        self._by_idempotency_key[idempotency_key] = intent
        return intent

    async def retrieve_payment_intent(self, intent_id: str) -> PaymentIntentResult | None:
        return self.intents.get(intent_id)

    async def create_refund(
        self,
        payment_intent_id: str,
        amount: int | None,
        reason: str | None,
        idempotency_key: str,
    ) -> RefundResult:
        if idempotency_key in self._by_idempotency_key:
            return self._by_idempotency_key[idempotency_key]
        intent = self.intents.get(payment_intent_id)
        refund = RefundResult(
            refund_id=f"re_{uuid4().hex[:24]}",
            amount=amount if amount is not None else (intent.amount if intent else 0),
            currency=intent.currency if intent else "usd",
            status="succeeded",
            reason=reason,
        )
        self.refunds.append(refund)
        self._by_idempotency_key[idempotency_key] = refund
        return refund

    async def parse_webhook_event(
        self,
        payload: bytes,
        signature_header: str | None,
        webhook_secret: str,
    ) -> dict[str, Any]:
        return verify_and_decode_event(
            payload, signature_header, webhook_secret, tolerance=self._tolerance
        )
