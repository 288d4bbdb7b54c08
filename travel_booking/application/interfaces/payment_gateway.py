from dataclasses import dataclass, field
from typing import Any


@dataclass
class PaymentIntentResult:
    client_secret: str | None
    intent_id: str
    amount: int
    currency: str
    status: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class RefundResult:
    refund_id: str
    amount: int
    currency: str
    status: str
    reason: str | None = None


class PaymentGateway:
    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict[str, str],
        idempotency_key: str,
    ) -> PaymentIntentResult:
        raise NotImplementedError

    async def retrieve_payment_intent(self, intent_id: str) -> PaymentIntentResult | None:
        raise NotImplementedError

    async def create_refund(
        self,
        payment_intent_id: str,
        amount: int | None,
        reason: str | None,
        idempotency_key: str,
    ) -> RefundResult:
        raise NotImplementedError

    async def parse_webhook_event(
        self,
        payload: bytes,
        signature_header: str | None,
        webhook_secret: str,
    ) -> dict[str, Any]:
        """Verify the signature and return the decoded event."""
        raise NotImplementedError
