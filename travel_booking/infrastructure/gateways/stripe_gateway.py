import asyncio
import json
import logging
from typing import Any, Callable

import stripe

from travel_booking.application.interfaces.payment_gateway import (
    PaymentGateway,
    PaymentIntentResult,
    RefundResult,
)
from travel_booking.domain.errors import PaymentProviderError, SignatureVerificationError
from travel_booking.infrastructure.circuit_breaker import CircuitBreakerError, stripe_breaker

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS = 300


def verify_and_decode_event(
    payload: bytes,
    signature_header: str | None,
    webhook_secret: str,
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
) -> dict[str, Any]:
    """
    Check a ``Stripe-Signature`` header against the raw body and decode it.

    Raises:
        SignatureVerificationError: missing header, bad signature, stale
            timestamp or a body that is not JSON.
    """
    if not signature_header:
        raise SignatureVerificationError("Missing Stripe-Signature header")
    try:
        body = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(body, signature_header, webhook_secret, tolerance)
        return json.loads(body)
    except stripe.SignatureVerificationError as exc:
        raise SignatureVerificationError("Invalid Stripe signature") from exc
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SignatureVerificationError("Invalid Stripe webhook payload") from exc


def _to_intent_result(intent: Any) -> PaymentIntentResult:
    return PaymentIntentResult(
        client_secret=intent.get("client_secret"),
        intent_id=intent["id"],
        amount=intent["amount"],
        currency=intent["currency"],
        status=intent["status"],
        metadata=dict(intent.get("metadata") or {}),
    )


class StripePaymentGateway(PaymentGateway):
    """
    Stripe adapter.

    Each gateway owns its ``StripeClient`` (API key, HTTP timeout, network
    retries), so nothing is configured on the ``stripe`` module itself. The
    SDK is synchronous: every call runs in a worker thread behind the Stripe
    circuit breaker.
    """

    def __init__(
        self,
        api_key: str | None,
        timeout_seconds: float = 10.0,
        max_network_retries: int = 2,
        tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
        client: stripe.StripeClient | None = None,
    ) -> None:
        self._tolerance = tolerance_seconds
        if client is None and api_key:
            client = stripe.StripeClient(
                api_key,
                http_client=stripe.RequestsClient(timeout=timeout_seconds),
                max_network_retries=max_network_retries,
            )
        self._client = client

    def _require_client(self, operation: str) -> stripe.StripeClient:
        if self._client is None:
            raise PaymentProviderError(operation, "Stripe API key not configured")
        return self._client

    async def _call(self, operation: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        try:
            return await asyncio.to_thread(stripe_breaker.call, func, *args, **kwargs)
        except CircuitBreakerError as exc:
            logger.error(
                "Stripe circuit breaker is open - service unavailable",
                extra={"operation": operation, "circuit_state": str(exc)},
            )
            raise PaymentProviderError(operation, "provider temporarily unavailable") from exc
        except stripe.StripeError as exc:
            logger.error(
                "Stripe API error",
                exc_info=exc,
                extra={"operation": operation, "stripe_code": getattr(exc, "code", None)},
            )
            raise PaymentProviderError(operation, getattr(exc, "user_message", None)) from exc

    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict[str, str],
        idempotency_key: str,
    ) -> PaymentIntentResult:
        operation = "create payment intent"
        client = self._require_client(operation)
        intent = await self._call(
            operation,
            client.v1.payment_intents.create,
            params={
                "amount": amount,
                "currency": currency.lower(),
                "metadata": metadata,
                "automatic_payment_methods": {"enabled": True},
            },
            options={"idempotency_key": idempotency_key},
        )
        return _to_intent_result(intent)

    async def retrieve_payment_intent(self, intent_id: str) -> PaymentIntentResult | None:
        operation = "retrieve payment intent"
        client = self._require_client(operation)
        try:
            intent = await self._call(operation, client.v1.payment_intents.retrieve, intent_id)
        except PaymentProviderError as exc:
            cause = exc.__cause__
            if isinstance(cause, stripe.InvalidRequestError) and cause.code == "resource_missing":
                return None
            raise
        return _to_intent_result(intent)

    async def create_refund(
        self,
        payment_intent_id: str,
        amount: int | None,
        reason: str | None,
        idempotency_key: str,
    ) -> RefundResult:
        operation = "create refund"
        client = self._require_client(operation)
        params: dict[str, Any] = {"payment_intent": payment_intent_id}
        if amount is not None:
            params["amount"] = amount
        if reason:
            params["reason"] = reason
        refund = await self._call(
            operation,
            client.v1.refunds.create,
            params=params,
            options={"idempotency_key": idempotency_key},
        )
        return RefundResult(
            refund_id=refund["id"],
            amount=refund["amount"],
            currency=refund["currency"],
            status=refund["status"],
            reason=refund.get("reason"),
        )

    async def parse_webhook_event(
        self,
        payload: bytes,
        signature_header: str | None,
        webhook_secret: str,
    ) -> dict[str, Any]:
        return verify_and_decode_event(
            payload, signature_header, webhook_secret, tolerance=self._tolerance
        )
