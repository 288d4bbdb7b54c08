"""
Stripe webhook reconciliation.

Events are signed with the test secret exactly like Stripe does
(``t=<ts>,v1=<hmac-sha256>``) and verified by the real SDK routine.
"""

import time
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio

from travel_booking.api.dependencies import build_services
from travel_booking.domain.entities.booking import BookingStatus, PaymentStatus
from travel_booking.domain.entities.listing import ListingCategory
from travel_booking.domain.entities.notification import NotificationType
from travel_booking.domain.errors import (
    SignatureVerificationError,
    ValidationError,
    WebhookNotConfiguredError,
)


def intent_object(booking, intent_id="pi_webhook", status="succeeded"):
    return {
        "id": intent_id,
        "object": "payment_intent",
        "amount": 11500,
        "currency": "usd",
        "status": status,
        "metadata": {"bookingId": str(booking.id)},
    }


@pytest_asyncio.fixture
async def pending_booking(make_listing, book):
    listing = make_listing(category=ListingCategory.ACTIVITY, price=Decimal("100.00"), capacity=None)
    return await book(listing)


class TestPaymentSucceeded:
    @pytest.mark.asyncio
    async def test_confirms_booking(self, env, pending_booking, signed_event):
        body, header = signed_event("payment_intent.succeeded", intent_object(pending_booking))

        event_type = await env.services.handle_webhook.execute(body, header)

        stored = await env.services.bookings.get_booking_by_id(pending_booking.id)
        assert event_type == "payment_intent.succeeded"
        assert stored.status == BookingStatus.CONFIRMED
        assert stored.payment_status == PaymentStatus.PAID
        assert stored.payment_id == "pi_webhook"

    @pytest.mark.asyncio
    async def test_replay_confirms_once(self, env, pending_booking, signed_event):
        """The same event delivered twice gives one transition and one confirmation."""
        body, header = signed_event(
            "payment_intent.succeeded", intent_object(pending_booking), event_id="evt_replayed"
        )

        await env.services.handle_webhook.execute(body, header)
        env.clock.advance(minutes=1)
        await env.services.handle_webhook.execute(body, header)

        stored = await env.services.bookings.get_booking_by_id(pending_booking.id)
        confirmations = env.notification_repo.of_type(NotificationType.BOOKING_CONFIRMED)
        assert stored.status == BookingStatus.CONFIRMED
        assert len(confirmations) == 1
        assert confirmations[0].title == "Booking Confirmed"
        assert len([n for n in env.sender.sent if n.type == NotificationType.BOOKING_CONFIRMED]) == 1

    @pytest.mark.asyncio
    async def test_cancelled_booking_not_reopened(self, env, make_listing, book, signed_event):
        customer_id = uuid4()
        booking = await book(make_listing(category=ListingCategory.ACTIVITY), customer_id=customer_id)
        await env.services.bookings.cancel_booking(booking.id, customer_id)
        body, header = signed_event("payment_intent.succeeded", intent_object(booking))

        await env.services.handle_webhook.execute(body, header)

        stored = await env.services.bookings.get_booking_by_id(booking.id)
        assert stored.status == BookingStatus.CANCELLED
        assert stored.payment_status == PaymentStatus.PAID
        assert env.notification_repo.of_type(NotificationType.BOOKING_CONFIRMED) == []

    @pytest.mark.asyncio
    async def test_without_booking_reference(self, env, pending_booking, signed_event):
        obj = intent_object(pending_booking)
        obj["metadata"] = {}
        body, header = signed_event("payment_intent.succeeded", obj)

        await env.services.handle_webhook.execute(body, header)

        stored = await env.services.bookings.get_booking_by_id(pending_booking.id)
        assert stored.status == BookingStatus.PENDING

    @pytest.mark.asyncio
    async def test_unknown_booking_acknowledged(self, env, signed_event):
        obj = {"id": "pi_orphan", "metadata": {"bookingId": str(uuid4())}}
        body, header = signed_event("payment_intent.succeeded", obj)

        assert await env.services.handle_webhook.execute(body, header) == "payment_intent.succeeded"


class TestOtherEvents:
    @pytest.mark.asyncio
    async def test_payment_failed_changes_nothing(self, env, pending_booking, signed_event):
        body, header = signed_event(
            "payment_intent.payment_failed",
            intent_object(pending_booking, status="requires_payment_method"),
        )

        await env.services.handle_webhook.execute(body, header)

        stored = await env.services.bookings.get_booking_by_id(pending_booking.id)
        assert stored.status == BookingStatus.PENDING
        assert stored.payment_status == PaymentStatus.PENDING

    @pytest.mark.asyncio
    async def test_charge_refunded(self, env, pending_booking, confirm, signed_event):
        await confirm(pending_booking, payment_id="pi_refund_me")
        charge = {"id": "ch_1", "object": "charge", "payment_intent": "pi_refund_me", "metadata": {}}
        body, header = signed_event("charge.refunded", charge)

        await env.services.handle_webhook.execute(body, header)

        stored = await env.services.bookings.get_booking_by_id(pending_booking.id)
        assert stored.payment_status == PaymentStatus.REFUNDED
        assert stored.status == BookingStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_unhandled_type_acknowledged(self, env, signed_event):
        body, header = signed_event("customer.created", {"id": "cus_1"})

        assert await env.services.handle_webhook.execute(body, header) == "customer.created"


class TestSignature:
    @pytest.mark.asyncio
    async def test_wrong_secret_rejected(self, env, pending_booking, signed_event):
        body, header = signed_event(
            "payment_intent.succeeded", intent_object(pending_booking), secret="whsec_other"
        )

        with pytest.raises(SignatureVerificationError):
            await env.services.handle_webhook.execute(body, header)

        stored = await env.services.bookings.get_booking_by_id(pending_booking.id)
        assert stored.status == BookingStatus.PENDING

    @pytest.mark.asyncio
    async def test_stale_timestamp_rejected(self, env, pending_booking, signed_event):
        body, header = signed_event(
            "payment_intent.succeeded",
            intent_object(pending_booking),
            timestamp=int(time.time()) - 3600,
        )

        with pytest.raises(SignatureVerificationError):
            await env.services.handle_webhook.execute(body, header)

    @pytest.mark.asyncio
    async def test_tampered_body_rejected(self, env, pending_booking, signed_event):
        body, header = signed_event("payment_intent.succeeded", intent_object(pending_booking))

        with pytest.raises(SignatureVerificationError):
            await env.services.handle_webhook.execute(body.replace(b"11500", b"1"), header)

    @pytest.mark.asyncio
    async def test_missing_header(self, env, pending_booking, signed_event):
        body, _ = signed_event("payment_intent.succeeded", intent_object(pending_booking))

        with pytest.raises(SignatureVerificationError):
            await env.services.handle_webhook.execute(body, None)

    @pytest.mark.asyncio
    async def test_empty_body(self, env):
        with pytest.raises(SignatureVerificationError):
            await env.services.handle_webhook.execute(b"", "t=1,v1=abc")


    @pytest.mark.asyncio
    async def test_event_without_type(self, env, sign):
        body = b'{"id": "evt_no_type", "data": {"object": {}}}'

        with pytest.raises(ValidationError):
            await env.services.handle_webhook.execute(body, sign(body))


@pytest.mark.asyncio
async def test_missing_secret_is_server_error(env, signed_event):
    settings = env.settings.model_copy(update={"stripe_webhook_secret": None})
    services = build_services(
        settings,
        listing_repo=env.listing_repo,
        booking_repo=env.booking_repo,
        notification_repo=env.notification_repo,
        payment_gateway=env.gateway,
        transaction_manager=env.transaction_manager,
        sender=env.sender,
        clock=env.clock,
    )
    body, header = signed_event("customer.created", {"id": "cus_1"})

    with pytest.raises(WebhookNotConfiguredError) as exc_info:
        await services.handle_webhook.execute(body, header)

    assert exc_info.value.status_code == 500


class TestWebhookEndpoint:
    def test_valid_event_acknowledged(self, client, env, signed_event):
        body, header = signed_event("customer.created", {"id": "cus_1"})

        response = client.post(
            "/webhooks/stripe",
            content=body,
            headers={"Stripe-Signature": header, "Content-Type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json() == {"received": True}

    def test_payment_succeeded_confirms(self, client, env, make_listing, signed_event):
        listing = make_listing(category=ListingCategory.ACTIVITY, capacity=None)
        customer = str(uuid4())
        created = client.post(
            "/bookings",
            json={"listing_id": str(listing.id)},
            headers={"X-User-Id": customer},
        ).json()
        body, header = signed_event(
            "payment_intent.succeeded",
            {"id": "pi_api", "metadata": {"bookingId": created["id"]}},
        )

        response = client.post("/webhooks/stripe", content=body, headers={"Stripe-Signature": header})
        booking = client.get(f"/bookings/{created['id']}", headers={"X-User-Id": customer}).json()

        assert response.status_code == 200
        assert booking["status"] == "CONFIRMED"
        assert booking["payment_status"] == "PAID"

    def test_bad_signature_is_400(self, client, signed_event):
        body, _ = signed_event("customer.created", {"id": "cus_1"})

        response = client.post(
            "/webhooks/stripe", content=body, headers={"Stripe-Signature": "t=1,v1=deadbeef"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_SIGNATURE"

    def test_missing_signature_is_400(self, client, signed_event):
        body, _ = signed_event("customer.created", {"id": "cus_1"})

        response = client.post("/webhooks/stripe", content=body)

        assert response.status_code == 400
