"""
Pytest configuration and shared fixtures.

Everything runs against the in-memory adapters and a FakeClock:
- ``env``: repositories, stub gateway and services wired like the app
- ``make_listing`` / ``make_trip_date``: seed catalog data
- ``book``: create a booking through the create-booking use case
- ``signed_event``: Stripe event body plus a valid ``Stripe-Signature``
- ``client``: FastAPI TestClient bound to ``env``
"""

import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from travel_booking.api.dependencies import AppServices, build_services, get_services
from travel_booking.application.interfaces.clock import FakeClock
from travel_booking.application.interfaces.notification_sender import NotificationSender
from travel_booking.application.use_cases.create_booking import BookingRequest
from travel_booking.config import Settings
from travel_booking.domain.entities.booking import Booking
from travel_booking.domain.entities.listing import Listing, ListingCategory, TripDate
from travel_booking.domain.entities.notification import Notification
from travel_booking.infrastructure.in_memory import (
    InMemoryBookingRepo,
    InMemoryListingRepo,
    InMemoryNotificationRepo,
    InMemoryTransactionManager,
    StubPaymentGateway,
)
from travel_booking.main import app

WEBHOOK_SECRET = "whsec_test_secret"
START_TIME = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


class RecordingSender(NotificationSender):
    """Delivery sink that keeps what it was given; can be told to fail."""

    def __init__(self) -> None:
        self.sent: list[Notification] = []
        self.fail = False

    async def send(self, notification: Notification) -> None:
        if self.fail:
            raise RuntimeError("push relay down")
        self.sent.append(notification)


@dataclass
class InMemoryEnv:
    settings: Settings
    clock: FakeClock
    listing_repo: InMemoryListingRepo
    booking_repo: InMemoryBookingRepo
    notification_repo: InMemoryNotificationRepo
    gateway: StubPaymentGateway
    transaction_manager: InMemoryTransactionManager
    sender: RecordingSender
    services: AppServices


# ============================================================================
# WIRING
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        use_in_memory=True,
        stripe_webhook_secret=WEBHOOK_SECRET,
        scheduler_enabled=False,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(START_TIME)


@pytest.fixture
def env(settings: Settings, clock: FakeClock) -> InMemoryEnv:
    listing_repo = InMemoryListingRepo()
    booking_repo = InMemoryBookingRepo(trip_date_lookup=listing_repo.trip_dates.get)
    notification_repo = InMemoryNotificationRepo()
    gateway = StubPaymentGateway(tolerance_seconds=settings.webhook_tolerance_seconds)
    transaction_manager = InMemoryTransactionManager()
    sender = RecordingSender()
    services = build_services(
        settings,
        listing_repo=listing_repo,
        booking_repo=booking_repo,
        notification_repo=notification_repo,
        payment_gateway=gateway,
        transaction_manager=transaction_manager,
        sender=sender,
        clock=clock,
    )
    return InMemoryEnv(
        settings=settings,
        clock=clock,
        listing_repo=listing_repo,
        booking_repo=booking_repo,
        notification_repo=notification_repo,
        gateway=gateway,
        transaction_manager=transaction_manager,
        sender=sender,
        services=services,
    )


@pytest.fixture
def client(env: InMemoryEnv):
    app.dependency_overrides[get_services] = lambda: env.services
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# TEST DATA
# ============================================================================


@pytest.fixture
def make_listing(env: InMemoryEnv):
    def _make(**overrides) -> Listing:
        fields = {
            "id": uuid4(),
            "vendor_id": uuid4(),
            "title": "Seaside Hotel",
            "category": ListingCategory.HOTEL,
            "price": Decimal("200.00"),
            "currency": "USD",
            "capacity": 4,
        }
        fields.update(overrides)
        return env.listing_repo.add_listing(Listing(**fields))

    return _make


@pytest.fixture
def make_trip_date(env: InMemoryEnv):
    def _make(
        listing: Listing,
        starts_in: timedelta = timedelta(days=10),
        length: timedelta = timedelta(days=3),
        **overrides,
    ) -> TripDate:
        start = env.clock.now() + starts_in
        fields = {
            "id": uuid4(),
            "listing_id": listing.id,
            "start_date": start,
            "end_date": start + length,
        }
        fields.update(overrides)
        return env.listing_repo.add_trip_date(TripDate(**fields))

    return _make


@pytest.fixture
def stay(clock: FakeClock):
    """(check_in, check_out) ``offset_days`` from now, ``nights`` long."""

    def _stay(offset_days: int = 5, nights: int = 3) -> tuple[datetime, datetime]:
        check_in = clock.now() + timedelta(days=offset_days)
        return check_in, check_in + timedelta(days=nights)

    return _stay


@pytest.fixture
def book(env: InMemoryEnv):
    async def _book(listing: Listing, customer_id: UUID | None = None, **request) -> Booking:
        return await env.services.create_booking.execute(
            customer_id or uuid4(),
            BookingRequest(listing_id=listing.id, **request),
        )

    return _book


@pytest.fixture
def confirm(env: InMemoryEnv):
    """Mark a booking paid and confirmed, as a payment webhook would."""

    async def _confirm(booking: Booking, payment_id: str = "pi_test") -> Booking:
        confirmed, _ = await env.services.bookings.confirm_paid_booking(booking.id, payment_id)
        return confirmed

    return _confirm


# ============================================================================
# STRIPE WEBHOOKS
# ============================================================================


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    ts = timestamp if timestamp is not None else int(time.time())
    signed = f"{ts}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={signature}"


@pytest.fixture
def signed_event():
    """Build a Stripe event body and a matching signature header."""

    def _build(
        event_type: str,
        obj: dict,
        event_id: str | None = None,
        secret: str = WEBHOOK_SECRET,
        timestamp: int | None = None,
    ) -> tuple[bytes, str]:
        body = json.dumps(
            {
                "id": event_id or f"evt_{uuid4().hex[:24]}",
                "object": "event",
                "type": event_type,
                "livemode": False,
                "created": int(time.time()),
                "data": {"object": obj},
            }
        ).encode("utf-8")
        return body, sign_payload(body, secret=secret, timestamp=timestamp)

    return _build


@pytest.fixture
def sign():
    return sign_payload
