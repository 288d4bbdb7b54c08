import json
from datetime import datetime, timezone
from uuid import uuid4

import httpx
import pytest

from travel_booking.domain.entities.notification import Notification, NotificationType
from travel_booking.infrastructure.gateways.push_sender import (
    HttpPushNotificationSender,
    LoggingNotificationSender,
)


@pytest.fixture
def notification():
    booking_id = uuid4()
    return Notification(
        id=uuid4(),
        user_id=uuid4(),
        title="Trip Reminder",
        body="Your trip is starting soon! Booking #1234abcd.",
        type=NotificationType.TRIP_REMINDER,
        reference_id=booking_id,
        created_at=datetime(2026, 6, 1, tzinfo=timezone.utc),
        data={"bookingId": str(booking_id)},
    )


class TestHttpPushNotificationSender:
    @pytest.mark.asyncio
    async def test_posts_payload(self, notification):
        received = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(json.loads(request.content))
            return httpx.Response(202)

        sender = HttpPushNotificationSender(
            "https://push.test/send", transport=httpx.MockTransport(handler)
        )

        await sender.send(notification)

        assert received == [
            {
                "userId": str(notification.user_id),
                "title": "Trip Reminder",
                "body": notification.body,
                "type": "TRIP_REMINDER",
                "data": {"bookingId": str(notification.reference_id)},
            }
        ]

    @pytest.mark.asyncio
    async def test_relay_error_not_raised(self, notification):
        sender = HttpPushNotificationSender(
            "https://push.test/send",
            transport=httpx.MockTransport(lambda request: httpx.Response(503)),
        )

        await sender.send(notification)

    @pytest.mark.asyncio
    async def test_connection_error_not_raised(self, notification):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        sender = HttpPushNotificationSender(
            "https://push.test/send", transport=httpx.MockTransport(handler)
        )

        await sender.send(notification)


@pytest.mark.asyncio
async def test_logging_sender(notification, caplog):
    with caplog.at_level("INFO"):
        await LoggingNotificationSender().send(notification)

    assert "Trip Reminder" in caplog.text
