import logging

import httpx

from travel_booking.application.interfaces.notification_sender import NotificationSender
from travel_booking.domain.entities.notification import Notification

logger = logging.getLogger(__name__)


class HttpPushNotificationSender(NotificationSender):
    """
    Forwards notifications to an HTTP push relay.

    Delivery is best effort: transport errors and non-2xx answers are logged,
    never raised.
    """

    def __init__(
        self,
        relay_url: str,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._relay_url = relay_url
        self._timeout = timeout_seconds
        self._transport = transport

    async def send(self, notification: Notification) -> None:
        payload = {
            "userId": str(notification.user_id),
            "title": notification.title,
            "body": notification.body,
            "type": notification.type.value,
            "data": {key: str(value) for key, value in notification.data.items()},
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(self._relay_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(
                "Push relay delivery failed",
                extra={
                    "notification_id": str(notification.id),
                    "user_id": str(notification.user_id),
                    "error": str(exc),
                },
            )
            return

        logger.info(
            "Push notification delivered",
            extra={"notification_id": str(notification.id), "type": notification.type.value},
        )


class LoggingNotificationSender(NotificationSender):
    """Sink used when no push relay is configured."""

    async def send(self, notification: Notification) -> None:
        logger.info(
            "Notification: %s",
            notification.title,
            extra={
                "notification_id": str(notification.id),
                "user_id": str(notification.user_id),
                "type": notification.type.value,
                "reference_id": str(notification.reference_id) if notification.reference_id else None,
            },
        )
