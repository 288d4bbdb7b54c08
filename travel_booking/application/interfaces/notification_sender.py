from travel_booking.domain.entities.notification import Notification


class NotificationSender:
    """Delivery sink for user notifications (push relay, log, ...)."""

    async def send(self, notification: Notification) -> None:
        raise NotImplementedError
