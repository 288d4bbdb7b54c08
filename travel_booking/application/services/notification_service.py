"""Booking notifications: ledger write, then hand-off to the delivery sink."""

import logging
from functools import partial
from typing import Any, Sequence
from uuid import UUID, uuid4

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.notification_repo import NotificationRepo
from travel_booking.application.interfaces.notification_sender import NotificationSender
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.application.services.pagination import page_window
from travel_booking.domain.entities.booking import Booking
from travel_booking.domain.entities.notification import Notification, NotificationType
from travel_booking.domain.errors import NotificationNotFoundError

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Writes one ledger row per notification and forwards it to the sink.

    Every notification type is sent at most once per booking; the ledger row
    is the marker. Delivery waits until the surrounding unit of work has
    committed, and sink failures never propagate.
    """

    def __init__(
        self,
        notification_repo: NotificationRepo,
        sender: NotificationSender,
        clock: Clock,
        transaction_manager: TransactionManager,
    ) -> None:
        self._repo = notification_repo
        self._sender = sender
        self._clock = clock
        self._transaction_manager = transaction_manager

    async def has_been_sent(self, booking_id: UUID, notification_type: NotificationType) -> bool:
        return await self._repo.exists_for_reference(booking_id, notification_type)

    async def send_booking_confirmation(self, booking: Booking) -> Notification | None:
        return await self._send_once(
            booking,
            NotificationType.BOOKING_CONFIRMED,
            title="Booking Confirmed",
            body=f"Your booking #{booking.short_ref} has been confirmed.",
        )

    async def send_trip_reminder(self, booking: Booking) -> Notification | None:
        return await self._send_once(
            booking,
            NotificationType.TRIP_REMINDER,
            title="Trip Reminder",
            body=f"Your trip is starting soon! Booking #{booking.short_ref}.",
        )

    async def send_rating_prompt(self, booking: Booking) -> Notification | None:
        return await self._send_once(
            booking,
            NotificationType.RATE_TRIP,
            title="Rate Your Trip",
            body=f"How was your experience? Leave a review for booking #{booking.short_ref}.",
            data={"action": "rate", "bookingId": str(booking.id)},
        )

    async def send_cancellation(self, booking: Booking) -> Notification | None:
        return await self._send_once(
            booking,
            NotificationType.BOOKING_CANCELLED,
            title="Booking Cancelled",
            body=f"Your booking #{booking.short_ref} has been cancelled.",
        )

    async def list_notifications(
        self, user_id: UUID, page: int, page_size: int
    ) -> Sequence[Notification]:
        limit, offset = page_window(page, page_size)
        return await self._repo.list_by_user(user_id, limit=limit, offset=offset)

    async def unread_count(self, user_id: UUID) -> int:
        return await self._repo.count_unread(user_id)

    async def mark_as_read(self, notification_id: UUID, user_id: UUID) -> None:
        if not await self._repo.mark_read(notification_id, user_id):
            raise NotificationNotFoundError(notification_id)

    async def mark_all_as_read(self, user_id: UUID) -> int:
        return await self._repo.mark_all_read(user_id)

    async def _send_once(
        self,
        booking: Booking,
        notification_type: NotificationType,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> Notification | None:
        payload = {"bookingId": str(booking.id)}
        if data:
            payload.update(data)
        notification = Notification(
            id=uuid4(),
            user_id=booking.customer_id,
            title=title,
            body=body,
            type=notification_type,
            reference_id=booking.id,
            created_at=self._clock.now(),
            data=payload,
        )
        if not await self._repo.add_once(notification):
            logger.info(
                "Notification already sent, skipping",
                extra={"booking_id": str(booking.id), "type": notification_type.value},
            )
            return None

        await self._transaction_manager.run_after_commit(partial(self._deliver, notification))
        return notification

    async def _deliver(self, notification: Notification) -> None:
        try:
            await self._sender.send(notification)
        except Exception:
            logger.exception(
                "Notification delivery failed",
                extra={
                    "notification_id": str(notification.id),
                    "booking_id": str(notification.reference_id),
                },
            )
