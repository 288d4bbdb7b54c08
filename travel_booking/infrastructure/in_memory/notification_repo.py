from dataclasses import replace
from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from travel_booking.application.interfaces.notification_repo import NotificationRepo
from travel_booking.domain.entities.notification import Notification, NotificationType

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class InMemoryNotificationRepo(NotificationRepo):
    def __init__(self) -> None:
        self.notifications: dict[UUID, Notification] = {}

    async def add(self, notification: Notification) -> Notification:
        self.notifications[notification.id] = replace(notification)
        return notification

    async def add_once(self, notification: Notification) -> bool:
        if await self.exists_for_reference(notification.reference_id, notification.type):
            return False
        await self.add(notification)
        return True

    async def exists_for_reference(
        self, reference_id: UUID, notification_type: NotificationType
    ) -> bool:
        return any(
            n.reference_id == reference_id and n.type == notification_type
            for n in self.notifications.values()
        )

    async def list_by_user(
        self, user_id: UUID, limit: int, offset: int
    ) -> Sequence[Notification]:
        items = [n for n in self.notifications.values() if n.user_id == user_id]
        items.sort(key=lambda n: n.created_at or EPOCH, reverse=True)
        return [replace(n) for n in items[offset : offset + limit]]

    async def count_unread(self, user_id: UUID) -> int:
        return sum(1 for n in self.notifications.values() if n.user_id == user_id and not n.is_read)

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> bool:
        notification = self.notifications.get(notification_id)
        if notification is None or notification.user_id != user_id:
            return False
        notification.is_read = True
        return True

    async def mark_all_read(self, user_id: UUID) -> int:
        count = 0
        for notification in self.notifications.values():
            if notification.user_id == user_id and not notification.is_read:
                notification.is_read = True
                count += 1
        return count

    def of_type(self, notification_type: NotificationType) -> list[Notification]:
        return [n for n in self.notifications.values() if n.type == notification_type]
