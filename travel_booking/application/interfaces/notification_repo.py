from typing import Sequence
from uuid import UUID

from travel_booking.domain.entities.notification import Notification, NotificationType


class NotificationRepo:
    async def add(self, notification: Notification) -> Notification:
        raise NotImplementedError

    async def add_once(self, notification: Notification) -> bool:
        """
        Insert unless a notification of the same type already references the
        same booking. Returns False when it was already there.
        """
        raise NotImplementedError

    async def exists_for_reference(
        self, reference_id: UUID, notification_type: NotificationType
    ) -> bool:
        raise NotImplementedError

    async def list_by_user(
        self, user_id: UUID, limit: int, offset: int
    ) -> Sequence[Notification]:
        raise NotImplementedError

    async def count_unread(self, user_id: UUID) -> int:
        raise NotImplementedError

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> bool:
        raise NotImplementedError

    async def mark_all_read(self, user_id: UUID) -> int:
        raise NotImplementedError
