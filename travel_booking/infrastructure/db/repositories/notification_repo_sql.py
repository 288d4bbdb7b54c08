from typing import Sequence
from uuid import UUID

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from travel_booking.application.interfaces.notification_repo import NotificationRepo
from travel_booking.domain.entities.notification import Notification, NotificationType
from travel_booking.infrastructure.db.engine import as_utc
from travel_booking.infrastructure.db.tables import notifications


def _to_notification(row) -> Notification:
    return Notification(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        body=row["body"],
        type=NotificationType(row["type"]),
        reference_id=row["reference_id"],
        is_read=bool(row["is_read"]),
        created_at=as_utc(row["created_at"]),
    )


def _insert(notification: Notification):
    return insert(notifications).values(
        id=notification.id,
        user_id=notification.user_id,
        title=notification.title,
        body=notification.body,
        type=notification.type.value,
        reference_id=notification.reference_id,
        is_read=notification.is_read,
        created_at=as_utc(notification.created_at),
    )


class NotificationRepoSQL(NotificationRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, notification: Notification) -> Notification:
        await self._session.execute(_insert(notification))
        return notification

    async def add_once(self, notification: Notification) -> bool:
        # the unique (reference_id, type) index decides; the savepoint keeps
        # the surrounding transaction usable after a duplicate
        try:
            async with self._session.begin_nested():
                await self._session.execute(_insert(notification))
        except IntegrityError:
            return False
        return True

    async def exists_for_reference(
        self, reference_id: UUID, notification_type: NotificationType
    ) -> bool:
        stmt = (
            select(notifications.c.id)
            .where(
                notifications.c.reference_id == reference_id,
                notifications.c.type == notification_type.value,
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar() is not None

    async def list_by_user(
        self, user_id: UUID, limit: int, offset: int
    ) -> Sequence[Notification]:
        stmt = (
            select(notifications)
            .where(notifications.c.user_id == user_id)
            .order_by(notifications.c.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return [_to_notification(row) for row in result.mappings().all()]

    async def count_unread(self, user_id: UUID) -> int:
        stmt = select(func.count()).select_from(notifications).where(
            notifications.c.user_id == user_id,
            notifications.c.is_read.is_(False),
        )
        result = await self._session.execute(stmt)
        return int(result.scalar() or 0)

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> bool:
        result = await self._session.execute(
            update(notifications)
            .where(notifications.c.id == notification_id, notifications.c.user_id == user_id)
            .values(is_read=True)
        )
        return result.rowcount > 0

    async def mark_all_read(self, user_id: UUID) -> int:
        result = await self._session.execute(
            update(notifications)
            .where(notifications.c.user_id == user_id, notifications.c.is_read.is_(False))
            .values(is_read=True)
        )
        return result.rowcount
