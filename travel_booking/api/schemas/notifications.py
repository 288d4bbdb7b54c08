from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from travel_booking.domain.entities.notification import Notification


class NotificationResponse(BaseModel):
    id: UUID
    title: str
    body: str
    type: str
    reference_id: UUID | None = None
    is_read: bool
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            id=notification.id,
            title=notification.title,
            body=notification.body,
            type=notification.type.value,
            reference_id=notification.reference_id,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int
    page: int
    page_size: int


class UnreadCountResponse(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    updated: int
