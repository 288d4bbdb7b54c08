from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID


class NotificationType(str, Enum):
    BOOKING_CONFIRMED = "BOOKING_CONFIRMED"
    TRIP_REMINDER = "TRIP_REMINDER"
    RATE_TRIP = "RATE_TRIP"
    BOOKING_CANCELLED = "BOOKING_CANCELLED"


@dataclass
class Notification:
    """Delivery log row; also the de-duplication ledger for booking notifications."""

    id: UUID
    user_id: UUID
    title: str
    body: str
    type: NotificationType
    reference_id: UUID | None = None
    is_read: bool = False
    created_at: datetime | None = None
    # delivery-only payload, not persisted
    data: dict[str, Any] = field(default_factory=dict)
