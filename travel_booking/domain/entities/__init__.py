"""Domain entities."""

from travel_booking.domain.entities.booking import (
    ACTIVE_STATUSES,
    Booking,
    BookingStatus,
    PaymentStatus,
)
from travel_booking.domain.entities.listing import Listing, ListingCategory, TripDate
from travel_booking.domain.entities.notification import Notification, NotificationType

__all__ = [
    # Booking
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "ACTIVE_STATUSES",
    # Listing
    "Listing",
    "ListingCategory",
    "TripDate",
    # Notification
    "Notification",
    "NotificationType",
]
