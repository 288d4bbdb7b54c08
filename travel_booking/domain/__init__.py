"""
Domain layer - travel booking core.

Pure business logic with no framework dependencies.

Layout:
- entities/: Booking, Listing, TripDate, Notification
- value_objects/: Money, DatetimeRange
- errors.py: domain exceptions
"""

from travel_booking.domain.entities import (
    ACTIVE_STATUSES,
    Booking,
    BookingStatus,
    Listing,
    ListingCategory,
    Notification,
    NotificationType,
    PaymentStatus,
    TripDate,
)
from travel_booking.domain.errors import (
    AvailabilityConflictError,
    BookingNotFoundError,
    DomainError,
    ForbiddenError,
    InvalidStatusTransitionError,
    ListingNotFoundError,
    NotFoundError,
    NotificationNotFoundError,
    PaymentIntentNotFoundError,
    PaymentProviderError,
    RefundNotAllowedError,
    SignatureVerificationError,
    TripDateNotFoundError,
    ValidationError,
    WebhookNotConfiguredError,
)
from travel_booking.domain.value_objects import DatetimeRange, Money

__all__ = [
    # Entities
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "ACTIVE_STATUSES",
    "Listing",
    "ListingCategory",
    "TripDate",
    "Notification",
    "NotificationType",
    # Value Objects
    "Money",
    "DatetimeRange",
    # Errors
    "DomainError",
    "NotFoundError",
    "ListingNotFoundError",
    "TripDateNotFoundError",
    "BookingNotFoundError",
    "PaymentIntentNotFoundError",
    "NotificationNotFoundError",
    "ValidationError",
    "InvalidStatusTransitionError",
    "RefundNotAllowedError",
    "ForbiddenError",
    "AvailabilityConflictError",
    "PaymentProviderError",
    "SignatureVerificationError",
    "WebhookNotConfiguredError",
]
