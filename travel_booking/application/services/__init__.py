from travel_booking.application.services.availability_service import (
    AvailabilityResult,
    AvailabilityService,
    PriceCalculation,
)
from travel_booking.application.services.booking_service import BookingService
from travel_booking.application.services.notification_service import NotificationService
from travel_booking.application.services.payment_service import PaymentService

__all__ = [
    "AvailabilityResult",
    "AvailabilityService",
    "PriceCalculation",
    "BookingService",
    "NotificationService",
    "PaymentService",
]
