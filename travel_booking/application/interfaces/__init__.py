"""Application-layer ports."""

from travel_booking.application.interfaces.booking_repo import BookingRepo
from travel_booking.application.interfaces.clock import Clock, FakeClock, SystemClock
from travel_booking.application.interfaces.listing_repo import ListingRepo
from travel_booking.application.interfaces.notification_repo import NotificationRepo
from travel_booking.application.interfaces.notification_sender import NotificationSender
from travel_booking.application.interfaces.payment_gateway import (
    PaymentGateway,
    PaymentIntentResult,
    RefundResult,
)
from travel_booking.application.interfaces.transaction_manager import TransactionManager

__all__ = [
    # Repositories
    "BookingRepo",
    "ListingRepo",
    "NotificationRepo",
    # Gateways
    "PaymentGateway",
    "PaymentIntentResult",
    "RefundResult",
    "NotificationSender",
    # Infrastructure
    "TransactionManager",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
]
