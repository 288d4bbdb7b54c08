"""In-memory implementations for local runs and tests."""

from travel_booking.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from travel_booking.infrastructure.in_memory.listing_repo import InMemoryListingRepo
from travel_booking.infrastructure.in_memory.notification_repo import InMemoryNotificationRepo
from travel_booking.infrastructure.in_memory.payment_gateway import StubPaymentGateway
from travel_booking.infrastructure.in_memory.transaction_manager import InMemoryTransactionManager

__all__ = [
    # Repositories
    "InMemoryBookingRepo",
    "InMemoryListingRepo",
    "InMemoryNotificationRepo",
    # Gateways
    "StubPaymentGateway",
    # Infrastructure
    "InMemoryTransactionManager",
]
