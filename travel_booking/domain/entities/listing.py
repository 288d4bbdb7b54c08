"""Listing and TripDate entities, read-only to the booking core."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from travel_booking.domain.value_objects.money import Money


class ListingCategory(str, Enum):
    HOTEL = "HOTEL"
    FLIGHT = "FLIGHT"
    ACTIVITY = "ACTIVITY"
    PACKAGE = "PACKAGE"


@dataclass
class Listing:
    """A vendor-published bookable offering."""

    id: UUID
    vendor_id: UUID
    title: str
    category: ListingCategory
    price: Decimal
    currency: str = "USD"
    capacity: int | None = None
    available_from: datetime | None = None
    available_to: datetime | None = None
    is_active: bool = True
    rating: Decimal = Decimal("0")
    review_count: int = 0

    @property
    def unit_price(self) -> Money:
        return Money(amount=self.price, currency_code=self.currency)

    @property
    def is_priced_per_night(self) -> bool:
        return self.category == ListingCategory.HOTEL


@dataclass
class TripDate:
    """A vendor-predefined departure for a listing."""

    id: UUID
    listing_id: UUID
    start_date: datetime
    end_date: datetime
    max_capacity: int | None = None
    current_bookings: int = 0
    is_active: bool = True

    def seats_left(self, listing_capacity: int | None) -> int | None:
        """Remaining seats, or None when neither the trip nor the listing has a cap."""
        cap = self.max_capacity if self.max_capacity is not None else listing_capacity
        if cap is None:
            return None
        return cap - self.current_bookings
