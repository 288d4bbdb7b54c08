"""Availability checks and price quotes for a listing."""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from travel_booking.application.interfaces.booking_repo import BookingRepo
from travel_booking.application.interfaces.listing_repo import ListingRepo
from travel_booking.domain.entities.booking import ACTIVE_STATUSES
from travel_booking.domain.errors import ListingNotFoundError, ValidationError
from travel_booking.domain.value_objects.datetime_range import DatetimeRange

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE = Decimal("0.10")
DEFAULT_SERVICE_FEE_RATE = Decimal("0.05")


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> "AvailabilityResult":
        return cls(available=True)

    @classmethod
    def rejected(cls, reason: str) -> "AvailabilityResult":
        return cls(available=False, reason=reason)


@dataclass(frozen=True)
class PriceCalculation:
    base_price: Decimal
    tax: Decimal
    service_fee: Decimal
    total: Decimal
    currency: str
    nights: int
    guest_count: int


def count_nights(check_in: datetime | None, check_out: datetime | None) -> int:
    """Whole days between the dates, never below 1. Missing dates count as one night."""
    if check_in is None or check_out is None or check_in >= check_out:
        return 1
    return DatetimeRange(check_in, check_out).nights


class AvailabilityService:
    """
    Read-only engine answering "can this be booked?" and "how much?".

    Safe to call concurrently; the create-booking use case re-runs the check
    under the listing lock before inserting.
    """

    def __init__(
        self,
        listing_repo: ListingRepo,
        booking_repo: BookingRepo,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
        service_fee_rate: Decimal = DEFAULT_SERVICE_FEE_RATE,
    ) -> None:
        self._listing_repo = listing_repo
        self._booking_repo = booking_repo
        self._tax_rate = tax_rate
        self._service_fee_rate = service_fee_rate

    async def check_availability(
        self,
        listing_id: UUID,
        check_in: datetime | None,
        check_out: datetime | None,
        guest_count: int,
        trip_date_id: UUID | None = None,
    ) -> AvailabilityResult:
        if guest_count < 1:
            raise ValidationError("number_of_guests", "must be at least 1")

        listing = await self._listing_repo.get_listing(listing_id)
        if listing is None:
            return AvailabilityResult.rejected("Listing not found")
        if not listing.is_active:
            return AvailabilityResult.rejected("Listing is not active")
        if listing.capacity is not None and guest_count > listing.capacity:
            return AvailabilityResult.rejected(
                f"Number of guests exceeds capacity (max: {listing.capacity})"
            )

        if check_in is not None and check_out is not None:
            if listing.available_from is not None and check_in < listing.available_from:
                return AvailabilityResult.rejected(
                    "Check-in date is before listing availability start"
                )
            if listing.available_to is not None and check_out > listing.available_to:
                return AvailabilityResult.rejected(
                    "Check-out date is after listing availability end"
                )
            if check_in >= check_out:
                return AvailabilityResult.rejected("Check-out date must be after check-in date")

            conflicts = await self._booking_repo.count_overlapping(
                listing_id=listing_id,
                start=check_in,
                end=check_out,
                statuses=ACTIVE_STATUSES,
            )
            if conflicts > 0:
                return AvailabilityResult.rejected(
                    "Selected dates are not available (conflicting bookings)"
                )

        if trip_date_id is not None:
            trip_date = await self._listing_repo.get_trip_date(trip_date_id)
            if trip_date is None or trip_date.listing_id != listing.id:
                return AvailabilityResult.rejected("Trip date not found for this listing")
            if not trip_date.is_active:
                return AvailabilityResult.rejected("Trip date is not active")
            seats_left = trip_date.seats_left(listing.capacity)
            if seats_left is not None and guest_count > seats_left:
                return AvailabilityResult.rejected(
                    f"Not enough seats left on this trip date (left: {max(seats_left, 0)})"
                )

        return AvailabilityResult.ok()

    async def calculate_price(
        self,
        listing_id: UUID,
        check_in: datetime | None,
        check_out: datetime | None,
        guest_count: int,
    ) -> PriceCalculation:
        listing = await self._listing_repo.get_listing(listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)

        nights = count_nights(check_in, check_out)
        subtotal = listing.unit_price.times(guest_count)
        if listing.is_priced_per_night and check_in is not None and check_out is not None:
            subtotal = subtotal.times(nights)

        tax = subtotal.percent(self._tax_rate)
        service_fee = subtotal.percent(self._service_fee_rate)
        total = (subtotal + tax + service_fee).rounded()

        logger.debug(
            "Price calculated",
            extra={
                "listing_id": str(listing_id),
                "nights": nights,
                "guest_count": guest_count,
                "total": str(total.amount),
            },
        )
        return PriceCalculation(
            base_price=subtotal.amount,
            tax=tax.amount,
            service_fee=service_fee.amount,
            total=total.amount,
            currency=total.currency_code,
            nights=nights,
            guest_count=guest_count,
        )
