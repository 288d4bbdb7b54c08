from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Sequence
from uuid import UUID

from travel_booking.application.interfaces.booking_repo import BookingRepo
from travel_booking.domain.entities.booking import Booking, BookingStatus
from travel_booking.domain.entities.listing import TripDate
from travel_booking.domain.value_objects.datetime_range import DatetimeRange

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class InMemoryBookingRepo(BookingRepo):
    def __init__(self, trip_date_lookup: Callable[[UUID], TripDate | None] | None = None) -> None:
        self.bookings: dict[UUID, Booking] = {}
        self._trip_date_lookup = trip_date_lookup or (lambda _: None)

    async def add(self, booking: Booking) -> Booking:
        if booking.id in self.bookings:
            raise ValueError("Booking id already exists")
        self.bookings[booking.id] = replace(booking)
        return booking

    async def get(self, booking_id: UUID) -> Booking | None:
        booking = self.bookings.get(booking_id)
        return replace(booking) if booking else None

    async def get_for_update(self, booking_id: UUID) -> Booking | None:
        return await self.get(booking_id)

    async def save(self, booking: Booking) -> Booking:
        stored = self.bookings.get(booking.id)
        if stored is None:
            raise ValueError("Booking not found")
        stored.status = booking.status
        stored.payment_status = booking.payment_status
        stored.payment_id = booking.payment_id
        stored.updated_at = booking.updated_at
        return booking

    async def find_by_payment_id(self, payment_id: str) -> Booking | None:
        for booking in self.bookings.values():
            if booking.payment_id == payment_id:
                return replace(booking)
        return None

    async def list_by_customer(
        self, customer_id: UUID, limit: int, offset: int
    ) -> Sequence[Booking]:
        return self._page([b for b in self.bookings.values() if b.customer_id == customer_id], limit, offset)

    async def list_by_listing(
        self, listing_id: UUID, limit: int, offset: int
    ) -> Sequence[Booking]:
        return self._page([b for b in self.bookings.values() if b.listing_id == listing_id], limit, offset)

    async def count_overlapping(
        self,
        listing_id: UUID,
        start: datetime,
        end: datetime,
        statuses: Sequence[BookingStatus],
    ) -> int:
        requested = DatetimeRange(start, end)
        return sum(
            1
            for b in self.bookings.values()
            if b.listing_id == listing_id
            and b.status in statuses
            and b.stay is not None
            and b.stay.overlaps_with(requested)
        )

    async def list_due_for_completion(self, now: datetime) -> Sequence[Booking]:
        due = []
        for booking in self.bookings.values():
            if booking.status != BookingStatus.CONFIRMED:
                continue
            end = booking.check_out_date
            if end is None and booking.trip_date_id is not None:
                trip_date = self._trip_date_lookup(booking.trip_date_id)
                end = trip_date.end_date if trip_date else None
            if end is not None and end < now:
                due.append(replace(booking))
        return due

    async def list_trip_bookings_starting_between(
        self, start: datetime, end: datetime
    ) -> Sequence[Booking]:
        upcoming = []
        for booking in self.bookings.values():
            if booking.status != BookingStatus.CONFIRMED or booking.trip_date_id is None:
                continue
            trip_date = self._trip_date_lookup(booking.trip_date_id)
            if trip_date is not None and start < trip_date.start_date < end:
                upcoming.append(replace(booking))
        return upcoming

    @staticmethod
    def _page(items: list[Booking], limit: int, offset: int) -> list[Booking]:
        items.sort(key=lambda b: b.created_at or EPOCH, reverse=True)
        return [replace(b) for b in items[offset : offset + limit]]
