from datetime import datetime
from typing import Sequence
from uuid import UUID

from travel_booking.domain.entities.booking import Booking, BookingStatus


class BookingRepo:
    async def add(self, booking: Booking) -> Booking:
        raise NotImplementedError

    async def get(self, booking_id: UUID) -> Booking | None:
        raise NotImplementedError

    async def get_for_update(self, booking_id: UUID) -> Booking | None:
        """Like ``get``, but holds a row lock until the current transaction ends."""
        raise NotImplementedError

    async def save(self, booking: Booking) -> Booking:
        """Persist the mutable fields (status, payment_status, payment_id, updated_at)."""
        raise NotImplementedError

    async def find_by_payment_id(self, payment_id: str) -> Booking | None:
        raise NotImplementedError

    async def list_by_customer(
        self, customer_id: UUID, limit: int, offset: int
    ) -> Sequence[Booking]:
        raise NotImplementedError

    async def list_by_listing(
        self, listing_id: UUID, limit: int, offset: int
    ) -> Sequence[Booking]:
        raise NotImplementedError

    async def count_overlapping(
        self,
        listing_id: UUID,
        start: datetime,
        end: datetime,
        statuses: Sequence[BookingStatus],
    ) -> int:
        """Bookings of ``listing_id`` in ``statuses`` whose [check_in, check_out] touches [start, end]."""
        raise NotImplementedError

    async def list_due_for_completion(self, now: datetime) -> Sequence[Booking]:
        """CONFIRMED bookings whose check-out or trip end is before ``now``."""
        raise NotImplementedError

    async def list_trip_bookings_starting_between(
        self, start: datetime, end: datetime
    ) -> Sequence[Booking]:
        """CONFIRMED trip-date bookings whose trip starts strictly inside (start, end)."""
        raise NotImplementedError
