from uuid import UUID

from travel_booking.domain.entities.listing import Listing, TripDate


class ListingRepo:
    """Read access to listings and trip dates, owned by the listing catalogue."""

    async def get_listing(self, listing_id: UUID) -> Listing | None:
        raise NotImplementedError

    async def lock_listing(self, listing_id: UUID) -> Listing | None:
        """Read the listing holding a write lock until the current transaction ends."""
        raise NotImplementedError

    async def get_trip_date(self, trip_date_id: UUID) -> TripDate | None:
        raise NotImplementedError

    async def adjust_trip_date_seats(self, trip_date_id: UUID, delta: int) -> None:
        raise NotImplementedError
