from dataclasses import replace
from uuid import UUID

from travel_booking.application.interfaces.listing_repo import ListingRepo
from travel_booking.domain.entities.listing import Listing, TripDate


class InMemoryListingRepo(ListingRepo):
    def __init__(self) -> None:
        self.listings: dict[UUID, Listing] = {}
        self.trip_dates: dict[UUID, TripDate] = {}

    def add_listing(self, listing: Listing) -> Listing:
        self.listings[listing.id] = listing
        return listing

    def add_trip_date(self, trip_date: TripDate) -> TripDate:
        self.trip_dates[trip_date.id] = trip_date
        return trip_date

    async def get_listing(self, listing_id: UUID) -> Listing | None:
        listing = self.listings.get(listing_id)
        return replace(listing) if listing else None

    async def lock_listing(self, listing_id: UUID) -> Listing | None:
        # the in-memory transaction lock already serializes writers
        return await self.get_listing(listing_id)

    async def get_trip_date(self, trip_date_id: UUID) -> TripDate | None:
        trip_date = self.trip_dates.get(trip_date_id)
        return replace(trip_date) if trip_date else None

    async def adjust_trip_date_seats(self, trip_date_id: UUID, delta: int) -> None:
        trip_date = self.trip_dates.get(trip_date_id)
        if trip_date is not None:
            trip_date.current_bookings = max(trip_date.current_bookings + delta, 0)
