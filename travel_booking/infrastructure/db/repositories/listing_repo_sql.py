from decimal import Decimal
from uuid import UUID

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from travel_booking.application.interfaces.listing_repo import ListingRepo
from travel_booking.domain.entities.listing import Listing, ListingCategory, TripDate
from travel_booking.infrastructure.db.engine import as_utc
from travel_booking.infrastructure.db.tables import listings, trip_dates


def _to_listing(row) -> Listing:
    return Listing(
        id=row["id"],
        vendor_id=row["vendor_id"],
        title=row["title"],
        category=ListingCategory(row["category"]),
        price=Decimal(row["price"]),
        currency=row["currency"],
        capacity=row["capacity"],
        available_from=as_utc(row["available_from"]),
        available_to=as_utc(row["available_to"]),
        is_active=bool(row["is_active"]),
        rating=Decimal(row["rating"] or 0),
        review_count=row["review_count"] or 0,
    )


def _to_trip_date(row) -> TripDate:
    return TripDate(
        id=row["id"],
        listing_id=row["listing_id"],
        start_date=as_utc(row["start_date"]),
        end_date=as_utc(row["end_date"]),
        max_capacity=row["max_capacity"],
        current_bookings=row["current_bookings"],
        is_active=bool(row["is_active"]),
    )


class ListingRepoSQL(ListingRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_listing(self, listing_id: UUID) -> Listing | None:
        result = await self._session.execute(
            select(listings).where(listings.c.id == listing_id).limit(1)
        )
        row = result.mappings().first()
        return _to_listing(row) if row else None

    async def lock_listing(self, listing_id: UUID) -> Listing | None:
        # no-op on SQLite, whose transactions open with BEGIN IMMEDIATE (see engine.py)
        result = await self._session.execute(
            select(listings).where(listings.c.id == listing_id).with_for_update()
        )
        row = result.mappings().first()
        return _to_listing(row) if row else None

    async def get_trip_date(self, trip_date_id: UUID) -> TripDate | None:
        result = await self._session.execute(
            select(trip_dates).where(trip_dates.c.id == trip_date_id).limit(1)
        )
        row = result.mappings().first()
        return _to_trip_date(row) if row else None

    async def adjust_trip_date_seats(self, trip_date_id: UUID, delta: int) -> None:
        seats = trip_dates.c.current_bookings + delta
        await self._session.execute(
            update(trip_dates)
            .where(trip_dates.c.id == trip_date_id)
            .values(current_bookings=case((seats < 0, 0), else_=seats))
        )

    async def add_listing(self, listing: Listing) -> Listing:
        await self._session.execute(
            listings.insert().values(
                id=listing.id,
                vendor_id=listing.vendor_id,
                title=listing.title,
                category=listing.category.value,
                price=listing.price,
                currency=listing.currency,
                capacity=listing.capacity,
                available_from=as_utc(listing.available_from),
                available_to=as_utc(listing.available_to),
                is_active=listing.is_active,
                rating=listing.rating,
                review_count=listing.review_count,
            )
        )
        return listing

    async def add_trip_date(self, trip_date: TripDate) -> TripDate:
        await self._session.execute(
            trip_dates.insert().values(
                id=trip_date.id,
                listing_id=trip_date.listing_id,
                start_date=as_utc(trip_date.start_date),
                end_date=as_utc(trip_date.end_date),
                max_capacity=trip_date.max_capacity,
                current_bookings=trip_date.current_bookings,
                is_active=trip_date.is_active,
            )
        )
        return trip_date
