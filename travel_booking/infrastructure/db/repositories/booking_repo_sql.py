from datetime import datetime
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy import and_, func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from travel_booking.application.interfaces.booking_repo import BookingRepo
from travel_booking.domain.entities.booking import Booking, BookingStatus, PaymentStatus
from travel_booking.infrastructure.db.engine import as_utc
from travel_booking.infrastructure.db.tables import bookings, trip_dates


def _to_booking(row) -> Booking:
    return Booking(
        id=row["id"],
        customer_id=row["customer_id"],
        listing_id=row["listing_id"],
        number_of_guests=row["number_of_guests"],
        total_price=Decimal(row["total_price"]),
        currency=row["currency"],
        trip_date_id=row["trip_date_id"],
        check_in_date=as_utc(row["check_in_date"]),
        check_out_date=as_utc(row["check_out_date"]),
        status=BookingStatus(row["status"]),
        payment_status=PaymentStatus(row["payment_status"]),
        payment_id=row["payment_id"],
        special_requests=row["special_requests"],
        created_at=as_utc(row["created_at"]),
        updated_at=as_utc(row["updated_at"]),
    )


class BookingRepoSQL(BookingRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, booking: Booking) -> Booking:
        await self._session.execute(
            insert(bookings).values(
                id=booking.id,
                customer_id=booking.customer_id,
                listing_id=booking.listing_id,
                trip_date_id=booking.trip_date_id,
                check_in_date=as_utc(booking.check_in_date),
                check_out_date=as_utc(booking.check_out_date),
                number_of_guests=booking.number_of_guests,
                total_price=booking.total_price,
                currency=booking.currency,
                status=booking.status.value,
                payment_status=booking.payment_status.value,
                payment_id=booking.payment_id,
                special_requests=booking.special_requests,
                created_at=as_utc(booking.created_at),
                updated_at=as_utc(booking.updated_at),
            )
        )
        return booking

    async def get(self, booking_id: UUID) -> Booking | None:
        result = await self._session.execute(
            select(bookings).where(bookings.c.id == booking_id).limit(1)
        )
        row = result.mappings().first()
        return _to_booking(row) if row else None

    async def get_for_update(self, booking_id: UUID) -> Booking | None:
        result = await self._session.execute(
            select(bookings).where(bookings.c.id == booking_id).with_for_update()
        )
        row = result.mappings().first()
        return _to_booking(row) if row else None

    async def save(self, booking: Booking) -> Booking:
        await self._session.execute(
            update(bookings)
            .where(bookings.c.id == booking.id)
            .values(
                status=booking.status.value,
                payment_status=booking.payment_status.value,
                payment_id=booking.payment_id,
                updated_at=as_utc(booking.updated_at),
            )
        )
        return booking

    async def find_by_payment_id(self, payment_id: str) -> Booking | None:
        result = await self._session.execute(
            select(bookings).where(bookings.c.payment_id == payment_id).limit(1)
        )
        row = result.mappings().first()
        return _to_booking(row) if row else None

    async def list_by_customer(
        self, customer_id: UUID, limit: int, offset: int
    ) -> Sequence[Booking]:
        stmt = (
            select(bookings)
            .where(bookings.c.customer_id == customer_id)
            .order_by(bookings.c.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return [_to_booking(row) for row in result.mappings().all()]

    async def list_by_listing(
        self, listing_id: UUID, limit: int, offset: int
    ) -> Sequence[Booking]:
        stmt = (
            select(bookings)
            .where(bookings.c.listing_id == listing_id)
            .order_by(bookings.c.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return [_to_booking(row) for row in result.mappings().all()]

    async def count_overlapping(
        self,
        listing_id: UUID,
        start: datetime,
        end: datetime,
        statuses: Sequence[BookingStatus],
    ) -> int:
        stmt = select(func.count()).select_from(bookings).where(
            bookings.c.listing_id == listing_id,
            bookings.c.status.in_([s.value for s in statuses]),
            bookings.c.check_in_date <= as_utc(end),
            bookings.c.check_out_date >= as_utc(start),
        )
        result = await self._session.execute(stmt)
        return int(result.scalar() or 0)

    async def list_due_for_completion(self, now: datetime) -> Sequence[Booking]:
        now = as_utc(now)
        stmt = (
            select(bookings)
            .select_from(bookings.outerjoin(trip_dates, bookings.c.trip_date_id == trip_dates.c.id))
            .where(
                bookings.c.status == BookingStatus.CONFIRMED.value,
                or_(
                    bookings.c.check_out_date < now,
                    and_(bookings.c.check_out_date.is_(None), trip_dates.c.end_date < now),
                ),
            )
            .order_by(bookings.c.created_at)
        )
        result = await self._session.execute(stmt)
        return [_to_booking(row) for row in result.mappings().all()]

    async def list_trip_bookings_starting_between(
        self, start: datetime, end: datetime
    ) -> Sequence[Booking]:
        stmt = (
            select(bookings)
            .select_from(bookings.join(trip_dates, bookings.c.trip_date_id == trip_dates.c.id))
            .where(
                bookings.c.status == BookingStatus.CONFIRMED.value,
                trip_dates.c.start_date > as_utc(start),
                trip_dates.c.start_date < as_utc(end),
            )
            .order_by(trip_dates.c.start_date)
        )
        result = await self._session.execute(stmt)
        return [_to_booking(row) for row in result.mappings().all()]
