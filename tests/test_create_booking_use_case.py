"""
Atomic check-price-insert for new bookings.
"""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from travel_booking.application.use_cases.create_booking import BookingRequest
from travel_booking.domain.entities.booking import BookingStatus
from travel_booking.domain.entities.listing import ListingCategory
from travel_booking.domain.errors import AvailabilityConflictError


class TestCreateBookingUseCase:
    @pytest.mark.asyncio
    async def test_booking_priced_at_creation(self, env, make_listing, stay):
        listing = make_listing(price=Decimal("200.00"))
        check_in, check_out = stay(nights=3)

        booking = await env.services.create_booking.execute(
            uuid4(),
            BookingRequest(listing_id=listing.id, check_in=check_in, check_out=check_out),
        )

        assert booking.total_price == Decimal("690.00")
        assert booking.status == BookingStatus.PENDING

    @pytest.mark.asyncio
    async def test_price_does_not_follow_listing_changes(self, env, make_listing, stay):
        listing = make_listing(price=Decimal("200.00"))
        booking = await env.services.create_booking.execute(
            uuid4(), BookingRequest(listing_id=listing.id, check_in=stay()[0], check_out=stay()[1])
        )

        env.listing_repo.listings[listing.id].price = Decimal("999.00")

        stored = await env.services.bookings.get_booking_by_id(booking.id)
        assert stored.total_price == Decimal("690.00")

    @pytest.mark.asyncio
    async def test_unavailable_raises_with_reason(self, env, make_listing, stay):
        listing = make_listing(capacity=2)

        with pytest.raises(AvailabilityConflictError) as exc_info:
            await env.services.create_booking.execute(
                uuid4(),
                BookingRequest(
                    listing_id=listing.id,
                    number_of_guests=3,
                    check_in=stay()[0],
                    check_out=stay()[1],
                ),
            )

        assert exc_info.value.reason == "Number of guests exceeds capacity (max: 2)"
        assert env.booking_repo.bookings == {}

    @pytest.mark.asyncio
    async def test_concurrent_overlapping_requests(self, env, make_listing, stay):
        """Two requests for the same dates race; exactly one booking is created."""
        listing = make_listing()
        check_in, check_out = stay()
        request = BookingRequest(listing_id=listing.id, check_in=check_in, check_out=check_out)

        results = await asyncio.gather(
            env.services.create_booking.execute(uuid4(), request),
            env.services.create_booking.execute(uuid4(), request),
            return_exceptions=True,
        )

        created = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, AvailabilityConflictError)]
        assert len(created) == 1
        assert len(rejected) == 1
        assert len(env.booking_repo.bookings) == 1

    @pytest.mark.asyncio
    async def test_concurrent_trip_date_requests_respect_seats(
        self, env, make_listing, make_trip_date
    ):
        listing = make_listing(category=ListingCategory.ACTIVITY, capacity=50)
        trip_date = make_trip_date(listing, max_capacity=5)
        request = BookingRequest(listing_id=listing.id, number_of_guests=2, trip_date_id=trip_date.id)

        results = await asyncio.gather(
            *(env.services.create_booking.execute(uuid4(), request) for _ in range(4)),
            return_exceptions=True,
        )

        created = [r for r in results if not isinstance(r, Exception)]
        assert len(created) == 2
        assert env.listing_repo.trip_dates[trip_date.id].current_bookings == 4

    @pytest.mark.asyncio
    async def test_deadlock_is_retried(self, env, make_listing, stay):
        listing = make_listing()
        deadlock = OperationalError(
            "statement", "params",
            "(pymysql.err.OperationalError) (1213, 'Deadlock found')",
            connection_invalidated=False,
        )
        original = env.listing_repo.lock_listing
        env.listing_repo.lock_listing = AsyncMock(side_effect=[deadlock, await original(listing.id)])

        booking = await env.services.create_booking.execute(
            uuid4(), BookingRequest(listing_id=listing.id, check_in=stay()[0], check_out=stay()[1])
        )

        assert booking.listing_id == listing.id
        assert env.listing_repo.lock_listing.await_count == 2
