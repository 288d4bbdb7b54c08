"""
Scheduler sweeps driven by a FakeClock.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import timedelta
from uuid import uuid4

import pytest

from travel_booking.domain.entities.booking import BookingStatus
from travel_booking.domain.entities.listing import ListingCategory
from travel_booking.domain.entities.notification import NotificationType
from travel_booking.infrastructure.scheduling.booking_scheduler import (
    BookingScheduler,
    SchedulerServices,
)


@pytest.fixture
def scheduler(env):
    @asynccontextmanager
    async def provide():
        yield SchedulerServices(
            bookings=env.services.bookings,
            notifications=env.services.notifications,
            transaction_manager=env.services.transaction_manager,
        )

    return BookingScheduler(
        services=provide,
        clock=env.clock,
        interval_seconds=3600,
        reminder_window_hours=24,
    )


class TestAutoComplete:
    @pytest.mark.asyncio
    async def test_completes_once(self, env, scheduler, make_listing, book, confirm, stay):
        booking = await confirm(await book(make_listing(), check_in=stay()[0], check_out=stay()[1]))
        env.clock.advance(days=10)

        first = await scheduler.run_once()
        second = await scheduler.run_once()

        stored = await env.services.bookings.get_booking_by_id(booking.id)
        assert stored.status == BookingStatus.COMPLETED
        assert first.completed == 1
        assert second.completed == 0
        assert len(env.notification_repo.of_type(NotificationType.RATE_TRIP)) == 1

    @pytest.mark.asyncio
    async def test_pending_and_future_bookings_untouched(
        self, env, scheduler, make_listing, book, confirm, stay
    ):
        pending = await book(make_listing(), check_in=stay(1, 1)[0], check_out=stay(1, 1)[1])
        future = await confirm(await book(make_listing(), check_in=stay(20)[0], check_out=stay(20)[1]))
        env.clock.advance(days=5)

        report = await scheduler.run_once()

        assert report.completed == 0
        assert (await env.services.bookings.get_booking_by_id(pending.id)).status == BookingStatus.PENDING
        assert (await env.services.bookings.get_booking_by_id(future.id)).status == BookingStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_trip_date_end_counts(self, env, scheduler, make_listing, make_trip_date, book, confirm):
        listing = make_listing(category=ListingCategory.ACTIVITY, capacity=10)
        trip_date = make_trip_date(listing, starts_in=timedelta(days=2), length=timedelta(days=1))
        booking = await confirm(await book(listing, trip_date_id=trip_date.id))
        env.clock.advance(days=4)

        report = await scheduler.run_once()

        assert report.completed == 1
        assert (await env.services.bookings.get_booking_by_id(booking.id)).status == BookingStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_booking_without_end_never_completes(self, env, scheduler, make_listing, book, confirm):
        booking = await confirm(await book(make_listing(category=ListingCategory.ACTIVITY)))
        env.clock.advance(days=365)

        report = await scheduler.run_once()

        assert report.completed == 0
        assert (await env.services.bookings.get_booking_by_id(booking.id)).status == BookingStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_sweep(
        self, env, scheduler, make_listing, book, confirm, stay, monkeypatch
    ):
        failing = await confirm(await book(make_listing(), check_in=stay()[0], check_out=stay()[1]))
        healthy = await confirm(await book(make_listing(), check_in=stay()[0], check_out=stay()[1]))
        original = env.services.bookings.complete_booking

        async def flaky(booking_id):
            if booking_id == failing.id:
                raise RuntimeError("boom")
            return await original(booking_id)

        monkeypatch.setattr(env.services.bookings, "complete_booking", flaky)
        env.clock.advance(days=10)

        report = await scheduler.run_once()

        assert report.completed == 1
        assert report.errors == 1
        assert (await env.services.bookings.get_booking_by_id(healthy.id)).status == BookingStatus.COMPLETED
        assert (await env.services.bookings.get_booking_by_id(failing.id)).status == BookingStatus.CONFIRMED


class TestTripReminders:
    @pytest.mark.asyncio
    async def test_reminder_sent_once(self, env, scheduler, make_listing, make_trip_date, book, confirm):
        listing = make_listing(category=ListingCategory.ACTIVITY, capacity=10)
        trip_date = make_trip_date(listing, starts_in=timedelta(hours=12))
        booking = await confirm(await book(listing, trip_date_id=trip_date.id))

        first = await scheduler.run_once()
        env.clock.advance(hours=1)
        second = await scheduler.run_once()

        reminders = env.notification_repo.of_type(NotificationType.TRIP_REMINDER)
        assert first.reminded == 1
        assert second.reminded == 0
        assert len(reminders) == 1
        assert reminders[0].reference_id == booking.id
        assert reminders[0].user_id == booking.customer_id

    @pytest.mark.asyncio
    async def test_outside_window_not_reminded(
        self, env, scheduler, make_listing, make_trip_date, book, confirm
    ):
        listing = make_listing(category=ListingCategory.ACTIVITY, capacity=10)
        trip_date = make_trip_date(listing, starts_in=timedelta(hours=30))
        await confirm(await book(listing, trip_date_id=trip_date.id))

        report = await scheduler.run_once()

        assert report.reminded == 0

    @pytest.mark.asyncio
    async def test_pending_booking_not_reminded(self, env, scheduler, make_listing, make_trip_date, book):
        listing = make_listing(category=ListingCategory.ACTIVITY, capacity=10)
        trip_date = make_trip_date(listing, starts_in=timedelta(hours=6))
        await book(listing, trip_date_id=trip_date.id)

        report = await scheduler.run_once()

        assert report.reminded == 0

    @pytest.mark.asyncio
    async def test_sink_failure_still_records_reminder(
        self, env, scheduler, make_listing, make_trip_date, book, confirm
    ):
        listing = make_listing(category=ListingCategory.ACTIVITY, capacity=10)
        trip_date = make_trip_date(listing, starts_in=timedelta(hours=6))
        await confirm(await book(listing, trip_date_id=trip_date.id))
        env.sender.fail = True

        report = await scheduler.run_once()

        assert report.reminded == 1
        assert report.errors == 0


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_and_stop(self, scheduler):
        scheduler.start()
        await asyncio.sleep(0)

        assert scheduler.is_running is True

        await scheduler.stop()

        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_stop_without_start(self, scheduler):
        await scheduler.stop()

        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_broken_provider_is_contained(self, env):
        @asynccontextmanager
        async def broken():
            raise RuntimeError("no database")
            yield  # pragma: no cover

        scheduler = BookingScheduler(services=broken, clock=env.clock, interval_seconds=3600)
        scheduler.start()
        await asyncio.sleep(0)

        assert scheduler.is_running is True
        await scheduler.stop()


@pytest.mark.asyncio
async def test_cancelled_trip_booking_gets_no_reminder(
    env, scheduler, make_listing, make_trip_date, book, confirm
):
    listing = make_listing(category=ListingCategory.ACTIVITY, capacity=10)
    trip_date = make_trip_date(listing, starts_in=timedelta(hours=6))
    customer_id = uuid4()
    booking = await confirm(await book(listing, customer_id=customer_id, trip_date_id=trip_date.id))
    await env.services.bookings.cancel_booking(booking.id, customer_id)

    report = await scheduler.run_once()

    assert report.reminded == 0
