"""Booking lifecycle: creation, status and payment transitions, cancellation."""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Sequence
from uuid import UUID, uuid4

from travel_booking.application.interfaces.booking_repo import BookingRepo
from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.listing_repo import ListingRepo
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.application.services.notification_service import NotificationService
from travel_booking.application.services.pagination import page_window
from travel_booking.domain.entities.booking import Booking, BookingStatus, PaymentStatus
from travel_booking.domain.errors import (
    ListingNotFoundError,
    TripDateNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(
        self,
        booking_repo: BookingRepo,
        listing_repo: ListingRepo,
        notifications: NotificationService,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._listing_repo = listing_repo
        self._notifications = notifications
        self._transaction_manager = transaction_manager
        self._clock = clock

    # === Creation ===

    async def create_booking(
        self,
        customer_id: UUID,
        listing_id: UUID,
        number_of_guests: int,
        total_price: Decimal,
        trip_date_id: UUID | None = None,
        check_in: datetime | None = None,
        check_out: datetime | None = None,
        special_requests: str | None = None,
    ) -> Booking:
        """
        Persist a new PENDING/PENDING booking.

        ``total_price`` is stored exactly as given; availability is the
        caller's concern (see ``CreateBookingUseCase``).
        """
        if number_of_guests < 1:
            raise ValidationError("number_of_guests", "must be at least 1")

        async with self._transaction_manager.start():
            listing = await self._listing_repo.get_listing(listing_id)
            if listing is None:
                raise ListingNotFoundError(listing_id)
            if trip_date_id is not None:
                trip_date = await self._listing_repo.get_trip_date(trip_date_id)
                if trip_date is None or trip_date.listing_id != listing_id:
                    raise TripDateNotFoundError(trip_date_id)

            now = self._clock.now()
            booking = Booking(
                id=uuid4(),
                customer_id=customer_id,
                listing_id=listing_id,
                number_of_guests=number_of_guests,
                total_price=total_price,
                currency=listing.currency,
                trip_date_id=trip_date_id,
                check_in_date=check_in,
                check_out_date=check_out,
                special_requests=special_requests,
                created_at=now,
                updated_at=now,
            )
            await self._booking_repo.add(booking)
            if trip_date_id is not None:
                await self._listing_repo.adjust_trip_date_seats(trip_date_id, number_of_guests)

        logger.info(
            "Booking created",
            extra={
                "booking_id": str(booking.id),
                "listing_id": str(listing_id),
                "customer_id": str(customer_id),
                "total_price": str(total_price),
            },
        )
        return booking

    # === Queries ===

    async def get_booking_by_id(self, booking_id: UUID) -> Booking | None:
        return await self._booking_repo.get(booking_id)

    async def get_booking_by_payment_id(self, payment_id: str) -> Booking | None:
        return await self._booking_repo.find_by_payment_id(payment_id)

    async def get_bookings_by_customer(
        self, customer_id: UUID, page: int = 1, page_size: int = 20
    ) -> Sequence[Booking]:
        limit, offset = page_window(page, page_size)
        return await self._booking_repo.list_by_customer(customer_id, limit=limit, offset=offset)

    async def get_bookings_by_listing(
        self, listing_id: UUID, page: int = 1, page_size: int = 20
    ) -> Sequence[Booking]:
        limit, offset = page_window(page, page_size)
        return await self._booking_repo.list_by_listing(listing_id, limit=limit, offset=offset)

    async def find_due_for_completion(self, now: datetime) -> Sequence[Booking]:
        return await self._booking_repo.list_due_for_completion(now)

    async def find_trips_starting_within(self, now: datetime, window: timedelta) -> Sequence[Booking]:
        return await self._booking_repo.list_trip_bookings_starting_between(now, now + window)

    # === Transitions ===

    async def update_booking_status(
        self,
        booking_id: UUID,
        status: str | BookingStatus,
        payment_status: str | PaymentStatus | None = None,
    ) -> Booking | None:
        """
        Apply a status (and optionally a payment status) change.

        Unknown status strings raise ``ValidationError``. Re-applying the
        current status is a no-op. Returns None when the booking is missing.
        """
        target = BookingStatus.parse(status)
        payment_target = PaymentStatus.parse(payment_status) if payment_status is not None else None

        async with self._transaction_manager.start():
            booking = await self._booking_repo.get_for_update(booking_id)
            if booking is None:
                return None

            now = self._clock.now()
            effective_end = None
            if target == BookingStatus.COMPLETED:
                effective_end = await self._effective_end(booking)

            status_changed = booking.transition_to(target, now=now, effective_end=effective_end)
            changed = status_changed
            if payment_target is not None:
                changed = booking.set_payment_status(payment_target) or changed

            if changed:
                booking.updated_at = now
                await self._booking_repo.save(booking)
                logger.info(
                    "Booking status updated",
                    extra={
                        "booking_id": str(booking.id),
                        "status": booking.status.value,
                        "payment_status": booking.payment_status.value,
                    },
                )

            if status_changed:
                await self._after_status_change(booking, target)

        return booking

    async def update_payment_status(
        self,
        booking_id: UUID,
        payment_status: str | PaymentStatus,
        payment_id: str | None = None,
    ) -> Booking | None:
        target = PaymentStatus.parse(payment_status)

        async with self._transaction_manager.start():
            booking = await self._booking_repo.get_for_update(booking_id)
            if booking is None:
                return None
            if booking.set_payment_status(target, payment_id=payment_id):
                booking.updated_at = self._clock.now()
                await self._booking_repo.save(booking)
                logger.info(
                    "Booking payment status updated",
                    extra={
                        "booking_id": str(booking.id),
                        "payment_status": booking.payment_status.value,
                        "payment_id": booking.payment_id,
                    },
                )
        return booking

    async def complete_booking(self, booking_id: UUID) -> Booking | None:
        return await self.update_booking_status(booking_id, BookingStatus.COMPLETED)

    async def confirm_paid_booking(
        self, booking_id: UUID, payment_id: str | None
    ) -> tuple[Booking | None, bool]:
        """
        Record a successful payment and confirm the booking.

        Returns the booking and whether it moved PENDING -> CONFIRMED. A
        replay, or a booking already CANCELLED/COMPLETED, keeps its status.
        """
        async with self._transaction_manager.start():
            booking = await self._booking_repo.get_for_update(booking_id)
            if booking is None:
                return None, False

            if booking.payment_status == PaymentStatus.REFUNDED:
                logger.warning(
                    "Payment succeeded for an already refunded booking, ignoring",
                    extra={"booking_id": str(booking.id), "payment_id": payment_id},
                )
                return booking, False

            changed = booking.set_payment_status(PaymentStatus.PAID, payment_id=payment_id)
            transitioned = False
            if booking.status == BookingStatus.PENDING:
                transitioned = booking.transition_to(BookingStatus.CONFIRMED)
            elif booking.status != BookingStatus.CONFIRMED:
                logger.warning(
                    "Payment succeeded for a closed booking, status kept",
                    extra={"booking_id": str(booking.id), "status": booking.status.value},
                )

            if changed or transitioned:
                booking.updated_at = self._clock.now()
                await self._booking_repo.save(booking)

        return booking, transitioned

    async def cancel_booking(self, booking_id: UUID, customer_id: UUID) -> Booking | None:
        """
        Cancel a booking on behalf of its customer.

        None unless the booking exists and belongs to ``customer_id``.
        Refunds are a separate step.
        """
        async with self._transaction_manager.start():
            booking = await self._booking_repo.get_for_update(booking_id)
            if booking is None or booking.customer_id != customer_id:
                return None

            if booking.transition_to(BookingStatus.CANCELLED):
                booking.updated_at = self._clock.now()
                await self._booking_repo.save(booking)
                logger.info(
                    "Booking cancelled",
                    extra={"booking_id": str(booking.id), "customer_id": str(customer_id)},
                )
                await self._after_status_change(booking, BookingStatus.CANCELLED)

        return booking

    # === Helpers ===

    async def _effective_end(self, booking: Booking) -> datetime | None:
        if booking.check_out_date is not None:
            return booking.check_out_date
        if booking.trip_date_id is not None:
            trip_date = await self._listing_repo.get_trip_date(booking.trip_date_id)
            if trip_date is not None:
                return trip_date.end_date
        return None

    async def _after_status_change(self, booking: Booking, status: BookingStatus) -> None:
        if status == BookingStatus.CANCELLED:
            if booking.trip_date_id is not None:
                await self._listing_repo.adjust_trip_date_seats(
                    booking.trip_date_id, -booking.number_of_guests
                )
            await self._notifications.send_cancellation(booking)
        elif status == BookingStatus.COMPLETED:
            await self._notifications.send_rating_prompt(booking)
