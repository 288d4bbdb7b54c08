import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from travel_booking.application.interfaces.listing_repo import ListingRepo
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.application.services.availability_service import AvailabilityService
from travel_booking.application.services.booking_service import BookingService
from travel_booking.domain.entities.booking import Booking
from travel_booking.domain.errors import AvailabilityConflictError
from travel_booking.infrastructure.db.retry import retry_on_deadlock


@dataclass(frozen=True)
class BookingRequest:
    listing_id: UUID
    number_of_guests: int = 1
    trip_date_id: UUID | None = None
    check_in: datetime | None = None
    check_out: datetime | None = None
    special_requests: str | None = None


class CreateBookingUseCase:
    """
    Check availability, price and insert a booking as one atomic step.

    The listing row is locked for the whole transaction so two concurrent
    requests for overlapping dates cannot both pass the overlap check.
    """

    def __init__(
        self,
        listing_repo: ListingRepo,
        availability: AvailabilityService,
        bookings: BookingService,
        transaction_manager: TransactionManager,
        max_attempts: int = 3,
    ) -> None:
        self._listing_repo = listing_repo
        self._availability = availability
        self._bookings = bookings
        self._transaction_manager = transaction_manager
        self._max_attempts = max_attempts
        self._logger = logging.getLogger(__name__)

    async def execute(self, customer_id: UUID, request: BookingRequest) -> Booking:
        async def attempt() -> Booking:
            async with self._transaction_manager.start():
                return await self._create_locked(customer_id, request)

        return await retry_on_deadlock(attempt, max_attempts=self._max_attempts)

    async def _create_locked(self, customer_id: UUID, request: BookingRequest) -> Booking:
        await self._listing_repo.lock_listing(request.listing_id)

        result = await self._availability.check_availability(
            listing_id=request.listing_id,
            check_in=request.check_in,
            check_out=request.check_out,
            guest_count=request.number_of_guests,
            trip_date_id=request.trip_date_id,
        )
        if not result.available:
            self._logger.info(
                "Booking rejected: not available",
                extra={
                    "listing_id": str(request.listing_id),
                    "customer_id": str(customer_id),
                    "reason": result.reason,
                },
            )
            raise AvailabilityConflictError(result.reason or "unavailable")

        price = await self._availability.calculate_price(
            listing_id=request.listing_id,
            check_in=request.check_in,
            check_out=request.check_out,
            guest_count=request.number_of_guests,
        )
        return await self._bookings.create_booking(
            customer_id=customer_id,
            listing_id=request.listing_id,
            number_of_guests=request.number_of_guests,
            total_price=price.total,
            trip_date_id=request.trip_date_id,
            check_in=request.check_in,
            check_out=request.check_out,
            special_requests=request.special_requests,
        )
