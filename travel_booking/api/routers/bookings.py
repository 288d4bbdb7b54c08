from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from travel_booking.api.auth import Principal, get_principal
from travel_booking.api.dependencies import AppServices, get_services
from travel_booking.api.schemas.bookings import (
    AvailabilityCheckResponse,
    BookingListResponse,
    BookingResponse,
    CreateBookingRequest,
    PriceCalculationResponse,
    UpdateBookingStatusRequest,
    UpdatePaymentStatusRequest,
)
from travel_booking.application.use_cases.create_booking import BookingRequest
from travel_booking.domain.errors import ForbiddenError

router = APIRouter(prefix="/bookings")


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")


@router.post("/check-availability", response_model=AvailabilityCheckResponse)
async def check_availability(
    payload: CreateBookingRequest,
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> AvailabilityCheckResponse:
    result = await services.availability.check_availability(
        listing_id=payload.listing_id,
        check_in=payload.check_in_date,
        check_out=payload.check_out_date,
        guest_count=payload.number_of_guests,
        trip_date_id=payload.trip_date_id,
    )
    price = None
    if result.available:
        calc = await services.availability.calculate_price(
            listing_id=payload.listing_id,
            check_in=payload.check_in_date,
            check_out=payload.check_out_date,
            guest_count=payload.number_of_guests,
        )
        price = PriceCalculationResponse.from_calculation(calc)
    return AvailabilityCheckResponse(
        available=result.available, reason=result.reason, price_calculation=price
    )


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: CreateBookingRequest,
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> BookingResponse:
    booking = await services.create_booking.execute(
        customer_id=principal.user_id,
        request=BookingRequest(
            listing_id=payload.listing_id,
            number_of_guests=payload.number_of_guests,
            trip_date_id=payload.trip_date_id,
            check_in=payload.check_in_date,
            check_out=payload.check_out_date,
            special_requests=payload.special_requests,
        ),
    )
    return BookingResponse.from_entity(booking)


@router.get("", response_model=BookingListResponse)
async def list_my_bookings(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> BookingListResponse:
    bookings = await services.bookings.get_bookings_by_customer(
        principal.user_id, page=page, page_size=page_size
    )
    return BookingListResponse(
        bookings=[BookingResponse.from_entity(b) for b in bookings],
        page=page,
        page_size=page_size,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> BookingResponse:
    booking = await services.bookings.get_booking_by_id(booking_id)
    if booking is None:
        raise _not_found()
    if booking.customer_id != principal.user_id and not principal.is_staff:
        raise ForbiddenError("Not allowed to view this booking")
    return BookingResponse.from_entity(booking)


@router.put("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: UUID,
    payload: UpdateBookingStatusRequest,
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> BookingResponse:
    if not principal.is_staff:
        raise ForbiddenError("Only vendors or admins can change booking status")
    booking = await services.bookings.update_booking_status(
        booking_id, payload.status, payment_status=payload.payment_status
    )
    if booking is None:
        raise _not_found()
    return BookingResponse.from_entity(booking)


@router.put("/{booking_id}/payment", response_model=BookingResponse)
async def update_payment_status(
    booking_id: UUID,
    payload: UpdatePaymentStatusRequest,
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> BookingResponse:
    existing = await services.bookings.get_booking_by_id(booking_id)
    if existing is None:
        raise _not_found()
    if existing.customer_id != principal.user_id and not principal.is_staff:
        raise ForbiddenError("Not allowed to update this booking")
    booking = await services.bookings.update_payment_status(
        booking_id, payload.payment_status, payment_id=payload.payment_id
    )
    if booking is None:
        raise _not_found()
    return BookingResponse.from_entity(booking)


@router.delete("/{booking_id}", response_model=BookingResponse)
async def cancel_booking(
    booking_id: UUID,
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> BookingResponse:
    booking = await services.bookings.cancel_booking(booking_id, principal.user_id)
    if booking is None:
        raise _not_found()
    return BookingResponse.from_entity(booking)
