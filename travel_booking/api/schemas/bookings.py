from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from travel_booking.application.services.availability_service import PriceCalculation
from travel_booking.domain.entities.booking import Booking


def _assume_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CreateBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    listing_id: UUID
    trip_date_id: UUID | None = None
    check_in_date: datetime | None = None
    check_out_date: datetime | None = None
    number_of_guests: int = Field(default=1, ge=1)
    special_requests: str | None = Field(default=None, max_length=1000)

    @field_validator("check_in_date", "check_out_date")
    @classmethod
    def _normalize_tz(cls, value: datetime | None) -> datetime | None:
        return _assume_utc(value)


class PriceCalculationResponse(BaseModel):
    base_price: Decimal
    tax: Decimal
    service_fee: Decimal
    total: Decimal
    currency: str
    nights: int
    number_of_guests: int

    @classmethod
    def from_calculation(cls, calc: PriceCalculation) -> "PriceCalculationResponse":
        return cls(
            base_price=calc.base_price,
            tax=calc.tax,
            service_fee=calc.service_fee,
            total=calc.total,
            currency=calc.currency,
            nights=calc.nights,
            number_of_guests=calc.guest_count,
        )


class AvailabilityCheckResponse(BaseModel):
    available: bool
    reason: str | None = None
    price_calculation: PriceCalculationResponse | None = None


class BookingResponse(BaseModel):
    id: UUID
    customer_id: UUID
    listing_id: UUID
    trip_date_id: UUID | None = None
    check_in_date: datetime | None = None
    check_out_date: datetime | None = None
    number_of_guests: int
    total_price: Decimal
    currency: str
    status: str
    payment_status: str
    payment_id: str | None = None
    special_requests: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            customer_id=booking.customer_id,
            listing_id=booking.listing_id,
            trip_date_id=booking.trip_date_id,
            check_in_date=booking.check_in_date,
            check_out_date=booking.check_out_date,
            number_of_guests=booking.number_of_guests,
            total_price=booking.total_price,
            currency=booking.currency,
            status=booking.status.value,
            payment_status=booking.payment_status.value,
            payment_id=booking.payment_id,
            special_requests=booking.special_requests,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]
    page: int
    page_size: int


class UpdateBookingStatusRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: str
    payment_status: str | None = None


class UpdatePaymentStatusRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    payment_status: str
    payment_id: str | None = None
