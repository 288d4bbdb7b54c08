"""Booking entity - aggregate root of the booking lifecycle."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from travel_booking.domain.errors import InvalidStatusTransitionError, ValidationError
from travel_booking.domain.value_objects.datetime_range import DatetimeRange
from travel_booking.domain.value_objects.money import Money


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    @classmethod
    def parse(cls, value: "str | BookingStatus") -> "BookingStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValidationError("status", f"unknown booking status '{value}'") from None


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    REFUNDED = "REFUNDED"

    @classmethod
    def parse(cls, value: "str | PaymentStatus") -> "PaymentStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValidationError("payment_status", f"unknown payment status '{value}'") from None


BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID}),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}

ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


@dataclass
class Booking:
    """
    A customer's reservation against a listing.

    ``status`` and ``payment_status`` are independent axes: a booking may be
    CANCELLED while still PAID until a refund goes through. ``total_price`` is
    fixed at creation and never recomputed.
    """

    id: UUID
    customer_id: UUID
    listing_id: UUID
    number_of_guests: int
    total_price: Decimal
    currency: str = "USD"
    trip_date_id: UUID | None = None
    check_in_date: datetime | None = None
    check_out_date: datetime | None = None
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_id: str | None = None
    special_requests: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # === Computed properties ===

    @property
    def stay(self) -> DatetimeRange | None:
        if self.check_in_date and self.check_out_date and self.check_in_date < self.check_out_date:
            return DatetimeRange(start=self.check_in_date, end=self.check_out_date)
        return None

    @property
    def total(self) -> Money:
        return Money(amount=self.total_price, currency_code=self.currency)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def short_ref(self) -> str:
        return str(self.id)[:8]

    # === Business methods ===

    def transition_to(
        self,
        target: BookingStatus,
        now: datetime | None = None,
        effective_end: datetime | None = None,
    ) -> bool:
        """
        Move ``status`` to ``target``.

        Returns False when the booking is already in ``target`` (no-op).
        COMPLETED needs ``now`` past ``effective_end``.
        """
        if self.status == target:
            return False
        if target not in BOOKING_TRANSITIONS[self.status]:
            raise InvalidStatusTransitionError(self.status.value, target.value)
        if target == BookingStatus.COMPLETED:
            if effective_end is None or now is None or effective_end >= now:
                raise InvalidStatusTransitionError(
                    self.status.value, target.value, reason="trip has not ended yet"
                )
        self.status = target
        return True

    def set_payment_status(self, target: PaymentStatus, payment_id: str | None = None) -> bool:
        changed = False
        if payment_id and payment_id != self.payment_id:
            self.payment_id = payment_id
            changed = True
        if self.payment_status == target:
            return changed
        if target not in PAYMENT_TRANSITIONS[self.payment_status]:
            raise InvalidStatusTransitionError(
                self.payment_status.value, target.value, reason="payment status"
            )
        self.payment_status = target
        return True
