"""Domain exceptions for the booking core."""


class DomainError(Exception):
    """Base class for every domain error."""

    status_code: int = 400

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Not found ===


class NotFoundError(DomainError):
    status_code = 404


class ListingNotFoundError(NotFoundError):
    def __init__(self, listing_id: object):
        super().__init__(message=f"Listing not found: {listing_id}", code="LISTING_NOT_FOUND")
        self.listing_id = listing_id


class TripDateNotFoundError(NotFoundError):
    def __init__(self, trip_date_id: object):
        super().__init__(message=f"Trip date not found: {trip_date_id}", code="TRIP_DATE_NOT_FOUND")
        self.trip_date_id = trip_date_id


class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: object):
        super().__init__(message=f"Booking not found: {booking_id}", code="BOOKING_NOT_FOUND")
        self.booking_id = booking_id


class PaymentIntentNotFoundError(NotFoundError):
    def __init__(self, intent_id: str):
        super().__init__(
            message=f"Payment intent not found: {intent_id}", code="PAYMENT_INTENT_NOT_FOUND"
        )
        self.intent_id = intent_id


class NotificationNotFoundError(NotFoundError):
    def __init__(self, notification_id: object):
        super().__init__(
            message=f"Notification not found: {notification_id}", code="NOTIFICATION_NOT_FOUND"
        )
        self.notification_id = notification_id


# === Validation ===


class ValidationError(DomainError):
    """Invalid input data."""

    def __init__(self, field: str, message: str):
        super().__init__(message=f"Validation failed on '{field}': {message}", code="VALIDATION_ERROR")
        self.field = field


class InvalidStatusTransitionError(ValidationError):
    """The current status does not allow the requested transition."""

    def __init__(self, current_status: str, target_status: str, reason: str | None = None):
        detail = f"cannot move from {current_status} to {target_status}"
        if reason:
            detail = f"{detail} ({reason})"
        super().__init__(field="status", message=detail)
        self.code = "INVALID_STATUS_TRANSITION"
        self.current_status = current_status
        self.target_status = target_status


class RefundNotAllowedError(DomainError):
    def __init__(self, booking_id: object, reason: str):
        super().__init__(message=f"Cannot refund booking {booking_id}: {reason}", code="REFUND_NOT_ALLOWED")
        self.booking_id = booking_id


class ForbiddenError(DomainError):
    status_code = 403

    def __init__(self, message: str = "Not allowed"):
        super().__init__(message=message, code="FORBIDDEN")


# === Availability ===


class AvailabilityConflictError(DomainError):
    """The listing cannot be booked for the requested guests/dates."""

    def __init__(self, reason: str):
        super().__init__(message=f"Booking not available: {reason}", code="NOT_AVAILABLE")
        self.reason = reason


# === Payments ===


class PaymentProviderError(DomainError):
    """The payment provider failed or is unreachable."""

    status_code = 502

    def __init__(self, operation: str, detail: str | None = None):
        message = f"Payment provider failed to {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message=message, code="PAYMENT_PROVIDER_ERROR")
        self.operation = operation


class SignatureVerificationError(DomainError):
    def __init__(self, detail: str = "Invalid signature"):
        super().__init__(message=detail, code="INVALID_SIGNATURE")


class WebhookNotConfiguredError(DomainError):
    status_code = 500

    def __init__(self) -> None:
        super().__init__(message="Webhook secret not configured", code="WEBHOOK_NOT_CONFIGURED")
