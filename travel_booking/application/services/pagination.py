from travel_booking.domain.errors import ValidationError


def page_window(page: int, page_size: int) -> tuple[int, int]:
    """Translate a 1-based page number into (limit, offset)."""
    if page < 1:
        raise ValidationError("page", "must be at least 1")
    if page_size < 1:
        raise ValidationError("page_size", "must be at least 1")
    return page_size, (page - 1) * page_size
