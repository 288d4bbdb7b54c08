"""Domain value objects."""

from travel_booking.domain.value_objects.datetime_range import DatetimeRange
from travel_booking.domain.value_objects.money import Money

__all__ = [
    "DatetimeRange",
    "Money",
]
